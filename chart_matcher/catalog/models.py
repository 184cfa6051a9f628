"""
Data model for catalog search results.

A Candidate is one track returned by a catalog search. It carries the
fixed attribute set the match selector scores on (name, primary artist,
album type, release date, explicit flag, popularity) plus pass-through
fields for presentation (links, artwork) that are never scored.

Design Decisions:
    - Candidates are frozen dataclasses; they are scored and ranked, never mutated
    - Field names follow the Spotify Web API where a field maps directly
    - artists is a tuple (primary artist first) for immutability

Usage:
    from chart_matcher.catalog.models import Candidate

    candidate = Candidate.from_spotify_api(search_response["tracks"]["items"][0])
    print(f"{candidate.name} by {candidate.artist} ({candidate.release_year})")
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Candidate:
    """
    Immutable representation of one catalog search result.

    Attributes:
        identifier: Opaque catalog ID, used for later playlist operations.
                    Example: "1qDrWA6lyx8cLECdZE7TV7"

        uri: Catalog URI for the track.
             Example: "spotify:track:1qDrWA6lyx8cLECdZE7TV7"

        name: Track title as the catalog displays it.
              Example: "Somebody That I Used To Know"

        artist: Primary artist name (first in artists).
                Example: "Gotye"

        artists: All credited artist names, primary first.
                 Example: ("Gotye", "Kimbra")

        album: Album name.

        album_type: One of "album", "single", "compilation", or another
                    catalog-specific value.

        release_date: Release date string, "YYYY-MM-DD", "YYYY-MM" or "YYYY".
                      None when the catalog does not report one.

        explicit: Whether the track is flagged explicit.

        popularity: Catalog popularity score (0-100).

        duration_ms: Track duration in milliseconds.

        preview_url: 30-second preview link, if any. Not scored.

        external_url: Web link to the track. Not scored.

        artwork_url: Largest album cover image. Not scored.
    """

    identifier: str
    uri: str
    name: str
    artist: str
    artists: tuple[str, ...] = field(default_factory=tuple)
    album: str = ""
    album_type: str = ""
    release_date: str | None = None
    explicit: bool = False
    popularity: int = 0
    duration_ms: int = 0
    preview_url: str | None = None
    external_url: str | None = None
    artwork_url: str | None = None

    @property
    def release_year(self) -> int | None:
        """Year parsed from release_date, or None if absent or unparseable."""
        if not self.release_date:
            return None
        try:
            return int(self.release_date[:4])
        except ValueError:
            return None

    @classmethod
    def from_spotify_api(cls, track_data: dict[str, Any]) -> "Candidate":
        """
        Create a Candidate from a Spotify track object.

        Args:
            track_data: One item of the 'tracks.items' list returned by the
                        Spotify search endpoint.

        Returns:
            Candidate populated from the track and its embedded album.

        Behavior:
            1. Extract identity (id, uri) and basic fields
            2. Primary artist is the first artist; "Unknown Artist" if none
            3. Album name, type and release date from the embedded album
            4. Artwork is the largest album image
            5. Popularity is clamped to 0-100
        """
        artists_list = [a.get("name", "") for a in track_data.get("artists") or []]
        artists_list = [name for name in artists_list if name]
        artist = artists_list[0] if artists_list else "Unknown Artist"

        album_info = track_data.get("album") or {}

        artwork_url = None
        images = album_info.get("images") or []
        if images:
            best_image = max(
                images,
                key=lambda img: (img.get("width") or 0) * (img.get("height") or 0)
            )
            artwork_url = best_image.get("url")

        popularity = track_data.get("popularity") or 0
        popularity = max(0, min(100, int(popularity)))

        return cls(
            identifier=track_data.get("id") or "",
            uri=track_data.get("uri") or "",
            name=track_data.get("name") or "",
            artist=artist,
            artists=tuple(artists_list),
            album=album_info.get("name") or "",
            album_type=(album_info.get("album_type") or "").lower(),
            release_date=album_info.get("release_date") or None,
            explicit=bool(track_data.get("explicit", False)),
            popularity=popularity,
            duration_ms=int(track_data.get("duration_ms") or 0),
            preview_url=track_data.get("preview_url"),
            external_url=(track_data.get("external_urls") or {}).get("spotify"),
            artwork_url=artwork_url,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict for match reports."""
        return {
            "id": self.identifier,
            "uri": self.uri,
            "name": self.name,
            "artist": self.artist,
            "artists": list(self.artists),
            "album": self.album,
            "album_type": self.album_type,
            "release_date": self.release_date,
            "explicit": self.explicit,
            "popularity": self.popularity,
            "duration_ms": self.duration_ms,
            "preview_url": self.preview_url,
            "external_url": self.external_url,
            "artwork_url": self.artwork_url,
        }
