"""
Data model for ranked chart entries.

A chart is an ordered list of (rank, title, artist) triples produced by an
external chart source. Entries are immutable once created; title and artist
are upper-cased so that display and matching use the same form.

Usage:
    from chart_matcher.chart.models import ChartEntry

    entry = ChartEntry.create(1, "Somebody That I Used to Know", "Gotye")
    entry.title             # "SOMEBODY THAT I USED TO KNOW"
    entry.structured_query  # 'track:"SOMEBODY THAT I USED TO KNOW" artist:"GOTYE"'
"""

from dataclasses import dataclass
from typing import Any

from chart_matcher.core.exceptions import MalformedEntryError


@dataclass(frozen=True)
class ChartEntry:
    """
    One ranked song from a chart.

    Attributes:
        rank: Chart position, a positive integer unique within one chart.
              Ranks need not be contiguous.
        title: Song title, trimmed and upper-cased.
        artist: Credited artist, trimmed and upper-cased.

    Every construction path normalizes title and artist and rejects
    malformed entries, so no query is ever built from a blank field.
    ChartEntry.create() additionally accepts integer strings for rank.

    Raises:
        MalformedEntryError: If rank is not a positive integer, or title
                             or artist is missing or blank.
    """

    rank: int
    title: str
    artist: str

    def __post_init__(self) -> None:
        if isinstance(self.rank, bool) or not isinstance(self.rank, int):
            raise MalformedEntryError(
                f"Chart entry has an invalid rank: {self.rank!r}",
                details={"rank": self.rank, "title": self.title, "artist": self.artist}
            )
        if self.rank < 1:
            raise MalformedEntryError(
                f"Chart entry rank must be positive, got {self.rank}",
                details={"rank": self.rank, "title": self.title, "artist": self.artist}
            )

        clean_title = self.title.strip().upper() if isinstance(self.title, str) else ""
        clean_artist = self.artist.strip().upper() if isinstance(self.artist, str) else ""

        if not clean_title:
            raise MalformedEntryError(
                f"Chart entry at rank {self.rank} has no title",
                details={"rank": self.rank, "artist": self.artist}
            )
        if not clean_artist:
            raise MalformedEntryError(
                f"Chart entry at rank {self.rank} has no artist",
                details={"rank": self.rank, "title": self.title}
            )

        # Frozen dataclass: normalized values are written through object
        object.__setattr__(self, "title", clean_title)
        object.__setattr__(self, "artist", clean_artist)

    @classmethod
    def create(cls, rank: Any, title: Any, artist: Any) -> "ChartEntry":
        """
        Create a ChartEntry from loosely typed values.

        Args:
            rank: Chart position. Integers and integer strings are accepted.
            title: Song title. Surrounding whitespace is removed.
            artist: Artist name. Surrounding whitespace is removed.

        Raises:
            MalformedEntryError: If rank does not parse as an integer, or
                                 the resulting entry is malformed.
        """
        if isinstance(rank, bool):
            rank = None
        try:
            parsed_rank = int(rank)
        except (TypeError, ValueError):
            raise MalformedEntryError(
                f"Chart entry has an invalid rank: {rank!r}",
                details={"rank": rank, "title": title, "artist": artist}
            ) from None

        return cls(rank=parsed_rank, title=title, artist=artist)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChartEntry":
        """
        Create a ChartEntry from a chart payload mapping.

        Accepts either 'rank' or 'position' for the chart position, as
        chart feeds use both.

        Raises:
            MalformedEntryError: If data is not a mapping or its fields are invalid.
        """
        if not isinstance(data, dict):
            raise MalformedEntryError(
                f"Chart entry must be a mapping, got {type(data).__name__}",
                details={"entry": repr(data)}
            )
        rank = data.get("rank", data.get("position"))
        return cls.create(rank, data.get("title"), data.get("artist"))

    @property
    def structured_query(self) -> str:
        """Field-qualified search query for this entry."""
        from chart_matcher.matching.query import build_structured_query
        return build_structured_query(self.title, self.artist)

    @property
    def fallback_query(self) -> str:
        """Plain 'title artist' search query for this entry."""
        from chart_matcher.matching.query import build_fallback_query
        return build_fallback_query(self.title, self.artist)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (rank, title, artist)."""
        return {"rank": self.rank, "title": self.title, "artist": self.artist}

    def __str__(self) -> str:
        return f"#{self.rank} {self.title} - {self.artist}"
