"""Test configuration and fixtures"""

from typing import Any, Callable

import pytest

from chart_matcher.catalog.client import CatalogSearch
from chart_matcher.catalog.models import Candidate
from chart_matcher.chart.models import ChartEntry


class FakeCatalog(CatalogSearch):
    """
    In-memory catalog for matcher tests.

    responses maps a query string to its candidates, or to an exception
    raised on every call. failures maps a query to exceptions raised on the
    first calls only, before falling through to responses. Unknown queries
    return no candidates.
    """

    def __init__(self) -> None:
        self.responses: dict[str, Any] = {}
        self.failures: dict[str, list[Exception]] = {}
        self.ready_error: Exception | None = None
        self.on_search: Callable[[str], None] | None = None
        self.calls: list[tuple[str, int]] = []

    def ensure_ready(self) -> None:
        if self.ready_error is not None:
            raise self.ready_error

    def search(self, query: str, limit: int) -> list[Candidate]:
        self.calls.append((query, limit))
        if self.on_search is not None:
            self.on_search(query)

        pending = self.failures.get(query)
        if pending:
            raise pending.pop(0)

        response = self.responses.get(query, [])
        if isinstance(response, Exception):
            raise response
        return list(response)[:limit]


@pytest.fixture
def fake_catalog():
    """Empty fake catalog; tests fill in responses"""
    return FakeCatalog()


@pytest.fixture
def make_candidate():
    """Factory for candidates with neutral defaults"""
    counter = {"n": 0}

    def factory(
        name: str = "Song",
        artist: str = "Band",
        popularity: int = 50,
        album_type: str = "",
        explicit: bool = False,
        release_date: str | None = None,
        **extra: Any
    ) -> Candidate:
        counter["n"] += 1
        identifier = extra.pop("identifier", f"track{counter['n']}")
        return Candidate(
            identifier=identifier,
            uri=f"spotify:track:{identifier}",
            name=name,
            artist=artist,
            artists=(artist,),
            album_type=album_type,
            explicit=explicit,
            popularity=popularity,
            release_date=release_date,
            **extra
        )

    return factory


@pytest.fixture
def gotye_entry():
    """The rank 1 entry of the reference scenario"""
    return ChartEntry.create(1, "Somebody That I Used to Know", "Gotye")


@pytest.fixture
def gotye_candidates(make_candidate):
    """Original recording followed by a karaoke version"""
    return [
        make_candidate(
            name="Somebody That I Used to Know",
            artist="Gotye",
            popularity=70,
            album_type="single",
            explicit=False,
            release_date="2011-07-05",
        ),
        make_candidate(
            name="Somebody That I Used To Know - Karaoke Version",
            artist="Karaoke Band",
            popularity=40,
            album_type="compilation",
            explicit=False,
            release_date="2015-01-01",
        ),
    ]


@pytest.fixture
def sample_track_data():
    """Sample Spotify search result item"""
    return {
        'id': '1qDrWA6lyx8cLECdZE7TV7',
        'uri': 'spotify:track:1qDrWA6lyx8cLECdZE7TV7',
        'name': 'Somebody That I Used To Know',
        'artists': [
            {'id': 'artist_1', 'name': 'Gotye'},
            {'id': 'artist_2', 'name': 'Kimbra'},
        ],
        'album': {
            'id': 'album_1',
            'name': 'Making Mirrors',
            'album_type': 'ALBUM',
            'release_date': '2011-08-19',
            'images': [
                {'url': 'https://i.scdn.co/image/small', 'width': 64, 'height': 64},
                {'url': 'https://i.scdn.co/image/large', 'width': 640, 'height': 640},
                {'url': 'https://i.scdn.co/image/medium', 'width': 300, 'height': 300},
            ],
        },
        'duration_ms': 244973,
        'explicit': False,
        'popularity': 78,
        'preview_url': None,
        'external_urls': {'spotify': 'https://open.spotify.com/track/1qDrWA6lyx8cLECdZE7TV7'},
    }


@pytest.fixture
def write_file(tmp_path):
    """Write text to a file under tmp_path and return its path"""
    def writer(name: str, content: str):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return writer
