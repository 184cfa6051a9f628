"""Test chart, catalog and match data models"""

import pytest

from chart_matcher.catalog.models import Candidate
from chart_matcher.chart.models import ChartEntry
from chart_matcher.core.exceptions import MalformedEntryError, SelectionError
from chart_matcher.matching.models import BatchReport, MatchResult


class TestChartEntry:
    """Test ChartEntry normalization and validation"""

    def test_create_normalizes(self):
        entry = ChartEntry.create(1, "  Somebody That I Used to Know ", " Gotye")

        assert entry.rank == 1
        assert entry.title == "SOMEBODY THAT I USED TO KNOW"
        assert entry.artist == "GOTYE"

    def test_create_accepts_numeric_string_rank(self):
        assert ChartEntry.create("7", "Song", "Band").rank == 7

    @pytest.mark.parametrize("rank", [0, -3, "abc", None, True, 2.5j])
    def test_invalid_rank(self, rank):
        with pytest.raises(MalformedEntryError):
            ChartEntry.create(rank, "Song", "Band")

    @pytest.mark.parametrize("title,artist", [
        ("", "Band"),
        ("   ", "Band"),
        (None, "Band"),
        ("Song", ""),
        ("Song", None),
    ])
    def test_missing_title_or_artist(self, title, artist):
        with pytest.raises(MalformedEntryError) as exc_info:
            ChartEntry.create(5, title, artist)
        assert exc_info.value.details["rank"] == 5

    def test_from_dict_with_rank(self):
        entry = ChartEntry.from_dict({"rank": 2, "title": "Call Me Maybe", "artist": "Carly Rae Jepsen"})
        assert entry == ChartEntry(2, "CALL ME MAYBE", "CARLY RAE JEPSEN")

    def test_from_dict_with_position(self):
        entry = ChartEntry.from_dict({"position": 4, "title": "Song", "artist": "Band"})
        assert entry.rank == 4

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(MalformedEntryError):
            ChartEntry.from_dict(["Song", "Band"])

    def test_is_immutable(self):
        entry = ChartEntry.create(1, "Song", "Band")
        with pytest.raises(AttributeError):
            entry.title = "OTHER"

    def test_str(self):
        assert str(ChartEntry.create(3, "Song", "Band")) == "#3 SONG - BAND"

    def test_constructor_normalizes(self):
        entry = ChartEntry(1, " Somebody That I Used to Know", "gotye ")

        assert entry.title == "SOMEBODY THAT I USED TO KNOW"
        assert entry.artist == "GOTYE"

    @pytest.mark.parametrize("rank,title,artist", [
        (1, "", "gotye"),
        (1, "Song", "  "),
        (1, None, "Band"),
        (0, "Song", "Band"),
        ("1", "Song", "Band"),
        (True, "Song", "Band"),
    ])
    def test_constructor_rejects_malformed(self, rank, title, artist):
        with pytest.raises(MalformedEntryError):
            ChartEntry(rank, title, artist)


class TestCandidate:
    """Test Candidate creation from Spotify data"""

    def test_from_spotify_api(self, sample_track_data):
        candidate = Candidate.from_spotify_api(sample_track_data)

        assert candidate.identifier == "1qDrWA6lyx8cLECdZE7TV7"
        assert candidate.uri == "spotify:track:1qDrWA6lyx8cLECdZE7TV7"
        assert candidate.name == "Somebody That I Used To Know"
        assert candidate.artist == "Gotye"
        assert candidate.artists == ("Gotye", "Kimbra")
        assert candidate.album == "Making Mirrors"
        assert candidate.album_type == "album"
        assert candidate.release_date == "2011-08-19"
        assert candidate.release_year == 2011
        assert candidate.explicit is False
        assert candidate.popularity == 78
        assert candidate.duration_ms == 244973
        assert candidate.external_url == "https://open.spotify.com/track/1qDrWA6lyx8cLECdZE7TV7"

    def test_artwork_is_largest_image(self, sample_track_data):
        candidate = Candidate.from_spotify_api(sample_track_data)
        assert candidate.artwork_url == "https://i.scdn.co/image/large"

    def test_minimal_payload(self):
        candidate = Candidate.from_spotify_api({"id": "x", "name": "Song"})

        assert candidate.artist == "Unknown Artist"
        assert candidate.artists == ()
        assert candidate.album == ""
        assert candidate.release_date is None
        assert candidate.release_year is None
        assert candidate.popularity == 0
        assert candidate.artwork_url is None

    def test_popularity_clamped(self, sample_track_data):
        sample_track_data["popularity"] = 150
        assert Candidate.from_spotify_api(sample_track_data).popularity == 100

    @pytest.mark.parametrize("release_date,year", [
        ("2011-07-05", 2011),
        ("2011-07", 2011),
        ("1999", 1999),
        ("", None),
        (None, None),
        ("n/a", None),
    ])
    def test_release_year(self, make_candidate, release_date, year):
        assert make_candidate(release_date=release_date).release_year == year

    def test_to_dict(self, sample_track_data):
        data = Candidate.from_spotify_api(sample_track_data).to_dict()

        assert data["id"] == "1qDrWA6lyx8cLECdZE7TV7"
        assert data["artists"] == ["Gotye", "Kimbra"]
        assert data["preview_url"] is None


class TestMatchResult:
    """Test MatchResult states and invariants"""

    def test_matched(self, gotye_entry, gotye_candidates):
        result = MatchResult.matched(gotye_entry, gotye_candidates, 0, "query", scores=[115.0, 20.0])

        assert result.has_match
        assert result.selected_candidate is gotye_candidates[0]
        assert result.selected_uri == gotye_candidates[0].uri
        assert result.best_score == 115.0
        assert result.error is None

    def test_empty(self, gotye_entry):
        result = MatchResult.empty(gotye_entry, "fallback")

        assert not result.has_match
        assert result.error is None
        assert result.selected_candidate is None
        assert result.selected_uri is None
        assert result.best_score is None

    def test_failed(self, gotye_entry):
        result = MatchResult.failed(gotye_entry, "query", "Network error")

        assert not result.has_match
        assert result.error == "Network error"

    def test_selected_index_must_be_in_range(self, gotye_entry, gotye_candidates):
        with pytest.raises(SelectionError):
            MatchResult.matched(gotye_entry, gotye_candidates, 2, "query")

    def test_selected_index_on_empty_is_rejected(self, gotye_entry):
        with pytest.raises(SelectionError):
            MatchResult(entry=gotye_entry, selected_index=0)

    def test_with_selection(self, gotye_entry, gotye_candidates):
        result = MatchResult.matched(gotye_entry, gotye_candidates, 0, "query")
        overridden = result.with_selection(1)

        assert overridden.selected_candidate is gotye_candidates[1]
        assert result.selected_index == 0

    @pytest.mark.parametrize("index", [-1, 2, 10])
    def test_with_selection_out_of_range(self, gotye_entry, gotye_candidates, index):
        result = MatchResult.matched(gotye_entry, gotye_candidates, 0, "query")
        with pytest.raises(SelectionError):
            result.with_selection(index)

    def test_with_candidates_clears_selection(self, gotye_entry, gotye_candidates, make_candidate):
        result = MatchResult.matched(gotye_entry, gotye_candidates, 1, "query", scores=[1.0, 2.0])
        more = [make_candidate() for _ in range(4)]

        replaced = result.with_candidates(more, "new query")

        assert replaced.candidates == tuple(more)
        assert replaced.selected_index is None
        assert replaced.scores == ()
        assert replaced.search_query == "new query"
        assert not replaced.has_match

    def test_to_dict(self, gotye_entry, gotye_candidates):
        data = MatchResult.matched(gotye_entry, gotye_candidates, 0, "query").to_dict()

        assert set(data) == {
            "rank", "title", "artist", "search_query",
            "candidates", "selected_index", "has_match", "error",
        }
        assert data["rank"] == 1
        assert data["title"] == "SOMEBODY THAT I USED TO KNOW"
        assert data["has_match"] is True
        assert len(data["candidates"]) == 2


class TestBatchReport:
    """Test batch summaries"""

    @pytest.fixture
    def report(self, make_candidate):
        first = ChartEntry.create(1, "One", "A1")
        second = ChartEntry.create(2, "Two", "A2")
        third = ChartEntry.create(3, "Three", "A3")
        return BatchReport(results=(
            MatchResult.matched(first, [make_candidate()], 0, "q1"),
            MatchResult.failed(second, "q2", "boom"),
            MatchResult.empty(third, "q3"),
        ))

    def test_views(self, report):
        assert [r.entry.rank for r in report.matched] == [1]
        assert [r.entry.rank for r in report.unmatched] == [2, 3]
        assert [r.entry.rank for r in report.errors] == [2]

    def test_summary(self, report):
        summary = report.summary()

        assert summary.total == 3
        assert summary.matched == 1
        assert summary.unmatched == 2
        assert summary.errored == 1
        assert [e.rank for e in summary.unmatched_entries] == [2, 3]

    def test_result_for_rank(self, report):
        assert report.result_for_rank(2).error == "boom"
        assert report.result_for_rank(99) is None

    def test_unselected_candidates_count_as_unmatched(self, report, make_candidate):
        entry = report.result_for_rank(1).entry
        pending = report.result_for_rank(1).with_candidates([make_candidate(), make_candidate()], "q1")

        updated = report.with_result(pending)

        assert updated.summary().matched == 0
        assert updated.to_dict()["results"][0]["has_match"] is False
        assert entry in updated.summary().unmatched_entries

    def test_with_result_replaces_by_rank(self, report, make_candidate):
        entry = report.result_for_rank(3).entry
        updated = report.with_result(MatchResult.matched(entry, [make_candidate()], 0, "q3"))

        assert updated.result_for_rank(3).has_match
        assert not report.result_for_rank(3).has_match
        assert len(updated.results) == 3

    def test_to_dict(self, report):
        data = report.to_dict()

        assert data["cancelled"] is False
        assert data["summary"]["matched"] == 1
        assert data["summary"]["unmatched_entries"][0] == {"rank": 2, "title": "TWO", "artist": "A2"}
        assert [r["rank"] for r in data["results"]] == [1, 2, 3]
