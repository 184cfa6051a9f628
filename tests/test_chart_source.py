"""Test chart sources and chart validation"""

import logging

import pytest

from chart_matcher.chart.models import ChartEntry
from chart_matcher.chart.source import (
    FileChartSource,
    StaticChartSource,
    available_years,
    find_missing_ranks,
    is_valid_year,
    validate_chart,
)
from chart_matcher.core.exceptions import ChartSourceError, MalformedEntryError
from chart_matcher.matching.matcher import match_chart


def entries_with_ranks(*ranks):
    return [ChartEntry.create(rank, f"Song {rank}", f"Artist {rank}") for rank in ranks]


class TestValidateChart:
    """Test ordering, duplicates and gaps"""

    def test_sorts_by_rank(self):
        result = validate_chart(entries_with_ranks(3, 1, 2))
        assert [e.rank for e in result] == [1, 2, 3]

    def test_duplicate_rank_rejected(self):
        with pytest.raises(ChartSourceError) as exc_info:
            validate_chart(entries_with_ranks(1, 2, 2))
        assert exc_info.value.details["rank"] == 2

    def test_gaps_are_logged_not_fatal(self, caplog):
        caplog.set_level(logging.WARNING)

        result = validate_chart(entries_with_ranks(1, 2, 5))

        assert [e.rank for e in result] == [1, 2, 5]
        assert "missing 2 rank(s): 3, 4" in caplog.text

    def test_no_gap_no_warning(self, caplog):
        caplog.set_level(logging.WARNING)
        validate_chart(entries_with_ranks(1, 2, 3))
        assert "missing" not in caplog.text

    def test_empty_chart(self):
        assert validate_chart([]) == []


class TestFindMissingRanks:
    """Test gap detection"""

    def test_up_to_highest_rank(self):
        assert find_missing_ranks(entries_with_ranks(1, 2, 5)) == [3, 4]

    def test_up_to_expected_count(self):
        assert find_missing_ranks(entries_with_ranks(1, 2, 5), expected_count=6) == [3, 4, 6]

    def test_complete(self):
        assert find_missing_ranks(entries_with_ranks(1, 2, 3), expected_count=3) == []

    def test_empty(self):
        assert find_missing_ranks([]) == []
        assert find_missing_ranks([], expected_count=2) == [1, 2]


class TestStaticChartSource:
    """Test the in-memory source"""

    def test_next_entries(self):
        source = StaticChartSource(entries_with_ranks(2, 1))
        assert [e.rank for e in source.next_entries()] == [1, 2]

    def test_blank_entry_never_reaches_catalog(self, fake_catalog):
        with pytest.raises(MalformedEntryError):
            match_chart(fake_catalog, StaticChartSource([ChartEntry(1, "", "gotye")]))

        assert fake_catalog.calls == []


class TestFileChartSource:
    """Test loading chart files"""

    def test_yaml_list(self, write_file):
        path = write_file("chart.yaml", (
            "- {rank: 2, title: 'Call Me Maybe', artist: 'Carly Rae Jepsen'}\n"
            "- {rank: 1, title: 'Somebody That I Used to Know', artist: 'Gotye'}\n"
        ))

        entries = FileChartSource(path).next_entries()

        assert entries == [
            ChartEntry(1, "SOMEBODY THAT I USED TO KNOW", "GOTYE"),
            ChartEntry(2, "CALL ME MAYBE", "CARLY RAE JEPSEN"),
        ]

    def test_yaml_mapping_with_year(self, write_file):
        path = write_file("chart.yaml", (
            "year: 2012\n"
            "entries:\n"
            "  - {position: 1, title: Song, artist: Band}\n"
        ))
        source = FileChartSource(path)

        entries = source.next_entries()

        assert entries[0].rank == 1
        assert source.year == 2012

    def test_tracks_key(self, write_file):
        path = write_file("chart.yaml", "tracks:\n  - {rank: 1, title: Song, artist: Band}\n")
        assert len(FileChartSource(path).next_entries()) == 1

    def test_json(self, write_file):
        path = write_file("chart.json", (
            '{"entries": [{"rank": 1, "title": "Song", "artist": "Band"},'
            ' {"rank": 2, "title": "Other", "artist": "Group"}]}'
        ))
        assert [e.title for e in FileChartSource(path).next_entries()] == ["SONG", "OTHER"]

    def test_size_used_for_gap_report(self, write_file, caplog):
        caplog.set_level(logging.WARNING)
        path = write_file("chart.yaml", (
            "size: 3\n"
            "entries:\n"
            "  - {rank: 1, title: Song, artist: Band}\n"
        ))

        FileChartSource(path).next_entries()

        assert "2, 3" in caplog.text

    def test_missing_file(self, tmp_path):
        with pytest.raises(ChartSourceError, match="not found"):
            FileChartSource(tmp_path / "nope.yaml").next_entries()

    def test_invalid_syntax(self, write_file):
        path = write_file("chart.yaml", "entries: [unclosed\n")
        with pytest.raises(ChartSourceError, match="syntax"):
            FileChartSource(path).next_entries()

    def test_no_entry_list(self, write_file):
        path = write_file("chart.yaml", "year: 2012\n")
        with pytest.raises(ChartSourceError, match="no list of entries"):
            FileChartSource(path).next_entries()

    def test_malformed_entry(self, write_file):
        path = write_file("chart.yaml", "- {rank: 1, title: Song}\n")
        with pytest.raises(MalformedEntryError):
            FileChartSource(path).next_entries()

    def test_duplicate_ranks(self, write_file):
        path = write_file("chart.yaml", (
            "- {rank: 1, title: Song, artist: Band}\n"
            "- {rank: 1, title: Other, artist: Group}\n"
        ))
        with pytest.raises(ChartSourceError, match="Duplicate"):
            FileChartSource(path).next_entries()


class TestChartYears:
    """Test the year helpers"""

    def test_available_years_most_recent_first(self):
        assert available_years(2003) == [2003, 2002, 2001, 2000]

    def test_available_years_defaults_to_today(self):
        years = available_years()
        assert years[-1] == 2000
        assert years == sorted(years, reverse=True)

    @pytest.mark.parametrize("year,valid", [
        (2000, True),
        (2012, True),
        (2024, True),
        (1999, False),
        (2025, False),
        ("2012", False),
        (True, False),
    ])
    def test_is_valid_year(self, year, valid):
        assert is_valid_year(year, current_year=2024) is valid
