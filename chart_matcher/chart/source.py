"""
Chart sources for chart-matcher.

A chart source yields the ranked list of entries for one matching pass.
Retrieving a chart from the web is outside this package; the sources here
read an already-clean list from memory or from a YAML/JSON file.

Chart File Format:
    Either a plain list of entries:

        - {rank: 1, title: "Somebody That I Used to Know", artist: "Gotye"}
        - {rank: 2, title: "We Are Young", artist: "fun."}

    or a mapping holding the list under 'entries' (or 'tracks'), with
    optional metadata:

        year: 2012
        entries:
          - {position: 1, title: "...", artist: "..."}

    JSON files are read by the same loader since JSON is valid YAML.

Validation:
    validate_chart() sorts entries by rank and rejects duplicate ranks.
    Missing ranks (gaps) are logged as warnings, not treated as errors.

Usage:
    from chart_matcher.chart.source import FileChartSource

    source = FileChartSource(Path("charts/2012.yaml"))
    entries = source.next_entries()
"""

from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Iterable

import yaml

from chart_matcher.chart.models import ChartEntry
from chart_matcher.core.exceptions import ChartSourceError
from chart_matcher.core.logger import get_logger


logger = get_logger(__name__)


# Earliest year for which year-end charts are offered
FIRST_CHART_YEAR = 2000


# =============================================================================
# CHART SOURCES
# =============================================================================

class ChartSource(ABC):
    """
    Abstract supplier of a ranked chart.

    Implementations return entries already sorted by rank with unique ranks.
    The matcher consumes the list once per pass and never re-fetches it.
    """

    @abstractmethod
    def next_entries(self) -> list[ChartEntry]:
        """
        Return the chart's entries, sorted by rank.

        Raises:
            ChartSourceError: If the chart cannot be produced.
        """


class StaticChartSource(ChartSource):
    """Chart source over an in-memory sequence of entries."""

    def __init__(self, entries: Iterable[ChartEntry], expected_count: int | None = None) -> None:
        self._entries = list(entries)
        self._expected_count = expected_count

    def next_entries(self) -> list[ChartEntry]:
        return validate_chart(self._entries, self._expected_count)


class FileChartSource(ChartSource):
    """
    Chart source reading a YAML or JSON file.

    Attributes:
        path: Path to the chart file.
        expected_count: Chart length used for gap reporting. When None, the
                        file's 'size' key is used if present, otherwise the
                        highest rank found.
        year: The chart year from the file's 'year' key, once loaded.
    """

    def __init__(self, path: Path, expected_count: int | None = None) -> None:
        self.path = path
        self.expected_count = expected_count
        self.year: int | None = None

    def next_entries(self) -> list[ChartEntry]:
        """
        Load, normalize and validate the chart file.

        Raises:
            ChartSourceError: If the file is missing, unparseable, has no entry
                              list, or contains duplicate ranks.
            MalformedEntryError: If an entry is missing its title or artist.
        """
        raw = self._load()

        expected_count = self.expected_count
        if isinstance(raw, dict):
            year = raw.get("year")
            if isinstance(year, int) and not isinstance(year, bool):
                self.year = year
            if expected_count is None and isinstance(raw.get("size"), int):
                expected_count = raw["size"]
            raw_entries = raw.get("entries", raw.get("tracks"))
        else:
            raw_entries = raw

        if not isinstance(raw_entries, list):
            raise ChartSourceError(
                f"Chart file has no list of entries: {self.path}",
                details={"file_path": str(self.path)}
            )

        entries = [ChartEntry.from_dict(item) for item in raw_entries]
        logger.debug(f"Loaded {len(entries)} chart entries from {self.path}")
        return validate_chart(entries, expected_count)

    def _load(self) -> Any:
        if not self.path.exists():
            raise ChartSourceError(
                f"Chart file not found: {self.path}",
                details={"file_path": str(self.path)}
            )
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except OSError as e:
            raise ChartSourceError(
                f"Failed to read chart file: {e}",
                details={"file_path": str(self.path), "original_error": str(e)}
            ) from e
        except yaml.YAMLError as e:
            raise ChartSourceError(
                f"Invalid chart file syntax: {e}",
                details={"file_path": str(self.path), "original_error": str(e)}
            ) from e


# =============================================================================
# VALIDATION
# =============================================================================

def validate_chart(
    entries: Iterable[ChartEntry],
    expected_count: int | None = None
) -> list[ChartEntry]:
    """
    Sort entries by rank, reject duplicates and report gaps.

    Args:
        entries: Chart entries in any order.
        expected_count: Number of positions the chart should have.
                        Used only for gap reporting.

    Returns:
        New list of entries sorted by ascending rank.

    Raises:
        ChartSourceError: If two entries share a rank.
    """
    ordered = sorted(entries, key=lambda entry: entry.rank)

    seen: set[int] = set()
    for entry in ordered:
        if entry.rank in seen:
            raise ChartSourceError(
                f"Duplicate chart rank: {entry.rank}",
                details={"rank": entry.rank}
            )
        seen.add(entry.rank)

    missing = find_missing_ranks(ordered, expected_count)
    if missing:
        logger.warning(
            f"Chart is missing {len(missing)} rank(s): {', '.join(str(r) for r in missing)}"
        )

    return ordered


def find_missing_ranks(
    entries: Iterable[ChartEntry],
    expected_count: int | None = None
) -> list[int]:
    """
    List the chart positions that have no entry.

    Positions run from 1 to expected_count, or to the highest rank present
    when expected_count is None.

    Example:
        find_missing_ranks(entries_with_ranks_1_2_5)      # [3, 4]
        find_missing_ranks(entries_with_ranks_1_2_5, 6)   # [3, 4, 6]
    """
    ranks = {entry.rank for entry in entries}
    upper = expected_count if expected_count is not None else max(ranks, default=0)
    return [rank for rank in range(1, upper + 1) if rank not in ranks]


# =============================================================================
# CHART YEARS
# =============================================================================

def available_years(current_year: int | None = None) -> list[int]:
    """Chart years that can be requested, most recent first."""
    if current_year is None:
        current_year = date.today().year
    return list(range(current_year, FIRST_CHART_YEAR - 1, -1))


def is_valid_year(year: Any, current_year: int | None = None) -> bool:
    """True when year is an integer between FIRST_CHART_YEAR and current_year."""
    if current_year is None:
        current_year = date.today().year
    if isinstance(year, bool) or not isinstance(year, int):
        return False
    return FIRST_CHART_YEAR <= year <= current_year
