"""
Data models for match selection and batch results.

Usage:
    from chart_matcher.matching.models import MatchResult

    result = matcher.match_entry(entry)
    if result.has_match:
        print(f"{entry} -> {result.selected_candidate.uri}")
    elif result.error:
        print(f"{entry} failed: {result.error}")
    else:
        print(f"{entry}: no candidates")
"""

from dataclasses import dataclass, field, replace
from typing import Any, Sequence

from chart_matcher.catalog.models import Candidate
from chart_matcher.chart.models import ChartEntry
from chart_matcher.core.exceptions import SelectionError


@dataclass(frozen=True)
class ScoredCandidate:
    """
    A candidate with its selector score.

    Attributes:
        index: Position of the candidate in the original search results.
        candidate: The scored Candidate.
        score: Sum of the selector's scoring terms. May be negative.
    """

    index: int
    candidate: Candidate
    score: float


@dataclass(frozen=True)
class MatchResult:
    """
    Outcome of matching one chart entry.

    Attributes:
        entry: The ChartEntry that was matched.

        candidates: Search results in catalog order (kept for display).
                    Empty if nothing was found or the search failed.

        selected_index: Index into candidates of the chosen match, or None.
                        When set it is always a valid index; this is checked
                        on construction and raises SelectionError otherwise.

        search_query: The last query sent to the catalog (the fallback query
                      if the structured one returned nothing).

        error: Error message when the search itself failed, else None.

        scores: Selector score per candidate, aligned with candidates.
                Empty when the selector did not score (0 or 1 candidates,
                or a fresh candidate list awaiting selection).

    Properties:
        has_match: True if a candidate is selected and there is no error.
                   A candidate list awaiting selection is not a match.
        selected_candidate: The Candidate at selected_index, or None.
        selected_uri: Its catalog URI, or None.
        best_score: Its score, or None if unscored.
    """

    entry: ChartEntry
    candidates: tuple[Candidate, ...] = ()
    selected_index: int | None = None
    search_query: str = ""
    error: str | None = None
    scores: tuple[float, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.selected_index is not None and not (
            0 <= self.selected_index < len(self.candidates)
        ):
            raise SelectionError(
                f"Selected index {self.selected_index} is out of range for "
                f"{len(self.candidates)} candidate(s)",
                details={
                    "rank": self.entry.rank,
                    "selected_index": self.selected_index,
                    "candidate_count": len(self.candidates),
                }
            )

    @property
    def has_match(self) -> bool:
        return self.selected_index is not None and self.error is None

    @property
    def selected_candidate(self) -> Candidate | None:
        if self.selected_index is None:
            return None
        return self.candidates[self.selected_index]

    @property
    def selected_uri(self) -> str | None:
        candidate = self.selected_candidate
        return candidate.uri if candidate else None

    @property
    def best_score(self) -> float | None:
        if self.selected_index is None or not self.scores:
            return None
        return self.scores[self.selected_index]

    @classmethod
    def matched(
        cls,
        entry: ChartEntry,
        candidates: Sequence[Candidate],
        selected_index: int,
        search_query: str,
        scores: Sequence[float] = ()
    ) -> "MatchResult":
        """Create a result for an entry whose search returned candidates."""
        return cls(
            entry=entry,
            candidates=tuple(candidates),
            selected_index=selected_index,
            search_query=search_query,
            scores=tuple(scores),
        )

    @classmethod
    def empty(cls, entry: ChartEntry, search_query: str) -> "MatchResult":
        """Create a result for an entry whose searches found nothing."""
        return cls(entry=entry, search_query=search_query)

    @classmethod
    def failed(cls, entry: ChartEntry, search_query: str, error: str) -> "MatchResult":
        """Create a result for an entry whose search raised an error."""
        return cls(entry=entry, search_query=search_query, error=error)

    def with_selection(self, index: int) -> "MatchResult":
        """
        Return a copy with a different selected candidate (manual override).

        Raises:
            SelectionError: If index is not a valid index into candidates.
        """
        return replace(self, selected_index=index)

    def with_candidates(
        self,
        candidates: Sequence[Candidate],
        search_query: str
    ) -> "MatchResult":
        """
        Return a copy with a replaced candidate list.

        Any previous selection, scores and error are discarded, since they
        referred to the old list.
        """
        return replace(
            self,
            candidates=tuple(candidates),
            selected_index=None,
            search_query=search_query,
            error=None,
            scores=(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the per-entry report shape consumed downstream."""
        return {
            "rank": self.entry.rank,
            "title": self.entry.title,
            "artist": self.entry.artist,
            "search_query": self.search_query,
            "candidates": [candidate.to_dict() for candidate in self.candidates],
            "selected_index": self.selected_index,
            "has_match": self.has_match,
            "error": self.error,
        }


@dataclass(frozen=True)
class BatchSummary:
    """Counts for one matching pass, plus the entries left without a match."""

    total: int
    matched: int
    unmatched: int
    errored: int
    unmatched_entries: tuple[ChartEntry, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "matched": self.matched,
            "unmatched": self.unmatched,
            "errored": self.errored,
            "unmatched_entries": [entry.to_dict() for entry in self.unmatched_entries],
        }


@dataclass(frozen=True)
class BatchReport:
    """
    Results of one matching pass, in chart order.

    Attributes:
        results: One MatchResult per processed entry.
        cancelled: True if the pass was stopped before all entries were
                   processed. The results present are still valid.
    """

    results: tuple[MatchResult, ...] = ()
    cancelled: bool = False

    @property
    def matched(self) -> list[MatchResult]:
        return [r for r in self.results if r.has_match]

    @property
    def unmatched(self) -> list[MatchResult]:
        return [r for r in self.results if not r.has_match]

    @property
    def errors(self) -> list[MatchResult]:
        return [r for r in self.results if r.error is not None]

    def result_for_rank(self, rank: int) -> MatchResult | None:
        """Find the result for a chart position, or None if it was not processed."""
        for result in self.results:
            if result.entry.rank == rank:
                return result
        return None

    def with_result(self, result: MatchResult) -> "BatchReport":
        """
        Return a copy with the result for result.entry.rank replaced.

        Used after a manual selection or a "more matches" search. A rank
        that was not in the report is appended.
        """
        results = list(self.results)
        for position, existing in enumerate(results):
            if existing.entry.rank == result.entry.rank:
                results[position] = result
                break
        else:
            results.append(result)
        return replace(self, results=tuple(results))

    def summary(self) -> BatchSummary:
        unmatched = self.unmatched
        return BatchSummary(
            total=len(self.results),
            matched=len(self.results) - len(unmatched),
            unmatched=len(unmatched),
            errored=len(self.errors),
            unmatched_entries=tuple(r.entry for r in unmatched),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable report."""
        return {
            "cancelled": self.cancelled,
            "summary": self.summary().to_dict(),
            "results": [result.to_dict() for result in self.results],
        }
