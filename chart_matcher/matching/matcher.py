"""
Batch matching of chart entries against a catalog.

Matching Protocol (per entry):
    1. Build the structured query for the entry
    2. Search the catalog with the configured result limit
    3. If nothing came back, search again with the plain fallback query
    4. If candidates were found, score them and select the best one
    5. Record a MatchResult; search errors are recorded, never raised

Batch Workflow:
    1. Pre-flight: search.ensure_ready(). A failure here aborts the batch,
       since no entry could succeed
    2. Entries are processed one at a time, in chart order
    3. A short pause separates searches and a longer one separates batches
       of batch_size entries; both only pace requests for the API's rate limit
    4. Pauses wait on a threading.Event, so setting the event cancels the
       batch promptly. Results recorded so far are returned
    5. A summary of matched and unmatched entries is logged

Rate Limiting:
    Searches failing with CatalogError(is_rate_limit=True) are retried up to
    max_retries times with exponential backoff and jitter. Other errors are
    recorded on the entry immediately.

Usage:
    from chart_matcher.matching.matcher import ChartMatcher

    matcher = ChartMatcher(catalog, search_limit=5)
    report = matcher.match_entries(entries)

    for result in report.unmatched:
        print(f"No match: {result.entry}")

    # Ask for more candidates for a wrong match
    better = matcher.fetch_more_matches(report.result_for_rank(12))
"""

import random
import threading
from datetime import date
from typing import Any, Iterable, Sequence

from chart_matcher.catalog.client import CatalogSearch
from chart_matcher.catalog.models import Candidate
from chart_matcher.chart.models import ChartEntry
from chart_matcher.chart.source import ChartSource
from chart_matcher.core.exceptions import CatalogError
from chart_matcher.core.logger import (
    format_matched_message,
    format_no_match_message,
    get_logger,
    log_unmatched_entry,
)
from chart_matcher.core.progress import MatchingProgressBar
from chart_matcher.matching.models import BatchReport, MatchResult
from chart_matcher.matching.query import build_fallback_query, build_structured_query
from chart_matcher.matching.selector import rank_candidates, select_best_match


logger = get_logger(__name__)


# =============================================================================
# PACING DEFAULTS
# =============================================================================

DEFAULT_SEARCH_LIMIT = 5
DEFAULT_MORE_MATCHES_LIMIT = 10
DEFAULT_BATCH_SIZE = 10

# Pause between individual searches and between batches (seconds)
DEFAULT_SEARCH_DELAY = 0.1
DEFAULT_BATCH_DELAY = 0.2


# =============================================================================
# RETRY CONFIGURATION FOR RATE LIMITS
# =============================================================================

DEFAULT_MAX_RETRIES = 2

# Base delay between retries (seconds) - uses exponential backoff with jitter
RETRY_DELAY_BASE = 2.0

# Maximum delay between retries (seconds) - caps exponential growth
RETRY_DELAY_MAX = 30.0

# Jitter factor (±30%) to spread out retries
RETRY_JITTER_FACTOR = 0.3

# Rate limit responses wait twice as long
RATE_LIMIT_DELAY_MULTIPLIER = 2.0


class ChartMatcher:
    """
    Matches chart entries to catalog candidates.

    Attributes:
        search: The catalog search capability.
        search_limit: Candidates requested per search.
        more_matches_limit: Candidates requested by fetch_more_matches().
        batch_size: Entries between the longer batch pauses.
        search_delay: Pause between searches, in seconds.
        batch_delay: Pause between batches, in seconds.
        max_retries: Retries for a rate-limited search.
        retry_delay_base: First backoff delay, in seconds.
        current_year: Year used by the selector's recency term. Fixed for
                      the lifetime of the matcher so that every entry in a
                      batch is scored against the same year.

    Thread Safety:
        A ChartMatcher holds no per-batch state; match_entry() may be
        called from several threads as long as the search capability allows it.
    """

    def __init__(
        self,
        search: CatalogSearch,
        *,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
        more_matches_limit: int = DEFAULT_MORE_MATCHES_LIMIT,
        batch_size: int = DEFAULT_BATCH_SIZE,
        search_delay: float = DEFAULT_SEARCH_DELAY,
        batch_delay: float = DEFAULT_BATCH_DELAY,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay_base: float = RETRY_DELAY_BASE,
        current_year: int | None = None
    ) -> None:
        if search_limit < 1 or more_matches_limit < 1:
            raise ValueError("Search limits must be at least 1")
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.search = search
        self.search_limit = search_limit
        self.more_matches_limit = more_matches_limit
        self.batch_size = batch_size
        self.search_delay = search_delay
        self.batch_delay = batch_delay
        self.max_retries = max_retries
        self.retry_delay_base = retry_delay_base
        self.current_year = current_year if current_year is not None else date.today().year

    # =========================================================================
    # Single Entry
    # =========================================================================

    def match_entry(
        self,
        entry: ChartEntry,
        cancel_event: threading.Event | None = None
    ) -> MatchResult:
        """
        Match one chart entry.

        Args:
            entry: The chart entry to match.
            cancel_event: Optional event; when set during a rate-limit
                          backoff, the wait is cut short and the entry is
                          recorded as failed.

        Returns:
            MatchResult. Never raises for search failures: they are stored
            in MatchResult.error.
        """
        return self._match(entry, self.search_limit, cancel_event, auto_select=True)

    def fetch_more_matches(
        self,
        result_or_entry: MatchResult | ChartEntry,
        limit: int | None = None,
        auto_select: bool = False
    ) -> MatchResult:
        """
        Search again for one entry with a larger result limit.

        Args:
            result_or_entry: The previous MatchResult, or just the entry.
            limit: Result limit. Defaults to more_matches_limit.
            auto_select: If True, run the selector on the new candidates.
                         If False (default), no candidate is selected and
                         the caller chooses with MatchResult.with_selection().

        Returns:
            A new MatchResult whose candidates replace the previous ones.
            The previous selection is discarded.
        """
        if isinstance(result_or_entry, MatchResult):
            entry = result_or_entry.entry
        else:
            entry = result_or_entry

        limit = limit if limit is not None else self.more_matches_limit
        logger.info(f"Fetching up to {limit} candidates for {entry}")
        return self._match(entry, limit, None, auto_select=auto_select)

    def _match(
        self,
        entry: ChartEntry,
        limit: int,
        cancel_event: threading.Event | None,
        auto_select: bool
    ) -> MatchResult:
        query = build_structured_query(entry.title, entry.artist)

        try:
            candidates = self._search_with_retry(query, limit, cancel_event)
            if not candidates:
                query = build_fallback_query(entry.title, entry.artist)
                logger.debug(f"No results for {entry}, retrying with fallback query '{query}'")
                candidates = self._search_with_retry(query, limit, cancel_event)
        except CatalogError as e:
            return MatchResult.failed(entry, query, e.message)
        except Exception as e:
            logger.debug(f"Unexpected search error for {entry}: {type(e).__name__}: {e}")
            return MatchResult.failed(entry, query, f"{type(e).__name__}: {e}")

        if not candidates:
            return MatchResult.empty(entry, query)

        if not auto_select:
            return MatchResult(entry=entry, candidates=tuple(candidates), search_query=query)

        selected_index, scores = self._select(entry, candidates)
        return MatchResult.matched(entry, candidates, selected_index, query, scores)

    def _select(
        self,
        entry: ChartEntry,
        candidates: Sequence[Candidate]
    ) -> tuple[int, tuple[float, ...]]:
        """Selected index plus per-candidate scores (empty for 0/1 candidates)."""
        if len(candidates) <= 1:
            return select_best_match(candidates, entry.title, entry.artist, self.current_year), ()

        ranked = rank_candidates(candidates, entry.title, entry.artist, self.current_year)
        scores = [0.0] * len(candidates)
        for item in ranked:
            scores[item.index] = item.score
        return ranked[0].index, tuple(scores)

    def _search_with_retry(
        self,
        query: str,
        limit: int,
        cancel_event: threading.Event | None
    ) -> list[Candidate]:
        """
        Run one search, retrying rate-limit errors with backoff.

        Retry Strategy:
            - Exponential backoff: base, 2x base, 4x base... capped at RETRY_DELAY_MAX
            - Rate limit multiplier: 2x
            - Jitter: ±30%

        Raises:
            CatalogError: When the error is not a rate limit, retries are
                          exhausted, or cancel_event is set while waiting.
        """
        for attempt in range(self.max_retries + 1):
            try:
                return list(self.search.search(query, limit))
            except CatalogError as e:
                if not e.is_rate_limit or attempt >= self.max_retries:
                    raise

                base_delay = min(self.retry_delay_base * (2 ** attempt), RETRY_DELAY_MAX)
                base_delay = min(base_delay * RATE_LIMIT_DELAY_MULTIPLIER, RETRY_DELAY_MAX)
                jitter = base_delay * RETRY_JITTER_FACTOR * (2 * random.random() - 1)
                delay = max(0.0, base_delay + jitter)

                logger.warning(
                    f"Search attempt {attempt + 1}/{self.max_retries + 1} rate limited. "
                    f"Retrying in {delay:.1f}s"
                )
                if _pause(delay, cancel_event):
                    raise

        # Unreachable: the last attempt either returns or raises
        return []

    # =========================================================================
    # Batch
    # =========================================================================

    def match_entries(
        self,
        entries: Iterable[ChartEntry],
        cancel_event: threading.Event | None = None,
        progress_bar: MatchingProgressBar | None = None
    ) -> BatchReport:
        """
        Match a chart, entry by entry.

        Args:
            entries: Chart entries, in rank order.
            cancel_event: Set it from another thread to stop the batch.
            progress_bar: Optional progress bar updated after every entry.
                          Started and stopped by the caller.

        Returns:
            BatchReport with one MatchResult per processed entry.
            report.cancelled is True if the batch was stopped early.

        Raises:
            CatalogError: If the pre-flight check fails. No entry is searched.
        """
        entries = list(entries)
        if cancel_event is None:
            cancel_event = threading.Event()

        self.search.ensure_ready()

        logger.info(
            f"Matching {len(entries)} chart entries "
            f"(limit {self.search_limit}, batches of {self.batch_size})"
        )

        results: list[MatchResult] = []
        cancelled = False

        for position, entry in enumerate(entries):
            if position == 0:
                delay = 0.0
            elif position % self.batch_size == 0:
                delay = self.batch_delay
            else:
                delay = self.search_delay

            if _pause(delay, cancel_event):
                cancelled = True
                break

            result = self.match_entry(entry, cancel_event)
            results.append(result)
            self._log_result(result, progress_bar)

            if progress_bar is not None:
                progress_bar.update(matched=result.has_match, errored=result.error is not None)

        if cancelled:
            logger.warning(
                f"Matching cancelled after {len(results)} of {len(entries)} entries"
            )

        report = BatchReport(results=tuple(results), cancelled=cancelled)
        log_summary(report)
        return report

    def _log_result(self, result: MatchResult, progress_bar: MatchingProgressBar | None) -> None:
        entry = result.entry

        if result.has_match:
            selected = result.selected_candidate
            label = f"{selected.name} - {selected.artist}" if selected else "?"
            logger.debug(f"Matched {entry} -> {label} ({result.selected_uri})")
            if progress_bar is not None:
                progress_bar.log(
                    format_matched_message(entry.rank, entry.artist, entry.title, label)
                )
            return

        log_unmatched_entry(
            logger,
            rank=entry.rank,
            title=entry.title,
            artist=entry.artist,
            query=result.search_query,
            error=result.error
        )
        if progress_bar is not None:
            reason = result.error or "no candidates"
            progress_bar.log(
                format_no_match_message(entry.rank, entry.artist, entry.title, reason)
            )


def _pause(delay: float, cancel_event: threading.Event | None) -> bool:
    """Wait up to delay seconds. Returns True if cancel_event is (or becomes) set."""
    if cancel_event is None:
        if delay > 0:
            threading.Event().wait(delay)
        return False
    return cancel_event.wait(delay)


def log_summary(report: BatchReport) -> None:
    """Log matched/unmatched counts and list the unmatched entries."""
    summary = report.summary()

    logger.info(
        f"Matching complete: {summary.matched}/{summary.total} matched, "
        f"{summary.unmatched} unmatched ({summary.errored} with errors)"
    )
    if summary.unmatched_entries:
        logger.info("Unmatched entries:")
        for entry in summary.unmatched_entries:
            logger.info(f"  #{entry.rank} {entry.title} - {entry.artist}")


def match_chart(
    search: CatalogSearch,
    source: ChartSource,
    cancel_event: threading.Event | None = None,
    progress_bar: MatchingProgressBar | None = None,
    **options: Any
) -> BatchReport:
    """
    Read a chart from source once and match it.

    Args:
        search: The catalog search capability.
        source: Chart source; next_entries() is called exactly once.
        cancel_event: See ChartMatcher.match_entries().
        progress_bar: See ChartMatcher.match_entries().
        **options: Keyword arguments for ChartMatcher (search_limit, ...).
    """
    matcher = ChartMatcher(search, **options)
    return matcher.match_entries(
        source.next_entries(),
        cancel_event=cancel_event,
        progress_bar=progress_bar
    )
