"""
Matching module for chart-matcher.

This module provides:
    - query: Structured and fallback search query construction
    - similarity: Stop-word aware edit-distance similarity
    - selector: Candidate scoring and best-match selection
    - models: ScoredCandidate, MatchResult, BatchReport
    - matcher: The batch matching protocol
"""

from chart_matcher.matching.matcher import ChartMatcher, match_chart
from chart_matcher.matching.models import (
    BatchReport,
    BatchSummary,
    MatchResult,
    ScoredCandidate,
)
from chart_matcher.matching.query import (
    build_fallback_query,
    build_structured_query,
    fallback_from_structured,
)
from chart_matcher.matching.selector import (
    PENALTY_RULES,
    PenaltyRule,
    rank_candidates,
    score_breakdown,
    score_candidate,
    select_best_match,
)
from chart_matcher.matching.similarity import clean_text, levenshtein, similarity

__all__ = [
    # Matcher
    "ChartMatcher",
    "match_chart",
    # Models
    "BatchReport",
    "BatchSummary",
    "MatchResult",
    "ScoredCandidate",
    # Query
    "build_structured_query",
    "build_fallback_query",
    "fallback_from_structured",
    # Selector
    "PENALTY_RULES",
    "PenaltyRule",
    "score_breakdown",
    "score_candidate",
    "rank_candidates",
    "select_best_match",
    # Similarity
    "clean_text",
    "levenshtein",
    "similarity",
]
