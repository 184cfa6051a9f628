"""
Match selection: score catalog candidates against a chart entry.

Scoring Algorithm:
    Each candidate's score is the sum of independent terms:

        popularity        candidate popularity, 0-100, added as-is
        title             similarity(title, candidate.name) * 20
        artist            similarity(artist, candidate.artist) * 15
        album type        +10 album, +5 single, 0 otherwise
        clean             +5 if the candidate is not explicit
        recency           +3 if released within the last 10 years
        penalties         see PENALTY_RULES (cover -30, remix -20, may stack)

    The best candidate is the highest score; ties go to the earlier search
    result. Scoring is pure: given the same current_year it always returns
    the same value, and it has no side effects other than DEBUG logging.

Usage:
    from chart_matcher.matching.selector import select_best_match

    index = select_best_match(candidates, entry.title, entry.artist, current_year=2024)
    best = candidates[index] if candidates else None
"""

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from chart_matcher.catalog.models import Candidate
from chart_matcher.core.logger import get_logger
from chart_matcher.matching.models import ScoredCandidate
from chart_matcher.matching.similarity import similarity


logger = get_logger(__name__)


# =============================================================================
# SCORING WEIGHTS
# =============================================================================

TITLE_WEIGHT = 20
ARTIST_WEIGHT = 15

# Bonus by album type; other types (compilation, appears_on...) get nothing
ALBUM_TYPE_BONUS = {
    "album": 10,
    "single": 5,
}

# Chart singles are usually the radio edit
NOT_EXPLICIT_BONUS = 5

RECENCY_BONUS = 3
RECENCY_WINDOW_YEARS = 10


# =============================================================================
# PENALTY TABLE
# =============================================================================

@dataclass(frozen=True)
class PenaltyRule:
    """
    A score adjustment triggered by keywords in candidate fields.

    Attributes:
        name: Short label used in score breakdowns.
        terms: Lower-case substrings that trigger the rule.
        delta: Amount added to the score when triggered (negative for penalties).
        fields: Candidate attributes searched, case-insensitively.
    """

    name: str
    terms: tuple[str, ...]
    delta: int
    fields: tuple[str, ...]

    def applies_to(self, candidate: Candidate) -> bool:
        for field_name in self.fields:
            value = (getattr(candidate, field_name, "") or "").lower()
            if any(term in value for term in self.terms):
                return True
        return False


# Rules are checked independently; a candidate can trigger several
PENALTY_RULES: tuple[PenaltyRule, ...] = (
    PenaltyRule(
        name="cover",
        terms=("cover", "tribute", "karaoke", "instrumental"),
        delta=-30,
        fields=("name", "artist"),
    ),
    PenaltyRule(
        name="remix",
        terms=("party", "dance", "remix", "mix"),
        delta=-20,
        fields=("name",),
    ),
)


# =============================================================================
# SCORING
# =============================================================================

def score_breakdown(
    candidate: Candidate,
    title: str,
    artist: str,
    current_year: int,
    penalty_rules: Sequence[PenaltyRule] = PENALTY_RULES
) -> dict[str, float]:
    """
    Compute each scoring term for a candidate.

    Returns:
        Mapping of term name to its contribution. Penalty rules appear under
        their rule name, with 0 when not triggered.
    """
    release_year = candidate.release_year

    terms: dict[str, float] = {
        "popularity": float(candidate.popularity),
        "title": similarity(title, candidate.name) * TITLE_WEIGHT,
        "artist": similarity(artist, candidate.artist) * ARTIST_WEIGHT,
        "album_type": float(ALBUM_TYPE_BONUS.get(candidate.album_type.lower(), 0)),
        "clean": float(NOT_EXPLICIT_BONUS if not candidate.explicit else 0),
        "recency": float(
            RECENCY_BONUS
            if release_year is not None and release_year >= current_year - RECENCY_WINDOW_YEARS
            else 0
        ),
    }
    for rule in penalty_rules:
        terms[rule.name] = float(rule.delta if rule.applies_to(candidate) else 0)

    return terms


def score_candidate(
    candidate: Candidate,
    title: str,
    artist: str,
    current_year: int,
    penalty_rules: Sequence[PenaltyRule] = PENALTY_RULES
) -> float:
    """Total score of a candidate for the given chart title and artist."""
    return sum(score_breakdown(candidate, title, artist, current_year, penalty_rules).values())


def rank_candidates(
    candidates: Sequence[Candidate],
    title: str,
    artist: str,
    current_year: int,
    penalty_rules: Sequence[PenaltyRule] = PENALTY_RULES
) -> list[ScoredCandidate]:
    """
    Score all candidates and sort them best first.

    The sort is stable, so equal scores keep search-result order.
    """
    scored = [
        ScoredCandidate(
            index=index,
            candidate=candidate,
            score=score_candidate(candidate, title, artist, current_year, penalty_rules),
        )
        for index, candidate in enumerate(candidates)
    ]

    for item in scored:
        logger.debug(
            f"Candidate {item.index}: '{item.candidate.name}' by "
            f"{item.candidate.artist} scored {item.score:.2f}"
        )

    return sorted(scored, key=lambda item: item.score, reverse=True)


def select_best_match(
    candidates: Sequence[Candidate],
    title: str,
    artist: str,
    current_year: int | None = None
) -> int:
    """
    Pick the best candidate for a chart entry.

    Args:
        candidates: Search results in catalog order.
        title: Chart entry title.
        artist: Chart entry artist.
        current_year: Year used by the recency term. Defaults to today's year.

    Returns:
        Index into candidates of the highest-scoring candidate.
        0 for an empty or single-element list, without scoring. An empty
        list therefore returns 0 even though there is nothing to select;
        callers check for emptiness themselves.

    Note:
        This function never fails and never rejects: it always names a
        best available candidate, even if every score is negative.
    """
    if len(candidates) <= 1:
        return 0

    if current_year is None:
        current_year = date.today().year

    ranked = rank_candidates(candidates, title, artist, current_year)
    return ranked[0].index
