"""
Text similarity used by the match selector.

similarity() compares two strings after lower-casing and removing common
English stop-words, and returns the share of the longer string that
survives the edit distance:

    similarity(a, b) = (len(longer) - levenshtein(longer, shorter)) / len(longer)

Two strings that are empty (or consist only of stop-words) are identical.
Edit distance comes from rapidfuzz, which implements the classic
unit-cost insert/delete/substitute Levenshtein distance.
"""

import re

from rapidfuzz.distance import Levenshtein


STOP_WORDS = (
    "the", "a", "an", "and", "or", "but",
    "in", "on", "at", "to", "for", "of", "with", "by",
)

STOP_WORDS_PATTERN = re.compile(r"\b(" + "|".join(STOP_WORDS) + r")\b")


def clean_text(text: str) -> str:
    """Lower-case text and strip whole-word stop-words and outer whitespace."""
    return STOP_WORDS_PATTERN.sub("", text.lower()).strip()


def levenshtein(a: str, b: str) -> int:
    """Case-sensitive edit distance between a and b."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """
    Similarity of two strings in [0.0, 1.0].

    Example:
        similarity("Somebody That I Used to Know", "SOMEBODY THAT I USED TO KNOW")  # 1.0
        similarity("The Beatles", "Beatles")                                        # 1.0
    """
    first = clean_text(a)
    second = clean_text(b)

    if len(first) >= len(second):
        longer, shorter = first, second
    else:
        longer, shorter = second, first

    if not longer:
        return 1.0

    score = (len(longer) - levenshtein(longer, shorter)) / len(longer)
    return max(0.0, min(1.0, score))
