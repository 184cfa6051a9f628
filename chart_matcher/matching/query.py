"""
Search query construction.

Each chart entry yields a structured query with field qualifiers and, when
that returns nothing, a plain fallback query:

    structured: track:"SOMEBODY THAT I USED TO KNOW" artist:"GOTYE"
    fallback:   SOMEBODY THAT I USED TO KNOW GOTYE

Embedded double quotes are not escaped; how the catalog treats them is up
to the catalog.
"""

import re


STRUCTURED_QUERY_PATTERN = re.compile(r'track:"([^"]*)" artist:"([^"]*)"')


def build_structured_query(title: str, artist: str) -> str:
    """Build the field-qualified query for a title/artist pair."""
    return f'track:"{title.strip()}" artist:"{artist.strip()}"'


def build_fallback_query(title: str, artist: str) -> str:
    """Build the plain 'title artist' query used when the structured one finds nothing."""
    return " ".join(part for part in (title.strip(), artist.strip()) if part)


def fallback_from_structured(query: str) -> str:
    """
    Rewrite a structured query into its fallback form.

    Strings that are not structured queries are returned unchanged.

    Example:
        fallback_from_structured('track:"Song" artist:"Band"')  # 'Song Band'
    """
    match = STRUCTURED_QUERY_PATTERN.fullmatch(query.strip())
    if match is None:
        return query
    return build_fallback_query(match.group(1), match.group(2))
