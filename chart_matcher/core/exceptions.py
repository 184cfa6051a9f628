"""
Exception classes for chart-matcher.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message plus an optional details
dictionary, so callers can log context without parsing message strings.

Exception Hierarchy:
    ChartMatcherError (base)
        ConfigError - Configuration file issues
        ChartSourceError - Chart list could not be loaded or is inconsistent
        MalformedEntryError - A chart entry is missing its title or artist
        CatalogError - Catalog search failed (transport, auth, rate limit)
        SelectionError - A candidate selection points outside the candidates

Propagation:
    Per-entry failures (CatalogError raised while searching one entry) are
    captured into that entry's MatchResult and never abort a batch.
    ConfigError, ChartSourceError, MalformedEntryError and a CatalogError
    raised by the pre-flight check are systemic and stop the run.
"""


class ChartMatcherError(Exception):
    """
    Base exception for all chart-matcher errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch every chart-matcher error with a single
    except clause.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (rank, query, ...).

    Example:
        try:
            report = matcher.match_entries(entries)
        except ChartMatcherError as e:
            logger.error(f"Matching aborted: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description shown to the user.
            details: Optional dictionary containing additional context.
                     Common keys include:
                     - 'rank': chart position involved in the error
                     - 'query': search query that failed
                     - 'original_error': the wrapped exception's message
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(ChartMatcherError):
    """
    Raised when there's an issue with the configuration file.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml not found
        - config.yaml has invalid YAML syntax
        - Required fields missing (client_id, client_secret, output directory)
        - Invalid field values (e.g., zero search limit, negative delay)

    Example:
        raise ConfigError(
            "Missing required field 'client_id' in config.yaml",
            details={'file_path': '/path/to/config.yaml', 'missing_field': 'client_id'}
        )
    """
    pass


class ChartSourceError(ChartMatcherError):
    """
    Raised when the ranked chart list cannot be used.

    This is a CRITICAL error: a chart with duplicate ranks or an unreadable
    chart file gives no trustworthy ordering to match against.

    Common causes:
        - Chart file not found or not valid YAML/JSON
        - Chart file has no list of entries
        - Two entries share the same rank

    Note:
        Missing ranks (gaps) are NOT an error. They are reported in the log
        and matching continues with the entries that are present.
    """
    pass


class MalformedEntryError(ChartMatcherError):
    """
    Raised when a chart entry has no title, no artist, or an invalid rank.

    Entries are validated before any query is built, so a malformed entry
    never reaches the catalog. The caller decides whether to skip the entry
    or fail the whole pass.

    Example:
        raise MalformedEntryError(
            "Chart entry at rank 12 has no artist",
            details={'rank': 12, 'title': 'SONG'}
        )
    """
    pass


class CatalogError(ChartMatcherError):
    """
    Raised when a catalog search fails.

    Can be CRITICAL (auth failure detected before a batch starts) or
    NON-CRITICAL (a single search failed mid-batch, which is recorded on
    that entry's MatchResult).

    Common causes:
        - Missing, invalid or expired access token (CRITICAL at pre-flight)
        - Rate limiting (retried with backoff before giving up)
        - Network connectivity issues
        - Unexpected API response shape

    Attributes:
        is_auth_error: True if this is an authentication error.
        is_rate_limit: True if this is a rate limit error (may retry).

    Example:
        raise CatalogError(
            "Rate limited while searching: track:\"Song\" artist:\"Band\"",
            details={'query': query, 'http_status': 429},
            is_rate_limit=True
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        is_auth_error: bool = False,
        is_rate_limit: bool = False
    ) -> None:
        """
        Initialize catalog error with additional flags.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            is_auth_error: Set to True if this is an authentication failure.
            is_rate_limit: Set to True if this is a rate limit error.
                          Rate limit errors are retried with exponential backoff.
        """
        super().__init__(message, details)
        self.is_auth_error = is_auth_error
        self.is_rate_limit = is_rate_limit


class SelectionError(ChartMatcherError):
    """
    Raised when a selected index does not point into the candidate sequence.

    A MatchResult's selected index, when set, must always be a valid index
    into its candidates. Manual overrides are checked against this.
    """
    pass
