"""
Logging configuration for chart-matcher.

This module sets up the logging system with multiple outputs:
    - Console: Real-time progress with tqdm-compatible formatting
    - log_full.log: Complete log of all events (DEBUG and above)
    - log_errors.log: Only ERROR and CRITICAL level messages
    - unmatched_entries.log: Chart entries for which no candidate was found

The logging system follows the principle: everything to screen is also saved
to file, then filtered into specialized files.

Log File Locations:
    All log files are created in a 'logs' subdirectory of the output
    directory specified in config.yaml. Each run gets its own timestamp.

Usage:
    from chart_matcher.core.logger import setup_logging, get_logger

    setup_logging(output_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Starting batch")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log file name prefixes (created in output_dir/logs)
LOG_FULL_FILENAME = "log_full"
LOG_ERRORS_FILENAME = "log_errors"
UNMATCHED_ENTRIES_FILENAME = "unmatched_entries"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Custom formatter that adds colors to console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as '<colored level>: <message>'."""
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        return f"{color}{record.levelname}{Colors.RESET}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking progress bars.

    Progress bars redraw in place using carriage returns; plain writes to
    the same stream would corrupt them. tqdm.write() prints the message
    above any active bar instead.
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        """
        Initialize the tqdm-compatible handler.

        Args:
            stream: Output stream for log messages. Defaults to stderr.
        """
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record using tqdm.write()."""
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class UnmatchedEntryHandler(logging.Handler):
    """
    Handler that captures unmatched chart entries into a report file.

    This handler listens for log records carrying unmatched-entry extras
    and writes them in a simple, human-readable format:

        #12 SOMEBODY THAT I USED TO KNOW - GOTYE
        query: track:"SOMEBODY THAT I USED TO KNOW" artist:"GOTYE"

        #47 SONG - ARTIST
        query: track:"SONG" artist:"ARTIST"
        error: Rate limited while searching

    The handler looks for these extra fields in log records:
        - 'unmatched_rank': Chart position
        - 'unmatched_title': Entry title
        - 'unmatched_artist': Entry artist
        - 'unmatched_query': The last query that was tried
        - 'unmatched_error': Search error message (optional)

    Only records containing 'unmatched_rank' are written.

    Usage:
        log_unmatched_entry(logger, rank=12, title="SONG", artist="ARTIST",
                            query='track:"SONG" artist:"ARTIST"')
    """

    def __init__(self, report_path: Path) -> None:
        """
        Initialize the unmatched entry handler.

        Args:
            report_path: Path to the report file. Created/overwritten by open().
        """
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing (overwrites existing content)."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        """Write the unmatched entry to the report if the record carries one."""
        if not hasattr(record, "unmatched_rank"):
            return

        if self.report_file is None:
            return

        try:
            rank = getattr(record, "unmatched_rank")
            title = getattr(record, "unmatched_title", "")
            artist = getattr(record, "unmatched_artist", "")
            query = getattr(record, "unmatched_query", "")
            error = getattr(record, "unmatched_error", None)

            self.report_file.write(f"#{rank} {title} - {artist}\n")
            self.report_file.write(f"query: {query}\n")
            if error:
                self.report_file.write(f"error: {error}\n")
            self.report_file.write("\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Filter that only allows ERROR and CRITICAL level records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(output_dir: Path, console_level: str = "INFO") -> Path:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any other operations.

    Args:
        output_dir: Directory where log files will be created.
                    Logs are stored in a 'logs' subdirectory.
        console_level: Minimum level shown on the console ("DEBUG", "INFO", ...).

    Returns:
        The logs directory that was created.

    Behavior:
        1. Create output_dir/logs if it doesn't exist
        2. Configure root logger level to DEBUG
        3. Console handler (TqdmLoggingHandler), colored, at console_level
        4. log_full_{timestamp}.log at DEBUG
        5. log_errors_{timestamp}.log filtered to ERROR+
        6. unmatched_entries_{timestamp}.log via UnmatchedEntryHandler
    """
    logs_dir = output_dir / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(getattr(logging, console_level.upper(), logging.INFO))
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    full_handler = logging.FileHandler(
        logs_dir / f"{LOG_FULL_FILENAME}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(
        logs_dir / f"{LOG_ERRORS_FILENAME}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    unmatched_handler = UnmatchedEntryHandler(
        logs_dir / f"{UNMATCHED_ENTRIES_FILENAME}_{timestamp}.log"
    )
    unmatched_handler.open()
    root_logger.addHandler(unmatched_handler)

    # spotipy and urllib3 are chatty at DEBUG
    for noisy in ("spotipy", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logs_dir


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Returns:
        logging.Logger configured by setup_logging().

    Note:
        Loggers obtained before setup_logging() is called have no handlers
        of their own; records propagate to whatever the root logger has.
    """
    return logging.getLogger(name)


def format_matched_message(rank: int, artist: str, title: str, selected: str) -> str:
    """Format a 'Matched' message with colors."""
    return (
        f"{Colors.GREEN}Matched{Colors.RESET}: "
        f"#{rank} {artist} - {title} -> "
        f"{Colors.CYAN}{selected}{Colors.RESET}"
    )


def format_no_match_message(rank: int, artist: str, title: str, reason: str) -> str:
    """Format a 'No match' message with colors."""
    return (
        f"{Colors.RED}No match{Colors.RESET}: "
        f"#{rank} {artist} - {title} ({reason})"
    )


def log_unmatched_entry(
    logger: logging.Logger,
    rank: int,
    title: str,
    artist: str,
    query: str,
    error: str | None = None
) -> None:
    """
    Log a chart entry for which no candidate was found.

    Logs a WARNING (or ERROR when the search itself failed) and attaches
    the extra fields that UnmatchedEntryHandler writes to the report.

    Args:
        logger: The logger to use for the message.
        rank: Chart position of the entry.
        title: Entry title.
        artist: Entry artist.
        query: The last query that was tried.
        error: Search error message, if the search failed.
    """
    extra = {
        "unmatched_rank": rank,
        "unmatched_title": title,
        "unmatched_artist": artist,
        "unmatched_query": query,
        "unmatched_error": error,
    }
    if error:
        logger.error(f"Search failed for #{rank} {title} by {artist}: {error}", extra=extra)
    else:
        logger.warning(f"No match found for #{rank} {title} by {artist}", extra=extra)


def shutdown_logging() -> None:
    """
    Flush, close and remove all handlers from the root logger.

    Call at application exit, typically from a finally block.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except OSError:
            pass
        root_logger.removeHandler(handler)
