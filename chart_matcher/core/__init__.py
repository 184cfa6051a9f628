"""
Core module for chart-matcher.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with multiple outputs
    - progress: Rich progress bar for batch matching

Usage:
    from chart_matcher.core import (
        Config, load_config,
        setup_logging, get_logger,
        ChartMatcherError, ConfigError, CatalogError
    )
"""

from chart_matcher.core.config import (
    Config,
    MatchingConfig,
    OutputConfig,
    SpotifyConfig,
    load_config,
)
from chart_matcher.core.exceptions import (
    CatalogError,
    ChartMatcherError,
    ChartSourceError,
    ConfigError,
    MalformedEntryError,
    SelectionError,
)
from chart_matcher.core.logger import (
    get_logger,
    log_unmatched_entry,
    setup_logging,
    shutdown_logging,
)
from chart_matcher.core.progress import MatchingProgressBar

__all__ = [
    # Config
    "Config",
    "SpotifyConfig",
    "MatchingConfig",
    "OutputConfig",
    "load_config",
    # Exceptions
    "ChartMatcherError",
    "ConfigError",
    "ChartSourceError",
    "MalformedEntryError",
    "CatalogError",
    "SelectionError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_unmatched_entry",
    "shutdown_logging",
    # Progress
    "MatchingProgressBar",
]
