"""
Configuration management for chart-matcher.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml.

The configuration file contains:
    - Spotify API credentials (client_id, client_secret) or a pre-issued token
    - Matching behavior (result limits, batch size, pacing delays, retries)
    - Output directory for logs and match reports

Configuration File Location:
    The config.yaml file is looked up in the current working directory
    unless an explicit path is given.

Example config.yaml:
    spotify:
      client_id: "your_client_id_here"
      client_secret: "your_client_secret_here"
      access_token: null  # Optional: use an already-issued token instead

    matching:
      search_limit: 5
      more_matches_limit: 10
      batch_size: 10
      search_delay: 0.1
      batch_delay: 0.2
      max_retries: 2

    output:
      directory: "./chart-matcher-output"
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from chart_matcher.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

# Spotify search accepts at most 50 results per request
MAX_SEARCH_LIMIT = 50


@dataclass(frozen=True)
class SpotifyConfig:
    """
    Spotify API credentials configuration.

    Either client credentials (client_id + client_secret) or a pre-issued
    access_token must be present.

    Attributes:
        client_id: The Spotify application client ID, or "" if not given.
        client_secret: The Spotify application client secret, or "" if not given.
        access_token: An already-valid bearer token, or None.
    """
    client_id: str
    client_secret: str
    access_token: str | None = None

    @property
    def has_client_credentials(self) -> bool:
        """True when both client_id and client_secret are set."""
        return bool(self.client_id and self.client_secret)


@dataclass(frozen=True)
class MatchingConfig:
    """
    Batch matching behavior configuration.

    Attributes:
        search_limit: Number of candidates requested per search. Larger values
                      give the selector more alternatives to score. Default: 5.
        more_matches_limit: Number of candidates requested by "fetch more
                            matches". Default: 10.
        batch_size: Entries per batch. Only affects pacing. Default: 10.
        search_delay: Pause in seconds between individual searches. Default: 0.1.
        batch_delay: Pause in seconds between batches. Default: 0.2.
        max_retries: Retries for rate-limited searches. Default: 2.
    """
    search_limit: int = 5
    more_matches_limit: int = 10
    batch_size: int = 10
    search_delay: float = 0.1
    batch_delay: float = 0.2
    max_retries: int = 2


@dataclass(frozen=True)
class OutputConfig:
    """
    Output directory configuration.

    Attributes:
        directory: Absolute path where logs and match reports are written.
                   Path expansion is performed (~ is expanded to home directory).
                   The directory is created when logging is set up.
    """
    directory: Path


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    This is the main configuration object that aggregates all configuration
    sections. It is created by load_config() and is immutable.

    Attributes:
        spotify: Spotify API credentials.
        matching: Batch matching settings.
        output: Output directory settings.

    Example:
        config = load_config()
        print(f"Requesting {config.matching.search_limit} candidates per entry")
        print(f"Writing logs to: {config.output.directory}")
    """
    spotify: SpotifyConfig
    matching: MatchingConfig
    output: OutputConfig


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If the config file is not found, has invalid YAML syntax,
                     is missing required fields, or contains invalid values.

    Behavior:
        1. Locate config file (explicit path or CWD/config.yaml)
        2. Read and parse YAML content
        3. Validate structure (required sections exist)
        4. Parse spotify credentials
        5. Parse matching settings with defaults
        6. Expand output directory path
    """
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    _validate_config(raw_config)

    return Config(
        spotify=_parse_spotify_config(raw_config["spotify"]),
        matching=_parse_matching_config(raw_config.get("matching")),
        output=_parse_output_config(raw_config["output"])
    )


def _validate_config(raw_config: dict[str, Any]) -> None:
    """
    Check that the required sections exist and are dictionaries.

    Raises:
        ConfigError: If a section is missing or has the wrong type.
    """
    for section in ("spotify", "output"):
        if section not in raw_config:
            raise ConfigError(
                f"Missing required section: '{section}'",
                details={"missing_section": section}
            )

        if not isinstance(raw_config[section], dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )

    matching = raw_config.get("matching")
    if matching is not None and not isinstance(matching, dict):
        raise ConfigError(
            "Section 'matching' must be a dictionary",
            details={"section": "matching"}
        )


def _parse_spotify_config(spotify_section: dict[str, Any]) -> SpotifyConfig:
    """
    Parse and validate the Spotify configuration section.

    Raises:
        ConfigError: If neither client credentials nor an access token are given,
                     or if a present field is not a string.
    """
    values: dict[str, str] = {}
    for field_name in ("client_id", "client_secret", "access_token"):
        raw = spotify_section.get(field_name)
        if raw is None:
            values[field_name] = ""
            continue
        if not isinstance(raw, str):
            raise ConfigError(
                f"'spotify.{field_name}' must be a string",
                details={"field": f"spotify.{field_name}"}
            )
        values[field_name] = raw.strip()

    access_token = values["access_token"] or None

    if not access_token:
        for field_name in ("client_id", "client_secret"):
            if not values[field_name]:
                raise ConfigError(
                    f"'spotify.{field_name}' must be a non-empty string",
                    details={"field": f"spotify.{field_name}"}
                )

    return SpotifyConfig(
        client_id=values["client_id"],
        client_secret=values["client_secret"],
        access_token=access_token
    )


def _parse_matching_config(matching_section: dict[str, Any] | None) -> MatchingConfig:
    """
    Parse and validate the matching configuration section.

    Applies defaults if the section is missing or fields are not specified.

    Raises:
        ConfigError: If a limit or size is not a positive integer, a limit
                     exceeds the catalog maximum, or a delay is negative.
    """
    defaults = MatchingConfig()
    if not matching_section:
        return defaults

    def positive_int(field_name: str, default: int, maximum: int | None = None) -> int:
        raw = matching_section.get(field_name)
        if raw is None:
            return default
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
            raise ConfigError(
                f"'matching.{field_name}' must be a positive integer",
                details={"field": f"matching.{field_name}", "value": raw}
            )
        if maximum is not None and raw > maximum:
            raise ConfigError(
                f"'matching.{field_name}' must not exceed {maximum}",
                details={"field": f"matching.{field_name}", "value": raw}
            )
        return raw

    def delay(field_name: str, default: float) -> float:
        raw = matching_section.get(field_name)
        if raw is None:
            return default
        if isinstance(raw, bool) or not isinstance(raw, (int, float)) or raw < 0:
            raise ConfigError(
                f"'matching.{field_name}' must be a non-negative number",
                details={"field": f"matching.{field_name}", "value": raw}
            )
        return float(raw)

    max_retries = matching_section.get("max_retries", defaults.max_retries)
    if isinstance(max_retries, bool) or not isinstance(max_retries, int) or max_retries < 0:
        raise ConfigError(
            "'matching.max_retries' must be a non-negative integer",
            details={"field": "matching.max_retries", "value": max_retries}
        )

    return MatchingConfig(
        search_limit=positive_int("search_limit", defaults.search_limit, MAX_SEARCH_LIMIT),
        more_matches_limit=positive_int(
            "more_matches_limit", defaults.more_matches_limit, MAX_SEARCH_LIMIT
        ),
        batch_size=positive_int("batch_size", defaults.batch_size),
        search_delay=delay("search_delay", defaults.search_delay),
        batch_delay=delay("batch_delay", defaults.batch_delay),
        max_retries=max_retries
    )


def _parse_output_config(output_section: dict[str, Any]) -> OutputConfig:
    """
    Parse and validate the output configuration section.

    Expands ~ to home directory and converts to absolute Path.
    Does NOT create the directory (that happens in setup_logging).

    Raises:
        ConfigError: If directory is missing or empty.
    """
    directory = output_section.get("directory", "")

    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError(
            "'output.directory' must be a non-empty string",
            details={"field": "output.directory"}
        )

    return OutputConfig(directory=Path(directory.strip()).expanduser().resolve())
