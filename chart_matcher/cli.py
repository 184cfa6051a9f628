"""
Command-line interface for chart-matcher.

This module implements the CLI using Click; rich-click is used for the
help output colors.

Commands:
    chart-match --chart <file>                      Match a chart file
    chart-match --chart <file> --report out.json    Also write a JSON report
    chart-match --chart <file> --more 12            Show more candidates for rank 12
    chart-match --chart <file> --select 12 3        Use candidate 3 for rank 12

Configuration:
    The CLI reads config.yaml from the current directory (or --config) with:
    - Spotify API credentials (client_id, client_secret) or an access_token
    - Matching settings (limits, pacing, retries)
    - Output directory for logs

Interrupting:
    Ctrl-C stops the batch after the entry in progress. Entries matched so
    far are still summarized and written to the report.

Exit Codes:
    0    Success (unmatched entries are not a failure)
    1    Configuration, chart, catalog or other chart-matcher error
    130  Interrupted by user
"""

import json
import sys
import threading
from pathlib import Path
from typing import Optional

import rich_click as click
from rich.console import Console
from rich.table import Table

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "cli": [
        {
            "name": "Input",
            "options": ["--chart", "--config", "--limit"],
        },
        {
            "name": "Review",
            "options": ["--more", "--select", "--report"],
        },
        {
            "name": "Info",
            "options": ["--version", "--help"],
        },
    ],
}

from chart_matcher import __version__
from chart_matcher.catalog import AccessCredential, CatalogSearch, SpotifyCatalog
from chart_matcher.chart import FileChartSource, available_years, is_valid_year
from chart_matcher.core import (
    CatalogError,
    ChartMatcherError,
    Config,
    ConfigError,
    MatchingProgressBar,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from chart_matcher.matching import BatchReport, ChartMatcher, MatchResult


logger = get_logger(__name__)


@click.command()
@click.option(
    "--chart",
    "chart_path",
    type=click.Path(path_type=Path),
    default=None,
    metavar="<chart.yaml>",
    help="Chart file (YAML or JSON) with rank, title and artist per entry"
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml)"
)
@click.option(
    "--limit",
    type=click.IntRange(1, 50),
    default=None,
    help="Candidates requested per search (overrides config)"
)
@click.option(
    "--more",
    "more_ranks",
    type=int,
    multiple=True,
    metavar="<rank>",
    help="Fetch a larger candidate list for this rank"
)
@click.option(
    "--select",
    "selections",
    type=(int, int),
    multiple=True,
    metavar="<rank> <index>",
    help="Override the selected candidate for a rank"
)
@click.option(
    "--report",
    "report_path",
    type=click.Path(path_type=Path),
    default=None,
    metavar="<report.json>",
    help="Write the match results as JSON"
)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit."
)
@click.pass_context
def cli(
    ctx: click.Context,
    chart_path: Optional[Path],
    config_path: Optional[Path],
    limit: Optional[int],
    more_ranks: tuple[int, ...],
    selections: tuple[tuple[int, int], ...],
    report_path: Optional[Path],
    version: bool
) -> None:
    """
    chart-matcher: Match chart entries to Spotify tracks.

    Searches the catalog for every (title, artist) pair of a ranked chart
    and picks the most likely track for each one.

    \b
    BASIC USAGE:
        chart-match --chart charts/2012.yaml
        chart-match --chart charts/2012.yaml --report 2012.json

    \b
    REVIEW:
        chart-match --chart charts/2012.yaml --more 12          # more candidates
        chart-match --chart charts/2012.yaml --select 12 3      # pick candidate 3
    """
    if version:
        click.echo(f"chart-matcher {__version__}")
        ctx.exit(0)

    if chart_path is None:
        click.echo(ctx.get_help())
        ctx.exit(0)

    _run(chart_path, config_path, limit, more_ranks, selections, report_path)


def _run(
    chart_path: Path,
    config_path: Optional[Path],
    limit: Optional[int],
    more_ranks: tuple[int, ...],
    selections: tuple[tuple[int, int], ...],
    report_path: Optional[Path]
) -> None:
    """Load everything, run the batch and handle errors and exit codes."""
    exit_code = 0
    report: BatchReport | None = None

    try:
        config = load_config(config_path)
        setup_logging(config.output.directory)

        logger.info(f"chart-matcher {__version__}")
        logger.info(f"Chart: {chart_path}")

        catalog = _initialize_catalog(config)
        matcher = ChartMatcher(
            catalog,
            search_limit=limit or config.matching.search_limit,
            more_matches_limit=config.matching.more_matches_limit,
            batch_size=config.matching.batch_size,
            search_delay=config.matching.search_delay,
            batch_delay=config.matching.batch_delay,
            max_retries=config.matching.max_retries
        )

        source = FileChartSource(chart_path)
        entries = source.next_entries()
        _check_chart_year(source.year)
        report = _run_batch(matcher, entries)

        # Ranks without a manual pick keep an automatic selection
        selected_ranks = {rank for rank, _ in selections}
        for rank in more_ranks:
            report = _show_more_matches(
                matcher, report, rank, auto_select=rank not in selected_ranks
            )

        for rank, index in selections:
            report = _apply_selection(report, rank, index)

        if report.cancelled:
            exit_code = 130

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        exit_code = 1

    except CatalogError as e:
        click.echo(f"Catalog error: {e.message}", err=True)
        if e.is_auth_error:
            click.echo("Check your client_id and client_secret in config.yaml", err=True)
        logger.error(f"Catalog error: {e.message}")
        exit_code = 1

    except ChartMatcherError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}")
        exit_code = 1

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        exit_code = 130

    finally:
        if report is not None and report_path is not None:
            _write_report(report, report_path)
        shutdown_logging()

    if exit_code:
        sys.exit(exit_code)


def _check_chart_year(year: Optional[int]) -> None:
    if year is None or is_valid_year(year):
        return
    years = available_years()
    logger.warning(
        f"Chart year {year} is outside the available range {years[-1]}-{years[0]}"
    )


def _initialize_catalog(config: Config) -> CatalogSearch:
    """Build the Spotify catalog from a configured token or client credentials."""
    if config.spotify.access_token:
        logger.debug("Using configured Spotify access token")
        return SpotifyCatalog(AccessCredential(access_token=config.spotify.access_token))
    return SpotifyCatalog.from_client_credentials(
        client_id=config.spotify.client_id,
        client_secret=config.spotify.client_secret
    )


def _run_batch(matcher: ChartMatcher, entries: list) -> BatchReport:
    """
    Run the batch in a worker thread so Ctrl-C can cancel it cleanly.

    The main thread waits for the worker; on KeyboardInterrupt it sets the
    cancel event and waits for the worker to return its partial report.
    """
    cancel_event = threading.Event()
    outcome: dict = {}

    def work() -> None:
        try:
            with MatchingProgressBar(total=len(entries)) as progress_bar:
                outcome["report"] = matcher.match_entries(
                    entries,
                    cancel_event=cancel_event,
                    progress_bar=progress_bar
                )
        except BaseException as e:
            outcome["error"] = e

    worker = threading.Thread(target=work, name="chart-matcher-batch", daemon=True)
    worker.start()

    try:
        while worker.is_alive():
            worker.join(timeout=0.2)
    except KeyboardInterrupt:
        click.echo("\nCancelling, finishing the current entry...", err=True)
        cancel_event.set()
        worker.join()

    if "error" in outcome:
        raise outcome["error"]
    return outcome["report"]


def _show_more_matches(
    matcher: ChartMatcher,
    report: BatchReport,
    rank: int,
    auto_select: bool = True
) -> BatchReport:
    """
    Fetch a larger candidate list for one rank and print it.

    With auto_select=False the rank is left unselected (and so unmatched)
    until a manual selection is applied.
    """
    previous = report.result_for_rank(rank)
    if previous is None:
        click.echo(f"Rank {rank} is not in the chart", err=True)
        return report

    result = matcher.fetch_more_matches(previous, auto_select=auto_select)
    _print_candidates(result)
    return report.with_result(result)


def _apply_selection(report: BatchReport, rank: int, index: int) -> BatchReport:
    """Apply a manual candidate selection for one rank."""
    result = report.result_for_rank(rank)
    if result is None:
        click.echo(f"Rank {rank} is not in the chart", err=True)
        return report

    updated = result.with_selection(index)
    selected = updated.selected_candidate
    logger.info(f"#{rank} manually set to '{selected.name}' by {selected.artist}")
    return report.with_result(updated)


def _print_candidates(result: MatchResult) -> None:
    entry = result.entry
    if result.error:
        click.echo(f"#{entry.rank} {entry.title} - {entry.artist}: {result.error}", err=True)
        return

    table = Table(title=f"#{entry.rank} {entry.title} - {entry.artist}")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Artist")
    table.add_column("Album")
    table.add_column("Type")
    table.add_column("Released")
    table.add_column("Pop.", justify="right")

    for index, candidate in enumerate(result.candidates):
        table.add_row(
            str(index),
            candidate.name,
            candidate.artist,
            candidate.album,
            candidate.album_type,
            candidate.release_date or "",
            str(candidate.popularity),
        )

    Console().print(table)
    if result.selected_index is not None:
        click.echo(f"Selected {result.selected_index}; override with: --select {entry.rank} <index>")
    elif result.candidates:
        click.echo(f"Pick one with: --select {entry.rank} <index>")


def _write_report(report: BatchReport, report_path: Path) -> None:
    try:
        report_path.parent.mkdir(parents=True, exist_ok=True)
        with open(report_path, "w", encoding="utf-8") as f:
            json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Report written to {report_path}")
    except OSError as e:
        click.echo(f"Failed to write report: {e}", err=True)
        logger.error(f"Failed to write report {report_path}: {e}")


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `chart-match` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
