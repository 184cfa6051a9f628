"""
Progress bar handling for chart-matcher using the Rich library.

Usage:
    from chart_matcher.core.progress import MatchingProgressBar

    # As context manager
    with MatchingProgressBar(total=100) as progress:
        for entry in entries:
            result = matcher.match_entry(entry)
            progress.update(matched=result.has_match, errored=result.error is not None)

    # Manual control
    progress = MatchingProgressBar(total=50)
    progress.start()
    # ... do work with progress.update() ...
    progress.stop()
"""

from typing import Optional

from rich import get_console
from rich.console import OverflowMethod
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    Task,
    TaskID,
)
from rich.style import StyleType
from rich.text import Text
from rich.theme import Theme


PROGRESS_THEME = Theme({
    "bar.back": "grey23",
    "bar.complete": "rgb(30,215,96)",
    "bar.finished": "rgb(114,156,31)",
    "bar.pulse": "rgb(30,215,96)",
    "progress.percentage": "white",
})


class SizedTextColumn(ProgressColumn):
    """
    Fixed-width text column for the matching progress line.

    Keeps the chart label and the matched/unmatched status at a constant
    width so the bar does not jump as counts grow; longer text is cut
    using the overflow method.
    """

    def __init__(
        self,
        text_format: str,
        style: StyleType = "none",
        overflow: Optional[OverflowMethod] = None,
        width: int = 20,
    ) -> None:
        self.text_format = text_format
        self.style = style
        self.overflow: Optional[OverflowMethod] = overflow
        self.width = width
        super().__init__()

    def render(self, task: Task) -> Text:
        text = Text.from_markup(self.text_format.format(task=task), style=self.style)
        text.truncate(max_width=self.width, overflow=self.overflow, pad=True)
        return text


class MatchingProgressBar:
    """
    Progress bar for the batch matching run.

    Displays:
    - Description (e.g., "Matching")
    - Status: ✓ matched, ✗ unmatched, ! search errors
    - Progress bar
    - Percentage

    Example:
        Matching        ✓ 91  ✗ 7  ! 2          ━━━━━━━━━━━━━━━━━  100%
    """

    def __init__(self, total: int, description: str = "Matching", status_width: int = 35):
        """
        Initialize the matching progress bar.

        Args:
            total: Total number of chart entries to match.
            description: Description to show on the left.
            status_width: Width of the status column.
        """
        self.total = total
        self.description = description
        self.completed = 0
        self.matched = 0
        self.unmatched = 0
        self.errored = 0

        self.console = get_console()
        self.console.push_theme(PROGRESS_THEME)

        self.progress = Progress(
            SizedTextColumn(
                "[white]{task.description}",
                overflow="ellipsis",
                width=15,
            ),
            SizedTextColumn(
                "{task.fields[status]}",
                width=status_width,
                style="white",
            ),
            BarColumn(bar_width=40, finished_style="green"),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=self.console,
            transient=False,
            refresh_per_second=10,
        )

        self.task_id: Optional[TaskID] = None
        self._started = False

    def __enter__(self) -> "MatchingProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        """Start the progress bar (can be called manually)."""
        if not self._started:
            self.progress.start()
            self.task_id = self.progress.add_task(
                description=self.description,
                total=self.total,
                status=self._get_status_text(),
            )
            self._started = True

    def stop(self) -> None:
        """Stop the progress bar."""
        if self._started:
            self.progress.stop()
            self._started = False

    def log(self, message: str) -> None:
        """Print a message above the progress bar."""
        self.progress.console.print(message, highlight=False)

    def update(self, matched: bool, errored: bool = False) -> None:
        """
        Record one finished chart entry.

        Args:
            matched: Whether the entry got at least one candidate.
            errored: Whether the search for the entry failed.
        """
        self.completed += 1
        if matched:
            self.matched += 1
        else:
            self.unmatched += 1
            if errored:
                self.errored += 1

        if self.task_id is not None:
            self.progress.update(
                self.task_id,
                completed=self.completed,
                status=self._get_status_text(),
            )

    def _get_status_text(self) -> str:
        parts = [
            f"[green]✓ {self.matched}[/green]",
            f"[red]✗ {self.unmatched}[/red]",
        ]
        if self.errored > 0:
            parts.append(f"[yellow]! {self.errored}[/yellow]")
        return "  ".join(parts)
