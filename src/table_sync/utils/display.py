"""
Rich Terminal Display Components.

Provides console UI for:
- Per-direction progress bars
- Sync result summaries
- Sync history tables
- Status messages
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from table_sync.core.results import SyncProgress, SyncReport, SyncResult


console = Console()


class ProgressDisplay:
    """
    Rich progress bars for running syncs, one task per direction.

    Example:
        with ProgressDisplay() as display:
            engine = SyncEngine(oracle, mysql, on_progress=display.update)
            await engine.bidirectional_sync("products")
    """

    def __init__(self) -> None:
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            MofNCompleteColumn(),
            TextColumn("[red]{task.fields[failed]} failed"),
            TimeRemainingColumn(),
            console=console,
        )
        self._tasks: dict[tuple[str, str, str], TaskID] = {}
        self._started = False

    def start(self) -> None:
        if not self._started:
            self.progress.start()
            self._started = True

    def stop(self) -> None:
        if self._started:
            self.progress.stop()
            self._started = False

    def update(self, progress: SyncProgress) -> None:
        """Progress callback for ``SyncEngine``."""
        self.start()

        key = (progress.table, progress.source, progress.destination)
        task_id = self._tasks.get(key)
        if task_id is None:
            task_id = self.progress.add_task(
                f"{progress.table}: {progress.source} → {progress.destination}",
                total=progress.records_read,
                failed=0,
            )
            self._tasks[key] = task_id

        self.progress.update(
            task_id,
            total=progress.records_read,
            completed=progress.records_processed,
            failed=progress.records_failed,
        )

    def __enter__(self) -> "ProgressDisplay":
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()


def print_summary(results: Sequence[tuple[str, str, SyncResult]]) -> None:
    """Print a summary table of (table, direction, result) rows."""
    table = Table(title="Sync Summary", border_style="green")

    table.add_column("Table", style="cyan")
    table.add_column("Direction")
    table.add_column("Status")
    table.add_column("Read", justify="right")
    table.add_column("Written", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Duration", justify="right")

    for table_name, direction, result in results:
        table.add_row(
            table_name,
            direction,
            format_success(result.success),
            f"{result.records_read:,}",
            f"{result.records_written:,}",
            f"{result.records_failed:,}",
            f"{result.duration_seconds:.2f}s",
        )

    console.print(table)


def print_history(reports: Sequence[SyncReport]) -> None:
    """Print sync reports, in the order given."""
    table = Table(title="Sync History", border_style="blue")

    table.add_column("Time (UTC)")
    table.add_column("Table", style="cyan")
    table.add_column("Source → Destination")
    table.add_column("Status")
    table.add_column("Read", justify="right")
    table.add_column("Written", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Error", style="dim")

    for report in reports:
        table.add_row(
            report.sync_time.strftime("%Y-%m-%d %H:%M:%S"),
            report.table_name,
            f"{report.source} → {report.destination}",
            format_success(report.success),
            f"{report.records_read:,}",
            f"{report.records_written:,}",
            f"{report.records_failed:,}",
            report.error_message or "",
        )

    console.print(table)


def format_success(success: bool) -> str:
    """Format a success flag with color."""
    return "[green]✓ ok[/green]" if success else "[red]✗ failed[/red]"


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red bold]Error:[/red bold] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green bold]✓[/green bold] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow bold]⚠[/yellow bold] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ[/blue] {message}")
