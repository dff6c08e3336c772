"""
Table Sync CLI - Command Line Interface.

CLI for Oracle ↔ MySQL table synchronization.

Commands:
    sync     Copy tables forward, in reverse, or both ways
    history  Show recorded sync history
    config   Manage configuration
"""

from __future__ import annotations

import asyncio
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from table_sync import __version__
from table_sync.audit import LoggingAuditNotifier, describe_result, notify
from table_sync.config import Settings, load_settings
from table_sync.connectors.mysql import MySQLConnector
from table_sync.connectors.oracle import OracleConnector
from table_sync.core.engine import SyncEngine
from table_sync.core.history import SyncHistory
from table_sync.core.results import SyncResult
from table_sync.utils.display import (
    ProgressDisplay,
    console,
    print_error,
    print_history,
    print_info,
    print_success,
    print_summary,
    print_warning,
)
from table_sync.utils.logger import setup_logging


# Create the Typer app
app = typer.Typer(
    name="table-sync",
    help="Oracle ↔ MySQL table synchronization tool.",
    add_completion=True,
    rich_markup_mode="rich",
)


class Direction(str, Enum):
    """Which way(s) to copy a table."""

    FORWARD = "forward"
    REVERSE = "reverse"
    BOTH = "both"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]table-sync[/bold cyan] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Table Sync - Oracle ↔ MySQL table synchronization."""
    pass


# =============================================================================
# SYNC Command
# =============================================================================
@app.command()
def sync(
    tables: Optional[list[str]] = typer.Option(
        None,
        "--table",
        "-t",
        help="Table to sync (can be repeated; defaults to sync.tables in config).",
    ),
    direction: Direction = typer.Option(
        Direction.FORWARD,
        "--direction",
        "-d",
        help="forward (Oracle → MySQL), reverse (MySQL → Oracle) or both.",
    ),
    config_file: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file.",
        exists=True,
    ),
    literal: bool = typer.Option(
        False,
        "--literal",
        help="Render row values inline instead of binding parameters.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Minimal output.",
    ),
) -> None:
    """
    Copy whole tables between Oracle and MySQL.

    Example:
        table-sync sync --table products --direction both
    """
    try:
        settings = load_settings(config_file)
    except (FileNotFoundError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    if literal:
        settings.sync.parameterized = False

    table_names = list(tables or settings.sync.tables)
    if not table_names:
        print_error("No tables given. Use --table or set sync.tables in config.")
        raise typer.Exit(1)

    errors = settings.validate_connections()
    if errors:
        for err in errors:
            print_error(err)
        print_info("Use --help for configuration options.")
        raise typer.Exit(1)

    setup_logging(
        level="WARNING" if quiet else settings.logging.level,
        log_file=settings.logging.file,
        format_style=settings.logging.format,
        max_file_size_mb=settings.logging.max_file_size_mb,
        backup_count=settings.logging.backup_count,
    )

    display = ProgressDisplay() if not quiet else None
    try:
        results = asyncio.run(
            _run_sync(settings, table_names, direction, display)
        )
    finally:
        if display:
            display.stop()

    if not quiet:
        console.print()
        print_summary(results)

    failed = [r for _, _, r in results if not r.success]
    if failed:
        for table_name, label, result in results:
            if not result.success:
                print_error(f"{table_name} ({label}): {result.error_message}")
        raise typer.Exit(1)

    rows_failed = sum(r.records_failed for _, _, r in results)
    if rows_failed:
        print_warning(f"{rows_failed:,} rows could not be written; see the log for details.")
    else:
        print_success("Sync completed successfully!")


async def _run_sync(
    settings: Settings,
    table_names: list[str],
    direction: Direction,
    display: ProgressDisplay | None,
) -> list[tuple[str, str, SyncResult]]:
    audit = LoggingAuditNotifier()
    results: list[tuple[str, str, SyncResult]] = []

    oracle = OracleConnector(settings.oracle)
    mysql = MySQLConnector(settings.mysql)
    try:
        engine = SyncEngine.from_settings(
            settings,
            oracle,
            mysql,
            on_progress=display.update if display else None,
        )

        for table_name in table_names:
            await notify(
                audit, "SyncStarted", entity=table_name, details=direction.value
            )

            if direction == Direction.FORWARD:
                result = await engine.sync_forward(table_name)
                label = f"{oracle.name} → {mysql.name}"
            elif direction == Direction.REVERSE:
                result = await engine.sync_reverse(table_name)
                label = f"{mysql.name} → {oracle.name}"
            else:
                result = await engine.bidirectional_sync(table_name)
                label = f"{oracle.name} ↔ {mysql.name}"

            await notify(
                audit,
                "SyncCompleted" if result.success else "SyncFailed",
                entity=table_name,
                details=describe_result(result),
            )
            results.append((table_name, label, result))
    finally:
        await oracle.close()
        await mysql.close()

    return results


# =============================================================================
# HISTORY Command
# =============================================================================
@app.command()
def history(
    history_file: Path = typer.Option(
        None,
        "--history-file",
        help="History file (defaults to sync.history_file in config).",
    ),
    config_file: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file.",
        exists=True,
    ),
    table: Optional[str] = typer.Option(
        None,
        "--table",
        "-t",
        help="Only show reports for this table.",
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        min=1,
        help="Maximum reports to show.",
    ),
) -> None:
    """Show recorded sync history, most recent first."""
    path = history_file
    if path is None:
        try:
            path = load_settings(config_file).sync.history_file
        except (FileNotFoundError, ValueError) as e:
            print_error(str(e))
            raise typer.Exit(1)

    if path is None:
        print_info("History is in-memory only. Set sync.history_file to keep it.")
        raise typer.Exit(0)

    reports = SyncHistory(limit=None, path=path).get_all()
    if table:
        reports = [r for r in reports if r.table_name == table]

    if not reports:
        print_info("No sync history found. Run a sync first.")
        raise typer.Exit(0)

    print_history(reports[:limit])


# =============================================================================
# CONFIG Command
# =============================================================================
@app.command()
def config(
    show: bool = typer.Option(
        False,
        "--show",
        help="Show current configuration.",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        help="Write a config file with the current settings.",
    ),
    output: Path = typer.Option(
        Path("config.toml"),
        "--output",
        "-o",
        help="Output path for config file.",
    ),
) -> None:
    """Manage configuration."""
    if init:
        settings = Settings()
        settings.to_file(output)
        print_success(f"Generated config file: {output}")
        return

    if show:
        settings = Settings()
        table = Table(title="Current Configuration", border_style="cyan")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")

        not_set = "[dim]not set[/dim]"
        table.add_row("Oracle DSN", settings.oracle.dsn or not_set)
        table.add_row("Oracle User", settings.oracle.user or not_set)
        table.add_row(
            "MySQL",
            f"{settings.mysql.host}:{settings.mysql.port}/{settings.mysql.database}",
        )
        table.add_row("MySQL User", settings.mysql.user or not_set)
        table.add_row("Tables", ", ".join(settings.sync.tables) or not_set)
        table.add_row(
            "Statements",
            "parameterized" if settings.sync.parameterized else "literal",
        )
        table.add_row(
            "History Limit",
            str(settings.sync.history_limit or "unbounded"),
        )
        table.add_row(
            "History File",
            str(settings.sync.history_file) if settings.sync.history_file else not_set,
        )

        console.print(table)
        return

    console.print("Use --show to view config or --init to create config file.")


if __name__ == "__main__":
    app()
