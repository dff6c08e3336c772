"""
Sync Engine - Main orchestration for table transfers.

Moves a full table snapshot from one store to another:
- Reads the whole table from the source adapter
- Writes each row to the destination through the statement builder
- Isolates per-row failures (counted, logged, never fatal)
- Captures connection-level faults into an unsuccessful result
- Appends one report per direction to the sync history

Rows are written strictly one at a time and the two directions of a
bidirectional sync run strictly in sequence: the reverse pass re-reads
the rows the forward pass just inserted.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Sequence

from table_sync.config import Settings
from table_sync.connectors.base import StoreAdapter, StoreConnectionError
from table_sync.core.history import SyncHistory
from table_sync.core.results import (
    RowOutcome,
    SyncProgress,
    SyncReport,
    SyncResult,
    utc_now,
)
from table_sync.core.statements import StatementBuilder
from table_sync.utils.logger import get_logger


# Progress callback type
ProgressCallback = Callable[[SyncProgress], None]


class SyncEngine:
    """
    Table sync engine between two store adapters.

    The engine holds no lock across calls; concurrent syncs of the same
    table may interleave their writes. Only the history log is shared.

    Example:
        async with OracleConnector(settings.oracle) as oracle, \\
                MySQLConnector(settings.mysql) as mysql:
            engine = SyncEngine(oracle, mysql)

            # Oracle -> MySQL
            result = await engine.sync_forward("products")

            # Oracle -> MySQL, then MySQL -> Oracle
            result = await engine.bidirectional_sync("products")

            for report in engine.get_history():
                print(report.source, report.destination, report.success)
    """

    def __init__(
        self,
        source: StoreAdapter,
        destination: StoreAdapter,
        history: SyncHistory | None = None,
        logger: logging.Logger | None = None,
        parameterized: bool = True,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """
        Initialize sync engine.

        Args:
            source: Store read by forward syncs (written by reverse syncs)
            destination: Store written by forward syncs
            history: History log (a fresh in-memory log if omitted)
            logger: Logger for diagnostics (``table_sync.engine`` if omitted)
            parameterized: Bind row values as parameters instead of
                rendering them as literals
            on_progress: Optional callback invoked after every row
        """
        self.source = source
        self.destination = destination
        self.history = history if history is not None else SyncHistory()
        self.logger = logger or get_logger("table_sync.engine")
        self.parameterized = parameterized
        self.on_progress = on_progress

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        source: StoreAdapter,
        destination: StoreAdapter,
        **kwargs: Any,
    ) -> "SyncEngine":
        """Create an engine whose history and statement style follow settings."""
        history = SyncHistory(
            limit=settings.sync.history_limit,
            path=settings.sync.history_file,
        )
        return cls(
            source,
            destination,
            history=history,
            parameterized=settings.sync.parameterized,
            **kwargs,
        )

    async def sync_directional(
        self,
        source: StoreAdapter,
        destination: StoreAdapter,
        table_name: str,
    ) -> SyncResult:
        """
        Copy every row of ``table_name`` from ``source`` to ``destination``.

        Args:
            source: Adapter the table is read from
            destination: Adapter the rows are inserted into
            table_name: Table present in both stores

        Returns:
            SyncResult; unsuccessful only on a connection-level fault

        Raises:
            ValueError: If the table name is not a non-empty string
        """
        _validate_table_name(table_name)

        started = time.perf_counter()
        timestamp = utc_now()
        progress = SyncProgress(
            table=table_name,
            source=source.name,
            destination=destination.name,
        )

        self.logger.info(
            "Starting sync from %s to %s for table: %s",
            source.name,
            destination.name,
            table_name,
        )

        error_message: str | None = None
        try:
            snapshot = await source.query(f"SELECT * FROM {table_name}")
            progress.records_read = snapshot.row_count

            self.logger.info(
                "Read %d records from %s", progress.records_read, source.name
            )

            await destination.connect()
            builder = StatementBuilder(destination.dialect)

            for index, row in enumerate(snapshot):
                outcome = await self._write_row(
                    builder, destination, table_name, snapshot.columns, row
                )
                progress.record(outcome)

                if not outcome.ok:
                    self.logger.warning(
                        "Failed to sync record %d of %s from %s to %s: %s",
                        index,
                        table_name,
                        source.name,
                        destination.name,
                        outcome.error,
                    )

                if self.on_progress:
                    self.on_progress(progress)

        except Exception as e:
            error_message = str(e) or type(e).__name__
            self.logger.error(
                "Sync from %s to %s failed: %s",
                source.name,
                destination.name,
                error_message,
                exc_info=True,
            )

        result = SyncResult(
            success=error_message is None,
            records_read=progress.records_read,
            records_written=progress.records_written,
            records_failed=progress.records_failed,
            error_message=error_message,
            duration_seconds=time.perf_counter() - started,
            timestamp=timestamp,
        )

        if result.success:
            self.logger.info(
                "Sync completed successfully: %d records written, %d failed in %.3fs",
                result.records_written,
                result.records_failed,
                result.duration_seconds,
            )

        await self._record(result, source, destination, table_name)
        return result

    async def sync_reverse_directional(
        self,
        source: StoreAdapter,
        destination: StoreAdapter,
        table_name: str,
    ) -> SyncResult:
        """Mirror of ``sync_directional``: copies ``destination`` into ``source``."""
        return await self.sync_directional(destination, source, table_name)

    async def sync_forward(self, table_name: str) -> SyncResult:
        """Copy the table from the engine's source to its destination."""
        return await self.sync_directional(
            self.source, self.destination, table_name
        )

    async def sync_reverse(self, table_name: str) -> SyncResult:
        """Copy the table from the engine's destination back to its source."""
        return await self.sync_reverse_directional(
            self.source, self.destination, table_name
        )

    async def bidirectional_sync(self, table_name: str) -> SyncResult:
        """
        Forward sync, then reverse sync, never concurrently.

        This is a double dump, not a merge: without a uniqueness constraint
        in the stores, rows inserted by the forward pass are read back and
        inserted again by the reverse pass.

        Returns:
            Combined result (summed counts and durations, AND of success,
            first non-null error message)
        """
        _validate_table_name(table_name)

        self.logger.info("Starting bidirectional sync for table: %s", table_name)

        forward = await self.sync_forward(table_name)
        reverse = await self.sync_reverse(table_name)

        return SyncResult.combine(forward, reverse)

    def get_history(self) -> list[SyncReport]:
        """All retained sync reports, most recent first."""
        return self.history.get_all()

    async def _write_row(
        self,
        builder: StatementBuilder,
        destination: StoreAdapter,
        table_name: str,
        columns: Sequence[str],
        row: Sequence[Any],
    ) -> RowOutcome:
        """Insert one row; connection faults propagate, anything else is a row fault."""
        try:
            statement = builder.build(
                table_name, columns, row, parameterized=self.parameterized
            )
            affected = await destination.execute(
                statement.sql, statement.params or None
            )
        except StoreConnectionError:
            raise
        except Exception as e:
            return RowOutcome.failed(str(e) or type(e).__name__)

        return RowOutcome.written(affected)

    async def _record(
        self,
        result: SyncResult,
        source: StoreAdapter,
        destination: StoreAdapter,
        table_name: str,
    ) -> None:
        report = SyncReport.from_result(
            result,
            source=source.name,
            destination=destination.name,
            table_name=table_name,
        )
        try:
            await asyncio.to_thread(self.history.append, report)
        except Exception:
            # History faults never change the returned result
            self.logger.error(
                "Failed to record sync history for table %s", table_name,
                exc_info=True,
            )


def _validate_table_name(table_name: Any) -> None:
    if not isinstance(table_name, str) or not table_name.strip():
        raise ValueError(f"Table name must be a non-empty string, got {table_name!r}")
