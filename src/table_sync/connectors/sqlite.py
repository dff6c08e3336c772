"""
SQLite Store Adapter.

Provides store adapter access to a local SQLite database file with:
- Blocking sqlite3 calls moved off the event loop
- Read-only mode
- Schema introspection helpers
"""

from __future__ import annotations

import asyncio
import sqlite3
import threading
from pathlib import Path
from typing import Any, Callable, TypeVar

from table_sync.connectors.base import (
    Params,
    StoreAdapter,
    StoreConnectionError,
    StoreError,
)
from table_sync.core.snapshot import RowSnapshot
from table_sync.core.statements import Dialect


T = TypeVar("T")


class SQLiteConnector(StoreAdapter):
    """
    Store adapter for SQLite databases.

    Example:
        async with SQLiteConnector(Path("local.db"), name="Local") as store:
            snapshot = await store.query("SELECT * FROM users")
            await store.execute(
                "INSERT INTO users (id, name) VALUES (?, ?)", (6, "Frank")
            )
    """

    dialect = Dialect.SQLITE

    def __init__(
        self,
        path: Path | str,
        readonly: bool = False,
        create: bool = False,
        name: str = "SQLite",
    ) -> None:
        """
        Initialize SQLite connector.

        Args:
            path: Path to local SQLite database file
            readonly: Open in read-only mode
            create: Create the database file if it does not exist
            name: Store name used in sync reports
        """
        self.path = Path(path)
        self.readonly = readonly
        self.create = create and not readonly
        self.name = name
        self._connection: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def _create_connection(self) -> sqlite3.Connection:
        """Create a new database connection."""
        if not self.create and not self.path.exists():
            raise StoreConnectionError(
                f"Database not found: {self.path}", store=self.name
            )

        uri = f"file:{self.path}"
        if self.readonly:
            uri += "?mode=ro"

        try:
            conn = sqlite3.connect(
                uri,
                uri=True,
                check_same_thread=False,
                timeout=30.0,
            )
        except sqlite3.Error as e:
            raise StoreConnectionError(
                f"Cannot open {self.path}: {e}", store=self.name
            ) from e

        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute("PRAGMA temp_store=MEMORY")
        return conn

    def _run(self, fn: Callable[[sqlite3.Connection], T]) -> T:
        """Run ``fn`` against the connection, one caller at a time."""
        with self._lock:
            if self._connection is None:
                self._connection = self._create_connection()

            try:
                return fn(self._connection)
            except sqlite3.Error as e:
                self._connection.rollback()
                raise StoreError(str(e), store=self.name) from e

    async def connect(self) -> None:
        await asyncio.to_thread(self._run, lambda conn: None)

    async def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None

    async def query(self, sql: str, params: Params = None) -> RowSnapshot:
        def fetch(conn: sqlite3.Connection) -> RowSnapshot:
            cursor = conn.execute(sql, tuple(params or ()))
            columns = [d[0] for d in cursor.description or ()]
            return RowSnapshot.from_rows(columns, cursor.fetchall())

        return await asyncio.to_thread(self._run, fetch)

    async def execute(self, sql: str, params: Params = None) -> int:
        if self.readonly:
            raise StoreError(
                "Cannot execute write operations in read-only mode", store=self.name
            )

        def run(conn: sqlite3.Connection) -> int:
            cursor = conn.execute(sql, tuple(params or ()))
            conn.commit()
            return cursor.rowcount

        return await asyncio.to_thread(self._run, run)

    async def execute_scalar(self, sql: str, params: Params = None) -> Any | None:
        def scalar(conn: sqlite3.Connection) -> Any | None:
            row = conn.execute(sql, tuple(params or ())).fetchone()
            return row[0] if row else None

        return await asyncio.to_thread(self._run, scalar)

    async def get_tables(self) -> list[str]:
        """Get names of all user tables."""
        snapshot = await self.query(
            """
            SELECT name FROM sqlite_master
            WHERE type = 'table'
            AND name NOT LIKE 'sqlite_%'
            ORDER BY name
            """
        )
        return [row[0] for row in snapshot]

    async def get_row_count(self, table: str) -> int:
        """Get the row count for a table."""
        count = await self.execute_scalar(f'SELECT COUNT(*) FROM "{table}"')
        return int(count or 0)
