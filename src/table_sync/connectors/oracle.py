"""
Oracle Store Adapter.

Async access to an Oracle-family database through python-oracledb's
asyncio API (thin mode, no client libraries needed). CLOB, NCLOB and BLOB
columns are fetched as plain strings and bytes rather than LOB locators.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

import oracledb

from table_sync.config import OracleConfig
from table_sync.connectors.base import (
    Params,
    StoreAdapter,
    StoreConnectionError,
    StoreError,
)
from table_sync.core.snapshot import RowSnapshot
from table_sync.core.statements import Dialect
from table_sync.utils.logger import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


class OracleConnector(StoreAdapter):
    """
    Store adapter for Oracle databases.

    Example:
        async with OracleConnector(settings.oracle) as oracle:
            snapshot = await oracle.query("SELECT * FROM products")
            total = await oracle.execute_scalar("SELECT COUNT(*) FROM products")
    """

    dialect = Dialect.ORACLE

    def __init__(
        self,
        config: OracleConfig,
        min_pool_size: int = 1,
        max_pool_size: int = 5,
    ) -> None:
        self.config = config
        self.name = config.name
        self.min_pool_size = min_pool_size
        self.max_pool_size = max_pool_size
        self.pool: oracledb.AsyncConnectionPool | None = None

    async def connect(self) -> None:
        """Create the pool and check one connection out to prove it works."""
        if self.pool is not None:
            return

        pool: oracledb.AsyncConnectionPool | None = None
        try:
            pool = oracledb.create_pool_async(
                user=self.config.user,
                password=self.config.password.get_secret_value(),
                dsn=self.config.dsn,
                min=self.min_pool_size,
                max=self.max_pool_size,
            )
            async with pool.acquire() as conn:
                await conn.ping()
        except oracledb.Error as e:
            if pool is not None:
                await pool.close(force=True)
            raise StoreConnectionError(
                f"Failed to connect to Oracle at {self.config.dsn}: {e}",
                store=self.name,
            ) from e

        self.pool = pool
        logger.info("Connected to Oracle database: %s", self.config.dsn)

    async def close(self) -> None:
        """Close the connection pool."""
        if self.pool is not None:
            await self.pool.close()
            self.pool = None
            logger.info("Disconnected from Oracle database")

    async def _run(
        self,
        fn: Callable[[oracledb.AsyncConnection, oracledb.AsyncCursor], Awaitable[T]],
    ) -> T:
        await self.connect()
        assert self.pool is not None

        try:
            async with self.pool.acquire() as conn:
                cursor = conn.cursor()
                cursor.outputtypehandler = fetch_lobs_inline
                try:
                    return await fn(conn, cursor)
                finally:
                    cursor.close()
        except (oracledb.InterfaceError, oracledb.OperationalError) as e:
            raise StoreConnectionError(str(e), store=self.name) from e
        except oracledb.Error as e:
            raise StoreError(str(e), store=self.name) from e

    async def query(self, sql: str, params: Params = None) -> RowSnapshot:
        async def fetch(
            conn: oracledb.AsyncConnection, cursor: oracledb.AsyncCursor
        ) -> RowSnapshot:
            await cursor.execute(sql, _args(params))
            columns = [d[0] for d in cursor.description or ()]
            return RowSnapshot.from_rows(columns, await cursor.fetchall())

        return await self._run(fetch)

    async def execute(self, sql: str, params: Params = None) -> int:
        async def run(
            conn: oracledb.AsyncConnection, cursor: oracledb.AsyncCursor
        ) -> int:
            await cursor.execute(sql, _args(params))
            await conn.commit()
            return cursor.rowcount

        return await self._run(run)

    async def execute_scalar(self, sql: str, params: Params = None) -> Any | None:
        async def scalar(
            conn: oracledb.AsyncConnection, cursor: oracledb.AsyncCursor
        ) -> Any | None:
            await cursor.execute(sql, _args(params))
            row = await cursor.fetchone()
            return row[0] if row else None

        return await self._run(scalar)


def fetch_lobs_inline(cursor: Any, metadata: Any) -> Any | None:
    """
    Output type handler fetching LOB columns as ``str``/``bytes``.

    LOB locators are only valid while their connection is checked out, and
    snapshots outlive the pooled connection they were read on.
    """
    if metadata.type_code is oracledb.DB_TYPE_CLOB:
        return cursor.var(oracledb.DB_TYPE_LONG, arraysize=cursor.arraysize)
    if metadata.type_code is oracledb.DB_TYPE_NCLOB:
        return cursor.var(oracledb.DB_TYPE_LONG_NVARCHAR, arraysize=cursor.arraysize)
    if metadata.type_code is oracledb.DB_TYPE_BLOB:
        return cursor.var(oracledb.DB_TYPE_LONG_RAW, arraysize=cursor.arraysize)
    return None


def _args(params: Params) -> list[Any] | None:
    return list(params) if params else None
