"""
MySQL Store Adapter.

Async access to a MySQL-family database through an aiomysql pool.
Driver errors are translated into the store fault taxonomy: failures to
reach or keep the server become ``StoreConnectionError``, everything else
(constraint violations, bad values) becomes ``StoreError``.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

import aiomysql
import pymysql
from pymysql.constants import CR

from table_sync.config import MySQLConfig
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

# Client error codes meaning the session is gone, not that the statement is bad
CONNECTION_LOST_CODES = frozenset({
    CR.CR_CONNECTION_ERROR,
    CR.CR_CONN_HOST_ERROR,
    CR.CR_SERVER_GONE_ERROR,
    CR.CR_SERVER_LOST,
})


class MySQLConnector(StoreAdapter):
    """
    Store adapter for MySQL databases.

    Example:
        async with MySQLConnector(settings.mysql) as mysql:
            snapshot = await mysql.query("SELECT * FROM products")
            written = await mysql.execute(
                "INSERT INTO products (id, name) VALUES (%s, %s)", (1, "Widget")
            )
    """

    dialect = Dialect.MYSQL

    def __init__(
        self,
        config: MySQLConfig,
        min_pool_size: int = 1,
        max_pool_size: int = 5,
    ) -> None:
        self.config = config
        self.name = config.name
        self.min_pool_size = min_pool_size
        self.max_pool_size = max_pool_size
        self.pool: aiomysql.Pool | None = None

    async def connect(self) -> None:
        """Create the connection pool if it does not exist yet."""
        if self.pool is not None:
            return

        try:
            self.pool = await aiomysql.create_pool(
                host=self.config.host,
                port=self.config.port,
                user=self.config.user,
                password=self.config.password.get_secret_value(),
                db=self.config.database,
                charset=self.config.charset,
                minsize=self.min_pool_size,
                maxsize=self.max_pool_size,
                connect_timeout=self.config.connect_timeout,
                autocommit=True,
                pool_recycle=3600,
            )
        except (pymysql.err.MySQLError, OSError) as e:
            raise StoreConnectionError(
                f"Failed to connect to MySQL at {self.config.host}:{self.config.port}: {e}",
                store=self.name,
            ) from e

        logger.info("Connected to MySQL database: %s", self.config.database)

    async def close(self) -> None:
        """Close the connection pool."""
        if self.pool is not None:
            self.pool.close()
            await self.pool.wait_closed()
            self.pool = None
            logger.info("Disconnected from MySQL database")

    async def _run(self, fn: Callable[[aiomysql.Cursor], Awaitable[T]]) -> T:
        await self.connect()
        assert self.pool is not None

        try:
            async with self.pool.acquire() as conn:
                async with conn.cursor() as cursor:
                    return await fn(cursor)
        except pymysql.err.InterfaceError as e:
            raise StoreConnectionError(str(e), store=self.name) from e
        except pymysql.err.OperationalError as e:
            code = e.args[0] if e.args else None
            if code in CONNECTION_LOST_CODES:
                raise StoreConnectionError(str(e), store=self.name) from e
            raise StoreError(str(e), store=self.name) from e
        except pymysql.err.MySQLError as e:
            raise StoreError(str(e), store=self.name) from e

    async def query(self, sql: str, params: Params = None) -> RowSnapshot:
        async def fetch(cursor: aiomysql.Cursor) -> RowSnapshot:
            await cursor.execute(sql, _args(params))
            columns = [d[0] for d in cursor.description or ()]
            return RowSnapshot.from_rows(columns, await cursor.fetchall())

        return await self._run(fetch)

    async def execute(self, sql: str, params: Params = None) -> int:
        async def run(cursor: aiomysql.Cursor) -> int:
            return await cursor.execute(sql, _args(params))

        return await self._run(run)

    async def execute_scalar(self, sql: str, params: Params = None) -> Any | None:
        async def scalar(cursor: aiomysql.Cursor) -> Any | None:
            await cursor.execute(sql, _args(params))
            row = await cursor.fetchone()
            return row[0] if row else None

        return await self._run(scalar)


def _args(params: Params) -> tuple[Any, ...] | None:
    # None keeps pymysql from %-formatting statements that carry no placeholders
    return tuple(params) if params else None
