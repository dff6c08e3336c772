"""Tests for the MySQL and Oracle adapters' driver error mapping.

No servers are needed: pools are replaced with fakes that hand out a
scripted cursor.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from types import SimpleNamespace
from typing import Any

import aiomysql
import oracledb
import pymysql
import pytest

from table_sync.config import MySQLConfig, OracleConfig
from table_sync.connectors.base import StoreConnectionError, StoreError
from table_sync.connectors.mysql import MySQLConnector
from table_sync.connectors.oracle import OracleConnector, fetch_lobs_inline
from table_sync.core.statements import Dialect


class FakeCursor:
    def __init__(self, rows: list[tuple] | None = None, error: Exception | None = None) -> None:
        self.rows = rows or []
        self.error = error
        self.description = [("ID",), ("NAME",)]
        self.rowcount = 1
        self.calls: list[tuple[str, Any]] = []
        self.closed = False

    async def execute(self, sql: str, args: Any = None) -> int:
        self.calls.append((sql, args))
        if self.error is not None:
            raise self.error
        return self.rowcount

    async def fetchall(self) -> list[tuple]:
        return self.rows

    async def fetchone(self) -> tuple | None:
        return self.rows[0] if self.rows else None

    def close(self) -> None:
        self.closed = True


class VarCursor:
    """Cursor stand-in recording the variables an output type handler asks for."""

    arraysize = 50

    def var(self, type_code: Any, arraysize: int) -> tuple[Any, int]:
        return (type_code, arraysize)


class FakeMySQLConnection:
    def __init__(self, cursor: FakeCursor) -> None:
        self._cursor = cursor

    @asynccontextmanager
    async def cursor(self):
        yield self._cursor


class FakeOracleConnection:
    def __init__(self, cursor: FakeCursor) -> None:
        self._cursor = cursor
        self.commits = 0

    def cursor(self) -> FakeCursor:
        return self._cursor

    async def commit(self) -> None:
        self.commits += 1

    async def ping(self) -> None:
        pass


class FakePool:
    def __init__(self, conn: Any, acquire_error: Exception | None = None) -> None:
        self.conn = conn
        self.acquire_error = acquire_error
        self.closed_with: list[bool] = []

    @asynccontextmanager
    async def acquire(self):
        if self.acquire_error is not None:
            raise self.acquire_error
        yield self.conn

    async def close(self, force: bool = False) -> None:
        self.closed_with.append(force)


def mysql_with(cursor: FakeCursor) -> MySQLConnector:
    connector = MySQLConnector(MySQLConfig(user="app", database="shop"))
    connector.pool = FakePool(FakeMySQLConnection(cursor))  # type: ignore[assignment]
    return connector


def oracle_with(cursor: FakeCursor) -> tuple[OracleConnector, FakeOracleConnection]:
    conn = FakeOracleConnection(cursor)
    connector = OracleConnector(OracleConfig(dsn="ora:1521/XE", user="app"))
    connector.pool = FakePool(conn)  # type: ignore[assignment]
    return connector, conn


class TestMySQLConnector:
    """Tests for MySQLConnector."""

    def test_identity(self) -> None:
        connector = MySQLConnector(MySQLConfig(name="Warehouse"))
        assert connector.name == "Warehouse"
        assert connector.dialect == Dialect.MYSQL

    @pytest.mark.asyncio
    async def test_query(self) -> None:
        cursor = FakeCursor(rows=[(1, "Widget")])
        snapshot = await mysql_with(cursor).query("SELECT * FROM products")

        assert snapshot.columns == ("ID", "NAME")
        assert snapshot.rows == ((1, "Widget"),)
        assert cursor.calls == [("SELECT * FROM products", None)]

    @pytest.mark.asyncio
    async def test_execute_binds_tuple(self) -> None:
        cursor = FakeCursor()
        affected = await mysql_with(cursor).execute(
            "INSERT INTO products (id) VALUES (%s)", [7]
        )
        assert affected == 1
        assert cursor.calls[0][1] == (7,)

    @pytest.mark.asyncio
    async def test_constraint_violation_is_store_error(self) -> None:
        cursor = FakeCursor(error=pymysql.err.IntegrityError(1062, "Duplicate entry '1'"))

        with pytest.raises(StoreError) as exc_info:
            await mysql_with(cursor).execute("INSERT INTO products (id) VALUES (%s)", (1,))

        assert not isinstance(exc_info.value, StoreConnectionError)
        assert exc_info.value.store == "MySQL"

    @pytest.mark.asyncio
    async def test_lost_connection(self) -> None:
        cursor = FakeCursor(
            error=pymysql.err.OperationalError(2013, "Lost connection to MySQL server")
        )
        with pytest.raises(StoreConnectionError):
            await mysql_with(cursor).query("SELECT * FROM products")

    @pytest.mark.asyncio
    async def test_other_operational_error(self) -> None:
        cursor = FakeCursor(error=pymysql.err.OperationalError(1054, "Unknown column"))
        with pytest.raises(StoreError) as exc_info:
            await mysql_with(cursor).query("SELECT * FROM products")
        assert not isinstance(exc_info.value, StoreConnectionError)

    @pytest.mark.asyncio
    async def test_interface_error(self) -> None:
        cursor = FakeCursor(error=pymysql.err.InterfaceError(0, ""))
        with pytest.raises(StoreConnectionError):
            await mysql_with(cursor).execute_scalar("SELECT 1")

    @pytest.mark.asyncio
    async def test_connect_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        async def refuse(**kwargs: Any) -> None:
            raise pymysql.err.OperationalError(2003, "Can't connect to MySQL server")

        monkeypatch.setattr(aiomysql, "create_pool", refuse)
        connector = MySQLConnector(MySQLConfig(host="db", user="app", database="shop"))

        with pytest.raises(StoreConnectionError, match="db:3306"):
            await connector.connect()
        assert connector.pool is None


class TestOracleConnector:
    """Tests for OracleConnector."""

    @pytest.mark.asyncio
    async def test_execute_commits(self) -> None:
        cursor = FakeCursor()
        connector, conn = oracle_with(cursor)

        affected = await connector.execute("INSERT INTO products (id) VALUES (:1)", (5,))

        assert affected == 1
        assert conn.commits == 1
        assert cursor.calls == [("INSERT INTO products (id) VALUES (:1)", [5])]
        assert cursor.closed is True

    @pytest.mark.asyncio
    async def test_execute_scalar(self) -> None:
        connector, _ = oracle_with(FakeCursor(rows=[(42,)]))
        assert await connector.execute_scalar("SELECT COUNT(*) FROM products") == 42

    @pytest.mark.asyncio
    async def test_database_error_is_store_error(self) -> None:
        cursor = FakeCursor(error=oracledb.IntegrityError("ORA-00001: unique constraint violated"))
        connector, _ = oracle_with(cursor)

        with pytest.raises(StoreError) as exc_info:
            await connector.execute("INSERT INTO products (id) VALUES (:1)", (1,))

        assert not isinstance(exc_info.value, StoreConnectionError)
        assert cursor.closed is True

    @pytest.mark.asyncio
    async def test_operational_error_is_connection_error(self) -> None:
        cursor = FakeCursor(error=oracledb.OperationalError("DPY-4011: connection closed"))
        connector, _ = oracle_with(cursor)

        with pytest.raises(StoreConnectionError):
            await connector.query("SELECT * FROM products")

    @pytest.mark.asyncio
    async def test_connect_failure_closes_pool(self, monkeypatch: pytest.MonkeyPatch) -> None:
        pool = FakePool(None, acquire_error=oracledb.OperationalError("DPY-6005: cannot connect"))
        monkeypatch.setattr(oracledb, "create_pool_async", lambda **kwargs: pool)
        connector = OracleConnector(OracleConfig(dsn="ora:1521/XE", user="app"))

        with pytest.raises(StoreConnectionError, match="ora:1521/XE"):
            await connector.connect()

        assert pool.closed_with == [True]
        assert connector.pool is None

    @pytest.mark.asyncio
    async def test_query_fetches_lobs_inline(self) -> None:
        """Queries install the LOB output type handler on their cursor."""
        cursor = FakeCursor(rows=[(1, "long text")])
        connector, _ = oracle_with(cursor)

        snapshot = await connector.query("SELECT * FROM notes")

        assert cursor.outputtypehandler is fetch_lobs_inline
        assert snapshot.rows == ((1, "long text"),)

    @pytest.mark.parametrize(
        "lob_type, fetch_type",
        [
            (oracledb.DB_TYPE_CLOB, oracledb.DB_TYPE_LONG),
            (oracledb.DB_TYPE_NCLOB, oracledb.DB_TYPE_LONG_NVARCHAR),
            (oracledb.DB_TYPE_BLOB, oracledb.DB_TYPE_LONG_RAW),
        ],
    )
    def test_lob_columns_fetched_as_values(self, lob_type: Any, fetch_type: Any) -> None:
        """LOB columns are fetched as strings or bytes, never locators."""
        cursor = VarCursor()
        var = fetch_lobs_inline(cursor, SimpleNamespace(type_code=lob_type))

        assert var == (fetch_type, 50)

    def test_other_columns_use_default_fetch(self) -> None:
        metadata = SimpleNamespace(type_code=oracledb.DB_TYPE_VARCHAR)
        assert fetch_lobs_inline(VarCursor(), metadata) is None
