"""Shared fixtures: in-memory store adapters and sample SQLite databases."""

from __future__ import annotations

import re
import sqlite3
from pathlib import Path
from typing import Any, Callable, Sequence

import pytest

from table_sync.connectors.base import StoreAdapter, StoreError
from table_sync.core.snapshot import RowSnapshot
from table_sync.core.statements import Dialect


SELECT_RE = re.compile(r"^SELECT \* FROM (\w+)$")
INSERT_RE = re.compile(r"^INSERT INTO (\w+) \(([^)]*)\) VALUES")


class MemoryStore(StoreAdapter):
    """
    In-memory store adapter for engine tests.

    Tables are lists of row tuples. Faults can be injected for the whole
    query, the session setup, or individual row writes.
    """

    dialect = Dialect.SQLITE

    def __init__(
        self,
        name: str,
        tables: dict[str, tuple[Sequence[str], list[tuple[Any, ...]]]] | None = None,
        query_error: Exception | None = None,
        connect_error: Exception | None = None,
        write_error: Callable[[tuple[Any, ...] | None], Exception | None] | None = None,
    ) -> None:
        self.name = name
        self.columns: dict[str, tuple[str, ...]] = {}
        self.rows: dict[str, list[tuple[Any, ...]]] = {}
        for table, (columns, rows) in (tables or {}).items():
            self.columns[table] = tuple(columns)
            self.rows[table] = list(rows)
        self.query_error = query_error
        self.connect_error = connect_error
        self.write_error = write_error
        self.executed: list[tuple[str, tuple[Any, ...] | None]] = []
        self.connect_calls = 0

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_error is not None:
            raise self.connect_error

    async def query(self, sql: str, params: Any = None) -> RowSnapshot:
        if self.query_error is not None:
            raise self.query_error

        match = SELECT_RE.match(sql)
        if not match or match.group(1) not in self.columns:
            raise StoreError(f"no such table in {sql!r}", store=self.name)

        table = match.group(1)
        return RowSnapshot.from_rows(self.columns[table], list(self.rows[table]))

    async def execute(self, sql: str, params: Any = None) -> int:
        row = tuple(params) if params is not None else None
        self.executed.append((sql, row))

        if self.write_error is not None:
            error = self.write_error(row)
            if error is not None:
                raise error

        match = INSERT_RE.match(sql)
        if match and row is not None:
            self.rows.setdefault(match.group(1), []).append(row)
        return 1

    async def execute_scalar(self, sql: str, params: Any = None) -> Any | None:
        snapshot = await self.query(sql, params)
        return snapshot.rows[0][0] if snapshot.rows else None

    def count(self, table: str) -> int:
        return len(self.rows.get(table, []))


PRODUCT_COLUMNS = ("id", "name", "price")


@pytest.fixture
def products() -> list[tuple[Any, ...]]:
    """Three product rows; the second carries a NULL price."""
    return [
        (1, "Widget", "9.99"),
        (2, "Gadget", None),
        (3, "O'Brien's Doohickey", "4.50"),
    ]


@pytest.fixture
def oracle_store(products: list[tuple[Any, ...]]) -> MemoryStore:
    return MemoryStore("Oracle", {"products": (PRODUCT_COLUMNS, products)})


@pytest.fixture
def mysql_store() -> MemoryStore:
    return MemoryStore("MySQL", {"products": (PRODUCT_COLUMNS, [])})


def create_products_db(path: Path, rows: list[tuple[Any, ...]], unique: bool = False) -> Path:
    """Create a SQLite database holding a ``products`` table."""
    conn = sqlite3.connect(path)
    id_type = "INTEGER PRIMARY KEY" if unique else "INTEGER"
    conn.execute(
        f"CREATE TABLE products (id {id_type}, name TEXT NOT NULL, price TEXT)"
    )
    conn.executemany("INSERT INTO products (id, name, price) VALUES (?, ?, ?)", rows)
    conn.commit()
    conn.close()
    return path


@pytest.fixture
def source_db(tmp_path: Path, products: list[tuple[Any, ...]]) -> Path:
    return create_products_db(tmp_path / "source.db", products)


@pytest.fixture
def dest_db(tmp_path: Path) -> Path:
    return create_products_db(tmp_path / "dest.db", [])
