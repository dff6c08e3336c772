"""
Store adapter contract.

The sync engine only depends on three operations of a backing store:
run a query and get a ``RowSnapshot`` back, run a mutating statement and
get an affected-row count, and run a scalar query. ``connect``/``close``
let the engine establish the destination session before writing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from table_sync.core.snapshot import RowSnapshot
from table_sync.core.statements import Dialect


Params = Sequence[Any] | None


class StoreError(Exception):
    """Base exception for store adapter faults."""

    def __init__(self, message: str, store: str | None = None) -> None:
        super().__init__(message)
        self.store = store


class StoreConnectionError(StoreError):
    """Raised when a store session cannot be opened or is lost."""

    pass


class StoreAdapter(ABC):
    """
    Minimal capability a backing database exposes to the sync engine.

    Subclasses wrap their driver's exceptions: ``StoreConnectionError`` for
    session faults, ``StoreError`` for everything else.

    Example:
        async with MySQLConnector(config) as mysql:
            snapshot = await mysql.query("SELECT * FROM products")
            count = await mysql.execute_scalar("SELECT COUNT(*) FROM products")
    """

    #: Display name used in sync reports ("Oracle", "MySQL", ...)
    name: str = "store"
    dialect: Dialect = Dialect.SQLITE

    @abstractmethod
    async def query(self, sql: str, params: Params = None) -> RowSnapshot:
        """Run a query and return its full result."""

    @abstractmethod
    async def execute(self, sql: str, params: Params = None) -> int:
        """Run a mutating statement and return the affected-row count."""

    @abstractmethod
    async def execute_scalar(self, sql: str, params: Params = None) -> Any | None:
        """Run a query and return the first column of the first row, or None."""

    async def connect(self) -> None:
        """Establish the session. Adapters that connect lazily may no-op."""

    async def close(self) -> None:
        """Release the session."""

    async def __aenter__(self) -> "StoreAdapter":
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
