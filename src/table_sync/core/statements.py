"""
Statement Builder - INSERT statements for a destination dialect.

Turns a table name and one snapshot row into an INSERT statement. The
default output is parameterized: placeholders in the dialect's bind style
plus the raw row values, handed to the adapter's ``parameters`` argument.
Literal rendering is kept as a compatibility fallback for drivers or
tooling that need a self-contained SQL string.

Identifiers are emitted as given: no quoting, casting or validation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from pymysql.converters import escape_string


class Dialect(str, Enum):
    """SQL dialect of a store, as far as bind style and literals go."""

    ORACLE = "oracle"
    MYSQL = "mysql"
    SQLITE = "sqlite"


@dataclass(frozen=True)
class Statement:
    """SQL text plus the values bound to its placeholders."""

    sql: str
    params: tuple[Any, ...] = ()


class StatementBuilder:
    """
    Dialect-aware INSERT builder.

    Example:
        builder = StatementBuilder(Dialect.ORACLE)

        stmt = builder.build_insert("users", ["id", "name"], (1, "O'Brien"))
        # stmt.sql    == "INSERT INTO users (id, name) VALUES (:1, :2)"
        # stmt.params == (1, "O'Brien")

        sql = builder.build_literal_insert("users", ["id", "name"], (1, None))
        # "INSERT INTO users (id, name) VALUES ('1', NULL)"
    """

    NULL_LITERAL = "NULL"

    def __init__(self, dialect: Dialect | str = Dialect.MYSQL) -> None:
        self.dialect = Dialect(dialect)

    def placeholder(self, position: int) -> str:
        """Bind placeholder for a 1-based column position."""
        if self.dialect == Dialect.ORACLE:
            return f":{position}"
        if self.dialect == Dialect.MYSQL:
            return "%s"
        return "?"

    def render_literal(self, value: Any) -> str:
        """
        Render a value as a SQL literal.

        Null becomes ``NULL``; anything else becomes a quoted string of its
        textual form, escaped so the value can never terminate the statement
        early. MySQL literals go through the driver's escaping, which also
        covers backslashes; the other dialects double single quotes.
        """
        if value is None:
            return self.NULL_LITERAL

        if isinstance(value, bool):
            text = "1" if value else "0"
        elif isinstance(value, (bytes, bytearray, memoryview)):
            text = bytes(value).hex()
        else:
            text = str(value)

        # NUL bytes are rejected by both engines inside string literals
        text = text.replace("\x00", "")
        if self.dialect == Dialect.MYSQL:
            escaped = escape_string(text)
        else:
            escaped = text.replace("'", "''")
        return f"'{escaped}'"

    def build_insert(
        self,
        table: str,
        columns: Sequence[str],
        row: Sequence[Any],
    ) -> Statement:
        """Build a parameterized INSERT for one row."""
        self._check_row(columns, row)

        col_str = ", ".join(columns)
        placeholders = ", ".join(
            self.placeholder(i + 1) for i in range(len(columns))
        )
        return Statement(
            sql=f"INSERT INTO {table} ({col_str}) VALUES ({placeholders})",
            params=tuple(row),
        )

    def build_literal_insert(
        self,
        table: str,
        columns: Sequence[str],
        row: Sequence[Any],
    ) -> str:
        """Build a self-contained INSERT with every value rendered inline."""
        self._check_row(columns, row)

        col_str = ", ".join(columns)
        values = ", ".join(self.render_literal(v) for v in row)
        return f"INSERT INTO {table} ({col_str}) VALUES ({values})"

    def build(
        self,
        table: str,
        columns: Sequence[str],
        row: Sequence[Any],
        parameterized: bool = True,
    ) -> Statement:
        """Build either form, always returned as a ``Statement``."""
        if parameterized:
            return self.build_insert(table, columns, row)
        return Statement(sql=self.build_literal_insert(table, columns, row))

    @staticmethod
    def _check_row(columns: Sequence[str], row: Sequence[Any]) -> None:
        if not columns:
            raise ValueError("Cannot build an INSERT without columns")
        if len(columns) != len(row):
            raise ValueError(
                f"Row has {len(row)} values for {len(columns)} columns"
            )
