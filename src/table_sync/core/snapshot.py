"""
Row Snapshot - engine-agnostic copy of a query result.

A snapshot is produced by a store adapter's ``query`` call, walked once
by the sync engine and then discarded. Values are opaque engine-native
scalars; ``None`` is the null marker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Sequence


@dataclass(frozen=True)
class RowSnapshot:
    """
    Ordered column names plus ordered rows aligned positionally to them.

    Example:
        snapshot = RowSnapshot.from_rows(
            ["id", "name"],
            [(1, "Alice"), (2, None)],
        )

        for row in snapshot:
            print(dict(zip(snapshot.columns, row)))
    """

    columns: tuple[str, ...] = ()
    rows: tuple[tuple[Any, ...], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"Duplicate column names in snapshot: {self.columns}")

        width = len(self.columns)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"Row {index} has {len(row)} values, expected {width}"
                )

    @classmethod
    def from_rows(
        cls,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
    ) -> "RowSnapshot":
        """Build a snapshot from any column/row sequences (e.g. a DB cursor)."""
        return cls(
            columns=tuple(columns),
            rows=tuple(tuple(row) for row in rows),
        )

    @classmethod
    def empty(cls, columns: Sequence[str] = ()) -> "RowSnapshot":
        return cls(columns=tuple(columns))

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[tuple[Any, ...]]:
        return iter(self.rows)

    def as_dicts(self) -> list[dict[str, Any]]:
        """Rows keyed by column name, mostly for diagnostics."""
        return [dict(zip(self.columns, row)) for row in self.rows]
