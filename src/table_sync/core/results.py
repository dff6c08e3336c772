"""
Sync outcomes.

Two tiers of outcome are kept apart on purpose:

- ``RowOutcome`` - one row's write, ok or failed with a reason. A failed
  row is counted, never escalated.
- ``SyncResult`` - one whole directional (or bidirectional) transfer. It is
  unsuccessful only when a connection-level fault cut the transfer short.

``SyncReport`` is the durable summary appended to the history log once per
directional transfer.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RowOutcome:
    """Outcome of writing a single row."""

    ok: bool
    error: str | None = None
    affected: int = 0

    @classmethod
    def written(cls, affected: int = 1) -> "RowOutcome":
        return cls(ok=True, affected=affected)

    @classmethod
    def failed(cls, reason: str) -> "RowOutcome":
        return cls(ok=False, error=reason)


@dataclass
class SyncProgress:
    """Running tally of a directional transfer, handed to progress callbacks."""

    table: str
    source: str
    destination: str
    records_read: int = 0
    records_written: int = 0
    records_failed: int = 0

    def record(self, outcome: RowOutcome) -> None:
        if outcome.ok:
            self.records_written += 1
        else:
            self.records_failed += 1

    @property
    def records_processed(self) -> int:
        return self.records_written + self.records_failed

    @property
    def percent_complete(self) -> float:
        if self.records_read > 0:
            return (self.records_processed / self.records_read) * 100
        return 0.0


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one transfer direction or one bidirectional round."""

    success: bool
    records_read: int = 0
    records_written: int = 0
    records_failed: int = 0
    error_message: str | None = None
    duration_seconds: float = 0.0
    timestamp: datetime = field(default_factory=utc_now)

    @property
    def records_per_second(self) -> float:
        if self.duration_seconds > 0:
            return self.records_written / self.duration_seconds
        return 0.0

    @classmethod
    def combine(cls, first: "SyncResult", second: "SyncResult") -> "SyncResult":
        """
        Combine two directional results into a bidirectional one.

        Counts and durations are summed, success is the AND of both and the
        first direction's error message takes precedence.
        """
        return cls(
            success=first.success and second.success,
            records_read=first.records_read + second.records_read,
            records_written=first.records_written + second.records_written,
            records_failed=first.records_failed + second.records_failed,
            error_message=(
                first.error_message
                if first.error_message is not None
                else second.error_message
            ),
            duration_seconds=first.duration_seconds + second.duration_seconds,
            timestamp=utc_now(),
        )


@dataclass(frozen=True)
class SyncReport:
    """History record of one completed (or failed) directional transfer."""

    sync_time: datetime
    source: str
    destination: str
    table_name: str
    records_read: int
    records_written: int
    records_failed: int
    success: bool
    error_message: str | None = None

    @classmethod
    def from_result(
        cls,
        result: SyncResult,
        source: str,
        destination: str,
        table_name: str,
    ) -> "SyncReport":
        return cls(
            sync_time=result.timestamp,
            source=source,
            destination=destination,
            table_name=table_name,
            records_read=result.records_read,
            records_written=result.records_written,
            records_failed=result.records_failed,
            success=result.success,
            error_message=result.error_message,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["sync_time"] = self.sync_time.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncReport":
        """Create from dictionary."""
        sync_time = datetime.fromisoformat(data["sync_time"])
        if sync_time.tzinfo is None:
            sync_time = sync_time.replace(tzinfo=timezone.utc)

        return cls(
            sync_time=sync_time,
            source=data.get("source", ""),
            destination=data.get("destination", ""),
            table_name=data.get("table_name", ""),
            records_read=data.get("records_read", 0),
            records_written=data.get("records_written", 0),
            records_failed=data.get("records_failed", 0),
            success=data.get("success", False),
            error_message=data.get("error_message"),
        )
