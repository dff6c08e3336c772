"""
Sync History - append-only log of past transfers.

Provides:
- Thread-safe append and snapshot reads (newest first)
- Optional count-based retention (oldest reports dropped first)
- Optional JSON file backing so history survives a restart
"""

from __future__ import annotations

import json
import threading
from collections import deque
from pathlib import Path

from table_sync.config import DEFAULT_HISTORY_LIMIT
from table_sync.core.results import SyncReport
from table_sync.utils.logger import get_logger


logger = get_logger(__name__)


class SyncHistory:
    """
    Concurrency-safe history of sync reports.

    All access to the underlying deque happens under one lock, and readers
    only ever get a fresh list, never the internal storage.

    Example:
        history = SyncHistory(limit=1000, path=Path("history.json"))

        history.append(report)

        for report in history.get_all():
            print(report.sync_time, report.table_name, report.success)
    """

    def __init__(
        self,
        limit: int | None = DEFAULT_HISTORY_LIMIT,
        path: Path | str | None = None,
    ) -> None:
        """
        Initialize history log.

        Args:
            limit: Maximum reports retained (None = unbounded)
            path: Optional JSON file to load from and persist to
        """
        if limit is not None and limit < 1:
            raise ValueError(f"History limit must be positive, got {limit}")

        self.limit = limit
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        self._save_lock = threading.Lock()
        self._reports: deque[SyncReport] = deque(maxlen=limit)
        self._version = 0
        self._saved_version = 0

        if self.path is not None:
            self._reports.extend(self._load(self.path))

    def append(self, report: SyncReport) -> None:
        """
        Append one report, persisting the log if file-backed.

        The file is written outside the main lock, so readers never wait on
        disk I/O. Writes are serialized and a snapshot older than the one
        already on disk is skipped.
        """
        with self._lock:
            self._reports.append(report)
            self._version += 1
            version = self._version
            snapshot = list(self._reports) if self.path is not None else None

        if self.path is None or snapshot is None:
            return

        with self._save_lock:
            if version > self._saved_version:
                self._save(self.path, snapshot)
                self._saved_version = version

    def get_all(self) -> list[SyncReport]:
        """Snapshot of all retained reports, most recent first."""
        with self._lock:
            reports = list(self._reports)

        # Reverse first so later appends win ties on equal timestamps
        reports.reverse()
        return sorted(reports, key=lambda r: r.sync_time, reverse=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)

    @staticmethod
    def _load(path: Path) -> list[SyncReport]:
        if not path.exists():
            return []

        try:
            data = json.loads(path.read_text())
            return [SyncReport.from_dict(item) for item in data]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            # Corrupted history file, start empty rather than refuse to run
            logger.warning("Could not load history file %s: %s", path, e)
            return []

    @staticmethod
    def _save(path: Path, reports: list[SyncReport]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps([r.to_dict() for r in reports], indent=2))
