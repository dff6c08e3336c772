"""
Core sync components for Table Sync.

``SyncEngine`` lives in ``table_sync.core.engine`` and is not re-exported
here: the engine depends on ``table_sync.connectors``, which in turn
depends on the snapshot and statement types below.
"""

from table_sync.core.history import SyncHistory
from table_sync.core.results import RowOutcome, SyncProgress, SyncReport, SyncResult
from table_sync.core.snapshot import RowSnapshot
from table_sync.core.statements import Dialect, Statement, StatementBuilder

__all__ = [
    "SyncHistory",
    "RowOutcome",
    "SyncProgress",
    "SyncReport",
    "SyncResult",
    "RowSnapshot",
    "Dialect",
    "Statement",
    "StatementBuilder",
]
