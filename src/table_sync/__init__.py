"""Table Sync - Oracle ↔ MySQL table synchronization engine."""

__version__ = "1.0.0"
__author__ = "Table Sync Contributors"

from table_sync.config import Settings

__all__ = ["Settings", "__version__"]
