"""Store adapters for Table Sync."""

from table_sync.connectors.base import StoreAdapter, StoreConnectionError, StoreError
from table_sync.connectors.sqlite import SQLiteConnector

__all__ = ["StoreAdapter", "StoreConnectionError", "StoreError", "SQLiteConnector"]
