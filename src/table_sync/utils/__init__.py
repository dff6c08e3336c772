"""Utility modules for Table Sync."""

from table_sync.utils.logger import setup_logging, get_logger
from table_sync.utils.display import ProgressDisplay

__all__ = ["setup_logging", "get_logger", "ProgressDisplay"]
