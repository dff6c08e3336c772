"""
Logging for Table Sync.

Everything logs under the ``table_sync`` hierarchy:

- ``table_sync.engine``  - transfer start/finish, rows read, failed rows
- ``table_sync.audit``   - "action performed" notifications
- ``table_sync.connectors.*`` - pool connect/disconnect

Library code only asks ``get_logger`` for a logger (or is handed one);
handlers are installed once, by the CLI, through ``setup_logging``.
Console output goes to stderr so summary and history tables printed on
stdout can be piped cleanly.
"""

from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


ROOT_LOGGER = "table_sync"

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

console = Console(stderr=True)


def setup_logging(
    level: str = "INFO",
    log_file: Path | str | None = None,
    format_style: str = "rich",
    max_file_size_mb: int = 10,
    backup_count: int = 3,
) -> logging.Logger:
    """
    Install console (and optionally file) handlers on the package logger.

    Calling it again replaces the previous handlers, so the CLI can switch
    level for ``--quiet`` without duplicating output.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Rotating log file; console only when omitted
        format_style: Console format: "rich", "json" or "simple"
        max_file_size_mb: Size at which the log file is rotated
        backup_count: Rotated files kept next to the log file

    Returns:
        The configured ``table_sync`` logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    package_logger = logging.getLogger(ROOT_LOGGER)

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(log_level)

    handlers = [_console_handler(format_style)]
    if log_file:
        handlers.append(_file_handler(Path(log_file), max_file_size_mb, backup_count))

    for handler in handlers:
        handler.setLevel(log_level)
        package_logger.addHandler(handler)

    return package_logger


def _console_handler(format_style: str) -> logging.Handler:
    if format_style == "rich":
        handler: logging.Handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        return handler

    handler = logging.StreamHandler(sys.stderr)
    if format_style == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(message)s", DATE_FORMAT)
        )
    return handler


def _file_handler(path: Path, max_file_size_mb: int, backup_count: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=max_file_size_mb * 1024 * 1024,
        backupCount=backup_count,
    )
    handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
    return handler


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Logger under the ``table_sync`` hierarchy."""
    return logging.getLogger(name)
