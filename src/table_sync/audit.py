"""
Audit notifications.

The sync engine never notifies the audit trail itself; callers (the CLI,
a scheduler) report "action performed" events before and after invoking
it. Notifications are fire-and-forget: a failing notifier is logged and
never interrupts the sync.
"""

from __future__ import annotations

import logging
from typing import Protocol

from table_sync.core.results import SyncResult
from table_sync.utils.logger import get_logger


class AuditNotifier(Protocol):
    """Receives "action performed" notifications."""

    async def log_action(
        self,
        action: str,
        entity: str | None = None,
        entity_id: int | None = None,
        user_id: str | None = None,
        details: str | None = None,
    ) -> None: ...


class LoggingAuditNotifier:
    """Audit notifier writing one log record per action to ``table_sync.audit``."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger("table_sync.audit")

    async def log_action(
        self,
        action: str,
        entity: str | None = None,
        entity_id: int | None = None,
        user_id: str | None = None,
        details: str | None = None,
    ) -> None:
        self.logger.info(
            "%s entity=%s id=%s user=%s details=%s",
            action,
            entity or "-",
            entity_id if entity_id is not None else "-",
            user_id or "-",
            details or "",
        )


async def notify(
    notifier: AuditNotifier | None,
    action: str,
    entity: str | None = None,
    user_id: str | None = "System",
    details: str | None = None,
) -> None:
    """Send a notification, logging instead of raising if the notifier fails."""
    if notifier is None:
        return

    try:
        await notifier.log_action(
            action, entity=entity, user_id=user_id, details=details
        )
    except Exception:
        get_logger(__name__).warning(
            "Audit notification %r failed", action, exc_info=True
        )


def describe_result(result: SyncResult) -> str:
    """One-line description of a sync result for audit details."""
    text = (
        f"read={result.records_read} written={result.records_written} "
        f"failed={result.records_failed} duration={result.duration_seconds:.3f}s"
    )
    if result.error_message:
        text += f" error={result.error_message}"
    return text
