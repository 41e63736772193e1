"""Share notifiers."""

from __future__ import annotations

import typing as typ

from librarian.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    from .engagement import ShareNotice

logger = get_logger(__name__)


class LoggingShareNotifier:
    """Record share notices in the log.

    Deployments without a messaging backend use this notifier; it accepts
    every notice.
    """

    async def deliver(self, notice: ShareNotice) -> None:
        """Log ``notice``."""
        target = (
            f"group {notice.group_id}"
            if notice.group_id is not None
            else f"{len(notice.recipient_ids)} users"
        )
        log_info(
            logger,
            "User %s shared resource %s with %s: %s",
            notice.sender_id,
            notice.resource_id,
            target,
            notice.message,
        )


__all__ = ("LoggingShareNotifier",)
