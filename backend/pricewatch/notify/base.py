"""Notifier interface and the log-only fallback transport."""

from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


class Notifier(Protocol):
    """Outbound message transport.

    ``send`` reports success as a bool and is expected not to raise;
    callers treat ``False`` as "not delivered, try again next cycle".
    """

    async def send(self, recipient: str, subject: str, body: str) -> bool:
        ...


class LogNotifier:
    """Writes notifications to the log instead of delivering them.

    Used when no SMTP host is configured (local development, CI).
    """

    async def send(self, recipient: str, subject: str, body: str) -> bool:
        logger.info("notification_logged", recipient=recipient, subject=subject, body_length=len(body))
        return True
