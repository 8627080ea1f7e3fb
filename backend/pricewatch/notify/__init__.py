"""Notification transports and message formatting."""

from .base import Notifier, LogNotifier
from .emailer import EmailNotifier
from pricewatch.config import settings


def build_notifier() -> Notifier:
    """Email when SMTP is configured, log-only otherwise."""
    if settings.smtp_configured():
        return EmailNotifier()
    return LogNotifier()


__all__ = [
    "Notifier",
    "LogNotifier",
    "EmailNotifier",
    "build_notifier",
]
