"""Email notifier via SMTP.

Supports STARTTLS (587) or implicit SSL (465). smtplib is blocking, so each
send runs in a worker thread to keep the event loop free.
"""

import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

import structlog

from pricewatch.config import settings
from pricewatch.core.exceptions import NotifierError
from pricewatch.notify.formatters import html_to_text

logger = structlog.get_logger(__name__)


class EmailNotifier:
    """Sends HTML notification emails through an SMTP relay."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        use_tls: Optional[bool] = None,
        timeout: float = 20.0,
    ):
        self.host = host if host is not None else settings.SMTP_HOST
        self.port = port if port is not None else settings.SMTP_PORT
        self.username = username if username is not None else settings.SMTP_USERNAME
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.sender = sender or settings.EMAIL_FROM or self.username
        self.use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls
        self.timeout = timeout

    def build_message(self, recipient: str, subject: str, body: str) -> EmailMessage:
        """Build a multipart message with plain-text and HTML alternatives."""
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = recipient
        msg.set_content(html_to_text(body))
        msg.add_alternative(body, subtype="html")
        return msg

    async def send(self, recipient: str, subject: str, body: str) -> bool:
        """Send one email. Returns False (and logs) on any delivery failure."""
        if not recipient:
            logger.warning("email_skipped_no_recipient", subject=subject)
            return False

        msg = self.build_message(recipient, subject, body)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except NotifierError as e:
            logger.error("email_send_failed", recipient=recipient, error=e.message)
            return False

        logger.info("email_sent", recipient=recipient, subject=subject)
        return True

    def _deliver(self, msg: EmailMessage) -> None:
        context = ssl.create_default_context()
        try:
            if self.use_tls and self.port != 465:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                    smtp.ehlo()
                    smtp.starttls(context=context)
                    self._login(smtp)
                    smtp.send_message(msg)
            else:
                with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as smtp:
                    self._login(smtp)
                    smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotifierError("smtp", str(e)) from e

    def _login(self, smtp: smtplib.SMTP) -> None:
        if self.username and self.password:
            smtp.login(self.username, self.password)
