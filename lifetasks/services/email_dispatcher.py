"""
Outbound email for reminder digests.

SmtpEmailDispatcher sends through the configured SMTP relay; without one,
LoggingEmailDispatcher writes the digest to the log so local runs still show
what would have gone out.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from lifetasks.core.config import settings

logger = logging.getLogger(__name__)


class EmailDispatcher:
    """Interface: deliver one message or raise."""

    async def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> None:
        raise NotImplementedError


class SmtpEmailDispatcher(EmailDispatcher):
    def __init__(
        self,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username or "noreply@localhost"
        self.use_tls = use_tls
        self.timeout = timeout

    def build_message(self, to: str, subject: str, text: str, html: Optional[str] = None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)
        if html:
            message.add_alternative(html, subtype="html")
        return message

    def _send_blocking(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username and self.password:
                smtp.login(self.username, self.password)
            smtp.send_message(message)

    async def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> None:
        message = self.build_message(to, subject, text, html)
        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self._send_blocking, message)
        logger.info("Sent email '%s' to %s", subject, to)


class LoggingEmailDispatcher(EmailDispatcher):
    """Development stand-in used when no SMTP host is configured."""

    async def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> None:
        logger.info("Email to %s not sent (EMAIL_HOST unset): %s\n%s", to, subject, text)


def get_email_dispatcher() -> EmailDispatcher:
    if not settings.EMAIL_HOST:
        return LoggingEmailDispatcher()
    return SmtpEmailDispatcher(
        host=settings.EMAIL_HOST,
        port=settings.EMAIL_PORT,
        username=settings.EMAIL_USER,
        password=settings.EMAIL_PASSWORD,
        sender=settings.EMAIL_FROM,
        use_tls=settings.EMAIL_USE_TLS,
    )
