"""Mailer — plain-text SMTP delivery for account notifications.

Invariants:
    - send() never raises into the request: failures are logged and swallowed
      by the background-task wrapper deliver()
    - An empty smtp_host disables delivery (the send is logged and skipped)
    - Message bodies carry tokens; bodies are never logged

Design Decisions:
    - smtplib in a worker thread (asyncio.to_thread): one short-lived connection per mail
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from dotareplays.config import Settings

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(
        self, host: str, port: int, username: str, password: str, sender: str,
        timeout: float = 5.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "Mailer":
        return cls(
            settings.smtp_host, settings.smtp_port,
            settings.smtp_username, settings.smtp_password,
            settings.smtp_sender, settings.smtp_timeout_seconds,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    def build_message(self, recipient: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["To"] = recipient
        msg["From"] = self.sender
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    def send(self, recipient: str, subject: str, body: str) -> None:
        """Deliver one message synchronously."""
        if not self.enabled:
            logger.info(f"SMTP disabled; skipped mail '{subject}'")
            return
        msg = self.build_message(recipient, subject, body)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.username:
                smtp.starttls()
                smtp.login(self.username, self.password)
            smtp.send_message(msg)

    async def deliver(self, recipient: str, subject: str, body: str) -> None:
        """Background-task entry point: send in a thread, log on failure."""
        try:
            await asyncio.to_thread(self.send, recipient, subject, body)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send mail '{subject}': {e}", exc_info=True)
