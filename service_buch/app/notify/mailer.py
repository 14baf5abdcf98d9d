"""
Notification of newly created catalog entries.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional

from shared.config import BaseConfig
from shared.logging import get_logger

from ..model.buch import Buch

logger = get_logger("buch.notify")


class Notifier:
    """Notifier that only logs the event."""

    async def buch_created(self, buch: Buch) -> None:
        logger.info("Book created", buch_id=buch.id, title=buch.title)


class MailNotifier(Notifier):
    """Send a mail per created entry through an SMTP relay."""

    def __init__(self, host: str, port: int, sender: str, recipient: str, timeout: float = 10.0):
        self.host = host
        self.port = port
        self.sender = sender
        self.recipient = recipient
        self.timeout = timeout

    def build_message(self, buch: Buch) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = self.recipient
        message["Subject"] = f"New book {buch.id}"
        message.set_content(f"The book titled {buch.title} has been created.")
        message.add_alternative(
            f"<p>The book titled <strong>{buch.title}</strong> has been created.</p>",
            subtype="html",
        )
        return message

    def _send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(host=self.host, port=self.port, timeout=self.timeout) as connection:
            connection.send_message(message)

    async def buch_created(self, buch: Buch) -> None:
        message = self.build_message(buch)
        await asyncio.to_thread(self._send, message)
        logger.debug("Mail sent", buch_id=buch.id, recipient=self.recipient)


def create_notifier(config: BaseConfig) -> Notifier:
    """Mail notifier if an SMTP host is configured, logging otherwise."""
    if config.mail_host:
        return MailNotifier(config.mail_host, config.mail_port, config.mail_sender, config.mail_recipient)
    return Notifier()


class BackgroundNotifications:
    """Run notifications as tasks the caller does not wait for.

    Failures are logged and never reach the caller.
    """

    def __init__(self, notifier: Optional[Notifier] = None):
        self.notifier = notifier or Notifier()
        self._tasks = set()

    def buch_created(self, buch: Buch) -> asyncio.Task:
        task = asyncio.create_task(self.notifier.buch_created(buch))
        self._tasks.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task):
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Notification failed", error=str(exc), error_type=type(exc).__name__)

    async def drain(self):
        """Wait for pending notifications, used on shutdown."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
