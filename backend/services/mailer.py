"""
Outbound mail transport.

Wraps the SMTP relay behind a small async interface. ``smtplib`` is
blocking, so every relay conversation runs in a worker thread via
``asyncio.to_thread``; a slow relay only holds up the request that is
waiting on it.
"""
import asyncio
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Optional, Protocol

import structlog

from backend.core.config import MailConfig
from backend.core.exceptions import MailTransportError


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OutboundEmail:
    """A fully rendered message ready to hand to a transport."""

    sender: str
    recipient: str
    subject: str
    text: str
    html: str
    reply_to: Optional[str] = None


class MailTransport(Protocol):
    """Anything that can deliver an OutboundEmail."""

    async def send(self, email: OutboundEmail) -> None:
        ...

    async def verify(self) -> None:
        ...


def build_message(email: OutboundEmail) -> EmailMessage:
    """
    Build a multipart/alternative message.

    Plain text comes first so clients without HTML support fall back to it.
    """
    message = EmailMessage()
    message["From"] = email.sender
    message["To"] = email.recipient
    message["Subject"] = email.subject
    message["Date"] = formatdate(localtime=True)
    message["Message-ID"] = make_msgid()
    if email.reply_to:
        message["Reply-To"] = email.reply_to

    message.set_content(email.text)
    message.add_alternative(email.html, subtype="html")
    return message


class SMTPMailer:
    """
    SMTP relay transport.

    Port 465 connects with implicit TLS; any other port starts in plain text
    and upgrades with STARTTLS when the server advertises it. Credentials are
    only sent when a username is configured.
    """

    def __init__(self, config: MailConfig):
        self.config = config
        self.logger = structlog.get_logger(__name__).bind(host=config.host, port=config.port)

    def _connect(self) -> smtplib.SMTP:
        if not self.config.host:
            raise MailTransportError("SMTP host not configured")

        context = ssl.create_default_context()
        if self.config.use_implicit_tls:
            client = smtplib.SMTP_SSL(
                self.config.host,
                self.config.port,
                timeout=self.config.timeout,
                context=context,
            )
        else:
            client = smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout)
            client.ehlo()
            if client.has_extn("starttls"):
                client.starttls(context=context)
                client.ehlo()

        if self.config.username:
            try:
                client.login(self.config.username, self.config.password or "")
            except smtplib.SMTPException:
                client.close()
                raise
        return client

    def _send_sync(self, message: EmailMessage) -> None:
        """Synchronous send operation for use with asyncio.to_thread."""
        client = self._connect()
        try:
            client.send_message(message)
        finally:
            try:
                client.quit()
            except smtplib.SMTPServerDisconnected:
                pass

    def _verify_sync(self) -> None:
        client = self._connect()
        client.quit()

    async def send(self, email: OutboundEmail) -> None:
        """
        Deliver one message to the relay.

        Raises:
            MailTransportError: on a header that cannot be encoded, or on any
                connection, authentication or protocol failure. The original
                error is chained.
        """
        try:
            message = build_message(email)
            await asyncio.to_thread(self._send_sync, message)
        except MailTransportError:
            raise
        except (smtplib.SMTPException, OSError, ValueError) as e:
            self.logger.error("smtp_send_failed", error=str(e), error_type=type(e).__name__)
            raise MailTransportError(str(e)) from e

        self.logger.info("smtp_message_sent", subject=email.subject)

    async def verify(self) -> None:
        """Open, authenticate and close one connection to the relay."""
        try:
            await asyncio.to_thread(self._verify_sync)
        except MailTransportError:
            raise
        except (smtplib.SMTPException, OSError) as e:
            raise MailTransportError(str(e)) from e
