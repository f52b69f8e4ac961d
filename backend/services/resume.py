"""Resume download notifications."""
from datetime import datetime
from typing import Callable

import structlog

from backend.core.config import MailConfig
from backend.core.exceptions import ResumeNotificationError
from backend.services.mailer import MailTransport, OutboundEmail


logger = structlog.get_logger(__name__)

RESUME_SUBJECT = "Resume Downloaded"


def format_timestamp(moment: datetime) -> str:
    return moment.strftime("%m/%d/%Y, %I:%M:%S %p")


def build_resume_email(config: MailConfig, downloaded_at: datetime) -> OutboundEmail:
    timestamp = format_timestamp(downloaded_at)
    return OutboundEmail(
        sender=config.sender,
        recipient=config.recipient,
        subject=RESUME_SUBJECT,
        text=f"Someone just downloaded your resume at {timestamp}.",
        html=f"<p>Someone just downloaded your resume at <b>{timestamp}</b>.</p>",
    )


def build_file_url(scheme: str, host: str, filename: str) -> str:
    return f"{scheme}://{host}/{filename.lstrip('/')}"


class ResumeNotifier:
    """
    Tells the site owner that the resume was downloaded.

    The notification has no user input; it only carries the time of the
    download.
    """

    def __init__(
        self,
        config: MailConfig,
        transport: MailTransport,
        filename: str,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.transport = transport
        self.filename = filename
        self._clock = clock

    async def handle(self, scheme: str, host: str) -> str:
        """
        Send the notification and return the resume's public URL.

        Raises:
            ResumeNotificationError: if the notification could not be sent.
        """
        email = build_resume_email(self.config, self._clock())
        try:
            await self.transport.send(email)
        except Exception as e:
            logger.exception("resume_notification_failed", error=str(e), error_type=type(e).__name__)
            raise ResumeNotificationError("Failed to send resume notification.") from e

        file_url = build_file_url(scheme, host, self.filename)
        logger.info("resume_download_notified", file_url=file_url)
        return file_url
