"""
Contact Intake Service
Validates portfolio contact submissions and relays them to the site owner.

A submission goes through one linear pass:

1. honeypot guard (bots get a silent success, nothing is sent)
2. ordered validation, first failing rule wins
3. plain-text and HTML rendering
4. a single dispatch through the mail transport
"""
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import structlog
from email_validator import EmailNotValidError, validate_email
from markupsafe import escape

from backend.core.config import MailConfig
from backend.schemas.contact import ContactSubmission
from backend.services.mailer import MailTransport, OutboundEmail


logger = structlog.get_logger(__name__)


MAX_NAME_LENGTH = 100
MAX_SUBJECT_LENGTH = 200
MAX_MESSAGE_LENGTH = 5000

ERROR_REQUIRED = "All fields are required."
ERROR_INVALID_EMAIL = "Invalid email."
ERROR_TOO_LONG = "Input too long."
ERROR_SEND_FAILED = "Failed to send message."


class ContactOutcome(str, Enum):
    """Terminal outcomes of handling one submission."""

    ACCEPTED = "accepted"
    DISCARDED_SPAM = "discarded_spam"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class ContactResult:
    outcome: ContactOutcome
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        # Spam reads as success to the caller
        return self.outcome in (ContactOutcome.ACCEPTED, ContactOutcome.DISCARDED_SPAM)


def is_honeypot_tripped(payload: Any) -> bool:
    """True for any truthy ``website`` value, whatever its JSON type."""
    if isinstance(payload, ContactSubmission):
        return bool(payload.website)
    return isinstance(payload, Mapping) and bool(payload.get("website"))


def is_valid_email(address: str) -> bool:
    """Check RFC address syntax only; no DNS lookups."""
    try:
        validate_email(address, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_submission(submission: ContactSubmission) -> Optional[str]:
    """
    Apply the contact form rules in order.

    Returns:
        The caller-safe reason for the first failing rule, or None when the
        submission is acceptable.
    """
    if not (submission.name and submission.email and submission.subject and submission.message):
        return ERROR_REQUIRED

    if not is_valid_email(submission.email):
        return ERROR_INVALID_EMAIL

    if (
        len(submission.name) > MAX_NAME_LENGTH
        or len(submission.subject) > MAX_SUBJECT_LENGTH
        or len(submission.message) > MAX_MESSAGE_LENGTH
    ):
        return ERROR_TOO_LONG

    return None


def header_text(value: str) -> str:
    """Collapse line breaks so the value fits on one header line."""
    return " ".join(value.splitlines())


def render_text(submission: ContactSubmission) -> str:
    text = (
        f"Name: {submission.name}\n"
        f"Email: {submission.email}\n"
        f"Subject: {submission.subject}\n"
        "\n"
        "Message:\n"
        f"{submission.message}"
    )
    return text.strip()


def render_html(submission: ContactSubmission) -> str:
    """Render the HTML body. Every submitted value is escaped."""
    return f"""
      <div style="font-family:Arial,Helvetica,sans-serif;line-height:1.6">
        <h2>New Portfolio Contact</h2>
        <p><strong>Name:</strong> {escape(submission.name)}</p>
        <p><strong>Email:</strong> {escape(submission.email)}</p>
        <p><strong>Subject:</strong> {escape(submission.subject)}</p>
        <p><strong>Message:</strong></p>
        <pre style="white-space:pre-wrap;background:#f7f7f9;padding:12px;border-radius:6px;border:1px solid #eee">{escape(submission.message)}</pre>
      </div>
    """


def build_contact_email(submission: ContactSubmission, config: MailConfig) -> OutboundEmail:
    return OutboundEmail(
        sender=config.sender,
        recipient=config.recipient,
        reply_to=submission.email,
        subject=f"{config.subject_prefix}{header_text(submission.subject)}",
        text=render_text(submission),
        html=render_html(submission),
    )


class ContactService:
    """Handles contact submissions against a fixed mail configuration."""

    def __init__(self, config: MailConfig, transport: MailTransport):
        self.config = config
        self.transport = transport

    async def handle_payload(self, payload: Any) -> ContactResult:
        """
        Handle a decoded JSON body.

        The honeypot is checked on the raw body, before any field typing.
        A missing body is treated as an empty submission.

        Raises:
            pydantic.ValidationError: if a non-honeypot body is not an object
                of string fields.
        """
        if is_honeypot_tripped(payload):
            logger.info("contact_spam_discarded")
            return ContactResult(ContactOutcome.DISCARDED_SPAM)

        submission = ContactSubmission.model_validate({} if payload is None else payload)
        return await self.handle(submission)

    async def handle(self, submission: ContactSubmission) -> ContactResult:
        if is_honeypot_tripped(submission):
            logger.info("contact_spam_discarded")
            return ContactResult(ContactOutcome.DISCARDED_SPAM)

        reason = validate_submission(submission)
        if reason is not None:
            logger.info("contact_submission_rejected", reason=reason)
            return ContactResult(ContactOutcome.REJECTED, error=reason)

        email = build_contact_email(submission, self.config)
        try:
            await self.transport.send(email)
        except Exception as e:
            # Full detail stays in the logs; the caller only sees a generic message
            logger.exception(
                "contact_email_failed",
                reply_to=submission.email,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ContactResult(ContactOutcome.FAILED, error=ERROR_SEND_FAILED)

        logger.info("contact_submission_accepted", reply_to=submission.email, subject=submission.subject)
        return ContactResult(ContactOutcome.ACCEPTED)
