"""
Backend services for mail delivery and request handling logic.
"""

from backend.services.contact import ContactOutcome, ContactResult, ContactService
from backend.services.mailer import MailTransport, OutboundEmail, SMTPMailer
from backend.services.resume import ResumeNotifier

__all__ = [
    "ContactOutcome",
    "ContactResult",
    "ContactService",
    "MailTransport",
    "OutboundEmail",
    "ResumeNotifier",
    "SMTPMailer",
]
