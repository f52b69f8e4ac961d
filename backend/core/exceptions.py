"""
Custom Exception Classes for the Portfolio Contact API.

HTTP exceptions carry a caller-safe message that the app-level handler
renders as ``{"ok": false, "error": <message>}``. The plain exceptions at the
bottom are raised by services and never reach the caller directly.
"""
from fastapi import HTTPException, status


class ContactValidationError(HTTPException):
    """Exception raised when a contact submission fails validation."""

    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class DeliveryFailedError(HTTPException):
    """Exception raised when an email could not be handed to the relay."""

    def __init__(self, message: str = "Failed to send message."):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


class RateLimitError(HTTPException):
    """Exception raised when rate limit is exceeded."""

    def __init__(self, retry_after: int, headers: dict[str, str] | None = None):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many requests. Please retry after {retry_after} seconds.",
            headers={"Retry-After": str(retry_after), **(headers or {})},
        )
        self.retry_after = retry_after


class MailTransportError(Exception):
    """Raised by a mail transport when delivery to the relay fails."""


class ResumeNotificationError(Exception):
    """Raised when the resume-download notification could not be sent."""
