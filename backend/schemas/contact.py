"""Contact form and resume download schemas."""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ContactSubmission(BaseModel):
    """
    Contact form submission.

    Every field is optional at the schema level; the contact service applies
    the required/format/length rules in a fixed order so callers get one
    specific error instead of a framework validation report.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None
    # Honeypot: hidden from humans, only bots fill it in
    website: Any = None


class ContactResponse(BaseModel):
    """Contact form submission response."""
    ok: bool
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str


class ResumeDownloadResponse(BaseModel):
    """Resume download response."""

    model_config = ConfigDict(populate_by_name=True)

    file_url: str = Field(..., alias="fileUrl")


class HealthResponse(BaseModel):
    ok: bool = True
