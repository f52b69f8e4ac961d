"""
Portfolio Contact API Pydantic Schemas
Request/Response models for API endpoints.
"""
from backend.schemas.contact import (
    ContactResponse,
    ContactSubmission,
    ErrorResponse,
    HealthResponse,
    ResumeDownloadResponse,
)

__all__ = [
    "ContactResponse",
    "ContactSubmission",
    "ErrorResponse",
    "HealthResponse",
    "ResumeDownloadResponse",
]
