"""
Portfolio Contact API Test Configuration and Fixtures
Shared pytest fixtures for all test modules.
"""
from pathlib import Path
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from backend.core.config import MailConfig, Settings, resolve_mail_config
from backend.main import create_app
from backend.schemas.contact import ContactSubmission
from backend.services.mailer import OutboundEmail


RESUME_BYTES = b"%PDF-1.4 fake resume"


# =============================================================================
# Mail Transport Fakes
# =============================================================================


class FakeMailTransport:
    """Records outbound messages instead of talking to an SMTP relay."""

    def __init__(self, error: Optional[Exception] = None):
        self.sent: list[OutboundEmail] = []
        self.error = error
        self.verify_calls = 0

    async def send(self, email: OutboundEmail) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(email)

    async def verify(self) -> None:
        self.verify_calls += 1
        if self.error is not None:
            raise self.error


@pytest.fixture
def fake_mailer() -> FakeMailTransport:
    return FakeMailTransport()


@pytest.fixture
def failing_mailer() -> FakeMailTransport:
    from backend.core.exceptions import MailTransportError

    return FakeMailTransport(error=MailTransportError("535 5.7.8 Authentication failed for owner@example.com"))


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def resume_bytes() -> bytes:
    return RESUME_BYTES


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    """A public directory holding the resume file."""
    public = tmp_path / "public"
    public.mkdir()
    (public / "resume.pdf").write_bytes(RESUME_BYTES)
    return public


@pytest.fixture
def test_settings(static_dir: Path) -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        allow_origin="https://portfolio.example.com, https://www.portfolio.example.com",
        smtp_host="smtp.example.com",
        smtp_port=465,
        smtp_user="owner@example.com",
        smtp_pass="app-password",
        from_email=None,
        to_email=None,
        smtp_verify_on_startup=False,
        static_dir=str(static_dir),
        resume_filename="resume.pdf",
        rate_limit_enabled=True,
        rate_limit_requests=20,
        rate_limit_window=60,
        redis_url=None,
        sentry_dsn=None,
    )


@pytest.fixture
def mail_config(test_settings: Settings) -> MailConfig:
    return resolve_mail_config(test_settings)


# =============================================================================
# Submission Fixtures
# =============================================================================


@pytest.fixture
def valid_payload() -> dict[str, str]:
    return {
        "name": "Ava",
        "email": "ava@example.com",
        "subject": "Hi",
        "message": "Hello there",
    }


@pytest.fixture
def valid_submission(valid_payload: dict[str, str]) -> ContactSubmission:
    return ContactSubmission(**valid_payload)


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(test_settings: Settings, fake_mailer: FakeMailTransport) -> FastAPI:
    return create_app(test_settings, mailer=fake_mailer)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app without a running server."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
