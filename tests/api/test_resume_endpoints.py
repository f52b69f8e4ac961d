"""
Tests for the resume download endpoint and static resume serving.
"""
import pytest
from httpx import ASGITransport, AsyncClient

from backend.main import create_app


class TestDownloadResume:
    """Tests for POST /download-resume."""

    @pytest.mark.asyncio
    async def test_returns_file_url(self, client, fake_mailer):
        response = await client.post("/download-resume")

        assert response.status_code == 200
        assert response.json() == {"fileUrl": "http://testserver/resume.pdf"}

    @pytest.mark.asyncio
    async def test_file_url_follows_request_host(self, test_settings, fake_mailer):
        app = create_app(test_settings, mailer=fake_mailer)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="https://api.example.com") as client:
            response = await client.post("/download-resume")

        assert response.json()["fileUrl"] == "https://api.example.com/resume.pdf"

    @pytest.mark.asyncio
    async def test_sends_one_notification(self, client, fake_mailer):
        await client.post("/download-resume")

        assert len(fake_mailer.sent) == 1
        sent = fake_mailer.sent[0]
        assert sent.subject == "Resume Downloaded"
        assert sent.recipient == "owner@example.com"
        assert sent.reply_to is None
        assert "Someone just downloaded your resume at" in sent.text

    @pytest.mark.asyncio
    async def test_ignores_request_body(self, client, fake_mailer):
        response = await client.post("/download-resume", json={"anything": "goes"})

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_notification_failure(self, test_settings, failing_mailer):
        app = create_app(test_settings, mailer=failing_mailer)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
            response = await client.post("/download-resume")

        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "Failed to send resume notification."}


class TestStaticResume:
    """Tests for the static file collaborator."""

    @pytest.mark.asyncio
    async def test_resume_is_served(self, client, resume_bytes):
        response = await client.get("/resume.pdf")

        assert response.status_code == 200
        assert response.content == resume_bytes

    @pytest.mark.asyncio
    async def test_file_url_resolves_to_static_file(self, client, resume_bytes):
        file_url = (await client.post("/download-resume")).json()["fileUrl"]

        response = await client.get(file_url)

        assert response.status_code == 200
        assert response.content == resume_bytes
