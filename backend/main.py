"""
Portfolio Contact API
FastAPI application that relays portfolio contact-form submissions and
resume-download notifications through an SMTP relay.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.api import contact, health, resume
from backend.core.config import Settings, resolve_mail_config, settings
from backend.core.exceptions import MailTransportError
from backend.core.rate_limit import InMemoryRateLimiter, RateLimitMiddleware, build_rate_limiter
from backend.core.security import BodySizeLimitMiddleware, SecurityHeadersMiddleware
from backend.core.sentry import capture_exception, init_sentry
from backend.services.mailer import MailTransport, SMTPMailer

# =============================================================================
# Logging Configuration
# =============================================================================

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Events
# =============================================================================


async def verify_mail_transport(app: FastAPI) -> bool:
    """
    Probe the SMTP relay once at startup.

    A failure is logged and otherwise ignored; the relay may come back
    before the first submission arrives.
    """
    if not app.state.mail_config.is_configured:
        logger.warning("SMTP relay not configured (set SMTP_HOST and SMTP_USER or FROM_EMAIL/TO_EMAIL)")
        return False

    try:
        await app.state.mailer.verify()
    except MailTransportError as e:
        logger.error(f"SMTP error: {e}")
        return False

    logger.info("SMTP connection ready")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown events.

    Startup:
    - Initialize Sentry
    - Probe the SMTP relay

    Shutdown:
    - Close the rate limiter backend
    """
    app_settings: Settings = app.state.settings
    logger.info(f"Starting {app_settings.app_name}...")
    logger.info(f"Environment: {app_settings.environment}")
    logger.info(f"Allowed origins: {app_settings.allowed_origins or 'none'}")

    if init_sentry(app_settings):
        logger.info("Sentry error tracking enabled")

    if app_settings.smtp_verify_on_startup:
        await verify_mail_transport(app)

    logger.info("Application startup complete")

    yield

    logger.info(f"Shutting down {app_settings.app_name}...")
    await app.state.rate_limiter.close()
    logger.info("Rate limiter closed")


# =============================================================================
# Exception Handlers
# =============================================================================


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions with the ``{ok, error}`` envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or non-string field values."""
    logger.info(f"Invalid request body on {request.url.path} ({len(exc.errors())} errors)")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"ok": False, "error": "Invalid request body."},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without exposing internals."""
    logger.exception(f"Unexpected error: {exc}")

    capture_exception(
        exc,
        extra={
            "request_method": request.method,
            "request_path": request.url.path,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"ok": False, "error": "Internal server error"},
    )


# =============================================================================
# Application Factory
# =============================================================================


def create_app(
    app_settings: Optional[Settings] = None,
    mailer: Optional[MailTransport] = None,
) -> FastAPI:
    """
    Application factory.

    Mail configuration is resolved here, once, and shared read-only by
    every request through ``app.state``.
    """
    app_settings = app_settings or settings
    mail_config = resolve_mail_config(app_settings)

    app = FastAPI(
        title=app_settings.app_name,
        description="Contact form relay and resume download notifications for a portfolio site.",
        version=app_settings.app_version,
        docs_url="/docs" if app_settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if app_settings.debug else None,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.mail_config = mail_config
    app.state.mailer = mailer or SMTPMailer(mail_config)
    app.state.rate_limiter = build_rate_limiter(app_settings)
    app.state.fallback_rate_limiter = InMemoryRateLimiter()

    # Middleware: the last one added runs first
    if app_settings.rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=app_settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.allowed_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(health.router)
    app.include_router(contact.router)
    app.include_router(resume.router)

    # Mounted last so API routes win over same-named files
    static_dir = Path(app_settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.warning(f"Static directory {static_dir} not found, static files disabled")

    return app


app = create_app()


# For running with uvicorn directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )
