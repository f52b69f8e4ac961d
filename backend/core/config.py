"""
Portfolio Contact API Configuration
Central configuration management using Pydantic Settings
"""
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application =====
    app_name: str = "Portfolio Contact API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    port: int = 8080

    # ===== CORS Configuration =====
    # Allowed origins for CORS (comma-separated list)
    allow_origin: str = ""

    # ===== SMTP Relay =====
    smtp_host: Optional[str] = None
    smtp_port: int = 465  # 465 = implicit TLS, anything else = STARTTLS when offered
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    smtp_timeout: float = 30.0
    smtp_verify_on_startup: bool = True

    # ===== Email =====
    # Both fall back to smtp_user when unset
    from_email: Optional[str] = None
    to_email: Optional[str] = None
    contact_subject_prefix: str = "Portfolio Contact: "

    # ===== Static Files =====
    static_dir: str = "public"
    resume_filename: str = "resume.pdf"

    # ===== Request Limits =====
    max_body_bytes: int = 100 * 1024

    # ===== Rate Limiting =====
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 20
    rate_limit_window: int = 60  # seconds, fixed window
    # Counters are kept in memory unless a Redis URL is configured
    redis_url: Optional[str] = None

    # ===== Sentry Error Tracking =====
    sentry_dsn: Optional[str] = None
    sentry_environment: Optional[str] = None  # Falls back to environment if not set
    sentry_traces_sample_rate: float = 0.0

    @property
    def allowed_origins(self) -> list[str]:
        """Parse the comma-separated origin allow-list."""
        return [origin.strip() for origin in self.allow_origin.split(",") if origin.strip()]


class MailConfig(BaseModel):
    """
    Resolved, read-only outbound mail configuration.

    Built once at startup by ``resolve_mail_config`` and shared by every
    request handler.
    """

    model_config = ConfigDict(frozen=True)

    host: Optional[str] = None
    port: int = 465
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: float = 30.0
    sender: Optional[str] = None
    recipient: Optional[str] = None
    subject_prefix: str = "Portfolio Contact: "

    @property
    def use_implicit_tls(self) -> bool:
        return self.port == 465

    @property
    def is_configured(self) -> bool:
        """Check that a relay host and both addresses are known."""
        return bool(self.host and self.sender and self.recipient)


def resolve_mail_config(settings: Settings) -> MailConfig:
    """
    Resolve mail settings into an immutable MailConfig.

    Sender and recipient default to the SMTP account when not set explicitly.
    """
    return MailConfig(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_pass,
        timeout=settings.smtp_timeout,
        sender=settings.from_email or settings.smtp_user,
        recipient=settings.to_email or settings.smtp_user,
        subject_prefix=settings.contact_subject_prefix,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
