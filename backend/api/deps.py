"""
FastAPI Dependencies
Shared dependencies for configuration and mail delivery.

Everything here reads from ``app.state``, which the application factory
fills once at startup.
"""
from typing import Annotated

from fastapi import Depends, Request

from backend.core.config import MailConfig, Settings
from backend.services.contact import ContactService
from backend.services.mailer import MailTransport
from backend.services.resume import ResumeNotifier


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mail_config(request: Request) -> MailConfig:
    return request.app.state.mail_config


def get_mail_transport(request: Request) -> MailTransport:
    return request.app.state.mailer


def get_contact_service(
    config: Annotated[MailConfig, Depends(get_mail_config)],
    transport: Annotated[MailTransport, Depends(get_mail_transport)],
) -> ContactService:
    return ContactService(config, transport)


def get_resume_notifier(
    settings: Annotated[Settings, Depends(get_app_settings)],
    config: Annotated[MailConfig, Depends(get_mail_config)],
    transport: Annotated[MailTransport, Depends(get_mail_transport)],
) -> ResumeNotifier:
    return ResumeNotifier(config, transport, filename=settings.resume_filename)
