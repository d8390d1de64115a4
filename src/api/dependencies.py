"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from datetime import timedelta

from fastapi import Depends, Header, Request

from src.adapters.auth import BcryptSecretVerifier, SharedSecretVerifier
from src.adapters.smtp import ConsoleEmailSender, SmtpEmailSender
from src.config.settings import Settings, get_settings
from src.domain.admin import AdminService
from src.domain.otp import OtpService
from src.domain.ports import CredentialVerifier, EmailSender, Store
from src.domain.registration import RegistrationService

# Module-level singleton - ConsoleEmailSender is stateless
_console_sender = ConsoleEmailSender()


def get_store(request: Request) -> Store:
    """
    Get the store from app state.

    The store is built once during app lifespan startup and stored in app.state.
    """
    return request.app.state.store


def get_email_sender(settings: Settings = Depends(get_settings)) -> EmailSender:
    """Get the email sender selected by settings."""
    if settings.email_backend == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            sender=settings.smtp_sender or None,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout,
        )
    return _console_sender


def get_credential_verifier(settings: Settings = Depends(get_settings)) -> CredentialVerifier:
    """bcrypt hash when configured, plain shared secret otherwise."""
    if settings.admin_password_hash:
        return BcryptSecretVerifier(settings.admin_password_hash)
    return SharedSecretVerifier(settings.admin_password)


def get_otp_service(
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> OtpService:
    return OtpService(store=store, ttl=timedelta(seconds=settings.otp_ttl_seconds))


def get_registration_service(
    store: Store = Depends(get_store),
    otp: OtpService = Depends(get_otp_service),
    email_sender: EmailSender = Depends(get_email_sender),
    settings: Settings = Depends(get_settings),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the store, OTP service and email sender for the domain service.
    """
    return RegistrationService(
        store=store,
        otp=otp,
        email_sender=email_sender,
        otp_subject=settings.otp_subject,
        welcome_subject=settings.welcome_subject,
    )


def get_admin_service(
    store: Store = Depends(get_store),
    email_sender: EmailSender = Depends(get_email_sender),
    credentials: CredentialVerifier = Depends(get_credential_verifier),
    settings: Settings = Depends(get_settings),
) -> AdminService:
    return AdminService(
        store=store,
        email_sender=email_sender,
        credentials=credentials,
        message_subject=settings.admin_message_subject,
        max_workers=settings.notify_max_workers,
    )


def get_admin_secret(
    x_admin_secret: str | None = Header(default=None),
) -> str | None:
    """Admin secret from the X-Admin-Secret header, if sent."""
    return x_admin_secret
