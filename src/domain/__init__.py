"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for OTP-gated user
registration. It defines its own port interfaces for infrastructure
abstraction, so storage, email and credential checks are all injected.
"""

from .admin import AdminService, NotifyResult, NotifyStatus, Recipient
from .exceptions import (
    AuthError,
    ConflictError,
    DeliveryError,
    ExpiredError,
    InfrastructureError,
    NotFoundError,
    OtpMismatchError,
    RegistrationError,
    ValidationError,
)
from .models import PendingRegistration, RegistrationDetails, User
from .otp import OtpService
from .ports import Collection, CredentialVerifier, EmailSender, Store, VerifyResult
from .registration import RegistrationService

__all__ = [
    "AdminService",
    "AuthError",
    "Collection",
    "ConflictError",
    "CredentialVerifier",
    "DeliveryError",
    "EmailSender",
    "ExpiredError",
    "InfrastructureError",
    "NotFoundError",
    "NotifyResult",
    "NotifyStatus",
    "OtpMismatchError",
    "OtpService",
    "PendingRegistration",
    "Recipient",
    "RegistrationDetails",
    "RegistrationError",
    "RegistrationService",
    "Store",
    "User",
    "ValidationError",
    "VerifyResult",
]
