"""
Domain exceptions - Semantic error types for registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each exception carries a machine-readable ``kind`` that the API
layer reports alongside the message.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    kind = "error"


class ValidationError(RegistrationError):
    """Input is missing or malformed."""

    kind = "validation"

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"Invalid {field}")


class ConflictError(RegistrationError):
    """Email is already registered."""

    kind = "conflict"


class AuthError(RegistrationError):
    """Admin secret rejected."""

    kind = "auth"


class NotFoundError(RegistrationError):
    """No pending registration or no matching user."""

    kind = "not_found"


class ExpiredError(RegistrationError):
    """OTP is past its time-to-live."""

    kind = "expired"


class OtpMismatchError(RegistrationError):
    """Submitted OTP does not match the issued one."""

    kind = "otp_mismatch"


class DeliveryError(RegistrationError):
    """Email dispatch failed."""

    kind = "delivery"


class InfrastructureError(RegistrationError):
    """Storage read or write failed."""

    kind = "infrastructure"
