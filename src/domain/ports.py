"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from enum import Enum
from typing import Protocol


class Collection(str, Enum):
    """Named record collections owned by the persistence adapter."""

    USERS = "users"
    PENDING_REGISTRATIONS = "pending-registrations"


class VerifyResult(Enum):
    """
    Result of an OTP verification attempt.

    Used by OtpService.verify() to indicate success or specific failure.
    """

    VALID = "valid"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"
    MISMATCH = "mismatch"


class Store(Protocol):
    """
    Port interface for record persistence.

    Records are JSON-compatible dicts. Users are keyed by ``id``,
    pending registrations by ``email``. Every method raises
    InfrastructureError when the backing store cannot be reached
    or its contents cannot be decoded; "not found" is never an error.
    """

    def list_records(self, collection: Collection) -> list[dict]:
        """Return all records of a collection, empty list if none."""
        ...

    def get(self, collection: Collection, key: str) -> dict | None:
        """Return the record stored under key, or None."""
        ...

    def put(self, collection: Collection, key: str, record: dict) -> None:
        """Insert the record, or replace the one stored under the same key."""
        ...

    def delete(self, collection: Collection, key: str) -> None:
        """Remove the record stored under key. No-op if absent."""
        ...

    def clear(self, collection: Collection) -> None:
        """Remove every record of a collection."""
        ...

    def ping(self) -> bool:
        """Return True if the backing store is reachable, else raise InfrastructureError."""
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send(self, to: str, subject: str, body: str) -> bool:
        """
        Deliver a plain-text email.

        Args:
            to: Recipient email address
            subject: Subject line
            body: Plain-text body

        Returns:
            True if the message was handed off, False if delivery failed
        """
        ...


class CredentialVerifier(Protocol):
    """Port interface for admin secret verification."""

    def verify(self, secret: str) -> bool:
        """Return True if the secret grants admin access."""
        ...
