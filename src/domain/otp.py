"""
OTP issuer/verifier - One-time codes bound to pending registrations.

A code is bound to a PendingRegistration keyed by email, with an
absolute expiry. Expiry is evaluated lazily when a code is verified;
nothing sweeps expired records in the background.
"""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from .models import PendingRegistration, RegistrationDetails
from .ports import Collection, Store, VerifyResult

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=10)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class OtpService:
    """Issues 6-digit codes and verifies them against pending registrations."""

    store: Store
    ttl: timedelta = DEFAULT_TTL
    clock: Callable[[], datetime] = field(default=utcnow)

    def issue(self) -> str:
        """
        Generate a 6-digit code in the range 100000-999999.

        Leading zeros are excluded by construction.
        """
        return str(100000 + secrets.randbelow(900000))

    def bind(
        self,
        details: RegistrationDetails,
        code: str,
        ttl: timedelta | None = None,
    ) -> PendingRegistration:
        """
        Store a pending registration carrying the code.

        Overwrites any pending registration for the same email, which
        invalidates its code immediately.
        """
        expires_at = self.clock() + (ttl if ttl is not None else self.ttl)
        pending = PendingRegistration(
            name=details.name,
            email=details.email,
            mobile=details.mobile,
            city=details.city,
            otp=code,
            expires_at=expires_at,
        )
        self.store.put(Collection.PENDING_REGISTRATIONS, pending.key, pending.to_record())
        return pending

    def lookup(self, email: str) -> PendingRegistration | None:
        """Fetch the pending registration for an email, if any."""
        record = self.store.get(Collection.PENDING_REGISTRATIONS, email)
        if record is None:
            return None
        return PendingRegistration.from_record(record)

    def discard(self, email: str) -> None:
        """Delete the pending registration for an email."""
        self.store.delete(Collection.PENDING_REGISTRATIONS, email)

    def verify(self, email: str, code: str) -> VerifyResult:
        """
        Check a submitted code against the pending registration.

        Return values by scenario:
        - NOT_FOUND: no pending registration for the email
        - EXPIRED: expiry has passed; the record is deleted, whatever the code
        - MISMATCH: code differs; the record is kept so the user may retry
        - VALID: code matches; the caller deletes the record once consumed
        """
        pending = self.lookup(email)
        if pending is None:
            return VerifyResult.NOT_FOUND

        if pending.is_expired(self.clock()):
            logger.info("OTP expired for %s", email)
            self.discard(email)
            return VerifyResult.EXPIRED

        if not secrets.compare_digest(pending.otp.encode(), code.strip().encode()):
            return VerifyResult.MISMATCH

        return VerifyResult.VALID
