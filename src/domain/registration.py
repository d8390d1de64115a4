"""
Registration domain service - OTP-gated registration workflow.

This module contains the core business logic for user registration:
a registrant is only persisted as a User once they prove control of
their email address with a one-time code.

Registration States
===================

- NoPending: no pending registration exists for the email
- PendingIssued: a code has been issued and is waiting for confirmation
- Confirmed: terminal, the pending registration became a User
- PendingExpired: terminal failure, registration must restart

Transitions:
    NoPending     -> PendingIssued   (request without code, input valid)
    PendingIssued -> Confirmed       (correct, unexpired code)
    PendingIssued -> PendingIssued   (wrong code, retry allowed; or a new request
                                      overwriting the previous code)
    PendingIssued -> PendingExpired  (code submitted after expiry)

Note: nothing here locks the pending record. Two concurrent confirmations
for the same email can both observe a valid code before either deletes it.
"""

import logging
import re
import uuid
from dataclasses import dataclass

from .exceptions import (
    ConflictError,
    DeliveryError,
    ExpiredError,
    NotFoundError,
    OtpMismatchError,
    ValidationError,
)
from .models import PendingRegistration, RegistrationDetails, User
from .otp import OtpService
from .ports import Collection, EmailSender, Store, VerifyResult

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MOBILE_PATTERN = re.compile(r"^[0-9]{10}$")

OTP_SUBJECT = "Your OTP for Registration"
WELCOME_SUBJECT = "Welcome to Our Platform"


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the two-phase flow: validation, code issue and
    delivery, then confirmation and promotion to a User.
    """

    store: Store
    otp: OtpService
    email_sender: EmailSender
    otp_subject: str = OTP_SUBJECT
    welcome_subject: str = WELCOME_SUBJECT

    @property
    def otp_ttl_seconds(self) -> int:
        return int(self.otp.ttl.total_seconds())

    def request_registration(
        self, name: str, email: str, mobile: str, city: str
    ) -> PendingRegistration:
        """
        Validate registrant data, issue a code and email it.

        Args:
            name: Registrant name
            email: Registrant email (will be normalized)
            mobile: 10-digit mobile number
            city: Registrant city

        Returns:
            The stored pending registration

        Raises:
            ValidationError: If a field is empty or malformed
            ConflictError: If a User with this email already exists
            DeliveryError: If the code could not be emailed
        """
        details = self._validate(name, email, mobile, city)

        if self.find_user_by_email(details.email) is not None:
            raise ConflictError(f"Email already registered: {details.email}")

        code = self.otp.issue()
        pending = self.otp.bind(details, code)

        minutes = int(self.otp.ttl.total_seconds() // 60)
        body = (
            f"Your OTP for registration is: {code}. "
            f"This OTP will expire in {minutes} minutes."
        )
        try:
            delivered = self.email_sender.send(details.email, self.otp_subject, body)
        except Exception as e:
            logger.exception("Error sending OTP email to %s", details.email)
            self.otp.discard(details.email)
            raise DeliveryError("Failed to send OTP. Please try again.") from e
        if not delivered:
            # Roll back so the same email can retry immediately
            self.otp.discard(details.email)
            raise DeliveryError("Failed to send OTP. Please try again.")

        logger.info("OTP issued for %s", details.email)
        return pending

    def confirm_registration(self, email: str, code: str) -> User:
        """
        Confirm a pending registration with its code.

        Raises:
            NotFoundError: No pending registration for the email
            ExpiredError: The code has expired (pending record removed)
            OtpMismatchError: The code is wrong (pending record kept)
        """
        normalized_email = self._normalize_email(email)
        result = self.otp.verify(normalized_email, code)

        if result == VerifyResult.NOT_FOUND:
            raise NotFoundError(
                "No pending registration found. Please start the registration process again."
            )
        if result == VerifyResult.EXPIRED:
            raise ExpiredError("OTP has expired. Please request a new one.")
        if result == VerifyResult.MISMATCH:
            raise OtpMismatchError("Invalid OTP")

        pending = self.otp.lookup(normalized_email)
        if pending is None:
            # Consumed by a concurrent confirmation between verify and lookup
            raise NotFoundError(
                "No pending registration found. Please start the registration process again."
            )

        user = User(
            id=str(uuid.uuid4()),
            name=pending.name,
            email=pending.email,
            mobile=pending.mobile,
            city=pending.city,
            registered_at=self.otp.clock(),
        )
        self.store.put(Collection.USERS, user.id, user.to_record())
        self.otp.discard(normalized_email)
        logger.info("User registered: %s (%s)", user.email, user.id)

        self._send_welcome(user)
        return user

    def find_user_by_email(self, email: str) -> User | None:
        """Return the User registered under an email, if any."""
        for record in self.store.list_records(Collection.USERS):
            if record.get("email", "").lower() == email:
                return User.from_record(record)
        return None

    def _send_welcome(self, user: User) -> None:
        body = (
            f"Dear {user.name},\n\n"
            "Welcome to our platform! We're excited to have you on board.\n\n"
            "Best regards,\nThe Team"
        )
        try:
            delivered = self.email_sender.send(user.email, self.welcome_subject, body)
        except Exception:
            logger.exception("Error sending welcome email to %s", user.email)
            return
        if not delivered:
            logger.warning("Welcome email to %s was not delivered", user.email)

    def _validate(self, name: str, email: str, mobile: str, city: str) -> RegistrationDetails:
        fields = {"name": name, "email": email, "mobile": mobile, "city": city}
        cleaned = {key: (value or "").strip() for key, value in fields.items()}
        for key, value in cleaned.items():
            if not value:
                raise ValidationError(key, "All fields are required")

        if not EMAIL_PATTERN.match(cleaned["email"]):
            raise ValidationError("email", "Invalid email format")
        if not MOBILE_PATTERN.match(cleaned["mobile"]):
            raise ValidationError("mobile", "Mobile number must be 10 digits")

        return RegistrationDetails(
            name=cleaned["name"],
            email=self._normalize_email(cleaned["email"]),
            mobile=cleaned["mobile"],
            city=cleaned["city"],
        )

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()
