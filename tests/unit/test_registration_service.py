"""
Unit tests for RegistrationService domain logic.

Tests the two-phase workflow against the in-memory store:
- Input validation
- Duplicate email rejection
- OTP issue, delivery and rollback
- Confirmation outcomes and promotion to a User
- Welcome email failures never undo a registration
"""

import re
from datetime import timedelta
from unittest.mock import Mock

import pytest

from src.domain.exceptions import (
    ConflictError,
    DeliveryError,
    ExpiredError,
    NotFoundError,
    OtpMismatchError,
    ValidationError,
)
from src.domain.otp import OtpService
from src.domain.ports import Collection
from src.domain.registration import RegistrationService
from tests.fakes import FakeClock, InMemoryStore, RecordingSender

JANE = ("Jane", "jane@x.com", "9876543210", "Pune")


def issued_code(sender: RecordingSender, email: str) -> str:
    """Extract the last OTP emailed to an address."""
    body = sender.bodies_to(email)[-1]
    match = re.search(r"is: (\d{6})", body)
    assert match, body
    return match.group(1)


class TestValidation:
    """Tests for registrant data validation."""

    @pytest.mark.parametrize("field", ["name", "email", "mobile", "city"])
    def test_empty_field_rejected(
        self, registration_service: RegistrationService, field: str
    ) -> None:
        """Every field is required; the error names the missing field."""
        values = dict(zip(["name", "email", "mobile", "city"], JANE, strict=True))
        values[field] = "   "

        with pytest.raises(ValidationError) as exc_info:
            registration_service.request_registration(**values)

        assert exc_info.value.field == field

    @pytest.mark.parametrize("email", ["jane", "jane@x", "jane@@x.com", "ja ne@x.com", "@x.com"])
    def test_invalid_email_rejected(
        self, registration_service: RegistrationService, email: str
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            registration_service.request_registration("Jane", email, "9876543210", "Pune")
        assert exc_info.value.field == "email"

    @pytest.mark.parametrize("mobile", ["987654321", "98765432101", "98765abcde", "+919876543"])
    def test_invalid_mobile_rejected(
        self, registration_service: RegistrationService, mobile: str
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            registration_service.request_registration("Jane", "jane@x.com", mobile, "Pune")
        assert exc_info.value.field == "mobile"

    def test_nine_digit_mobile_example(
        self, registration_service: RegistrationService, sender: RecordingSender
    ) -> None:
        """Valid data sends an OTP; the same data with a 9-digit mobile is rejected."""
        registration_service.request_registration(*JANE)
        assert len(sender.sent) == 1

        with pytest.raises(ValidationError) as exc_info:
            registration_service.request_registration("Jane", "jane@x.com", "987654321", "Pune")
        assert exc_info.value.field == "mobile"

    def test_invalid_request_sends_nothing(
        self, registration_service: RegistrationService, sender: RecordingSender
    ) -> None:
        with pytest.raises(ValidationError):
            registration_service.request_registration("Jane", "bad", "9876543210", "Pune")
        assert sender.sent == []


class TestRequestRegistration:
    """Tests for the first phase (OTP issue)."""

    def test_stores_pending_and_sends_code(
        self,
        registration_service: RegistrationService,
        store: InMemoryStore,
        sender: RecordingSender,
    ) -> None:
        pending = registration_service.request_registration(*JANE)

        assert pending.email == "jane@x.com"
        assert issued_code(sender, "jane@x.com") == pending.otp
        record = store.get(Collection.PENDING_REGISTRATIONS, "jane@x.com")
        assert record["otp"] == pending.otp

    def test_email_normalized(
        self, registration_service: RegistrationService, store: InMemoryStore
    ) -> None:
        """Email is stripped and lowercased before use as the pending key."""
        registration_service.request_registration("Jane", "  Jane@X.COM ", "9876543210", "Pune")
        assert store.get(Collection.PENDING_REGISTRATIONS, "jane@x.com") is not None

    def test_otp_email_mentions_expiry(
        self, registration_service: RegistrationService, sender: RecordingSender
    ) -> None:
        registration_service.request_registration(*JANE)
        to, subject, body = sender.sent[0]
        assert subject == "Your OTP for Registration"
        assert "10 minutes" in body

    def test_resubmission_overwrites_code(
        self,
        registration_service: RegistrationService,
        store: InMemoryStore,
        sender: RecordingSender,
    ) -> None:
        """Two requests leave exactly one pending record bearing the second code."""
        registration_service.request_registration(*JANE)
        second = registration_service.request_registration(*JANE)

        records = store.list_records(Collection.PENDING_REGISTRATIONS)
        assert len(records) == 1
        assert records[0]["otp"] == second.otp
        assert issued_code(sender, "jane@x.com") == second.otp

    def test_already_registered_rejected(
        self, registration_service: RegistrationService, sender: RecordingSender
    ) -> None:
        """A confirmed email never gets a new OTP."""
        registration_service.request_registration(*JANE)
        registration_service.confirm_registration("jane@x.com", issued_code(sender, "jane@x.com"))
        sent_before = len(sender.sent)

        with pytest.raises(ConflictError):
            registration_service.request_registration("Other", "JANE@x.com", "1234567890", "Goa")

        otp_mails = [s for s in sender.sent[sent_before:] if "OTP" in s[1]]
        assert otp_mails == []

    def test_delivery_failure_rolls_back(
        self, store: InMemoryStore, otp_service: OtpService
    ) -> None:
        """A failed send removes the pending record and raises DeliveryError."""
        service = RegistrationService(
            store=store, otp=otp_service, email_sender=RecordingSender(failing={"jane@x.com"})
        )

        with pytest.raises(DeliveryError):
            service.request_registration(*JANE)

        assert store.get(Collection.PENDING_REGISTRATIONS, "jane@x.com") is None

    def test_sender_exception_rolls_back(
        self, store: InMemoryStore, otp_service: OtpService
    ) -> None:
        """A sender that raises is reported as DeliveryError and leaves no pending record."""
        sender = Mock()
        sender.send.side_effect = RuntimeError("SMTP connection reset")
        service = RegistrationService(store=store, otp=otp_service, email_sender=sender)

        with pytest.raises(DeliveryError) as exc_info:
            service.request_registration(*JANE)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert store.list_records(Collection.PENDING_REGISTRATIONS) == []

    def test_delivery_failure_allows_retry(
        self, store: InMemoryStore, otp_service: OtpService
    ) -> None:
        flaky = RecordingSender(failing={"jane@x.com"})
        service = RegistrationService(store=store, otp=otp_service, email_sender=flaky)
        with pytest.raises(DeliveryError):
            service.request_registration(*JANE)

        flaky.failing.clear()
        pending = service.request_registration(*JANE)
        assert store.get(Collection.PENDING_REGISTRATIONS, "jane@x.com")["otp"] == pending.otp


class TestConfirmRegistration:
    """Tests for the second phase (confirmation)."""

    def test_happy_path_creates_one_user(
        self,
        registration_service: RegistrationService,
        store: InMemoryStore,
        sender: RecordingSender,
        clock: FakeClock,
    ) -> None:
        """Correct code yields exactly one User and removes the pending record."""
        registration_service.request_registration(*JANE)

        user = registration_service.confirm_registration(
            "jane@x.com", issued_code(sender, "jane@x.com")
        )

        users = store.list_records(Collection.USERS)
        assert len(users) == 1
        assert users[0]["email"] == "jane@x.com"
        assert users[0]["id"] == user.id
        assert user.registered_at == clock.now
        assert (user.name, user.mobile, user.city) == ("Jane", "9876543210", "Pune")
        assert store.get(Collection.PENDING_REGISTRATIONS, "jane@x.com") is None

    def test_user_ids_are_unique(
        self, registration_service: RegistrationService, sender: RecordingSender
    ) -> None:
        ids = set()
        for i in range(3):
            email = f"user{i}@x.com"
            registration_service.request_registration("U", email, "9876543210", "Pune")
            ids.add(registration_service.confirm_registration(email, issued_code(sender, email)).id)
        assert len(ids) == 3

    def test_welcome_email_sent(
        self, registration_service: RegistrationService, sender: RecordingSender
    ) -> None:
        registration_service.request_registration(*JANE)
        registration_service.confirm_registration("jane@x.com", issued_code(sender, "jane@x.com"))

        to, subject, body = sender.sent[-1]
        assert subject == "Welcome to Our Platform"
        assert body.startswith("Dear Jane,")

    def test_no_pending_is_not_found(self, registration_service: RegistrationService) -> None:
        with pytest.raises(NotFoundError):
            registration_service.confirm_registration("jane@x.com", "123456")

    def test_wrong_code_twice_leaves_pending_unchanged(
        self, registration_service: RegistrationService, store: InMemoryStore
    ) -> None:
        """Mismatch is repeatable and never modifies the pending record."""
        pending = registration_service.request_registration(*JANE)
        wrong = "100000" if pending.otp != "100000" else "100001"
        before = store.get(Collection.PENDING_REGISTRATIONS, "jane@x.com")

        for _ in range(2):
            with pytest.raises(OtpMismatchError):
                registration_service.confirm_registration("jane@x.com", wrong)

        assert store.get(Collection.PENDING_REGISTRATIONS, "jane@x.com") == before
        assert store.list_records(Collection.USERS) == []

    def test_retry_after_mismatch_succeeds(
        self, registration_service: RegistrationService, sender: RecordingSender
    ) -> None:
        pending = registration_service.request_registration(*JANE)
        wrong = "100000" if pending.otp != "100000" else "100001"
        with pytest.raises(OtpMismatchError):
            registration_service.confirm_registration("jane@x.com", wrong)

        user = registration_service.confirm_registration("jane@x.com", pending.otp)
        assert user.email == "jane@x.com"

    def test_expired_code_rejected_and_removed(
        self,
        registration_service: RegistrationService,
        store: InMemoryStore,
        clock: FakeClock,
    ) -> None:
        """Past expiry, even the correct code yields Expired and drops the pending record."""
        pending = registration_service.request_registration(*JANE)
        clock.advance(minutes=11)

        with pytest.raises(ExpiredError):
            registration_service.confirm_registration("jane@x.com", pending.otp)

        assert store.get(Collection.PENDING_REGISTRATIONS, "jane@x.com") is None
        assert store.list_records(Collection.USERS) == []

    def test_expired_then_not_found(
        self, registration_service: RegistrationService, clock: FakeClock
    ) -> None:
        """After expiry the registration must restart."""
        pending = registration_service.request_registration(*JANE)
        clock.advance(minutes=11)
        with pytest.raises(ExpiredError):
            registration_service.confirm_registration("jane@x.com", pending.otp)

        with pytest.raises(NotFoundError):
            registration_service.confirm_registration("jane@x.com", pending.otp)

    def test_old_code_invalid_after_resubmission(
        self, registration_service: RegistrationService
    ) -> None:
        first = registration_service.request_registration(*JANE)
        second = registration_service.request_registration(*JANE)
        if first.otp == second.otp:
            pytest.skip("codes collided")

        with pytest.raises(OtpMismatchError):
            registration_service.confirm_registration("jane@x.com", first.otp)

    def test_confirm_normalizes_email(
        self, registration_service: RegistrationService, sender: RecordingSender
    ) -> None:
        registration_service.request_registration(*JANE)
        user = registration_service.confirm_registration(
            " JANE@x.com ", issued_code(sender, "jane@x.com")
        )
        assert user.email == "jane@x.com"


class TestWelcomeFailure:
    """Welcome email problems never undo a confirmed registration."""

    def test_welcome_send_failure_swallowed(
        self, store: InMemoryStore, otp_service: OtpService
    ) -> None:
        sender = Mock()
        sender.send.side_effect = [True, False]
        service = RegistrationService(store=store, otp=otp_service, email_sender=sender)

        pending = service.request_registration(*JANE)
        user = service.confirm_registration("jane@x.com", pending.otp)

        assert store.get(Collection.USERS, user.id) is not None

    def test_welcome_send_exception_swallowed(
        self, store: InMemoryStore, otp_service: OtpService, caplog: pytest.LogCaptureFixture
    ) -> None:
        sender = Mock()
        sender.send.side_effect = [True, RuntimeError("smtp down")]
        service = RegistrationService(store=store, otp=otp_service, email_sender=sender)

        pending = service.request_registration(*JANE)
        user = service.confirm_registration("jane@x.com", pending.otp)

        assert store.get(Collection.USERS, user.id) is not None
        assert "Error sending welcome email" in caplog.text


class TestTtl:
    def test_ttl_seconds_follows_otp_service(
        self, store: InMemoryStore, sender: RecordingSender
    ) -> None:
        otp = OtpService(store=store, ttl=timedelta(minutes=5))
        service = RegistrationService(store=store, otp=otp, email_sender=sender)

        assert service.otp_ttl_seconds == 300
        service.request_registration(*JANE)
        assert "5 minutes" in sender.sent[0][2]
