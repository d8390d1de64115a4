"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory Store fake
- A recording EmailSender fake
- A controllable clock
- Domain services wired to the fakes
"""

import pytest

from src.domain.admin import AdminService
from src.domain.otp import OtpService
from src.domain.registration import RegistrationService
from tests.fakes import AcceptSecret, FakeClock, InMemoryStore, RecordingSender


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def otp_service(store: InMemoryStore, clock: FakeClock) -> OtpService:
    return OtpService(store=store, clock=clock)


@pytest.fixture
def registration_service(
    store: InMemoryStore, otp_service: OtpService, sender: RecordingSender
) -> RegistrationService:
    return RegistrationService(store=store, otp=otp_service, email_sender=sender)


@pytest.fixture
def admin_service(store: InMemoryStore, sender: RecordingSender) -> AdminService:
    return AdminService(store=store, email_sender=sender, credentials=AcceptSecret())
