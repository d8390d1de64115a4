"""
Domain models - Users and pending registrations.

Records are persisted as plain JSON objects with camelCase field
names; ``to_record``/``from_record`` convert between the two forms.
"""

from dataclasses import dataclass
from datetime import datetime, timezone


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with a trailing Z."""
    value = value.astimezone(timezone.utc)
    return value.isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str | int | float) -> datetime:
    """
    Parse a persisted timestamp.

    Accepts ISO-8601 strings (with or without Z) and epoch milliseconds,
    which older documents stored for expiry times.
    """
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class RegistrationDetails:
    """Registrant data submitted with a registration request."""

    name: str
    email: str
    mobile: str
    city: str


@dataclass(frozen=True)
class User:
    """A confirmed registrant."""

    id: str
    name: str
    email: str
    mobile: str
    city: str
    registered_at: datetime
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        # Records written before createdAt existed share the registration time
        if self.created_at is None:
            object.__setattr__(self, "created_at", self.registered_at)

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "mobile": self.mobile,
            "city": self.city,
            "registeredAt": format_timestamp(self.registered_at),
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_record(cls, record: dict) -> "User":
        return cls(
            id=record["id"],
            name=record["name"],
            email=record["email"],
            mobile=record["mobile"],
            city=record["city"],
            registered_at=parse_timestamp(record["registeredAt"]),
            created_at=parse_timestamp(record["createdAt"]) if record.get("createdAt") else None,
        )


@dataclass(frozen=True)
class PendingRegistration:
    """An unconfirmed registration awaiting OTP proof, keyed by email."""

    name: str
    email: str
    mobile: str
    city: str
    otp: str
    expires_at: datetime

    @property
    def key(self) -> str:
        return self.email

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def to_record(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "email": self.email,
            "mobile": self.mobile,
            "city": self.city,
            "otp": self.otp,
            "expiresAt": format_timestamp(self.expires_at),
        }

    @classmethod
    def from_record(cls, record: dict) -> "PendingRegistration":
        return cls(
            name=record["name"],
            email=record["email"],
            mobile=record["mobile"],
            city=record["city"],
            otp=str(record["otp"]),
            expires_at=parse_timestamp(record["expiresAt"]),
        )
