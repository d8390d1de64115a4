"""
Admin domain service - User listing, clearing and bulk notification.

Every admin operation re-reads the user collection from the store;
nothing is cached between calls.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum

from .exceptions import AuthError, NotFoundError, ValidationError
from .models import User
from .ports import Collection, CredentialVerifier, EmailSender, Store

logger = logging.getLogger(__name__)

ADMIN_MESSAGE_SUBJECT = "Message from Admin"


class NotifyStatus(Enum):
    """Overall outcome of a bulk notification."""

    SENT = "sent"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class Recipient:
    """A resolved notification target."""

    user_id: str
    email: str


@dataclass
class NotifyResult:
    """Per-recipient delivery outcome of a bulk notification."""

    sent: list[Recipient] = field(default_factory=list)
    failed: list[Recipient] = field(default_factory=list)

    @property
    def status(self) -> NotifyStatus:
        if not self.failed:
            return NotifyStatus.SENT
        if self.sent:
            return NotifyStatus.PARTIAL
        return NotifyStatus.FAILED


@dataclass
class AdminService:
    """Domain service behind the admin surface."""

    store: Store
    email_sender: EmailSender
    credentials: CredentialVerifier
    message_subject: str = ADMIN_MESSAGE_SUBJECT
    max_workers: int = 8

    def authenticate(self, secret: str | None) -> None:
        """
        Check the admin secret.

        Raises:
            AuthError: If the secret is missing or rejected
        """
        if not secret or not self.credentials.verify(secret):
            raise AuthError("Invalid admin password")

    def list_users(self, city: str | None = None, search: str | None = None) -> list[User]:
        """
        Return registered users, oldest first.

        Args:
            city: Keep only users from this city (case-insensitive)
            search: Keep only users whose name, email or mobile contains this text
        """
        users = [User.from_record(r) for r in self.store.list_records(Collection.USERS)]

        if city:
            wanted = city.strip().lower()
            users = [u for u in users if u.city.lower() == wanted]
        if search:
            needle = search.strip().lower()
            users = [
                u
                for u in users
                if needle in u.name.lower() or needle in u.email.lower() or needle in u.mobile
            ]

        return sorted(users, key=lambda u: u.registered_at)

    def clear_users(self, secret: str | None) -> None:
        """Authenticate, then remove every registered user."""
        self.authenticate(secret)
        self.store.clear(Collection.USERS)
        logger.info("All users cleared")

    def notify(self, user_ids: list[str] | set[str], message: str) -> NotifyResult:
        """
        Email a message to each of the given users.

        Unknown ids are dropped without being reported. Deliveries run
        concurrently and independently; one failure does not affect others.

        Raises:
            ValidationError: If the message or the id set is empty
            NotFoundError: If none of the ids resolve to a user
        """
        if not message or not message.strip():
            raise ValidationError("message", "Message is required")
        if not user_ids:
            raise ValidationError("userIds", "At least one user must be selected")

        wanted = set(user_ids)
        users = [
            User.from_record(r)
            for r in self.store.list_records(Collection.USERS)
            if r.get("id") in wanted
        ]
        if not users:
            logger.info("No valid users found for ids: %s", sorted(wanted))
            raise NotFoundError("No valid users found")

        with ThreadPoolExecutor(max_workers=max(1, min(self.max_workers, len(users)))) as executor:
            outcomes = list(executor.map(lambda u: self._deliver(u, message), users))

        result = NotifyResult()
        for user, delivered in zip(users, outcomes, strict=True):
            recipient = Recipient(user_id=user.id, email=user.email)
            (result.sent if delivered else result.failed).append(recipient)

        if result.failed:
            logger.error(
                "Failed to send messages to: %s", ", ".join(r.email for r in result.failed)
            )
        return result

    def _deliver(self, user: User, message: str) -> bool:
        body = f"Dear {user.name},\n\n{message}\n\nBest regards,\nAdmin"
        try:
            return self.email_sender.send(user.email, self.message_subject, body)
        except Exception:
            logger.exception("Failed to send message to %s", user.email)
            return False
