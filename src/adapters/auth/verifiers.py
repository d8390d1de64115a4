"""
Admin credential verifiers - Implement CredentialVerifier protocol.

SharedSecretVerifier compares against a configured plain secret;
BcryptSecretVerifier checks against a bcrypt hash so the secret
itself never has to be stored in configuration.
"""

import logging
import secrets

import bcrypt

logger = logging.getLogger(__name__)


class SharedSecretVerifier:
    """Exact match against a static shared secret (constant-time)."""

    def __init__(self, secret: str) -> None:
        self._secret = secret

    def verify(self, secret: str) -> bool:
        return secrets.compare_digest(self._secret.encode(), secret.encode())


class BcryptSecretVerifier:
    """Checks the secret against a bcrypt hash."""

    def __init__(self, password_hash: str) -> None:
        self._hash = password_hash.encode()

    def verify(self, secret: str) -> bool:
        try:
            return bcrypt.checkpw(secret.encode(), self._hash)
        except ValueError:
            logger.error("Configured admin password hash is not a valid bcrypt hash")
            return False
