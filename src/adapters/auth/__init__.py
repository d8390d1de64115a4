"""Credential adapters - Admin secret verifiers."""

from .verifiers import BcryptSecretVerifier, SharedSecretVerifier

__all__ = ["BcryptSecretVerifier", "SharedSecretVerifier"]
