"""
Custom exceptions for the encryption engine.
"""

from __future__ import annotations


class E2EEError(Exception):
    """Base class for every failure raised by the engine."""


class EncodingOverflow(E2EEError):
    """Encoded plaintext does not fit below the modulus."""


class DecryptionFailure(E2EEError):
    """Ciphertext could not be authenticated or decoded."""


class KeyFormatError(E2EEError):
    """Key or ciphertext components are missing or malformed."""


class WrongPasswordOrCorruption(E2EEError):
    """Sealed private key failed authentication."""


class EntropyFailure(E2EEError):
    """The operating system could not supply random bytes."""


class PrimalitySearchExhausted(E2EEError):
    """Prime search gave up after its attempt budget."""


class KeyGenerationError(E2EEError):
    """Background key generation ended without a result."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class SessionClosed(E2EEError):
    """The session was logged out and holds no secrets anymore."""


class UnknownConversation(E2EEError):
    """No sender key is held for the conversation."""
