"""Common symmetric key-derivation utilities.
"""

from __future__ import annotations

import base64

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

MESSAGE_KEY_INFO = b"easye2ee:bulk"


class CryptoUtils:
    """Utility class for symmetric cryptographic operations."""

    @staticmethod
    def derive_message_key(sender_key: bytes, length: int = 32) -> bytes:
        """Derive the bulk AEAD key from raw sender-key bytes."""
        return HKDF(
            algorithm=hashes.SHA256(),
            length=length,
            salt=None,
            info=MESSAGE_KEY_INFO,
        ).derive(sender_key)

    @staticmethod
    def derive_wrapping_key(
        password: str, salt: bytes, iterations: int, length: int = 32
    ) -> bytes:
        """Derive a key-sealing key from a password with PBKDF2-HMAC-SHA256."""
        return PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=length,
            salt=salt,
            iterations=iterations,
        ).derive(password.encode("utf-8"))

    @staticmethod
    def b64encode(data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")

    @staticmethod
    def b64decode(data: str) -> bytes:
        """Strict base64 decoding; raises binascii.Error on bad input."""
        return base64.b64decode(data.encode("ascii"), validate=True)
