"""
Password-based protection of private keys at rest.

Layout of a sealed blob, base64-encoded for storage:
salt (16 bytes) || iv (12 bytes) || AES-256-GCM ciphertext with tag.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from pydantic import ValidationError

from easye2ee.common.config import pbkdf2_iterations
from easye2ee.common.crypto import CryptoUtils
from easye2ee.common.exceptions import (
    EntropyFailure,
    KeyFormatError,
    WrongPasswordOrCorruption,
)
from easye2ee.common.models import PrivateKeyModel
from easye2ee.crypto.keys import PrivateKey, parse_private_key

logger = logging.getLogger(__name__)

SALT_SIZE = 16
IV_SIZE = 12
TAG_SIZE = 16


@dataclass(frozen=True)
class ProtectedPrivateKeyBlob:
    salt: bytes
    iv: bytes
    ciphertext: bytes

    def encode(self) -> str:
        return CryptoUtils.b64encode(self.salt + self.iv + self.ciphertext)

    @classmethod
    def decode(cls, data: str) -> ProtectedPrivateKeyBlob:
        try:
            raw = CryptoUtils.b64decode(data)
        except ValueError as err:
            msg = "sealed key is not valid base64"
            raise WrongPasswordOrCorruption(msg) from err
        if len(raw) < SALT_SIZE + IV_SIZE + TAG_SIZE:
            msg = "sealed key is truncated"
            raise WrongPasswordOrCorruption(msg)
        return cls(
            salt=raw[:SALT_SIZE],
            iv=raw[SALT_SIZE : SALT_SIZE + IV_SIZE],
            ciphertext=raw[SALT_SIZE + IV_SIZE :],
        )


def _iterations(iterations: int | None) -> int:
    return iterations if iterations is not None else pbkdf2_iterations()


def seal_private_key(
    private_key: PrivateKey, password: str, iterations: int | None = None
) -> ProtectedPrivateKeyBlob:
    """Encrypt private_key under a key derived from password."""
    try:
        salt = os.urandom(SALT_SIZE)
        iv = os.urandom(IV_SIZE)
    except (OSError, NotImplementedError) as err:
        msg = "secure random source unavailable"
        raise EntropyFailure(msg) from err

    wrapping_key = CryptoUtils.derive_wrapping_key(
        password, salt, _iterations(iterations)
    )
    serialized = private_key.to_model().model_dump_json().encode("utf-8")
    ciphertext = AESGCM(wrapping_key).encrypt(iv, serialized, None)
    logger.debug("Private key sealed")
    return ProtectedPrivateKeyBlob(salt=salt, iv=iv, ciphertext=ciphertext)


def unseal_private_key(
    blob: ProtectedPrivateKeyBlob | str,
    password: str,
    iterations: int | None = None,
) -> PrivateKey:
    """Recover the private key; a wrong password fails authentication."""
    if isinstance(blob, str):
        blob = ProtectedPrivateKeyBlob.decode(blob)

    wrapping_key = CryptoUtils.derive_wrapping_key(
        password, blob.salt, _iterations(iterations)
    )
    try:
        serialized = AESGCM(wrapping_key).decrypt(blob.iv, blob.ciphertext, None)
    except InvalidTag as err:
        msg = "wrong password or corrupted key blob"
        raise WrongPasswordOrCorruption(msg) from err

    try:
        return parse_private_key(PrivateKeyModel.model_validate_json(serialized))
    except (ValidationError, KeyFormatError) as err:
        msg = "sealed key holds no valid private key"
        raise WrongPasswordOrCorruption(msg) from err
