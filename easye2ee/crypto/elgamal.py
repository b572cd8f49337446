"""
ElGamal public-key cryptosystem over a safe-prime field.

Encryption is randomized: every call draws a fresh ephemeral exponent, so
the same plaintext never produces the same ciphertext twice. No integrity
protection is provided; a tampered ciphertext may decrypt to garbage.
"""

from __future__ import annotations

import logging

from easye2ee.common.config import Config
from easye2ee.common.exceptions import (
    DecryptionFailure,
    EncodingOverflow,
    KeyFormatError,
)
from easye2ee.crypto.kernel import (
    find_primitive_root,
    generate_safe_prime,
    modular_exponentiation,
    modular_inverse,
    random_int_between,
)
from easye2ee.crypto.keys import Ciphertext, KeyPair, PrivateKey, PublicKey

logger = logging.getLogger(__name__)

BLOCK_MARKER = b"\x01"


def encode_message(message: str | bytes) -> int:
    """Map message bytes to a big-endian integer.

    Leading NUL bytes have no integer representation, so they are rejected;
    encrypt_chunked keeps them behind its block marker.
    """
    data = message.encode("utf-8") if isinstance(message, str) else message
    if data.startswith(b"\x00"):
        msg = "single-block encoding cannot carry leading NUL bytes"
        raise EncodingOverflow(msg)
    return int.from_bytes(data, "big")


def decode_message(m: int) -> str:
    """Inverse of encode_message for UTF-8 text."""
    data = m.to_bytes((m.bit_length() + 7) // 8, "big")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as err:
        msg = "decrypted block is not valid text"
        raise DecryptionFailure(msg) from err


def max_message_bytes(modulus: int) -> int:
    """Largest byte length that always encodes below modulus."""
    return (modulus.bit_length() - 1) // 8


def block_capacity(modulus: int) -> int:
    """Payload bytes per chunk once the block marker is accounted for."""
    return max_message_bytes(modulus) - len(BLOCK_MARKER)


class ElGamal:
    """ElGamal key generation plus single-block and chunked encryption."""

    def __init__(
        self,
        bits: int | None = None,
        rounds: int | None = None,
        max_attempts: int | None = None,
        config: Config | None = None,
    ):
        config = config or Config()
        self.bits = bits or config.KEY_BITS
        self.rounds = rounds or config.PRIMALITY_ROUNDS
        self.max_attempts = (
            max_attempts
            if max_attempts is not None
            else config.PRIME_SEARCH_MAX_ATTEMPTS
        )

    def generate_keys(self) -> KeyPair:
        """Generate a fresh key pair on a new safe-prime modulus."""
        logger.info("Generating %d-bit ElGamal key pair...", self.bits)
        p = generate_safe_prime(self.bits, self.rounds, self.max_attempts)
        g = find_primitive_root(p, self.rounds)
        x = random_int_between(1, p - 2)
        y = modular_exponentiation(g, x, p)
        logger.info("Key pair generated")
        return KeyPair(PublicKey(p=p, g=g, y=y), PrivateKey(x=x))

    @staticmethod
    def _encrypt_int(m: int, public_key: PublicKey) -> Ciphertext:
        p = public_key.p
        if m >= p:
            msg = (
                f"encoded message needs {m.bit_length()} bits but the modulus "
                f"has {p.bit_length()}"
            )
            raise EncodingOverflow(msg)
        k = random_int_between(2, p - 2)
        a = modular_exponentiation(public_key.g, k, p)
        s = modular_exponentiation(public_key.y, k, p)
        return Ciphertext(a=a, b=m * s % p, p=p)

    @staticmethod
    def _decrypt_int(
        ciphertext: Ciphertext, private_key: PrivateKey, modulus: int | None
    ) -> int:
        p = modulus if modulus is not None else ciphertext.p
        if p is None:
            msg = "ciphertext carries no modulus and none was supplied"
            raise KeyFormatError(msg)
        if ciphertext.p is not None and ciphertext.p != p:
            msg = "ciphertext was produced under a different modulus"
            raise DecryptionFailure(msg)
        if not 1 <= ciphertext.a < p or not 0 <= ciphertext.b < p:
            msg = "ciphertext components out of range"
            raise DecryptionFailure(msg)

        s = modular_exponentiation(ciphertext.a, private_key.x, p)
        try:
            s_inv = modular_inverse(s, p)
        except ValueError as err:
            msg = "shared secret is not invertible"
            raise DecryptionFailure(msg) from err
        return ciphertext.b * s_inv % p

    @staticmethod
    def encrypt(message: str | bytes, public_key: PublicKey) -> Ciphertext:
        """Encrypt a message that fits in a single block."""
        return ElGamal._encrypt_int(encode_message(message), public_key)

    @staticmethod
    def decrypt(
        ciphertext: Ciphertext,
        private_key: PrivateKey,
        modulus: int | None = None,
    ) -> str:
        """Decrypt a single block back to text."""
        return decode_message(ElGamal._decrypt_int(ciphertext, private_key, modulus))

    @staticmethod
    def encrypt_chunked(
        message: str | bytes, public_key: PublicKey
    ) -> list[Ciphertext]:
        """Encrypt a message of any length as a list of blocks."""
        data = message.encode("utf-8") if isinstance(message, str) else message
        size = block_capacity(public_key.p)
        if size < 1:
            msg = "modulus too small to carry any payload"
            raise EncodingOverflow(msg)
        chunks = [data[i : i + size] for i in range(0, len(data), size)] or [b""]
        return [
            ElGamal._encrypt_int(encode_message(BLOCK_MARKER + chunk), public_key)
            for chunk in chunks
        ]

    @staticmethod
    def decrypt_chunked(
        blocks: list[Ciphertext],
        private_key: PrivateKey,
        modulus: int | None = None,
    ) -> str:
        """Reassemble and decode blocks produced by encrypt_chunked."""
        if not blocks:
            msg = "no ciphertext blocks"
            raise DecryptionFailure(msg)
        data = bytearray()
        for block in blocks:
            m = ElGamal._decrypt_int(block, private_key, modulus)
            raw = m.to_bytes((m.bit_length() + 7) // 8, "big")
            if not raw.startswith(BLOCK_MARKER):
                msg = "block marker missing"
                raise DecryptionFailure(msg)
            data += raw[len(BLOCK_MARKER) :]
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as err:
            msg = "decrypted message is not valid text"
            raise DecryptionFailure(msg) from err
