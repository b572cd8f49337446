"""
Configuration settings for the encryption engine.
"""

from __future__ import annotations

import logging
import os

MIN_PRIMALITY_ROUNDS = 5
MIN_PBKDF2_ITERATIONS = 100_000
# One wrapped 32-character sender key must fit in a single ElGamal block.
MIN_KEY_BITS = 512
MAX_KEY_BITS = 4096


def check_key_bits(bits: int) -> int:
    """Return bits if it is a supported modulus size, else raise ValueError."""
    if not MIN_KEY_BITS <= bits <= MAX_KEY_BITS:
        msg = (
            f"key size must be between {MIN_KEY_BITS} and {MAX_KEY_BITS} bits, "
            f"got {bits}"
        )
        raise ValueError(msg)
    return bits


def pbkdf2_iterations() -> int:
    """Read EASYE2EE_PBKDF2_ITERATIONS alone, enforcing the minimum."""
    iterations = int(
        os.getenv("EASYE2EE_PBKDF2_ITERATIONS", str(MIN_PBKDF2_ITERATIONS))
    )
    if iterations < MIN_PBKDF2_ITERATIONS:
        msg = (
            f"PBKDF2_ITERATIONS must be at least {MIN_PBKDF2_ITERATIONS}, "
            f"got {iterations}"
        )
        raise ValueError(msg)
    return iterations


def _optional_int(name: str) -> int | None:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return int(value)


class Config:
    """Central configuration class for all engine settings."""

    def __init__(self) -> None:
        # Asymmetric cryptosystem
        self.KEY_BITS: int = int(os.getenv("EASYE2EE_KEY_BITS", "1024"))
        self.PRIMALITY_ROUNDS: int = int(
            os.getenv("EASYE2EE_PRIMALITY_ROUNDS", "40")
        )  # False-positive rate <= 4^-rounds
        self.PRIME_SEARCH_MAX_ATTEMPTS: int | None = _optional_int(
            "EASYE2EE_PRIME_SEARCH_MAX_ATTEMPTS"
        )  # None: search until found

        # Private-key sealing
        self.PBKDF2_ITERATIONS: int = pbkdf2_iterations()

        # Background key generation
        self.KEYGEN_WORKERS: int = int(os.getenv("EASYE2EE_KEYGEN_WORKERS", "1"))

        # Offload host
        self.SERVER_HOST: str = os.getenv("EASYE2EE_SERVER_HOST", "127.0.0.1")
        self.SERVER_PORT: int = int(os.getenv("EASYE2EE_SERVER_PORT", "8000"))

        # Logging
        self.LOG_LEVEL: int = logging.getLevelName(
            os.getenv("EASYE2EE_LOG_LEVEL", "INFO").upper()
        )

        self._validate()

    def _validate(self) -> None:
        check_key_bits(self.KEY_BITS)
        if self.PRIMALITY_ROUNDS < MIN_PRIMALITY_ROUNDS:
            msg = (
                f"PRIMALITY_ROUNDS must be at least {MIN_PRIMALITY_ROUNDS}, "
                f"got {self.PRIMALITY_ROUNDS}"
            )
            raise ValueError(msg)
        if (
            self.PRIME_SEARCH_MAX_ATTEMPTS is not None
            and self.PRIME_SEARCH_MAX_ATTEMPTS < 1
        ):
            msg = "PRIME_SEARCH_MAX_ATTEMPTS must be positive when set"
            raise ValueError(msg)
        if self.KEYGEN_WORKERS < 1:
            msg = "KEYGEN_WORKERS must be positive"
            raise ValueError(msg)
        if not isinstance(self.LOG_LEVEL, int):
            msg = f"Unknown log level: {self.LOG_LEVEL}"
            raise ValueError(msg)
