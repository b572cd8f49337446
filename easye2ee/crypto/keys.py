"""
Key and ciphertext entities, and the parsers that build them from wire data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from easye2ee.common.exceptions import KeyFormatError
from easye2ee.common.models import CiphertextModel, PrivateKeyModel, PublicKeyModel
from easye2ee.crypto.kernel import is_probable_prime

BOUNDARY_PRIME_ROUNDS = 5
MIN_MODULUS = 5


@dataclass(frozen=True)
class PublicKey:
    """ElGamal public key (p, g, y) with y = g^x mod p."""

    p: int
    g: int
    y: int

    @property
    def bits(self) -> int:
        return self.p.bit_length()

    def to_model(self) -> PublicKeyModel:
        return PublicKeyModel(p=str(self.p), g=str(self.g), y=str(self.y))


@dataclass(frozen=True)
class PrivateKey:
    """ElGamal private exponent x."""

    x: int = field(repr=False)

    def to_model(self) -> PrivateKeyModel:
        return PrivateKeyModel(x=str(self.x))


@dataclass(frozen=True)
class KeyPair:
    public_key: PublicKey
    private_key: PrivateKey


@dataclass(frozen=True)
class Ciphertext:
    """Single-block ElGamal ciphertext (a, b), tagged with its modulus."""

    a: int
    b: int
    p: int | None = None

    def to_model(self) -> CiphertextModel:
        return CiphertextModel(
            a=str(self.a),
            b=str(self.b),
            p=None if self.p is None else str(self.p),
        )

    def to_compact(self) -> str:
        """Render as the compact "a;b;p" string form."""
        return f"{self.a};{self.b};{'' if self.p is None else self.p}"


def _validation_message(err: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}" for e in err.errors()
    )


def parse_public_key(data: Any) -> PublicKey:
    """Build a PublicKey from wire data, rejecting malformed components."""
    if isinstance(data, PublicKey):
        model = data.to_model()
    else:
        try:
            model = (
                data
                if isinstance(data, PublicKeyModel)
                else PublicKeyModel.model_validate(data)
            )
        except ValidationError as err:
            msg = f"invalid public key: {_validation_message(err)}"
            raise KeyFormatError(msg) from err

    p, g, y = int(model.p), int(model.g), int(model.y)
    if p < MIN_MODULUS or not is_probable_prime(p, BOUNDARY_PRIME_ROUNDS):
        msg = "invalid public key: p is not a usable prime"
        raise KeyFormatError(msg)
    if not 2 <= g < p:  # noqa: PLR2004
        msg = "invalid public key: g out of range"
        raise KeyFormatError(msg)
    if not 1 <= y < p:
        msg = "invalid public key: y out of range"
        raise KeyFormatError(msg)
    return PublicKey(p=p, g=g, y=y)


def parse_private_key(data: Any) -> PrivateKey:
    """Build a PrivateKey from wire data."""
    if isinstance(data, PrivateKey):
        return data
    try:
        model = (
            data
            if isinstance(data, PrivateKeyModel)
            else PrivateKeyModel.model_validate(data)
        )
    except ValidationError as err:
        msg = f"invalid private key: {_validation_message(err)}"
        raise KeyFormatError(msg) from err
    x = int(model.x)
    if x < 1:
        msg = "invalid private key: x must be positive"
        raise KeyFormatError(msg)
    return PrivateKey(x=x)


def parse_ciphertext(data: Any) -> Ciphertext:
    """Build a Ciphertext from a mapping, a model or an "a;b;p" string."""
    if isinstance(data, Ciphertext):
        return data
    if isinstance(data, str):
        parts = data.split(";")
        if len(parts) not in (2, 3):
            msg = "invalid ciphertext: expected 'a;b' or 'a;b;p'"
            raise KeyFormatError(msg)
        modulus = parts[2] if len(parts) == 3 else ""  # noqa: PLR2004
        data = {"a": parts[0], "b": parts[1], "p": modulus or None}
    try:
        model = (
            data
            if isinstance(data, CiphertextModel)
            else CiphertextModel.model_validate(data)
        )
    except ValidationError as err:
        msg = f"invalid ciphertext: {_validation_message(err)}"
        raise KeyFormatError(msg) from err
    return Ciphertext(
        a=int(model.a),
        b=int(model.b),
        p=None if model.p is None else int(model.p),
    )
