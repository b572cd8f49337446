"""
Worker side of the key-generation offload protocol.

Requests and responses are plain dicts so they cross process boundaries:

    request:  {"action": "generateKeys", "password": "..."}
    success:  {"success": true, "data": {"publicKey", "privateKey",
               "protectedPrivateKeyBlob"}}
    failure:  {"success": false, "error": "..."}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from easye2ee.common.config import Config
from easye2ee.common.exceptions import KeyGenerationError
from easye2ee.common.models import KeyGenData, KeyGenRequest, KeyGenResponse
from easye2ee.crypto.elgamal import ElGamal
from easye2ee.crypto.keys import (
    PrivateKey,
    PublicKey,
    parse_private_key,
    parse_public_key,
)
from easye2ee.crypto.protection import seal_private_key

logger = logging.getLogger(__name__)

GENERATE_KEYS = "generateKeys"


@dataclass(frozen=True)
class KeyGenResult:
    public_key: PublicKey
    private_key: PrivateKey
    protected_private_key_blob: str

    def to_response(self) -> KeyGenResponse:
        return KeyGenResponse(
            success=True,
            data=KeyGenData(
                public_key=self.public_key.to_model(),
                private_key=self.private_key.to_model(),
                protected_private_key_blob=self.protected_private_key_blob,
            ),
        )


def generate_and_seal(
    password: str,
    bits: int | None = None,
    iterations: int | None = None,
    config: Config | None = None,
) -> KeyGenResult:
    """Generate a key pair and seal its private half with password."""
    key_pair = ElGamal(bits=bits, config=config).generate_keys()
    blob = seal_private_key(key_pair.private_key, password, iterations)
    return KeyGenResult(
        public_key=key_pair.public_key,
        private_key=key_pair.private_key,
        protected_private_key_blob=blob.encode(),
    )


def failure(error: str) -> dict[str, Any]:
    return KeyGenResponse(success=False, error=error).to_wire()


def handle_request(
    request: dict[str, Any], iterations: int | None = None
) -> dict[str, Any]:
    """Serve one offload request; always answers with a response dict."""
    action = request.get("action") if isinstance(request, dict) else None
    if action != GENERATE_KEYS:
        return failure(f"unknown action: {action}")
    try:
        req = KeyGenRequest.model_validate(request)
    except ValidationError as err:
        fields = ", ".join(".".join(map(str, e["loc"])) for e in err.errors())
        return failure(f"invalid request: {fields}")

    logger.info("Worker: starting key generation")
    try:
        result = generate_and_seal(req.password, req.bits, iterations)
    except Exception as err:  # noqa: BLE001
        logger.error("Worker: key generation failed: %s", type(err).__name__)
        return failure(f"{type(err).__name__}: {err}")
    logger.info("Worker: key generation finished")
    return result.to_response().to_wire()


def parse_response(response: dict[str, Any]) -> KeyGenResult:
    """Turn a worker response into a KeyGenResult or raise its error."""
    try:
        resp = KeyGenResponse.model_validate(response)
    except ValidationError as err:
        msg = "malformed worker response"
        raise KeyGenerationError(msg) from err
    if not resp.success or resp.data is None:
        raise KeyGenerationError(resp.error or "key generation failed")
    return KeyGenResult(
        public_key=parse_public_key(resp.data.public_key),
        private_key=parse_private_key(resp.data.private_key),
        protected_private_key_blob=resp.data.protected_private_key_blob,
    )
