"""
Hybrid group encryption: per-conversation sender keys wrapped with ElGamal
for every participant, and bulk message encryption under the sender key.
"""

from __future__ import annotations

import logging
import os
import secrets
from typing import TYPE_CHECKING, Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from pydantic import ValidationError

from easye2ee.common.crypto import CryptoUtils
from easye2ee.common.exceptions import (
    DecryptionFailure,
    EntropyFailure,
    KeyFormatError,
)
from easye2ee.common.models import (
    ConversationCreatePayload,
    DirectMessagePayload,
    MessageEnvelope,
    SenderKeyMessage,
)
from easye2ee.crypto.elgamal import ElGamal
from easye2ee.crypto.keys import parse_ciphertext, parse_public_key

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from easye2ee.crypto.keys import Ciphertext, PrivateKey

logger = logging.getLogger(__name__)

SENDER_KEY_SIZE = 16
NONCE_SIZE = 12
TAG_SIZE = 16
UNREADABLE_MESSAGE = "message unreadable"


# ---------- sender keys ----------
def generate_sender_key(size: int = SENDER_KEY_SIZE) -> str:
    """Return a fresh hex-encoded sender key of size random bytes."""
    try:
        return secrets.token_hex(size)
    except (OSError, NotImplementedError) as err:
        msg = "secure random source unavailable"
        raise EntropyFailure(msg) from err


def _sender_key_bytes(sender_key: str) -> bytes:
    try:
        raw = bytes.fromhex(sender_key)
    except (TypeError, ValueError) as err:
        msg = "sender key is not hex-encoded"
        raise KeyFormatError(msg) from err
    if not raw:
        msg = "sender key is empty"
        raise KeyFormatError(msg)
    return raw


def wrap_sender_key(
    sender_key: str, participants_public_keys: Mapping[str, Any]
) -> dict[str, Ciphertext]:
    """Encrypt sender_key independently for every participant."""
    _sender_key_bytes(sender_key)
    wrapped: dict[str, Ciphertext] = {}
    for participant_id, key_data in participants_public_keys.items():
        public_key = parse_public_key(key_data)
        wrapped[participant_id] = ElGamal.encrypt(sender_key, public_key)
    logger.debug("Wrapped sender key for %d participants", len(wrapped))
    return wrapped


def unwrap_sender_key(
    encrypted_key_map: Mapping[str, Any],
    my_id: str,
    my_private_key: PrivateKey,
    modulus: int | None = None,
) -> str:
    """Recover the sender key from the caller's entry of encrypted_key_map."""
    if my_id not in encrypted_key_map:
        msg = f"no wrapped sender key for participant {my_id}"
        raise KeyFormatError(msg)
    ciphertext = parse_ciphertext(encrypted_key_map[my_id])
    sender_key = ElGamal.decrypt(ciphertext, my_private_key, modulus)
    try:
        _sender_key_bytes(sender_key)
    except KeyFormatError as err:
        msg = "unwrapped value is not a sender key"
        raise DecryptionFailure(msg) from err
    return sender_key


# ---------- bulk messages ----------
def _aead(sender_key: str) -> ChaCha20Poly1305:
    return ChaCha20Poly1305(
        CryptoUtils.derive_message_key(_sender_key_bytes(sender_key))
    )


def _aad(associated_data: str | None) -> bytes | None:
    return None if associated_data is None else associated_data.encode("utf-8")


def encrypt_bulk_message(
    plaintext: str, sender_key: str, associated_data: str | None = None
) -> str:
    """AEAD-encrypt plaintext under sender_key; returns base64(nonce || ct)."""
    try:
        nonce = os.urandom(NONCE_SIZE)
    except (OSError, NotImplementedError) as err:
        msg = "secure random source unavailable"
        raise EntropyFailure(msg) from err
    ct = _aead(sender_key).encrypt(
        nonce, plaintext.encode("utf-8"), _aad(associated_data)
    )
    return CryptoUtils.b64encode(nonce + ct)


def decrypt_bulk_message(
    ciphertext: str, sender_key: str, associated_data: str | None = None
) -> str:
    """Inverse of encrypt_bulk_message."""
    try:
        raw = CryptoUtils.b64decode(ciphertext)
    except ValueError as err:
        msg = "message is not valid base64"
        raise DecryptionFailure(msg) from err
    if len(raw) < NONCE_SIZE + TAG_SIZE:
        msg = "message too short"
        raise DecryptionFailure(msg)

    nonce, ct = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
    try:
        plaintext = _aead(sender_key).decrypt(nonce, ct, _aad(associated_data))
    except InvalidTag as err:
        msg = "message authentication failed"
        raise DecryptionFailure(msg) from err
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as err:
        msg = "message is not valid text"
        raise DecryptionFailure(msg) from err


def decrypt_bulk_batch(
    ciphertexts: Iterable[str],
    sender_key: str,
    associated_data: str | None = None,
) -> list[str]:
    """Decrypt many messages; unreadable ones become UNREADABLE_MESSAGE."""
    results: list[str] = []
    for index, ciphertext in enumerate(ciphertexts):
        try:
            results.append(
                decrypt_bulk_message(ciphertext, sender_key, associated_data)
            )
        except DecryptionFailure as err:
            logger.warning("Message %d unreadable: %s", index, err)
            results.append(UNREADABLE_MESSAGE)
    return results


# ---------- conversation payloads ----------
def create_conversation(
    participants_public_keys: Mapping[str, Any],
) -> tuple[str, ConversationCreatePayload]:
    """Generate a sender key and the creation payload wrapping it."""
    sender_key = generate_sender_key()
    wrapped = wrap_sender_key(sender_key, participants_public_keys)
    payload = ConversationCreatePayload(
        participant_ids=list(wrapped),
        encrypted_keys={pid: ct.to_model() for pid, ct in wrapped.items()},
    )
    return sender_key, payload


def build_direct_envelope(
    conversation_id: str,
    sender_id: str,
    text: str,
    recipients_public_keys: Mapping[str, Any],
) -> MessageEnvelope:
    """Encrypt text directly with ElGamal for each recipient."""
    contents = {}
    for participant_id, key_data in recipients_public_keys.items():
        blocks = ElGamal.encrypt_chunked(text, parse_public_key(key_data))
        contents[participant_id] = [block.to_model() for block in blocks]
    return MessageEnvelope(
        payload=DirectMessagePayload(
            conversation_id=conversation_id,
            sender_id=sender_id,
            encrypted_contents=contents,
        )
    )


def open_direct_envelope(
    envelope: MessageEnvelope | dict,
    my_id: str,
    my_private_key: PrivateKey,
    modulus: int | None = None,
) -> str:
    """Decrypt the caller's copy of a direct-message envelope."""
    if not isinstance(envelope, MessageEnvelope):
        try:
            envelope = MessageEnvelope.model_validate(envelope)
        except ValidationError as err:
            msg = "malformed message envelope"
            raise KeyFormatError(msg) from err
    contents = envelope.payload.encrypted_contents
    if my_id not in contents:
        msg = f"envelope has no content for participant {my_id}"
        raise KeyFormatError(msg)
    entry = contents[my_id]
    if not isinstance(entry, list):
        return ElGamal.decrypt(parse_ciphertext(entry), my_private_key, modulus)
    blocks = [parse_ciphertext(block) for block in entry]
    return ElGamal.decrypt_chunked(blocks, my_private_key, modulus)


def build_sender_key_message(
    conversation_id: str, sender_id: str, text: str, sender_key: str
) -> SenderKeyMessage:
    """Encrypt text under the conversation sender key, bound to its id."""
    return SenderKeyMessage(
        conversation_id=conversation_id,
        sender_id=sender_id,
        content=encrypt_bulk_message(text, sender_key, conversation_id),
    )


def open_sender_key_message(
    message: SenderKeyMessage | dict, sender_key: str
) -> str:
    if not isinstance(message, SenderKeyMessage):
        try:
            message = SenderKeyMessage.model_validate(message)
        except ValidationError as err:
            msg = "malformed sender-key message"
            raise KeyFormatError(msg) from err
    return decrypt_bulk_message(message.content, sender_key, message.conversation_id)
