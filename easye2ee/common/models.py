"""
Pydantic models for wire formats and worker messages.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from easye2ee.common.config import MAX_KEY_BITS, MIN_KEY_BITS

DECIMAL_PATTERN = r"^[0-9]+$"


class WireModel(BaseModel):
    """Base for camelCase wire payloads that also accept field names."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class PublicKeyModel(WireModel):
    p: str = Field(pattern=DECIMAL_PATTERN)
    g: str = Field(pattern=DECIMAL_PATTERN)
    y: str = Field(pattern=DECIMAL_PATTERN)


class PrivateKeyModel(WireModel):
    x: str = Field(pattern=DECIMAL_PATTERN)


class CiphertextModel(WireModel):
    a: str = Field(pattern=DECIMAL_PATTERN)
    b: str = Field(pattern=DECIMAL_PATTERN)
    p: str | None = Field(default=None, pattern=DECIMAL_PATTERN)


class KeyGenRequest(WireModel):
    action: Literal["generateKeys"]
    password: str = Field(min_length=1)
    bits: int | None = Field(
        default=None, alias="bitLength", ge=MIN_KEY_BITS, le=MAX_KEY_BITS
    )


class KeyGenData(WireModel):
    public_key: PublicKeyModel = Field(alias="publicKey")
    private_key: PrivateKeyModel = Field(alias="privateKey")
    protected_private_key_blob: str = Field(alias="protectedPrivateKeyBlob")


class KeyGenResponse(WireModel):
    success: bool
    data: KeyGenData | None = None
    error: str | None = None


class ConversationCreatePayload(WireModel):
    participant_ids: list[str] = Field(alias="participantIds")
    encrypted_keys: dict[str, CiphertextModel] = Field(alias="encryptedKeys")


class DirectMessagePayload(WireModel):
    """Per-recipient ciphertexts of one message.

    An entry is either a list of chunked blocks or a single unchunked
    ciphertext, given as an object or in the compact "a;b;p" form.
    """

    conversation_id: str = Field(alias="conversationId")
    sender_id: str = Field(alias="senderId")
    encrypted_contents: dict[
        str, list[CiphertextModel | str] | CiphertextModel | str
    ] = Field(alias="encryptedContents")


class MessageEnvelope(WireModel):
    type: Literal["message"] = "message"
    payload: DirectMessagePayload


class SenderKeyMessage(WireModel):
    conversation_id: str = Field(alias="conversationId")
    sender_id: str = Field(alias="senderId")
    content: str
