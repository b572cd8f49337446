"""
Per-user session holding secret material for the lifetime of a login.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from easye2ee.common.exceptions import (
    E2EEError,
    KeyFormatError,
    SessionClosed,
    UnknownConversation,
)
from easye2ee.common.models import SenderKeyMessage
from easye2ee.crypto import hybrid
from easye2ee.crypto.kernel import modular_exponentiation
from easye2ee.crypto.keys import KeyPair, PublicKey, parse_public_key
from easye2ee.crypto.protection import seal_private_key, unseal_private_key

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from easye2ee.common.models import (
        ConversationCreatePayload,
        MessageEnvelope,
    )
    from easye2ee.crypto.protection import ProtectedPrivateKeyBlob
    from easye2ee.worker.protocol import KeyGenResult
    from easye2ee.worker.service import KeyGenService

logger = logging.getLogger(__name__)


class E2EESession:
    """Owns one user's key pair and the unwrapped sender keys in use."""

    def __init__(
        self,
        user_id: str,
        key_pair: KeyPair,
        keygen_service: KeyGenService | None = None,
    ):
        self.user_id = user_id
        self.keygen_service = keygen_service
        self._key_pair: KeyPair | None = key_pair
        self._sender_keys: dict[str, str] = {}

    @classmethod
    def register(
        cls, user_id: str, password: str, keygen_service: KeyGenService
    ) -> tuple[E2EESession, KeyGenResult]:
        """Generate keys in the background and open a session with them."""
        result = keygen_service.generate_keys(password)
        key_pair = KeyPair(result.public_key, result.private_key)
        logger.info("Registered keys for user %s", user_id)
        return cls(user_id, key_pair, keygen_service), result

    @classmethod
    def login(
        cls,
        user_id: str,
        public_key: Any,
        blob: ProtectedPrivateKeyBlob | str,
        password: str,
        keygen_service: KeyGenService | None = None,
    ) -> E2EESession:
        """Unseal the stored private key and check it against public_key."""
        public = parse_public_key(public_key)
        private = unseal_private_key(blob, password)
        if modular_exponentiation(public.g, private.x, public.p) != public.y:
            msg = "sealed private key does not match the public key"
            raise KeyFormatError(msg)
        logger.info("User %s logged in", user_id)
        return cls(user_id, KeyPair(public, private), keygen_service)

    # ---------- lifecycle ----------
    @property
    def active(self) -> bool:
        return self._key_pair is not None

    def _keys(self) -> KeyPair:
        if self._key_pair is None:
            msg = "session is logged out"
            raise SessionClosed(msg)
        return self._key_pair

    @property
    def public_key(self) -> PublicKey:
        return self._keys().public_key

    def reseal(self, new_password: str) -> ProtectedPrivateKeyBlob:
        """Seal the private key under a new password (password change)."""
        return seal_private_key(self._keys().private_key, new_password)

    def logout(self) -> None:
        """Forget every secret held by the session."""
        self._sender_keys.clear()
        self._key_pair = None
        logger.info("User %s logged out", self.user_id)

    # ---------- conversations ----------
    def create_conversation(
        self, conversation_id: str, others_public_keys: Mapping[str, Any]
    ) -> ConversationCreatePayload:
        """Start a conversation; the creator receives a wrapped copy too."""
        participants = dict(others_public_keys)
        participants[self.user_id] = self._keys().public_key
        sender_key, payload = hybrid.create_conversation(participants)
        self._sender_keys[conversation_id] = sender_key
        return payload

    def join_conversation(
        self, conversation_id: str, encrypted_keys: Mapping[str, Any]
    ) -> None:
        """Unwrap and cache the sender key addressed to this user."""
        keys = self._keys()
        self._sender_keys[conversation_id] = hybrid.unwrap_sender_key(
            encrypted_keys, self.user_id, keys.private_key, keys.public_key.p
        )

    def has_conversation(self, conversation_id: str) -> bool:
        return conversation_id in self._sender_keys

    def _sender_key(self, conversation_id: str) -> str:
        self._keys()
        try:
            return self._sender_keys[conversation_id]
        except KeyError as err:
            msg = f"no sender key for conversation {conversation_id}"
            raise UnknownConversation(msg) from err

    # ---------- messages ----------
    def encrypt_message(self, conversation_id: str, text: str) -> SenderKeyMessage:
        return hybrid.build_sender_key_message(
            conversation_id, self.user_id, text, self._sender_key(conversation_id)
        )

    def decrypt_message(self, message: SenderKeyMessage | dict) -> str:
        if not isinstance(message, SenderKeyMessage):
            try:
                message = SenderKeyMessage.model_validate(message)
            except ValidationError as err:
                msg = "malformed sender-key message"
                raise KeyFormatError(msg) from err
        return hybrid.open_sender_key_message(
            message, self._sender_key(message.conversation_id)
        )

    def decrypt_history(
        self, messages: Iterable[SenderKeyMessage | dict]
    ) -> list[str]:
        """Decrypt a batch; one unreadable message never stops the rest."""
        self._keys()
        results = []
        for message in messages:
            try:
                results.append(self.decrypt_message(message))
            except SessionClosed:
                raise
            except E2EEError as err:
                logger.warning("Unreadable message: %s", type(err).__name__)
                results.append(hybrid.UNREADABLE_MESSAGE)
        return results

    def send_direct(
        self,
        conversation_id: str,
        text: str,
        recipients_public_keys: Mapping[str, Any],
    ) -> MessageEnvelope:
        """Encrypt text with ElGamal for each recipient and for this user."""
        recipients = dict(recipients_public_keys)
        recipients[self.user_id] = self._keys().public_key
        return hybrid.build_direct_envelope(
            conversation_id, self.user_id, text, recipients
        )

    def read_direct(self, envelope: MessageEnvelope | dict) -> str:
        keys = self._keys()
        return hybrid.open_direct_envelope(
            envelope, self.user_id, keys.private_key, keys.public_key.p
        )
