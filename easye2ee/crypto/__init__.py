# Cryptographic core
from easye2ee.crypto.elgamal import ElGamal
from easye2ee.crypto.hybrid import (
    decrypt_bulk_message,
    encrypt_bulk_message,
    generate_sender_key,
    unwrap_sender_key,
    wrap_sender_key,
)
from easye2ee.crypto.keys import (
    Ciphertext,
    KeyPair,
    PrivateKey,
    PublicKey,
    parse_ciphertext,
    parse_private_key,
    parse_public_key,
)
from easye2ee.crypto.protection import (
    ProtectedPrivateKeyBlob,
    seal_private_key,
    unseal_private_key,
)

__all__ = [
    "Ciphertext",
    "ElGamal",
    "KeyPair",
    "PrivateKey",
    "ProtectedPrivateKeyBlob",
    "PublicKey",
    "decrypt_bulk_message",
    "encrypt_bulk_message",
    "generate_sender_key",
    "parse_ciphertext",
    "parse_private_key",
    "parse_public_key",
    "seal_private_key",
    "unseal_private_key",
    "unwrap_sender_key",
    "wrap_sender_key",
]
