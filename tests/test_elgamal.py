import pytest

from easye2ee.common.exceptions import (
    DecryptionFailure,
    EncodingOverflow,
    KeyFormatError,
)
from easye2ee.crypto.elgamal import (
    ElGamal,
    block_capacity,
    decode_message,
    encode_message,
    max_message_bytes,
)
from easye2ee.crypto.kernel import is_probable_prime, modular_exponentiation
from easye2ee.crypto.keys import Ciphertext, KeyPair


def test_generated_key_pair_is_consistent(alice_keys: KeyPair) -> None:
    pub, priv = alice_keys.public_key, alice_keys.private_key
    assert pub.bits == 512  # noqa: PLR2004
    assert is_probable_prime(pub.p)
    assert is_probable_prime((pub.p - 1) // 2)
    assert 2 <= pub.g < pub.p  # noqa: PLR2004
    assert 1 <= priv.x <= pub.p - 2
    assert modular_exponentiation(pub.g, priv.x, pub.p) == pub.y


def test_small_key_generation() -> None:
    key_pair = ElGamal(bits=128, rounds=10).generate_keys()
    pub = key_pair.public_key
    assert pub.bits == 128  # noqa: PLR2004
    assert pow(pub.g, key_pair.private_key.x, pub.p) == pub.y


def test_bits_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("EASYE2EE_KEY_BITS", "768")
    monkeypatch.setenv("EASYE2EE_PRIMALITY_ROUNDS", "12")
    elgamal = ElGamal()
    assert elgamal.bits == 768  # noqa: PLR2004
    assert elgamal.rounds == 12  # noqa: PLR2004


def test_hello_world_round_trip(alice_keys: KeyPair) -> None:
    ct = ElGamal.encrypt("hello world", alice_keys.public_key)
    assert ct.p == alice_keys.public_key.p
    plaintext = ElGamal.decrypt(ct, alice_keys.private_key, alice_keys.public_key.p)
    assert plaintext.encode() == b"hello world"


def test_encryption_is_randomized(alice_keys: KeyPair) -> None:
    first = ElGamal.encrypt("same text", alice_keys.public_key)
    second = ElGamal.encrypt("same text", alice_keys.public_key)
    assert (first.a, first.b) != (second.a, second.b)
    assert ElGamal.decrypt(first, alice_keys.private_key) == "same text"
    assert ElGamal.decrypt(second, alice_keys.private_key) == "same text"


def test_unicode_round_trip(alice_keys: KeyPair) -> None:
    message = "olá, 世界 ✓"
    ct = ElGamal.encrypt(message, alice_keys.public_key)
    assert ElGamal.decrypt(ct, alice_keys.private_key) == message


def test_cross_key_isolation(alice_keys: KeyPair, bob_keys: KeyPair) -> None:
    ct = ElGamal.encrypt("hello world", alice_keys.public_key)
    try:
        result = ElGamal.decrypt(ct, bob_keys.private_key)
    except DecryptionFailure:
        result = None
    assert result != "hello world"


def test_modulus_mismatch_fails(alice_keys: KeyPair, bob_keys: KeyPair) -> None:
    ct = ElGamal.encrypt("hello world", alice_keys.public_key)
    with pytest.raises(DecryptionFailure):
        ElGamal.decrypt(ct, bob_keys.private_key, bob_keys.public_key.p)


def test_missing_modulus(alice_keys: KeyPair) -> None:
    ct = ElGamal.encrypt("hi", alice_keys.public_key)
    with pytest.raises(KeyFormatError):
        ElGamal.decrypt(Ciphertext(a=ct.a, b=ct.b), alice_keys.private_key)


def test_zero_component_rejected(alice_keys: KeyPair) -> None:
    ct = ElGamal.encrypt("hi", alice_keys.public_key)
    with pytest.raises(DecryptionFailure):
        ElGamal.decrypt(Ciphertext(a=0, b=ct.b, p=ct.p), alice_keys.private_key)


def test_encoding_overflow(alice_keys: KeyPair) -> None:
    with pytest.raises(EncodingOverflow):
        ElGamal.encrypt("x" * 65, alice_keys.public_key)


def test_largest_single_block(alice_keys: KeyPair) -> None:
    size = max_message_bytes(alice_keys.public_key.p)
    message = "a" * size
    ct = ElGamal.encrypt(message, alice_keys.public_key)
    assert ElGamal.decrypt(ct, alice_keys.private_key) == message


def test_chunked_round_trip(alice_keys: KeyPair) -> None:
    message = "Chunked message ✓ " * 60
    blocks = ElGamal.encrypt_chunked(message, alice_keys.public_key)
    capacity = block_capacity(alice_keys.public_key.p)
    assert len(blocks) == -(-len(message.encode()) // capacity)
    assert ElGamal.decrypt_chunked(blocks, alice_keys.private_key) == message


def test_chunked_empty_message(alice_keys: KeyPair) -> None:
    blocks = ElGamal.encrypt_chunked("", alice_keys.public_key)
    assert len(blocks) == 1
    assert ElGamal.decrypt_chunked(blocks, alice_keys.private_key) == ""


def test_chunked_rejects_no_blocks(alice_keys: KeyPair) -> None:
    with pytest.raises(DecryptionFailure):
        ElGamal.decrypt_chunked([], alice_keys.private_key)


def test_chunked_wrong_key(alice_keys: KeyPair, bob_keys: KeyPair) -> None:
    blocks = ElGamal.encrypt_chunked("for alice only " * 10, alice_keys.public_key)
    with pytest.raises(DecryptionFailure):
        ElGamal.decrypt_chunked(blocks, bob_keys.private_key, bob_keys.public_key.p)


def test_message_encoding() -> None:
    assert encode_message("A") == 0x41
    assert encode_message(b"\x01\x00") == 256  # noqa: PLR2004
    assert decode_message(encode_message("hello")) == "hello"
    assert decode_message(0) == ""
    with pytest.raises(DecryptionFailure):
        decode_message(0xFF)


def test_leading_nul_bytes(alice_keys: KeyPair) -> None:
    with pytest.raises(EncodingOverflow):
        ElGamal.encrypt("\x00hi", alice_keys.public_key)
    with pytest.raises(EncodingOverflow):
        encode_message(b"\x00\x01")

    blocks = ElGamal.encrypt_chunked("\x00hi", alice_keys.public_key)
    assert ElGamal.decrypt_chunked(blocks, alice_keys.private_key) == "\x00hi"
