from pathlib import Path

import pytest

from easye2ee.common.exceptions import KeyFormatError
from easye2ee.crypto.keys import KeyPair
from easye2ee.crypto.protection import seal_private_key, unseal_private_key
from easye2ee.keystore import KeyStore


def test_save_and_load(tmp_path: Path, alice_keys: KeyPair) -> None:
    store = KeyStore(tmp_path / "keys")
    sealed = seal_private_key(alice_keys.private_key, "pw").encode()
    store.save(alice_keys.public_key, sealed)

    assert store.public_key_path.exists()
    assert store.sealed_key_path.stat().st_mode & 0o777 == 0o600
    assert store.load_public_key() == alice_keys.public_key
    assert unseal_private_key(store.load_sealed_key(), "pw") == alice_keys.private_key


def test_missing_files(tmp_path: Path) -> None:
    store = KeyStore(tmp_path)
    with pytest.raises(FileNotFoundError):
        store.load_public_key()
    with pytest.raises(FileNotFoundError):
        store.load_sealed_key()


def test_corrupt_public_key(tmp_path: Path) -> None:
    store = KeyStore(tmp_path)
    store.public_key_path.write_text("{not json")
    with pytest.raises(KeyFormatError):
        store.load_public_key()
