"""
File-backed storage for a public key and its sealed private key.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from easye2ee.common.exceptions import KeyFormatError
from easye2ee.crypto.keys import PublicKey, parse_public_key

logger = logging.getLogger(__name__)

PUBLIC_KEY_FILE = "public_key.json"
SEALED_KEY_FILE = "private_key.blob"


class KeyStore:
    """Reads and writes key files under a single directory."""

    def __init__(self, keys_dir: Path | str):
        self.keys_dir = Path(keys_dir)

    @property
    def public_key_path(self) -> Path:
        return self.keys_dir / PUBLIC_KEY_FILE

    @property
    def sealed_key_path(self) -> Path:
        return self.keys_dir / SEALED_KEY_FILE

    def save(self, public_key: PublicKey, sealed_key: str) -> None:
        """Write the public key and sealed private key, creating the directory."""
        self.keys_dir.mkdir(parents=True, exist_ok=True)
        with self.public_key_path.open("w") as f:
            f.write(public_key.to_model().model_dump_json())
        with self.sealed_key_path.open("w") as f:
            f.write(sealed_key)
        self.sealed_key_path.chmod(0o600)

        logger.info("Keys saved:")
        logger.info("  Public: %s", self.public_key_path)
        logger.info("  Sealed private: %s", self.sealed_key_path)

    def load_public_key(self) -> PublicKey:
        with self.public_key_path.open() as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as err:
                msg = f"{self.public_key_path} is not valid JSON"
                raise KeyFormatError(msg) from err
        return parse_public_key(data)

    def load_sealed_key(self) -> str:
        with self.sealed_key_path.open() as f:
            return f.read().strip()
