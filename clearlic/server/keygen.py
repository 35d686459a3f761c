"""
Key generator for the license signing Ed25519 keypair.
"""

from __future__ import annotations

import logging
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from clearlic.common.config import Config

logger = logging.getLogger(__name__)


class KeyGenerator:
    """Key generator for creating license signing keys."""

    def __init__(self, keys_dir: Path | None = None):
        config = Config()
        self.keys_dir = keys_dir or config.SERVER_KEYS_DIR

    @property
    def private_path(self) -> Path:
        return self.keys_dir / "license_private.key"

    @property
    def public_path(self) -> Path:
        return self.keys_dir / "license_public.key"

    def generate_keys(self) -> None:
        """Generate and save the signing private key and its public key."""
        logger.info("Generating Ed25519 license signing keys...")

        private_key = Ed25519PrivateKey.generate()
        public_key = private_key.public_key()

        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_pem = public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

        self.keys_dir.mkdir(parents=True, exist_ok=True)
        with self.private_path.open("wb") as f:
            f.write(private_pem)
        with self.public_path.open("wb") as f:
            f.write(public_pem)

        logger.info("Keys generated and saved:")
        logger.info("  Private: %s", self.private_path)
        logger.info("  Public: %s", self.public_path)
        logger.info("Keep the private key secure!")
