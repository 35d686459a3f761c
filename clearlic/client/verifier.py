"""
Signature verification against the single embedded trusted key.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from clearlic.common.exceptions import SignatureVerificationFailed

if TYPE_CHECKING:
    from clearlic.client.armor import ClearSignDocument

logger = logging.getLogger(__name__)

TRUSTED_KEY_PATH = Path(__file__).parent.parent / "resources" / "license.key"


@lru_cache(maxsize=1)
def load_trusted_key() -> Ed25519PublicKey:
    """Load the packaged trusted public key once per process."""
    try:
        with TRUSTED_KEY_PATH.open("rb") as f:
            key = serialization.load_pem_public_key(f.read())
    except (OSError, ValueError, UnsupportedAlgorithm) as e:
        msg = f"Trusted license key unavailable: {e}"
        raise SignatureVerificationFailed(msg) from e

    if not isinstance(key, Ed25519PublicKey):
        msg = "Trusted license key is not an Ed25519 public key"
        raise SignatureVerificationFailed(msg)
    return key


class SignatureVerifier:
    """Checks clear-sign signatures with exactly one public key."""

    def __init__(self, public_key: Ed25519PublicKey | None = None):
        self.public_key = public_key or load_trusted_key()

    def verify(self, plaintext: str, signature: bytes) -> bool:
        """Verify a signature over the UTF-8 bytes of normalized plaintext."""
        try:
            self.public_key.verify(signature, plaintext.encode("utf-8"))
        except InvalidSignature:
            return False
        return True

    def verify_document(self, document: ClearSignDocument) -> str:
        """Return the verified plaintext or raise SignatureVerificationFailed."""
        if not self.verify(document.plaintext, document.signature):
            logger.info("License signature does not match the trusted key")
            msg = "BAD LICENSE: Signature does not match"
            raise SignatureVerificationFailed(msg)
        logger.debug("License signature valid")
        return document.plaintext
