"""
License generator producing clear-signed license documents.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from cryptography.hazmat.primitives import serialization

from clearlic.client.armor import armor_clear_signed, normalize_text, parse_clear_signed
from clearlic.client.properties import (
    ORDER,
    VALID_UNTIL,
    extract_properties,
    parse_expiry,
    parse_license_id,
)
from clearlic.client.verifier import SignatureVerifier
from clearlic.common.config import Config

if TYPE_CHECKING:
    from datetime import date

    from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey


class LicenseGenerator:
    """License generator for creating signed licenses."""

    def __init__(
        self,
        config: Config | None = None,
        server_priv: Ed25519PrivateKey | None = None,
    ):
        self.config = config or Config()
        self.logger = logging.getLogger(__name__)
        self.server_priv = server_priv or self._load_private_key()

    def _load_private_key(self) -> Ed25519PrivateKey:
        """Load the signing private key."""
        with self.config.SERVER_PRIVATE_KEY_PATH.open("rb") as f:
            return cast(
                "Ed25519PrivateKey", serialization.load_pem_private_key(f.read(), None)
            )

    def sign(self, text: str) -> bytes:
        """Sign the normalized form of ``text``."""
        return self.server_priv.sign(normalize_text(text).encode("utf-8"))

    def render(
        self, order: int, valid_until: date, extra: dict[str, str] | None = None
    ) -> str:
        """Render properties so they read back unchanged after normalization."""
        properties = {ORDER: str(order), VALID_UNTIL: valid_until.isoformat()}
        for key, value in (extra or {}).items():
            if not _round_trips(key, value):
                msg = f"Invalid license property: {key!r}"
                raise ValueError(msg)
            if key in properties:
                msg = f"Duplicate license property: {key}"
                raise ValueError(msg)
            properties[key] = value
        return "\n".join(f"{key}: {value}" for key, value in properties.items())

    def generate_license(
        self, order: int, valid_until: date, extra: dict[str, str] | None = None
    ) -> bytes:
        """Generate an armored, signed license."""
        text = normalize_text(self.render(order, valid_until, extra))
        self.logger.info("Generating license %s valid until %s", order, valid_until)
        return armor_clear_signed(text, self.sign(text))

    def check_issued(self, raw: bytes) -> dict[str, str]:
        """Verify ``raw`` against this issuer's own key, offline.

        Returns the license properties. Raises LicenseError subclasses for bad
        framing, a foreign signature or missing required fields.
        """
        verifier = SignatureVerifier(self.server_priv.public_key())
        plaintext = verifier.verify_document(parse_clear_signed(raw))
        properties = extract_properties(plaintext)
        parse_license_id(properties)
        parse_expiry(properties)
        return properties


def _round_trips(key: str, value: str) -> bool:
    # Lines are trimmed and split on CR/LF before the first ": " is looked up.
    if not key or key != key.strip() or ": " in key:
        return False
    if not value.strip() or value != value.rstrip():
        return False
    return not any(c in "\r\n" for c in key + value)
