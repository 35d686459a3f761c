"""Business logic services for the verification server.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from clearlic.client.armor import parse_clear_signed
from clearlic.client.properties import (
    extract_properties,
    parse_expiry,
    parse_license_id,
)
from clearlic.common.exceptions import LicenseError

if TYPE_CHECKING:
    import logging
    from pathlib import Path

    from clearlic.client.verifier import SignatureVerifier
    from clearlic.common.interfaces import IDataPersistence

OK = "OK"
REVOKED = "REVOKED"
MISMATCH = "MISMATCH"


class VerificationService:
    """Answers revalidation requests for issued licenses."""

    def __init__(
        self,
        verifier: SignatureVerifier,
        revoked_licenses_file_path: Path,
        data_persistence: IDataPersistence,
        logger: logging.Logger,
    ):
        self.verifier = verifier
        self.revoked_licenses_file_path = revoked_licenses_file_path
        self.data_persistence = data_persistence
        self.logger = logger

    def health(self) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "timestamp": int(time.time())}

    def verify(self, license_id: int, raw: bytes) -> str:
        """Return the plaintext verdict for a posted license."""
        try:
            plaintext = self.verifier.verify_document(parse_clear_signed(raw))
            properties = extract_properties(plaintext)
            order = parse_license_id(properties)
            parse_expiry(properties)
        except LicenseError as e:
            self.logger.info("License %s invalid: %s", license_id, e)
            return f"INVALID: {e}"

        if order != license_id:
            self.logger.info("License %s posted as %s", order, license_id)
            return MISMATCH
        revoked = self.data_persistence.load_revoked_licenses(
            self.revoked_licenses_file_path
        )
        if str(license_id) in revoked:
            self.logger.info("License %s revoked", license_id)
            return REVOKED

        self.logger.debug("License %s valid", license_id)
        return OK

    def revoke(self, license_id: int) -> dict[str, Any]:
        """Add a license to the persisted revocation list."""
        revoked_at = self.data_persistence.add_revoked_license(
            self.revoked_licenses_file_path, license_id
        )
        self.logger.info("License %s revoked", license_id)
        return {"status": "revoked", "license_id": license_id, "revoked_at": revoked_at}
