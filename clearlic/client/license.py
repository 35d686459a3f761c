"""
License object and the validator service that constructs it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING

import requests

from clearlic.client.armor import parse_clear_signed
from clearlic.client.infrastructure.cache_store import JsonFileCacheStore
from clearlic.client.infrastructure.config_loader import (
    ConfigLoader,
    read_license_file,
)
from clearlic.client.properties import (
    extract_properties,
    from_millis,
    parse_expiry,
    parse_license_id,
    to_millis,
)
from clearlic.client.revalidation import LicenseRevalidator
from clearlic.client.verifier import SignatureVerifier
from clearlic.common.exceptions import LicenseExpired, LicenseFileMissing

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from clearlic.common.interfaces import IRevalidator
    from clearlic.common.models import ClientConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class License:
    """A verified license. Only ever built by :meth:`from_bytes`."""

    id: int
    expires: int
    raw: bytes = field(repr=False)
    properties: Mapping[str, str] = field(repr=False, compare=False)

    @classmethod
    def from_bytes(
        cls,
        raw: bytes,
        revalidator: IRevalidator,
        verifier: SignatureVerifier | None = None,
    ) -> License:
        """Parse, verify, extract and revalidate; any failure aborts."""
        verifier = verifier or SignatureVerifier()

        logger.debug("Parsing license document (%d bytes)", len(raw))
        document = parse_clear_signed(raw)

        logger.debug("Verifying license signature")
        plaintext = verifier.verify_document(document)

        logger.debug("Extracting license properties")
        properties = extract_properties(plaintext)
        license_id = parse_license_id(properties)
        expires = parse_expiry(properties)

        logger.debug("Revalidating license %s", license_id)
        revalidator.verify(license_id, raw)

        return cls(
            id=license_id,
            expires=expires,
            raw=bytes(raw),
            properties=MappingProxyType(dict(properties)),
        )

    @property
    def expires_at(self) -> datetime:
        return from_millis(self.expires)

    @property
    def valid_until(self) -> date:
        return self.expires_at.date()

    def is_valid(self, now: datetime | None = None) -> bool:
        """Whether ``now`` falls on or before the last second of Valid-Until."""
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.utcoffset() is None:
            msg = "now must be timezone-aware"
            raise ValueError(msg)
        return to_millis(now) <= self.expires

    def __str__(self) -> str:
        return f"{self.id} (Valid-Until: {self.valid_until.isoformat()})"


class LicenseValidator:
    """Owns the verifier and revalidator used to build License values."""

    def __init__(
        self,
        revalidator: IRevalidator,
        verifier: SignatureVerifier | None = None,
        license_file: Path | None = None,
    ):
        self.revalidator = revalidator
        self.verifier = verifier or SignatureVerifier()
        self.license_file = license_file

    @classmethod
    def from_config(cls, client_config: ClientConfig | None = None) -> LicenseValidator:
        """Wire the default persistent cache, HTTP session and trusted key."""
        loader = ConfigLoader(client_config)
        revalidator = LicenseRevalidator(
            cache=JsonFileCacheStore(loader.cache_file_path),
            verification_url=loader.verification_url,
            session=requests.Session(),
            max_age=loader.cache_max_age,
            timeout=loader.request_timeout,
        )
        return cls(revalidator, license_file=loader.license_file)

    def load_and_validate(self, raw: bytes) -> License:
        return License.from_bytes(raw, self.revalidator, self.verifier)

    def load_file(self, path: Path | None = None) -> License:
        """Read a license file and validate its contents."""
        path = path or self.license_file
        if path is None:
            msg = "No license file configured"
            raise LicenseFileMissing(msg)
        return self.load_and_validate(read_license_file(path))

    def check(self, lic: License, now: datetime | None = None) -> None:
        """Raise LicenseExpired if the license is past its Valid-Until date."""
        if not lic.is_valid(now):
            logger.warning("License %s has expired", lic.id)
            msg = f"BAD LICENSE: {lic}"
            raise LicenseExpired(msg)
