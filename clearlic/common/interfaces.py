"""
Interfaces and protocols for dependency injection.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from clearlic.common.models import CacheEntry


class ICacheStore(Protocol):
    """Protocol for the revalidation cache store."""

    def get(self, key: str) -> CacheEntry | None: ...

    def put(self, key: str, entry: CacheEntry) -> None: ...


class IDataPersistence(Protocol):
    """Protocol for revocation list persistence."""

    @staticmethod
    def load_revoked_licenses(file_path: Path) -> dict[str, int]: ...

    @staticmethod
    def save_revoked_licenses(
        file_path: Path, revoked_licenses: dict[str, int]
    ) -> None: ...

    @staticmethod
    def add_revoked_license(file_path: Path, license_id: int) -> int: ...


class IRevalidator(Protocol):
    """Protocol for online license revalidation."""

    def fetch_status(self, license_id: int, raw: bytes) -> str: ...

    def verify(self, license_id: int, raw: bytes) -> None: ...
