"""
Configuration settings for the license validation system.
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta
from pathlib import Path


class Config:
    """Central configuration class for all system settings."""

    def __init__(self) -> None:
        # Revalidation settings
        self.CACHE_MAX_AGE: timedelta = timedelta(days=30)
        self.VERIFICATION_URL: str = os.getenv(
            "CLEARLIC_VERIFICATION_URL", "https://license.clearlic.dev"
        ).rstrip("/")
        timeout = os.getenv("CLEARLIC_REQUEST_TIMEOUT")
        self.REQUEST_TIMEOUT: float | None = float(timeout) if timeout else None

        # Server settings
        self.ADMIN_PASSWORD: str | None = os.getenv("CLEARLIC_ADMIN_PASSWORD")
        self.SERVER_HOST: str = os.getenv("CLEARLIC_SERVER_HOST", "127.0.0.1")
        self.SERVER_PORT: int = int(os.getenv("CLEARLIC_SERVER_PORT", "8000"))

        # File paths
        self.DATA_DIR: Path = Path(
            os.getenv("CLEARLIC_DATA_DIR", str(Path.home() / ".clearlic"))
        )
        self.LICENSE_FILE_PATH: Path = Path(
            os.getenv("CLEARLIC_LICENSE_FILE", str(self.DATA_DIR / "license.txt"))
        )
        self.CACHE_FILE_PATH: Path = self.DATA_DIR / "cache" / "license.json"
        self.SERVER_KEYS_DIR: Path = Path(
            os.getenv("CLEARLIC_KEYS_DIR", str(self.DATA_DIR / "keys"))
        )
        self.SERVER_PUBLIC_KEY_PATH: Path = self.SERVER_KEYS_DIR / "license_public.key"
        self.SERVER_PRIVATE_KEY_PATH: Path = (
            self.SERVER_KEYS_DIR / "license_private.key"
        )
        self.REVOKED_LICENSES_FILE_PATH: Path = (
            self.DATA_DIR / "revoked_licenses.json"
        )

        # Logging
        self.LOG_LEVEL: int = logging.INFO

