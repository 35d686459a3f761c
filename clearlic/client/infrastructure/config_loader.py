"""Infrastructure layer: Configuration loading and file operations.
"""

from __future__ import annotations

import logging
from pathlib import Path

from clearlic.common import setup_logger
from clearlic.common.config import Config
from clearlic.common.exceptions import LicenseFileMissing
from clearlic.common.models import ClientConfig


def read_license_file(path: Path) -> bytes:
    """Read raw license bytes, raising LicenseFileMissing when unusable."""
    try:
        raw = path.read_bytes()
    except OSError as e:
        msg = f"License file not found: {path}"
        raise LicenseFileMissing(msg) from e
    if not raw.strip():
        msg = f"License file is empty: {path}"
        raise LicenseFileMissing(msg)
    return raw


class ConfigLoader:
    """Resolves client overrides against the environment-backed Config."""

    def __init__(self, client_config: ClientConfig | None = None):
        client_config = client_config or ClientConfig()
        self.config: Config = Config()

        self.verification_url: str = (
            client_config.verification_url or self.config.VERIFICATION_URL
        )
        self.license_file = Path(
            client_config.license_file or self.config.LICENSE_FILE_PATH
        )
        self.cache_file_path: Path = (
            client_config.cache_file_path or self.config.CACHE_FILE_PATH
        )
        self.request_timeout: float | None = (
            client_config.request_timeout
            if client_config.request_timeout is not None
            else self.config.REQUEST_TIMEOUT
        )
        self.cache_max_age = self.config.CACHE_MAX_AGE
        self.log_level: int = (
            client_config.log_level
            if client_config.log_level is not None
            else self.config.LOG_LEVEL
        )

        # Setup logging
        self.logger = logging.getLogger("clearlic")
        setup_logger(self.logger, self.log_level)
