"""
Data persistence utilities.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import cast

_revocation_lock = threading.Lock()


class DataPersistence:
    """Handles loading and saving persistent data.

    The revocation file is the only source of truth: the server reads it on
    every request, so revocations written by the CLI take effect immediately.
    """

    @staticmethod
    def load_revoked_licenses(file_path: Path) -> dict[str, int]:
        """Load revoked licenses from file."""
        try:
            with file_path.open() as f:
                return cast("dict[str, int]", json.load(f))
        except FileNotFoundError:
            return {}

    @staticmethod
    def save_revoked_licenses(
        file_path: Path, revoked_licenses: dict[str, int]
    ) -> None:
        """Save revoked licenses to file."""
        file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=file_path.parent, prefix=file_path.name, suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(revoked_licenses, f)
            # readers never see a half-written file
            os.replace(tmp_name, file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @staticmethod
    def add_revoked_license(file_path: Path, license_id: int) -> int:
        """Add one license to the revocation file, keeping existing entries."""
        with _revocation_lock:
            revoked = DataPersistence.load_revoked_licenses(file_path)
            revoked_at = revoked.setdefault(str(license_id), int(time.time()))
            DataPersistence.save_revoked_licenses(file_path, revoked)
        return revoked_at
