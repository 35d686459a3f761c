"""
License verification server using FastAPI.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import cast

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from fastapi import FastAPI

from clearlic.client.verifier import SignatureVerifier
from clearlic.common import setup_logger
from clearlic.common.config import Config

from .persistence import DataPersistence
from .routes import VerificationRoutes
from .services import VerificationService


class VerificationServer:
    """Serves the online revalidation endpoint for issued licenses."""

    def __init__(
        self,
        config: Config | None = None,
        public_key: Ed25519PublicKey | None = None,
        log_level: int | None = None,
        admin_password: str | None = None,
        server_host: str | None = None,
        server_port: int | None = None,
        revoked_licenses_file_path: Path | None = None,
    ):
        self.config = config or Config()
        self.logger = logging.getLogger(__name__)
        setup_logger(
            self.logger, log_level if log_level is not None else self.config.LOG_LEVEL
        )
        self.admin_password = admin_password or self.config.ADMIN_PASSWORD
        self.server_host = server_host or self.config.SERVER_HOST
        self.server_port = server_port or self.config.SERVER_PORT
        self.revoked_licenses_file_path = (
            revoked_licenses_file_path or self.config.REVOKED_LICENSES_FILE_PATH
        )
        self.app = FastAPI()

        self.data_persistence = DataPersistence()
        self.verifier = SignatureVerifier(public_key or self._load_public_key())
        self.service = VerificationService(
            verifier=self.verifier,
            revoked_licenses_file_path=self.revoked_licenses_file_path,
            data_persistence=self.data_persistence,
            logger=self.logger,
        )
        VerificationRoutes(self.service, self.admin_password).setup_routes(self.app)

    def _load_public_key(self) -> Ed25519PublicKey | None:
        """Issuer public key from the keys dir, else the embedded trusted key."""
        key_path = self.config.SERVER_PUBLIC_KEY_PATH
        if not key_path.exists():
            return None
        self.logger.info("Using issuer public key %s", key_path)
        with key_path.open("rb") as f:
            return cast(
                "Ed25519PublicKey", serialization.load_pem_public_key(f.read())
            )
