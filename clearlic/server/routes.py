"""
Routes for the verification server.
"""

import hmac
from typing import Any

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import PlainTextResponse

from .services import VerificationService


class VerificationRoutes:
    """Handles FastAPI routes for the verification server."""

    def __init__(self, service: VerificationService, admin_password: str | None):
        self.service = service
        self.admin_password = admin_password

    def setup_routes(self, app: FastAPI) -> None:
        """Setup API routes on the FastAPI app."""

        app.get("/health")(self.health)
        app.post("/verify/{license_id}", response_class=PlainTextResponse)(
            self.verify
        )
        if self.admin_password:
            app.post("/revoke/{license_id}")(self.revoke)

    async def health(self) -> dict[str, Any]:
        """Handle /health endpoint."""
        return self.service.health()

    async def verify(self, license_id: int, request: Request) -> PlainTextResponse:
        """Handle /verify/{license_id} endpoint."""
        raw = await request.body()
        return PlainTextResponse(self.service.verify(license_id, raw))

    async def revoke(
        self,
        license_id: int,
        x_admin_password: str | None = Header(default=None),
    ) -> dict:
        """Handle /revoke/{license_id} endpoint."""
        if not x_admin_password or not hmac.compare_digest(
            x_admin_password.encode(), str(self.admin_password).encode()
        ):
            raise HTTPException(403, "Invalid admin password")
        return self.service.revoke(license_id)
