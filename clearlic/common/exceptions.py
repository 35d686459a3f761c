"""
Custom exceptions for the license system.
"""

from __future__ import annotations


class LicenseError(Exception):
    """Base exception for every "bad license" outcome."""

    def __init__(self, message: str, status_code: int = 403) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedLicenseDocument(LicenseError):
    """Exception for armor, framing and property format errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class SignatureVerificationFailed(LicenseError):
    """Exception for signatures that do not match the trusted key."""


class InvalidLicenseField(LicenseError):
    """Exception for missing or unparseable required properties."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class RemoteVerificationFailed(LicenseError):
    """Exception for rejected or unreachable online revalidation."""


class LicenseFileMissing(LicenseError):
    """Exception for license files that cannot be read."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class LicenseExpired(LicenseError):
    """Exception for licenses past their Valid-Until date."""
