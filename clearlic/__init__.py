# Clear-signed license validation

from clearlic.client.license import License, LicenseValidator
from clearlic.common.decorators import license_protected, requires_valid_license
from clearlic.common.exceptions import (
    InvalidLicenseField,
    LicenseError,
    LicenseExpired,
    LicenseFileMissing,
    MalformedLicenseDocument,
    RemoteVerificationFailed,
    SignatureVerificationFailed,
)

__all__ = [
    "InvalidLicenseField",
    "License",
    "LicenseError",
    "LicenseExpired",
    "LicenseFileMissing",
    "LicenseValidator",
    "MalformedLicenseDocument",
    "RemoteVerificationFailed",
    "SignatureVerificationFailed",
    "license_protected",
    "requires_valid_license",
]
