# License consuming side
from clearlic.client.license import License as License
from clearlic.client.license import LicenseValidator as LicenseValidator

__all__ = ["License", "LicenseValidator"]
