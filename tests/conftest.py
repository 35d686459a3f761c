from datetime import date
from unittest.mock import Mock

import pytest
import requests
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from clearlic.client.infrastructure.cache_store import MemoryCacheStore
from clearlic.client.revalidation import LicenseRevalidator
from clearlic.client.verifier import SignatureVerifier
from clearlic.server.license_generator import LicenseGenerator


class MockResponse:
    def __init__(self, status_code, content):
        self.status_code = status_code
        self.content = content

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def signing_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


@pytest.fixture
def verifier(signing_key: Ed25519PrivateKey) -> SignatureVerifier:
    return SignatureVerifier(signing_key.public_key())


@pytest.fixture
def generator(signing_key: Ed25519PrivateKey) -> LicenseGenerator:
    return LicenseGenerator(server_priv=signing_key)


@pytest.fixture
def license_bytes(generator: LicenseGenerator) -> bytes:
    return generator.generate_license(
        1234, date(2999, 12, 31), {"Name": "Jane Doe", "Product": "Renamer"}
    )


@pytest.fixture
def session() -> Mock:
    session = Mock(spec=requests.Session)
    session.post.return_value = MockResponse(200, b"OK\n")
    return session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def revalidator(session: Mock, clock: FakeClock) -> LicenseRevalidator:
    return LicenseRevalidator(
        cache=MemoryCacheStore(),
        verification_url="https://license.example.test/",
        session=session,
        clock=clock,
    )
