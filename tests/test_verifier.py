from datetime import date

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from clearlic.client import verifier as verifier_module
from clearlic.client.armor import armor_clear_signed, parse_clear_signed
from clearlic.client.verifier import SignatureVerifier, load_trusted_key
from clearlic.common.exceptions import SignatureVerificationFailed
from clearlic.server.license_generator import LicenseGenerator


def test_trusted_key_is_packaged() -> None:
    key = load_trusted_key()
    assert isinstance(key, Ed25519PublicKey)
    assert load_trusted_key() is key


def test_default_verifier_uses_trusted_key() -> None:
    assert SignatureVerifier().public_key is load_trusted_key()


def test_missing_trusted_key(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(verifier_module, "TRUSTED_KEY_PATH", tmp_path / "missing.key")
    load_trusted_key.cache_clear()
    try:
        with pytest.raises(SignatureVerificationFailed, match="unavailable"):
            load_trusted_key()
    finally:
        load_trusted_key.cache_clear()


def test_verify_document(verifier: SignatureVerifier, license_bytes: bytes) -> None:
    document = parse_clear_signed(license_bytes)
    assert verifier.verify_document(document) == document.plaintext


def test_verify_signature_over_lf_source(
    verifier: SignatureVerifier, generator: LicenseGenerator
) -> None:
    text = "Order: 5\nValid-Until: 2030-01-01"
    raw = armor_clear_signed(text, generator.sign(text)).replace(b"\n", b"\r\n")
    assert verifier.verify(parse_clear_signed(raw).plaintext, generator.sign(text))


def test_foreign_key_rejected(verifier: SignatureVerifier) -> None:
    foreign = LicenseGenerator(server_priv=Ed25519PrivateKey.generate())
    raw = foreign.generate_license(1, date(2999, 1, 1))

    with pytest.raises(SignatureVerificationFailed, match="does not match"):
        verifier.verify_document(parse_clear_signed(raw))


def test_tampered_text_rejected(verifier: SignatureVerifier, license_bytes: bytes) -> None:
    tampered = license_bytes.replace(b"Order: 1234", b"Order: 1235")

    with pytest.raises(SignatureVerificationFailed):
        verifier.verify_document(parse_clear_signed(tampered))


def test_verify_returns_false_on_mismatch(verifier: SignatureVerifier) -> None:
    assert verifier.verify("Order: 1", bytes(64)) is False
