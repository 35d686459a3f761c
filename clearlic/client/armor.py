"""
Clear-signed license armor.

A license travels as human-readable text followed by an armored signature::

    -----BEGIN SIGNED LICENSE-----
    Hash: Ed25519

    Order: 1234
    Valid-Until: 2024-01-31
    -----BEGIN LICENSE SIGNATURE-----

    <base64 signature>
    =<base64 CRC-24>
    -----END LICENSE SIGNATURE-----

The framing follows the OpenPGP cleartext signature layout (armor headers,
dash-escaping, CRC-24 checksum). The signature itself is a raw Ed25519
signature over the normalized text, see :func:`normalize_text`.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from clearlic.common.exceptions import MalformedLicenseDocument

logger = logging.getLogger(__name__)

BEGIN_MESSAGE = "-----BEGIN SIGNED LICENSE-----"
BEGIN_SIGNATURE = "-----BEGIN LICENSE SIGNATURE-----"
END_SIGNATURE = "-----END LICENSE SIGNATURE-----"

SIGNATURE_LENGTH = 64
LINE_TERMINATOR = "\r\n"

CRC24_INIT = 0xB704CE
CRC24_POLY = 0x1864CFB

_NEWLINE = re.compile(r"\r\n|[\r\n]")


@dataclass(frozen=True)
class ClearSignDocument:
    """Normalized clear text and the first signature found in the armor."""

    plaintext: str
    signature: bytes
    headers: dict[str, str] = field(default_factory=dict)


def normalize_text(text: str) -> str:
    """Trim every line and join with CRLF, dropping trailing empty lines.

    This is the exact form that gets signed and verified.
    """
    lines = [line.strip() for line in _NEWLINE.split(text)]
    while lines and not lines[-1]:
        lines.pop()
    return LINE_TERMINATOR.join(lines)


def crc24(data: bytes) -> int:
    """OpenPGP CRC-24 (RFC 4880 section 6.1)."""
    crc = CRC24_INIT
    for byte in data:
        crc ^= byte << 16
        for _ in range(8):
            crc <<= 1
            if crc & 0x1000000:
                crc ^= CRC24_POLY
    return crc & 0xFFFFFF


def parse_clear_signed(raw: bytes) -> ClearSignDocument:
    """Split an armored license into normalized clear text and signature."""
    lines = iter(raw.splitlines())

    _read_begin_marker(lines)
    headers = _read_headers(lines)
    plaintext = _read_clear_text(lines)
    _read_headers(lines)
    signature = _read_signature(lines)

    return ClearSignDocument(plaintext=plaintext, signature=signature, headers=headers)


def armor_clear_signed(
    text: str, signature: bytes, headers: dict[str, str] | None = None
) -> bytes:
    """Wrap clear text and a signature into the armored license format."""
    if headers is None:
        headers = {"Hash": "Ed25519"}

    out = [BEGIN_MESSAGE]
    out.extend(f"{key}: {value}" for key, value in headers.items())
    out.append("")
    for line in normalize_text(text).split(LINE_TERMINATOR):
        # dash-escape anything that could be mistaken for a marker
        out.append(f"- {line}" if line.startswith("-") else line)

    out.append(BEGIN_SIGNATURE)
    out.append("")
    encoded = base64.b64encode(signature).decode("ascii")
    out.extend(encoded[i : i + 64] for i in range(0, len(encoded), 64))
    checksum = crc24(signature).to_bytes(3, "big")
    out.append("=" + base64.b64encode(checksum).decode("ascii"))
    out.append(END_SIGNATURE)

    return ("\n".join(out) + "\n").encode("utf-8")


def _next_line(lines: Iterator[bytes], section: str) -> bytes:
    line = next(lines, None)
    if line is None:
        msg = f"Truncated license document: unexpected end of {section}"
        raise MalformedLicenseDocument(msg)
    return line


def _is_marker(line: bytes, marker: str) -> bool:
    return line.rstrip() == marker.encode("ascii")


def _read_begin_marker(lines: Iterator[bytes]) -> None:
    while True:
        line = next(lines, None)
        if line is None:
            msg = "Not a signed license: begin marker not found"
            raise MalformedLicenseDocument(msg)
        if _is_marker(line, BEGIN_MESSAGE):
            return
        if line.strip():
            msg = "Not a signed license: unexpected data before begin marker"
            raise MalformedLicenseDocument(msg)


def _read_headers(lines: Iterator[bytes]) -> dict[str, str]:
    headers: dict[str, str] = {}
    while True:
        line = _next_line(lines, "armor headers").strip()
        if not line:
            return headers
        key, sep, value = line.partition(b": ")
        if not sep:
            msg = f"Malformed armor header: {line!r}"
            raise MalformedLicenseDocument(msg)
        try:
            headers[key.decode("ascii")] = value.decode("utf-8")
        except UnicodeDecodeError as e:
            msg = f"Malformed armor header: {line!r}"
            raise MalformedLicenseDocument(msg) from e


def _read_clear_text(lines: Iterator[bytes]) -> str:
    content: list[bytes] = []
    for line in lines:
        if _is_marker(line, BEGIN_SIGNATURE):
            break
        if line.startswith(b"- "):
            line = line[2:]
        content.append(line)
    else:
        msg = "Clear-text boundary not found: missing signature section"
        raise MalformedLicenseDocument(msg)

    try:
        text = b"\n".join(content).decode("utf-8")
    except UnicodeDecodeError as e:
        msg = f"License text is not valid UTF-8: {e}"
        raise MalformedLicenseDocument(msg) from e

    return normalize_text(text)


def _read_signature(lines: Iterator[bytes]) -> bytes:
    body: list[bytes] = []
    checksum: bytes | None = None
    while True:
        line = _next_line(lines, "signature").strip()
        if _is_marker(line, END_SIGNATURE):
            break
        if checksum is not None:
            msg = "Unexpected data after armor checksum"
            raise MalformedLicenseDocument(msg)
        if line.startswith(b"=") and len(line) == 5:  # noqa: PLR2004
            checksum = line[1:]
        elif line:
            body.append(line)

    try:
        data = base64.b64decode(b"".join(body), validate=True)
        expected = base64.b64decode(checksum, validate=True) if checksum else None
    except binascii.Error as e:
        msg = f"Malformed signature armor: {e}"
        raise MalformedLicenseDocument(msg) from e

    if expected is not None and int.from_bytes(expected, "big") != crc24(data):
        msg = "Signature armor checksum mismatch"
        raise MalformedLicenseDocument(msg)

    if not data:
        msg = "No signature found in license document"
        raise MalformedLicenseDocument(msg)
    if len(data) % SIGNATURE_LENGTH:
        msg = f"Unexpected signature length: {len(data)} bytes"
        raise MalformedLicenseDocument(msg)

    count = len(data) // SIGNATURE_LENGTH
    if count > 1:
        logger.debug("License carries %d signatures, using the first", count)
    return data[:SIGNATURE_LENGTH]
