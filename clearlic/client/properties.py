"""
License property extraction and required field parsing.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta, timezone

from clearlic.common.exceptions import InvalidLicenseField, MalformedLicenseDocument

ORDER = "Order"
VALID_UNTIL = "Valid-Until"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_NEWLINE = re.compile(r"\r\n|[\r\n]")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def extract_properties(plaintext: str) -> dict[str, str]:
    """Parse ``Key: Value`` lines into an ordered mapping.

    Only the first ``": "`` separates key from value, so values may contain
    colons. Lines without a separator and repeated keys are rejected.
    """
    properties: dict[str, str] = {}
    if not plaintext:
        return properties

    for number, line in enumerate(_NEWLINE.split(plaintext), start=1):
        key, sep, value = line.partition(": ")
        if not sep:
            msg = f"Malformed license property on line {number}: {line!r}"
            raise MalformedLicenseDocument(msg)
        if key in properties:
            msg = f"Duplicate license property: {key}"
            raise MalformedLicenseDocument(msg)
        properties[key] = value
    return properties


def _require(properties: Mapping[str, str], name: str) -> str:
    value = properties.get(name)
    if value is None:
        msg = f"Missing license property: {name}"
        raise InvalidLicenseField(msg)
    return value


def parse_license_id(properties: Mapping[str, str]) -> int:
    """Return the ``Order`` property as a base-10 integer."""
    value = _require(properties, ORDER)
    if not _INTEGER.fullmatch(value):
        msg = f"Invalid {ORDER}: {value!r}"
        raise InvalidLicenseField(msg)
    return int(value)


def parse_valid_until(properties: Mapping[str, str]) -> date:
    value = _require(properties, VALID_UNTIL)
    if not _ISO_DATE.fullmatch(value):
        msg = f"Invalid {VALID_UNTIL}: {value!r}"
        raise InvalidLicenseField(msg)
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        msg = f"Invalid {VALID_UNTIL}: {value!r}"
        raise InvalidLicenseField(msg) from e


def end_of_day_millis(day: date) -> int:
    """Epoch millis of the last second of ``day`` in UTC."""
    start_of_next_day = datetime.combine(
        day + timedelta(days=1), time.min, tzinfo=timezone.utc
    )
    return to_millis(start_of_next_day - timedelta(seconds=1))


def parse_expiry(properties: Mapping[str, str]) -> int:
    """Return the expiry instant of ``Valid-Until`` as epoch millis."""
    try:
        return end_of_day_millis(parse_valid_until(properties))
    except OverflowError as e:
        msg = f"Invalid {VALID_UNTIL}: {properties[VALID_UNTIL]!r}"
        raise InvalidLicenseField(msg) from e


def to_millis(moment: datetime) -> int:
    """Convert an aware datetime to epoch millis."""
    return (moment - EPOCH) // timedelta(milliseconds=1)


def from_millis(millis: int) -> datetime:
    return EPOCH + timedelta(milliseconds=millis)
