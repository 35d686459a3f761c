"""
Online license revalidation with a bounded-age result cache.
"""

from __future__ import annotations

import logging
import threading
import time
import weakref
from datetime import timedelta
from typing import TYPE_CHECKING

import requests

from clearlic.common.exceptions import RemoteVerificationFailed
from clearlic.common.models import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Callable

    from clearlic.common.interfaces import ICacheStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(days=30)
EXPECTED_RESPONSE = "OK"


class LicenseRevalidator:
    """Posts a license to the verification endpoint, caching the answer per ID.

    A cached answer younger than ``max_age`` is reused without touching the
    network. Requests for the same license ID are serialized so that at most
    one is in flight; different IDs proceed in parallel.
    """

    def __init__(
        self,
        cache: ICacheStore,
        verification_url: str,
        session: requests.Session | None = None,
        max_age: timedelta = DEFAULT_MAX_AGE,
        timeout: float | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.cache = cache
        self.verification_url = verification_url.rstrip("/")
        self.session = session or requests.Session()
        self.max_age = max_age
        self.timeout = timeout
        self.clock = clock
        # entries vanish once no caller holds the lock
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    def url_for(self, license_id: int) -> str:
        return f"{self.verification_url}/verify/{license_id}"

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def _fresh_entry(self, key: str) -> CacheEntry | None:
        entry = self.cache.get(key)
        if entry is None:
            return None
        age = self.clock() - entry.timestamp
        if age < self.max_age.total_seconds():
            return entry
        logger.debug("Cached verification for license %s is stale", key)
        return None

    def _request(self, license_id: int, raw: bytes) -> str:
        url = self.url_for(license_id)
        logger.info("Verifying license %s online", license_id)
        response = self.session.post(
            url,
            data=raw,
            headers={"Content-Type": "application/octet-stream"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.content.decode("utf-8").strip()

    def fetch_status(self, license_id: int, raw: bytes) -> str:
        """Return the trimmed verification response for a license."""
        key = str(license_id)
        entry = self._fresh_entry(key)
        if entry is not None:
            logger.debug("Using cached verification for license %s", key)
            return entry.text

        with self._lock_for(key):
            # another caller may have refreshed the entry while we waited
            entry = self._fresh_entry(key)
            if entry is not None:
                return entry.text

            try:
                text = self._request(license_id, raw)
            except (requests.RequestException, UnicodeDecodeError) as e:
                entry = self._fresh_entry(key)
                if entry is not None:
                    logger.warning(
                        "Online verification failed, using cached result: %s", e
                    )
                    return entry.text
                msg = f"Online license verification failed: {e}"
                raise RemoteVerificationFailed(msg) from e

            self.cache.put(key, CacheEntry(text=text, timestamp=self.clock()))
            return text

    def verify(self, license_id: int, raw: bytes) -> None:
        """Raise RemoteVerificationFailed unless the issuer answers ``OK``."""
        message = self.fetch_status(license_id, raw)
        if message != EXPECTED_RESPONSE:
            logger.info("License %s rejected by issuer: %s", license_id, message)
            raise RemoteVerificationFailed(message)
