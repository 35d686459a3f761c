import gc
import threading
import time
from datetime import timedelta
from unittest.mock import Mock

import pytest
import requests

from clearlic.client.infrastructure.cache_store import MemoryCacheStore
from clearlic.client.revalidation import LicenseRevalidator
from clearlic.common.exceptions import RemoteVerificationFailed
from clearlic.common.models import CacheEntry

from .conftest import FakeClock, MockResponse

DAY = 24 * 60 * 60


def test_fetch_posts_raw_bytes(revalidator: LicenseRevalidator, session: Mock) -> None:
    assert revalidator.fetch_status(1234, b"raw license") == "OK"

    session.post.assert_called_once_with(
        "https://license.example.test/verify/1234",
        data=b"raw license",
        headers={"Content-Type": "application/octet-stream"},
        timeout=None,
    )


def test_fetch_stores_trimmed_text(
    revalidator: LicenseRevalidator, session: Mock, clock: FakeClock
) -> None:
    session.post.return_value = MockResponse(200, b"  REVOKED \r\n")

    assert revalidator.fetch_status(7, b"raw") == "REVOKED"
    assert revalidator.cache.get("7") == CacheEntry(text="REVOKED", timestamp=clock.now)


def test_cache_hit_within_window(
    revalidator: LicenseRevalidator, session: Mock, clock: FakeClock
) -> None:
    revalidator.fetch_status(1, b"raw")
    clock.advance(30 * DAY - 1)

    assert revalidator.fetch_status(1, b"raw") == "OK"
    assert session.post.call_count == 1


def test_cache_refreshed_after_window(
    revalidator: LicenseRevalidator, session: Mock, clock: FakeClock
) -> None:
    revalidator.fetch_status(1, b"raw")
    clock.advance(31 * DAY)
    session.post.return_value = MockResponse(200, b"REVOKED")

    assert revalidator.fetch_status(1, b"raw") == "REVOKED"
    assert session.post.call_count == 2  # noqa: PLR2004


def test_cache_keyed_by_license_id(
    revalidator: LicenseRevalidator, session: Mock
) -> None:
    revalidator.fetch_status(1, b"raw")
    revalidator.fetch_status(2, b"raw")
    assert session.post.call_count == 2  # noqa: PLR2004


def test_verify_accepts_ok(revalidator: LicenseRevalidator) -> None:
    revalidator.verify(1, b"raw")


def test_verify_rejects_other_text(
    revalidator: LicenseRevalidator, session: Mock
) -> None:
    session.post.return_value = MockResponse(200, b"REVOKED\n")

    with pytest.raises(RemoteVerificationFailed) as excinfo:
        revalidator.verify(1, b"raw")
    assert str(excinfo.value) == "REVOKED"


def test_transport_error_without_cache(
    revalidator: LicenseRevalidator, session: Mock
) -> None:
    session.post.side_effect = requests.ConnectionError("unreachable")

    with pytest.raises(RemoteVerificationFailed, match="unreachable"):
        revalidator.fetch_status(1, b"raw")
    assert revalidator.cache.get("1") is None


def test_http_error_status(revalidator: LicenseRevalidator, session: Mock) -> None:
    session.post.return_value = MockResponse(500, b"OK")

    with pytest.raises(RemoteVerificationFailed):
        revalidator.fetch_status(1, b"raw")


def test_stale_cache_not_used_on_error(
    revalidator: LicenseRevalidator, session: Mock, clock: FakeClock
) -> None:
    revalidator.fetch_status(1, b"raw")
    clock.advance(31 * DAY)
    session.post.side_effect = requests.Timeout("slow")

    with pytest.raises(RemoteVerificationFailed):
        revalidator.fetch_status(1, b"raw")


def test_fresh_entry_written_during_failure_is_used(clock: FakeClock) -> None:
    cache = MemoryCacheStore()
    session = Mock(spec=requests.Session)

    def fail_after_concurrent_write(*args, **kwargs):
        cache.put("1", CacheEntry(text="OK", timestamp=clock.now))
        raise requests.ConnectionError("reset")

    session.post.side_effect = fail_after_concurrent_write
    revalidator = LicenseRevalidator(cache, "https://v.test", session=session, clock=clock)

    assert revalidator.fetch_status(1, b"raw") == "OK"


def test_custom_max_age_and_timeout(session: Mock, clock: FakeClock) -> None:
    revalidator = LicenseRevalidator(
        MemoryCacheStore(),
        "https://v.test",
        session=session,
        max_age=timedelta(hours=1),
        timeout=5.0,
        clock=clock,
    )
    revalidator.fetch_status(1, b"raw")
    clock.advance(3600)
    revalidator.fetch_status(1, b"raw")

    assert session.post.call_count == 2  # noqa: PLR2004
    assert session.post.call_args.kwargs["timeout"] == 5.0  # noqa: PLR2004


def test_one_request_in_flight_per_license() -> None:
    release = threading.Event()
    session = Mock(spec=requests.Session)

    def slow_post(*args, **kwargs):
        release.wait(5)
        return MockResponse(200, b"OK")

    session.post.side_effect = slow_post
    revalidator = LicenseRevalidator(MemoryCacheStore(), "https://v.test", session=session)

    results: list[str] = []
    threads = [
        threading.Thread(target=lambda: results.append(revalidator.fetch_status(9, b"raw")))
        for _ in range(5)
    ]
    for thread in threads:
        thread.start()
    time.sleep(0.1)
    release.set()
    for thread in threads:
        thread.join(5)

    assert results == ["OK"] * 5
    assert session.post.call_count == 1


def test_locks_released_after_use(revalidator: LicenseRevalidator) -> None:
    for license_id in range(100):
        revalidator.fetch_status(license_id, b"raw")
    gc.collect()

    assert len(revalidator._locks) == 0
