import json
import threading
from pathlib import Path

from clearlic.client.infrastructure.cache_store import (
    JsonFileCacheStore,
    MemoryCacheStore,
)
from clearlic.common.models import CacheEntry


def test_memory_store() -> None:
    store = MemoryCacheStore()
    assert store.get("1") is None
    store.put("1", CacheEntry(text="OK", timestamp=10))
    assert store.get("1") == CacheEntry(text="OK", timestamp=10)


def test_json_store_persists(tmp_path: Path) -> None:
    path = tmp_path / "cache" / "license.json"
    JsonFileCacheStore(path).put("1234", CacheEntry(text="OK", timestamp=100.5))

    reopened = JsonFileCacheStore(path)
    assert reopened.get("1234") == CacheEntry(text="OK", timestamp=100.5)
    assert json.loads(path.read_text())["entries"]["1234"]["text"] == "OK"


def test_json_store_last_write_wins(tmp_path: Path) -> None:
    store = JsonFileCacheStore(tmp_path / "license.json")
    store.put("1", CacheEntry(text="OK", timestamp=1))
    store.put("1", CacheEntry(text="REVOKED", timestamp=2))
    assert store.get("1") == CacheEntry(text="REVOKED", timestamp=2)


def test_json_store_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "license.json"
    path.write_text("{not json")

    store = JsonFileCacheStore(path)
    assert store.get("1") is None
    store.put("1", CacheEntry(text="OK", timestamp=1))
    assert store.get("1") is not None


def test_json_store_concurrent_writes(tmp_path: Path) -> None:
    store = JsonFileCacheStore(tmp_path / "license.json")

    def write(i: int) -> None:
        store.put(str(i), CacheEntry(text="OK", timestamp=i))

    threads = [threading.Thread(target=write, args=(i,)) for i in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    for i in range(20):
        assert store.get(str(i)) == CacheEntry(text="OK", timestamp=i)
    assert list(tmp_path.iterdir()) == [tmp_path / "license.json"]


def test_json_store_keeps_entries_from_other_writers(tmp_path: Path) -> None:
    path = tmp_path / "license.json"
    first = JsonFileCacheStore(path)
    second = JsonFileCacheStore(path)

    first.put("1", CacheEntry(text="OK", timestamp=1))
    second.put("2", CacheEntry(text="OK", timestamp=2))
    first.put("3", CacheEntry(text="OK", timestamp=3))

    assert set(json.loads(path.read_text())["entries"]) == {"1", "2", "3"}
