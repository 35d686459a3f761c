"""Infrastructure layer: revalidation cache stores.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path  # noqa: TC003

from pydantic import ValidationError

from clearlic.common.models import CacheEntry, CacheFile

logger = logging.getLogger(__name__)


class MemoryCacheStore:
    """Process-local cache store."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[key] = entry


class JsonFileCacheStore:
    """Persistent cache store backed by a single JSON file.

    Every write re-reads the file, adds its entry and rewrites the whole file
    through a temporary sibling and ``os.replace``. Readers never observe a
    partially written file. The thread lock only covers this process: two
    processes writing different IDs at the same moment can drop one entry,
    which costs one extra online verification for that ID and nothing else.
    """

    def __init__(self, file_path: Path):
        self.file_path = file_path
        self._lock = threading.Lock()

    def _load(self) -> CacheFile:
        try:
            return CacheFile.model_validate_json(self.file_path.read_bytes())
        except FileNotFoundError:
            return CacheFile()
        except (OSError, ValidationError) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", self.file_path, e)
            return CacheFile()

    def _save(self, cache: CacheFile) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.file_path.parent, prefix=self.file_path.name, suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(cache.model_dump_json())
            os.replace(tmp_name, self.file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._load().entries.get(key)

    def put(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            cache = self._load()
            cache.entries[key] = entry
            self._save(cache)
