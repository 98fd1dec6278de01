"""FileCacheStore: one JSON file per fingerprint, the default cache.

Layout: ``<cache_dir>/<key>.json`` holding a single CacheEntry. Each write
goes to a temporary file in the same directory and is renamed over the
target, so a reader sees either the old entry or the new one, never a
partial file. Concurrent commits writing the same key: last writer wins.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path

from commitguard_store.base import BaseCacheStore
from commitguard_store.models import RETENTION_SECONDS, CacheEntry

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[0-9a-f]{16}$")


class FileCacheStore(BaseCacheStore):
    def __init__(self, cache_dir: str | Path = ".commitguard-cache", retention: float = RETENTION_SECONDS):
        self._dir = Path(cache_dir)
        self._retention = retention

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid cache key: {key!r}")
        return self._dir / f"{key}.json"

    def _read(self, path: Path) -> CacheEntry | None:
        try:
            return CacheEntry.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.debug("Unreadable cache entry %s: %s", path, e)
            return None

    def get(self, key: str) -> CacheEntry | None:
        try:
            path = self._path(key)
        except ValueError:
            return None
        if not path.exists():
            return None
        entry = self._read(path)
        if entry is None or entry.key != key or entry.is_expired(retention=self._retention):
            return None
        return entry

    def put(self, key: str, verdict: str, backend: str, model: str) -> None:
        try:
            path = self._path(key)
            entry = CacheEntry(key=key, verdict=verdict, backend=backend, model=model)
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(entry.to_dict(), f, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, ValueError) as e:
            # Never fail the review because caching failed.
            logger.warning("Could not write cache: %s", e)

    def _entry_files(self) -> list[Path]:
        if not self._dir.is_dir():
            return []
        return [p for p in self._dir.glob("*.json") if _KEY_RE.match(p.stem)]

    def list_entries(self) -> list[CacheEntry]:
        entries = [e for e in (self._read(p) for p in self._entry_files()) if e is not None]
        return sorted(entries, key=lambda e: e.created_at)

    def _delete(self, paths: list[Path]) -> int:
        removed = 0
        for path in paths:
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
        return removed

    def clear(self) -> int:
        return self._delete(self._entry_files())

    def prune(self) -> int:
        stale = []
        for path in self._entry_files():
            entry = self._read(path)
            if entry is None or entry.is_expired(retention=self._retention):
                stale.append(path)
        return self._delete(stale)
