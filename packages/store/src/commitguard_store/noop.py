"""No-op cache, used for `cache: none` and `commitguard review --no-cache`.

Using a NoOpCacheStore rather than None lets the CLI always pass a store to
the pipeline and call close() without conditional checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from commitguard_store.base import BaseCacheStore

if TYPE_CHECKING:
    from commitguard_store.models import CacheEntry


class NoOpCacheStore(BaseCacheStore):
    """Every lookup misses and every write is discarded."""

    def get(self, key: str) -> CacheEntry | None:
        return None

    def put(self, key: str, verdict: str, backend: str, model: str) -> None:
        pass  # intentional no-op

    def list_entries(self) -> list[CacheEntry]:
        return []

    def clear(self) -> int:
        return 0

    def prune(self) -> int:
        return 0
