"""Abstract cache store interface.

The CLI depends on BaseCacheStore, not on a concrete backend, so stores are
swappable without touching the review pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from commitguard_store.models import CacheEntry


class BaseCacheStore(ABC):
    """Content-addressed, time-boxed verdict cache.

    Caching is an optimisation: implementations must never raise from get()
    or put(). A read problem is a miss; a write problem is logged.
    """

    @abstractmethod
    def get(self, key: str) -> CacheEntry | None:
        """Return the live entry for ``key``, or None if absent or expired."""

    @abstractmethod
    def put(self, key: str, verdict: str, backend: str, model: str) -> None:
        """Store (or overwrite) the verdict for ``key``. Best effort."""

    @abstractmethod
    def list_entries(self) -> list[CacheEntry]:
        """Every stored entry, expired ones included, oldest first."""

    @abstractmethod
    def clear(self) -> int:
        """Delete every entry and return how many were removed."""

    @abstractmethod
    def prune(self) -> int:
        """Delete expired entries and return how many were removed."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Subclasses that need cleanup override this.
        Default is a no-op so callers can always call close() safely.
        """
