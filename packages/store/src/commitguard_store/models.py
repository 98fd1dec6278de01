"""Cache data model.

Decoupled from commitguard_core so the store layer can be used independently
and commitguard_core has no knowledge of persistence concerns.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field

# Entries older than this are treated as absent.
RETENTION_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class CacheEntry:
    """One cached verdict, keyed by the fingerprint of (changes, backend, model)."""

    key: str
    verdict: str
    backend: str
    model: str
    created_at: float = field(default_factory=time.time)  # epoch seconds

    def is_expired(self, now: float | None = None, retention: float = RETENTION_SECONDS) -> bool:
        now = time.time() if now is None else now
        return now - self.created_at >= retention

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> CacheEntry:
        return cls(
            key=str(d["key"]),
            verdict=str(d["verdict"]),
            backend=str(d.get("backend", "")),
            model=str(d.get("model", "")),
            created_at=float(d["created_at"]),
        )
