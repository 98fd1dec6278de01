"""SQLiteCacheStore: single-file cache for repos with many cached verdicts.

Schema:
  verdicts: one row per fingerprint key; put() replaces the row whole.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from pathlib import Path

from commitguard_store.base import BaseCacheStore
from commitguard_store.models import RETENTION_SECONDS, CacheEntry

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS verdicts (
    key         TEXT PRIMARY KEY,
    verdict     TEXT NOT NULL,
    backend     TEXT,
    model       TEXT,
    created_at  REAL NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_verdicts_created ON verdicts (created_at);
"""


class SQLiteCacheStore(BaseCacheStore):
    """Stores cached verdicts in a SQLite database.

    The database path defaults to `.commitguard-cache/cache.db`. Configure
    via .commitguard.yml: `cache: sqlite` and `cache_dir: <dir>`.
    """

    def __init__(self, db_path: str | Path = ".commitguard-cache/cache.db", retention: float = RETENTION_SECONDS):
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._retention = retention
        self._conn = sqlite3.connect(str(db_path))
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def get(self, key: str) -> CacheEntry | None:
        try:
            row = self._conn.execute("SELECT * FROM verdicts WHERE key=?", (key,)).fetchone()
        except sqlite3.Error as e:
            logger.debug("Cache lookup failed: %s", e)
            return None
        if row is None:
            return None
        entry = self._row_to_entry(row)
        return None if entry.is_expired(retention=self._retention) else entry

    def put(self, key: str, verdict: str, backend: str, model: str) -> None:
        try:
            self._conn.execute(
                """
                INSERT OR REPLACE INTO verdicts (key, verdict, backend, model, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (key, verdict, backend, model, time.time()),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            logger.warning("Could not write cache: %s", e)

    def list_entries(self) -> list[CacheEntry]:
        rows = self._conn.execute("SELECT * FROM verdicts ORDER BY created_at").fetchall()
        return [self._row_to_entry(r) for r in rows]

    def clear(self) -> int:
        cursor = self._conn.execute("DELETE FROM verdicts")
        self._conn.commit()
        return cursor.rowcount

    def prune(self) -> int:
        cursor = self._conn.execute("DELETE FROM verdicts WHERE created_at <= ?", (time.time() - self._retention,))
        self._conn.commit()
        return cursor.rowcount

    def close(self) -> None:
        self._conn.close()

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> CacheEntry:
        return CacheEntry(
            key=row["key"],
            verdict=row["verdict"],
            backend=row["backend"] or "",
            model=row["model"] or "",
            created_at=row["created_at"],
        )
