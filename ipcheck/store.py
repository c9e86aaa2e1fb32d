from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path

from ipcheck.errors import StoreError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS ip_stats (
    ip    TEXT PRIMARY KEY,
    count INTEGER NOT NULL
)
"""


class VisitStore:
    """Persistent per-IP visit counters in a single SQLite table.

    One connection is shared by all request threads; a lock serializes it.
    """

    def __init__(self, path: str) -> None:
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(path, check_same_thread=False)
            with self._conn:
                self._conn.execute(_SCHEMA)
        except sqlite3.Error as exc:
            raise StoreError(f"cannot open visit store at {path}: {exc}") from exc
        logger.info("Visit store opened at %s", path)

    @property
    def count(self) -> int:
        """Number of distinct addresses seen."""
        with self._lock:
            row = self._execute("SELECT COUNT(*) FROM ip_stats").fetchone()
        return int(row[0])

    def increment(self, ip: str) -> int:
        """Add one visit for ip and return its new total."""
        with self._lock:
            try:
                with self._conn:
                    self._conn.execute(
                        "INSERT INTO ip_stats (ip, count) VALUES (?, 1) "
                        "ON CONFLICT(ip) DO UPDATE SET count = count + 1",
                        (ip,),
                    )
                    row = self._conn.execute(
                        "SELECT count FROM ip_stats WHERE ip = ?", (ip,)
                    ).fetchone()
            except sqlite3.Error as exc:
                raise StoreError(f"cannot update visit count for {ip}: {exc}") from exc
        return int(row[0])

    def get(self, ip: str) -> int:
        with self._lock:
            row = self._execute("SELECT count FROM ip_stats WHERE ip = ?", (ip,)).fetchone()
        return int(row[0]) if row else 0

    def items(self) -> list[tuple[str, int]]:
        """All (ip, count) pairs, ordered by ip."""
        with self._lock:
            rows = self._execute("SELECT ip, count FROM ip_stats ORDER BY ip").fetchall()
        return [(ip, int(count)) for ip, count in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise StoreError(f"visit store query failed: {exc}") from exc
