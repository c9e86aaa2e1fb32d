from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator

from ipcheck.classifier import normalize_ip
from ipcheck.models import CacheEntry, GeoRecord

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """Many concurrent readers or one writer.

    Writers are preferred: once a writer is waiting, new readers queue behind
    it, so a steady stream of lookups cannot starve a put.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class GeoCache:
    """Thread-safe in-memory TTL cache of geo records, keyed by normalized IP.

    Entries are never deleted; an expired entry is ignored on read and
    replaced on the next put. With max_entries set, a put of a new key into a
    full cache drops the oldest inserted entry first.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int | None = None,
    ) -> None:
        self._clock = clock
        self._max_entries = max_entries if max_entries and max_entries > 0 else None
        self._lock = ReadWriteLock()
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def get(self, ip: str) -> GeoRecord | None:
        """Return the cached record for ip, or None if absent or expired."""
        key = normalize_ip(ip)
        if key is None:
            return None
        now = self._clock()
        with self._lock.read():
            entry = self._entries.get(key)
        if entry is None or now >= entry.expiry:
            return None
        return entry.record

    def put(self, ip: str, record: GeoRecord, ttl: float) -> None:
        """Insert or overwrite the entry for ip, valid for ttl seconds from now."""
        key = normalize_ip(ip)
        if key is None:
            logger.debug("Not caching unparseable address %r", ip)
            return
        entry = CacheEntry(record=record, expiry=self._clock() + ttl)
        with self._lock.write():
            if key in self._entries:
                del self._entries[key]
            elif self._max_entries and len(self._entries) >= self._max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = entry
