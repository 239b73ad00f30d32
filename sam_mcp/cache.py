"""
In-memory TTL cache for provider search results

Entries expire lazily: an expired entry is removed by the read that finds it,
there is no background sweeper. No capacity bound, the key space is one entry
per distinct query text per calendar day.
"""

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Iterator


class ReadWriteLock:
    """Many concurrent readers or a single writer, writers are not starved"""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers: int = 0
        self._writer: bool = False
        self._writers_waiting: int = 0

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


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """
    Key -> value store with per-entry expiry, safe for concurrent use

    Usage:
        cache = TTLCache()
        cache.set("sam_search:cyber:2024-05-01", {"results": []}, timedelta(hours=12))
        value, found = cache.get("sam_search:cyber:2024-05-01")
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock: Callable[[], float] = clock
        self._items: dict[str, CacheEntry] = {}
        self._lock = ReadWriteLock()

    def set(self, key: str, value: Any, ttl: timedelta | float) -> None:
        """Store value under key, replacing any previous entry; it expires ttl from now"""
        seconds: float = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)
        with self._lock.write():
            self._items[key] = CacheEntry(value=value, expires_at=self._clock() + seconds)

    def get(self, key: str) -> tuple[Any, bool]:
        """Return (value, True) for a live entry, else (None, False); expired entries are evicted"""
        with self._lock.read():
            entry: CacheEntry | None = self._items.get(key)
            now: float = self._clock()

        if entry is None:
            return None, False

        if now < entry.expires_at:
            return entry.value, True

        with self._lock.write():
            # A concurrent set() may have replaced the entry since it was read
            if self._items.get(key) is entry:
                del self._items[key]

        return None, False

    def delete(self, key: str) -> None:
        with self._lock.write():
            self._items.pop(key, None)

    def clear(self) -> None:
        with self._lock.write():
            self._items.clear()

    def __len__(self) -> int:
        """Number of stored entries, including expired ones not yet read"""
        with self._lock.read():
            return len(self._items)
