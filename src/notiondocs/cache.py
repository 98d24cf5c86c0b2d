"""Process-wide TTL cache for decoded API responses.

One :class:`ResponseCache` is meant to live for the whole process so that
repeated lookups of the same remote resource (a page mentioned from many
documents, a page reached both through a link and through a parent's
``Sub-Items``) are served from memory.  :func:`get_default_cache` returns
that shared instance; :class:`~notiondocs.notion_api.fetcher.NotionFetcher`
uses it unless a cache is injected explicitly.

Concurrency: a reader/writer lock admits many concurrent ``get`` calls or a
single writer (``set``, ``cleanup``, ``clear``).
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any


class ReadWriteLock:
    """Many-readers / one-writer lock built on a condition variable.

    Writers are preferred: once a writer is waiting, new readers block so a
    steady stream of reads cannot starve ``set``.
    """

    __slots__ = ("_cond", "_readers", "_writer", "_writers_waiting")

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
                if self._readers == 0:
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
    """A cached value and the monotonic instant after which it is stale."""

    key: str
    value: Any
    expires_at: float


class ResponseCache:
    """In-memory TTL cache.

    Parameters
    ----------
    clock:
        Zero-argument callable returning the current time in seconds.
        Defaults to :func:`time.monotonic`; tests inject a fake clock.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._items: dict[str, CacheEntry] = {}
        self._lock = ReadWriteLock()

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store *value* under *key* for *ttl* seconds."""
        entry = CacheEntry(key=key, value=value, expires_at=self._clock() + ttl)
        with self._lock.write():
            self._items[key] = entry

    def get(self, key: str) -> tuple[Any, bool]:
        """Return ``(value, True)`` while the entry is fresh, else
        ``(None, False)``.  An expired entry is indistinguishable from a
        missing one."""
        with self._lock.read():
            entry = self._items.get(key)
        if entry is None or self._clock() >= entry.expires_at:
            return None, False
        return entry.value, True

    def cleanup(self) -> int:
        """Evict every expired entry and return how many were removed."""
        now = self._clock()
        with self._lock.write():
            stale = [k for k, e in self._items.items() if now >= e.expires_at]
            for key in stale:
                del self._items[key]
        return len(stale)

    def clear(self) -> None:
        with self._lock.write():
            self._items.clear()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._items)


_default_cache: ResponseCache | None = None
_default_cache_lock = threading.Lock()


def get_default_cache() -> ResponseCache:
    """Return the process-wide :class:`ResponseCache`, creating it once."""
    global _default_cache
    with _default_cache_lock:
        if _default_cache is None:
            _default_cache = ResponseCache()
        return _default_cache
