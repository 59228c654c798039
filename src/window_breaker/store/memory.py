"""In-process counter store with per-key TTL."""

from __future__ import annotations

import logging
import threading
import time
from datetime import timedelta
from typing import Any

from window_breaker.exceptions import CacheMissError, StoreError
from window_breaker.models import CounterEntry

log = logging.getLogger(__name__)


class MemoryCounterStore:
    """Dict-backed counter store guarded by a ``threading.Lock``.

    Only shares state within a single process. Expired entries are dropped
    lazily on access. Writes also sweep every expired entry once
    ``purge_interval`` has elapsed since the last sweep, so timestamped keys
    that are never read again do not accumulate. A non-positive
    ``purge_interval`` disables the sweep; :meth:`purge_expired` still works.
    """

    def __init__(
        self,
        default_ttl: timedelta = timedelta(0),
        purge_interval: timedelta = timedelta(minutes=10),
    ) -> None:
        self._default_ttl = default_ttl
        self._purge_interval = purge_interval.total_seconds()
        self._next_purge = time.monotonic() + self._purge_interval
        self._store: dict[str, CounterEntry] = {}
        self._lock = threading.Lock()

    def _expires_at(self, ttl: timedelta | None) -> float:
        if ttl is None or ttl <= timedelta(0):
            ttl = self._default_ttl
        if ttl <= timedelta(0):
            return 0.0
        return time.time() + ttl.total_seconds()

    def _live_entry(self, key: str) -> CounterEntry | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired:
            del self._store[key]
            return None
        return entry

    def _purge_locked(self) -> int:
        expired = [k for k, entry in self._store.items() if entry.is_expired]
        for key in expired:
            del self._store[key]
        if expired:
            log.debug("Purged %d expired counters", len(expired))
        return len(expired)

    def _maybe_purge_locked(self) -> None:
        if self._purge_interval <= 0:
            return
        now = time.monotonic()
        if now >= self._next_purge:
            self._next_purge = now + self._purge_interval
            self._purge_locked()

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._live_entry(key)
        if entry is None:
            raise CacheMissError(key)
        return entry.value

    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        with self._lock:
            self._maybe_purge_locked()
            self._store[key] = CounterEntry(key=key, value=value, expires_at=self._expires_at(ttl))

    def get_multi(self, keys: list[str]) -> dict[str, int]:
        result: dict[str, int] = {}
        with self._lock:
            for key in keys:
                entry = self._live_entry(key)
                if entry is not None:
                    result[key] = int(entry.value)
        return result

    def increment(self, key: str, delta: int, ttl: timedelta | None = None) -> int:
        with self._lock:
            self._maybe_purge_locked()
            entry = self._live_entry(key)
            if entry is None:
                entry = CounterEntry(key=key, value=0, expires_at=self._expires_at(ttl))
                self._store[key] = entry
            if isinstance(entry.value, bool) or not isinstance(entry.value, int):
                raise StoreError(f"Value at {key!r} is not an integer counter")
            entry.value += delta
            return entry.value

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        with self._lock:
            return self._purge_locked()

    def __len__(self) -> int:
        return len(self._store)
