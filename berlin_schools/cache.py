"""In-memory key-value store with a time-to-live per entry.

Fetchers and the geocoder take a ``TTLCache`` as an argument instead of
reaching for module-level state, so each caller decides how long data stays
fresh.
"""

import threading
import time
from collections.abc import Callable, Hashable
from typing import Any

FEED_TTL = 60 * 60
GEOCODE_TTL = 24 * 60 * 60

_MISSING = object()


class TTLCache:
    """Dict-like store whose entries expire ``ttl`` seconds after being set."""

    def __init__(self, ttl: float, *, clock: Callable[[], float] = time.monotonic):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return default
            return value

    def set(self, key: Hashable, value: Any) -> None:
        """Store ``value`` and drop whatever has expired meanwhile."""
        now = self._clock()
        with self._lock:
            self._drop_expired(now)
            self._entries[key] = (now + self.ttl, value)

    def get_or_set(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        """Return the fresh value for ``key``, computing and storing it if needed.

        Exceptions raised by ``factory`` propagate and nothing is stored.
        """
        value = self.get(key, _MISSING)
        if value is _MISSING:
            value = factory()
            self.set(key, value)
        return value

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were dropped."""
        with self._lock:
            return self._drop_expired(self._clock())

    def _drop_expired(self, now: float) -> int:
        stale = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

