"""
Cache - small in-memory TTL cache with LRU eviction.

Used for per-IP region lookups so external geolocation providers are
queried at most once per TTL window.
"""

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class CacheEntry:
    value: Any
    expires_at: float | None


class MemoryCache:
    """Fast in-memory cache with LRU eviction and per-entry TTL."""

    def __init__(self, max_size: int = 1024, clock: Callable[[], float] = time.monotonic):
        self.max_size = max_size
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        # Check expiration
        if entry.expires_at is not None and entry.expires_at <= self._clock():
            self.delete(key)
            return None

        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        expires_at = self._clock() + ttl if ttl else None
        self._entries[key] = CacheEntry(value=value, expires_at=expires_at)
        self._entries.move_to_end(key)

        # Evict least recently used entries
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    @property
    def size(self) -> int:
        return len(self._entries)
