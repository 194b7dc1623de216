"""Simple TTL cache used by the in-memory event store."""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A cached value with an optional expiration time."""

    value: T
    expires_at: Optional[float]

    def is_expired(self, now: float) -> bool:
        """Entries without an expiration never expire."""
        return self.expires_at is not None and now >= self.expires_at


class TTLCache(Generic[T]):
    """Per-entry TTL cache with LRU eviction.

    A ttl of 0 stores the value without expiry. Expired entries are dropped
    lazily on read.

    Example:
        cache = TTLCache[Event](maxsize=512)
        cache.set("600041234", event, ttl=300)
        cache.set("600040000", finished_event, ttl=0)  # kept until evicted
        cache.get("600041234")
    """

    def __init__(self, maxsize: int = 1024, clock: Callable[[], float] = time.time) -> None:
        self.maxsize = max(1, int(maxsize))
        self._clock = clock
        self._cache: OrderedDict[str, CacheEntry[T]] = OrderedDict()

    def get(self, key: str) -> Optional[T]:
        """Return the value for key, or None if missing or expired."""
        entry = self._cache.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._cache[key]
            return None
        # LRU touch
        self._cache.move_to_end(key)
        return entry.value

    def set(self, key: str, value: T, ttl: float = 0) -> None:
        """Store a value; ttl is in seconds, 0 means no expiry."""
        if ttl < 0:
            raise ValueError(f"ttl must be >= 0, got {ttl}")
        expires_at = self._clock() + ttl if ttl > 0 else None
        self._cache[key] = CacheEntry(value=value, expires_at=expires_at)
        self._cache.move_to_end(key)
        while len(self._cache) > self.maxsize:
            self._cache.popitem(last=False)

    def invalidate(self, key: str) -> bool:
        """Remove a key. Returns True if it was present."""
        if key in self._cache:
            del self._cache[key]
            return True
        return False

    def clear(self) -> int:
        count = len(self._cache)
        self._cache.clear()
        return count

    def __len__(self) -> int:
        """Number of entries in cache (including expired)."""
        return len(self._cache)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
