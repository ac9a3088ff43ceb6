"""In-memory TTL cache for PhishTank lookups and database snapshots."""

import logging
import math
from typing import Any, NamedTuple

from cachetools import TLRUCache

from phishtank_mcp.utils.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class CacheEntry(NamedTuple):
    """A cached value and its time-to-live in seconds."""

    value: Any
    ttl: float


def _expires_at(key: str, entry: CacheEntry, now: float) -> float:
    return now + entry.ttl


class TTLCache:
    """
    Key-value store where every entry carries its own TTL.

    Backed by cachetools.TLRUCache: an entry stops being readable once
    its TTL has elapsed, and expired entries are dropped on every write.
    Capacity is unbounded, so entries only ever leave by expiry or
    explicit removal.
    """

    def __init__(
        self,
        default_ttl: float = 300,
        clock: Clock | None = None,
    ):
        """
        Initialize cache.

        Args:
            default_ttl: TTL in seconds used when set() is called without one
            clock: Time source, defaults to the system clock
        """
        self.default_ttl = default_ttl
        self.clock = clock or SystemClock()
        self._store: TLRUCache = TLRUCache(
            maxsize=math.inf, ttu=_expires_at, timer=self.clock.time
        )

    def get(self, key: str) -> Any | None:
        """
        Get cached value if present and not expired.

        Args:
            key: Cache key

        Returns:
            Cached value, or None on a miss
        """
        entry = self._store.get(key)
        if entry is None:
            logger.debug(f"Cache MISS for key: {key}")
            return None

        logger.debug(f"Cache HIT for key: {key}")
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """
        Store a value, replacing any previous entry for the key.

        Args:
            key: Cache key
            value: Value to store
            ttl: Seconds until the value expires (default_ttl if None)
        """
        ttl = self.default_ttl if ttl is None else ttl
        self._store[key] = CacheEntry(value=value, ttl=ttl)
        logger.debug(f"Cached key {key} for {ttl}s")

    def delete(self, key: str) -> bool:
        """Remove a key, returning whether it was present."""
        return self._store.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all cached entries."""
        self._store.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)
