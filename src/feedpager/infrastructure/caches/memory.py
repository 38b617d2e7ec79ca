"""In-memory cache implementation."""

import logging
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from cachetools import TLRUCache  # type: ignore[import-untyped]

from feedpager.core.entities.cache_config import CacheConfig
from feedpager.core.entities.cache_entry import CacheEntry
from feedpager.core.entities.cache_stats import CacheStats

logger = logging.getLogger(__name__)


def _entry_expiry(_key: str, entry: CacheEntry, _now: float) -> float:
    """Time-to-use function handing each entry's own expiry to TLRUCache."""
    return entry.expires_at


class MemoryCache:
    """In-memory key-value cache with per-entry TTL.

    Suitable for a single process (one UI session or one worker). Uses
    cachetools' TLRUCache so every entry expires independently, and
    least-recently-used entries are dropped once ``maxsize`` is reached.
    Expiry is checked lazily when entries are accessed.
    """

    def __init__(
        self,
        maxsize: int = 1000,
        default_ttl: timedelta = timedelta(minutes=5),
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the in-memory cache.

        Args:
            maxsize: Maximum number of items in the cache.
            default_ttl: TTL used when ``set`` is called without one.
            timer: Clock returning seconds; injectable for tests.
        """
        if default_ttl <= timedelta(0):
            raise ValueError("default_ttl must be positive")
        self._maxsize = maxsize
        self._default_ttl = default_ttl
        self._timer = timer
        self._cache: TLRUCache[str, CacheEntry] = TLRUCache(
            maxsize=maxsize,
            ttu=_entry_expiry,
            timer=timer,
        )
        self._hits = 0
        self._misses = 0

    @classmethod
    def from_config(
        cls,
        config: CacheConfig,
        timer: Callable[[], float] = time.monotonic,
    ) -> "MemoryCache":
        """Create a cache sized and timed by a CacheConfig."""
        return cls(
            maxsize=config.max_size,
            default_ttl=config.default_ttl or timedelta(minutes=5),
            timer=timer,
        )

    def get(self, key: str) -> Any | None:
        """Retrieve cached value by key.

        A stale entry is evicted and reported as a miss.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached value, or None if not found or expired.
        """
        entry = self.get_entry(key)
        if entry is None:
            self._misses += 1
            return None
        self._hits += 1
        return entry.value

    def get_entry(self, key: str) -> CacheEntry | None:
        """Retrieve the full cache entry without touching the counters.

        Args:
            key: The cache key to retrieve.

        Returns:
            The fresh CacheEntry, or None if not found or expired.
        """
        entry = self._cache.get(key)
        if entry is None:
            self._evict(key)
            return None
        return entry

    def set(
        self,
        key: str,
        value: Any,
        ttl: timedelta | None = None,
    ) -> None:
        """Store value with optional TTL, replacing any existing entry.

        A zero or negative TTL stores nothing and drops the previous entry.

        Args:
            key: The cache key.
            value: The value to store.
            ttl: Optional time-to-live. If None, uses the default.
        """
        effective_ttl = ttl if ttl is not None else self._default_ttl
        if effective_ttl <= timedelta(0):
            self._evict(key)
            return

        entry = CacheEntry.create(
            key=key,
            value=value,
            ttl=effective_ttl,
            now=self._timer(),
        )
        self._cache[key] = entry

    def has(self, key: str) -> bool:
        """Check if a fresh entry exists for key.

        Args:
            key: The cache key to check.

        Returns:
            True if the key exists and has not expired, False otherwise.
        """
        return key in self._cache

    def invalidate(self, key: str) -> bool:
        """Delete a single cached value.

        Args:
            key: The cache key to delete.

        Returns:
            True if a fresh entry existed and was deleted, False otherwise.
        """
        return self._evict(key)

    def invalidate_pattern(self, pattern: str) -> int:
        """Delete every entry whose key contains pattern.

        Args:
            pattern: Substring matched against keys.

        Returns:
            Number of keys deleted.
        """
        keys_to_delete = [key for key in list(self._cache) if pattern in key]

        count = 0
        for key in keys_to_delete:
            if self._evict(key):
                count += 1

        logger.debug("Invalidated %d cache entries matching %r", count, pattern)
        return count

    def clear(self) -> None:
        """Clear all cached values and reset the hit/miss counters."""
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def get_stats(self) -> CacheStats:
        """Return the fresh keys and hit/miss counters.

        Returns:
            A CacheStats snapshot; expired entries are not listed.
        """
        entries = tuple(self._cache)
        return CacheStats(
            size=len(entries),
            entries=entries,
            hits=self._hits,
            misses=self._misses,
        )

    def _evict(self, key: str) -> bool:
        """Remove key; report whether a fresh entry was removed."""
        try:
            # TLRUCache deletes an expired key and then raises KeyError
            del self._cache[key]
        except KeyError:
            return False
        return True

    def __len__(self) -> int:
        """Return the number of fresh items in the cache."""
        return len(self._cache)

    def __contains__(self, key: object) -> bool:
        """Return True if key has a fresh entry."""
        return isinstance(key, str) and self.has(key)

    @property
    def maxsize(self) -> int:
        """Return the maximum size of the cache."""
        return self._maxsize

    @property
    def default_ttl(self) -> timedelta:
        """Return the TTL applied when none is given."""
        return self._default_ttl
