"""Key-value cache interface."""

from datetime import timedelta
from typing import Any, Protocol

from feedpager.core.entities.cache_stats import CacheStats


class IKeyValueCache(Protocol):
    """Contract for process-local TTL caches.

    Values are arbitrary Python objects stored by reference. Every entry
    carries its own expiry; an expired entry is indistinguishable from a
    missing one. Methods are synchronous because storage is in-process.
    """

    def get(self, key: str) -> Any | None:
        """Retrieve cached value by key.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached value, or None if not found or expired.
        """
        ...

    def set(
        self,
        key: str,
        value: Any,
        ttl: timedelta | None = None,
    ) -> None:
        """Store value with optional TTL, replacing any existing entry.

        Args:
            key: The cache key.
            value: The value to store.
            ttl: Optional time-to-live. If None, uses the cache default.
        """
        ...

    def has(self, key: str) -> bool:
        """Check if a non-expired entry exists for key.

        Args:
            key: The cache key to check.

        Returns:
            True if the key is cached and fresh, False otherwise.
        """
        ...

    def invalidate(self, key: str) -> bool:
        """Remove a single entry.

        Args:
            key: The cache key to remove.

        Returns:
            True if a fresh entry existed and was removed, False otherwise.
        """
        ...

    def invalidate_pattern(self, pattern: str) -> int:
        """Remove every entry whose key contains pattern.

        Args:
            pattern: Substring to look for in keys.

        Returns:
            Number of entries removed.
        """
        ...

    def clear(self) -> None:
        """Remove all entries."""
        ...

    def get_stats(self) -> CacheStats:
        """Return a snapshot of the cache contents and counters."""
        ...
