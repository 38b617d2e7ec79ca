"""Cache entry entity."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cache entry value object.

    Holds a cached value together with the moment it was stored and its
    time-to-live. Times are readings of the owning cache's clock (monotonic
    seconds by default), not wall-clock datetimes.
    """

    key: str
    value: Any
    created_at: float
    ttl: timedelta

    @property
    def expires_at(self) -> float:
        """Calculate expiration time.

        Returns:
            The clock reading at which this entry stops being valid.
        """
        return self.created_at + self.ttl.total_seconds()

    def is_expired(self, now: float) -> bool:
        """Check if entry has expired at the given clock reading.

        Args:
            now: Current reading of the cache clock.

        Returns:
            True if the entry is no longer valid, False otherwise.
        """
        return not now < self.expires_at

    @classmethod
    def create(
        cls,
        key: str,
        value: Any,
        ttl: timedelta,
        now: float,
    ) -> "CacheEntry":
        """Factory method to create a new cache entry.

        Args:
            key: The cache key.
            value: The value to cache.
            ttl: Time-to-live for the entry.
            now: Current reading of the cache clock.

        Returns:
            A new CacheEntry instance.
        """
        return cls(key=key, value=value, created_at=now, ttl=ttl)
