"""Cache statistics entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time view of a cache.

    Attributes:
        size: Number of fresh entries.
        entries: Keys of the fresh entries.
        hits: Lookups answered from the cache since the last clear.
        misses: Lookups that found nothing fresh since the last clear.
    """

    size: int
    entries: tuple[str, ...]
    hits: int = 0
    misses: int = 0

    @property
    def total(self) -> int:
        """Total number of lookups."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups answered from the cache."""
        if self.total == 0:
            return 0.0
        return self.hits / self.total
