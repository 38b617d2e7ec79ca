"""Cache service - main orchestrator for cached reads."""

import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, TypeVar

from feedpager.core.entities.cache_config import CacheConfig
from feedpager.core.entities.cache_stats import CacheStats
from feedpager.core.interfaces.key_value_cache import IKeyValueCache

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheService:
    """Service that memoizes repeated reads against the backend.

    Wraps a key-value cache with the application's key prefix, the enabled
    switch and the default TTL. Analytics panels, trending lists and feed
    pages all go through ``get_or_fetch`` so repeated reads within the TTL
    never reach the network.
    """

    def __init__(
        self,
        cache: IKeyValueCache,
        config: CacheConfig | None = None,
    ) -> None:
        """Initialize the cache service.

        Args:
            cache: The cache used for storage.
            config: Optional cache configuration. Uses defaults if not provided.
        """
        self._cache = cache
        self._config = config or CacheConfig()

    @property
    def config(self) -> CacheConfig:
        """Get the cache configuration."""
        return self._config

    @property
    def cache(self) -> IKeyValueCache:
        """Get the underlying cache."""
        return self._cache

    @property
    def stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._cache.get_stats()

    def make_key(self, key: str) -> str:
        """Prefix a key with the configured key prefix.

        Keys that already carry the prefix are returned unchanged.
        """
        prefix = f"{self._config.key_prefix}:"
        if key.startswith(prefix):
            return key
        return prefix + key

    async def get_or_fetch(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[T]],
        ttl: timedelta | None = None,
    ) -> T:
        """Return the cached value for key, fetching and storing it on a miss.

        ``None`` results are returned but not cached, so a later call tries
        again. Fetcher exceptions propagate and nothing is stored.

        Args:
            key: Cache key, without the configured prefix.
            fetcher: Coroutine function producing the value.
            ttl: Optional TTL. Uses config default if not provided.

        Returns:
            The cached or freshly fetched value.
        """
        if not self._config.enabled:
            return await fetcher()

        full_key = self.make_key(key)
        cached = self._cache.get(full_key)
        if cached is not None:
            logger.debug("Cache hit: %s", full_key)
            return cached  # type: ignore[no-any-return]

        logger.debug("Cache miss: %s", full_key)
        value = await fetcher()
        if value is not None:
            self._cache.set(full_key, value, ttl or self._config.default_ttl)
        return value

    def put(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Store a value under the prefixed key."""
        if not self._config.enabled:
            return
        self._cache.set(self.make_key(key), value, ttl or self._config.default_ttl)

    def peek(self, key: str) -> Any | None:
        """Return the cached value for key without fetching."""
        if not self._config.enabled:
            return None
        return self._cache.get(self.make_key(key))

    def invalidate(self, patterns: list[str]) -> int:
        """Invalidate cached entries whose keys contain any of the patterns.

        Args:
            patterns: Substrings to match, e.g. ``"posts:"`` or ``"album:42"``.

        Returns:
            Number of entries invalidated.
        """
        count = 0
        for pattern in patterns:
            count += self._cache.invalidate_pattern(pattern)
        if count:
            logger.debug("Invalidated %d entries for %s", count, patterns)
        return count

    def clear(self) -> None:
        """Clear all cached entries."""
        self._cache.clear()
