"""Caching wrapper for post data sources."""

from datetime import timedelta

from feedpager.core.entities.filter_criteria import FilterCriteria
from feedpager.core.entities.post import PostPage
from feedpager.core.interfaces.data_source import IPostDataSource
from feedpager.core.interfaces.key_builder import IKeyBuilder
from feedpager.core.services.cache_service import CacheService
from feedpager.infrastructure.key_builders.page import PageKeyBuilder


class CachedPostDataSource:
    """Post source that memoizes pages of another source.

    Pages are keyed by page number, page size and active filters, so
    revisiting a feed (or a creator's post list) within the TTL costs no
    request. Failed fetches are not cached.
    """

    def __init__(
        self,
        source: IPostDataSource,
        cache_service: CacheService,
        ttl: timedelta | None = None,
        key_builder: IKeyBuilder | None = None,
    ) -> None:
        """Initialize the wrapper.

        Args:
            source: The source to read through to.
            cache_service: Cache for fetched pages.
            ttl: Page TTL. Uses the cache's default if not provided.
            key_builder: Key builder. Defaults to ``PageKeyBuilder("posts")``.
        """
        self._source = source
        self._cache = cache_service
        self._ttl = ttl
        self._key_builder = key_builder or PageKeyBuilder()

    @property
    def source(self) -> IPostDataSource:
        """The wrapped source."""
        return self._source

    async def fetch_posts(
        self,
        page: int,
        page_size: int,
        filters: FilterCriteria | None = None,
    ) -> PostPage:
        """Fetch one page, serving it from the cache when possible."""
        key = self._key_builder.build(page, page_size, filters)
        return await self._cache.get_or_fetch(
            key,
            lambda: self._source.fetch_posts(page, page_size, filters),
            self._ttl,
        )

    def invalidate(self) -> int:
        """Drop every cached page of this resource.

        Call after creating, editing or deleting a post.

        Returns:
            Number of pages dropped.
        """
        pattern = self._cache.make_key(f"{self._key_builder.prefix}:page:")
        return self._cache.invalidate([pattern])
