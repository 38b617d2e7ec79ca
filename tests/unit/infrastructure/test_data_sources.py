"""Tests for the in-memory and caching post data sources."""

from datetime import timedelta

import pytest

from feedpager import (
    CacheService,
    CachedPostDataSource,
    FilterCriteria,
    InMemoryPostDataSource,
    MemoryCache,
    PageKeyBuilder,
    PaginationManager,
    PostType,
    SortBy,
)


@pytest.fixture
def in_memory(post_factory) -> InMemoryPostDataSource:
    """Source holding 40 posts, every fourth one audio."""
    posts = [
        post_factory(i, post_type=PostType.AUDIO if i % 4 == 0 else PostType.TEXT)
        for i in range(40)
    ]
    return InMemoryPostDataSource(reversed(posts))


class TestInMemoryPostDataSource:
    """Tests for InMemoryPostDataSource."""

    async def test_pages_newest_first(self, in_memory: InMemoryPostDataSource) -> None:
        """Test pages are served newest first with the total."""
        page = await in_memory.fetch_posts(1, 15)

        assert page.total_count == 40
        assert page.items[0].id == "post-0"
        assert len(page.items) == 15

    async def test_last_page_is_partial(self, in_memory: InMemoryPostDataSource) -> None:
        """Test the last page holds the remainder, past it nothing."""
        assert len((await in_memory.fetch_posts(3, 15)).items) == 10
        assert (await in_memory.fetch_posts(4, 15)).items == ()

    async def test_filters_apply_before_paging(
        self, in_memory: InMemoryPostDataSource
    ) -> None:
        """Test filtered totals and ordering."""
        page = await in_memory.fetch_posts(
            1, 15, FilterCriteria(post_type=PostType.AUDIO, sort_by=SortBy.OLDEST)
        )

        assert page.total_count == 10
        assert page.items[0].id == "post-36"

    async def test_counts_calls(self, in_memory: InMemoryPostDataSource) -> None:
        """Test every request is recorded."""
        await in_memory.fetch_posts(1, 15)
        await in_memory.fetch_posts(2, 15)

        assert in_memory.call_count == 2
        assert in_memory.calls[1] == (2, 15, None)

    async def test_add_keeps_order(self, in_memory: InMemoryPostDataSource, post_factory) -> None:
        """Test a newly added post is served first when newest."""
        in_memory.add(post_factory(-1))

        page = await in_memory.fetch_posts(1, 15)

        assert page.items[0].id == "post--1"
        assert page.total_count == 41

    async def test_invalid_page(self, in_memory: InMemoryPostDataSource) -> None:
        """Test pages are 1-based."""
        with pytest.raises(ValueError):
            await in_memory.fetch_posts(0, 15)

    async def test_drives_pagination_manager(
        self, in_memory: InMemoryPostDataSource, clock
    ) -> None:
        """Test the manager pages through the whole source."""
        manager = PaginationManager(in_memory, clock=clock)

        await manager.load_initial()
        while manager.state.has_more_posts:
            await manager.load_more()

        assert len(manager.state.all_posts) == 40
        assert in_memory.call_count == 3


class TestCachedPostDataSource:
    """Tests for CachedPostDataSource."""

    @pytest.fixture
    def cache_service(self, clock) -> CacheService:
        return CacheService(MemoryCache(timer=clock))

    async def test_repeated_page_served_from_cache(
        self, in_memory: InMemoryPostDataSource, cache_service: CacheService
    ) -> None:
        """Test the same page is fetched once within the TTL."""
        cached_source = CachedPostDataSource(in_memory, cache_service)

        first = await cached_source.fetch_posts(1, 15)
        second = await cached_source.fetch_posts(1, 15)

        assert first == second
        assert in_memory.call_count == 1

    async def test_filters_are_part_of_key(
        self, in_memory: InMemoryPostDataSource, cache_service: CacheService
    ) -> None:
        """Test filtered and unfiltered pages are cached separately."""
        cached_source = CachedPostDataSource(in_memory, cache_service)

        await cached_source.fetch_posts(1, 15)
        filtered = await cached_source.fetch_posts(
            1, 15, FilterCriteria(post_type=PostType.AUDIO)
        )

        assert filtered.total_count == 10
        assert in_memory.call_count == 2

    async def test_ttl_expiry(
        self, in_memory: InMemoryPostDataSource, cache_service: CacheService, clock
    ) -> None:
        """Test pages are fetched again after the TTL."""
        cached_source = CachedPostDataSource(
            in_memory, cache_service, ttl=timedelta(seconds=30)
        )

        await cached_source.fetch_posts(1, 15)
        clock.advance(31)
        await cached_source.fetch_posts(1, 15)

        assert in_memory.call_count == 2

    async def test_invalidate_drops_only_own_pages(
        self, in_memory: InMemoryPostDataSource, cache_service: CacheService
    ) -> None:
        """Test invalidation is scoped to the key builder's prefix."""
        feed = CachedPostDataSource(in_memory, cache_service)
        creator = CachedPostDataSource(
            in_memory, cache_service, key_builder=PageKeyBuilder("creator:42:posts")
        )
        await feed.fetch_posts(1, 15)
        await feed.fetch_posts(2, 15)
        await creator.fetch_posts(1, 15)

        dropped = feed.invalidate()

        assert dropped == 2
        await creator.fetch_posts(1, 15)
        assert in_memory.call_count == 3
