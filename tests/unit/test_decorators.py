"""Tests for cache decorators."""

from datetime import timedelta

import pytest

from feedpager import CacheConfig, CacheService, MemoryCache
from feedpager.decorators import cached, invalidates


@pytest.fixture
def cache_service() -> CacheService:
    """Create a cache service for testing."""
    return CacheService(MemoryCache(maxsize=100), CacheConfig(default_ttl=timedelta(minutes=5)))


class TestCachedDecorator:
    """Tests for @cached decorator."""

    async def test_cached_function(self, cache_service: CacheService) -> None:
        """Test that @cached caches function results."""
        call_count = 0

        @cached(cache_service, key="analytics:{creator_id}")
        async def get_analytics(creator_id: str) -> dict:
            nonlocal call_count
            call_count += 1
            return {"creator": creator_id, "plays": 3}

        result1 = await get_analytics("42")
        result2 = await get_analytics(creator_id="42")

        assert result1 == result2 == {"creator": "42", "plays": 3}
        assert call_count == 1

    async def test_cached_different_args(self, cache_service: CacheService) -> None:
        """Test that different args create different cache entries."""
        call_count = 0

        @cached(cache_service, key="analytics:{creator_id}")
        async def get_analytics(creator_id: str) -> dict:
            nonlocal call_count
            call_count += 1
            return {"creator": creator_id}

        await get_analytics("1")
        await get_analytics("2")

        assert call_count == 2

    async def test_template_uses_defaults(self, cache_service: CacheService) -> None:
        """Test default argument values fill the key template."""

        @cached(cache_service, key="trending:albums:{days}d")
        async def get_trending(days: int = 7) -> list:
            return ["album"]

        await get_trending()

        assert cache_service.stats.entries == ("feedpager:trending:albums:7d",)

    async def test_callable_key(self, cache_service: CacheService) -> None:
        """Test a key builder function."""

        @cached(cache_service, key=lambda user_id, limit: f"feed:{user_id}:{limit}")
        async def get_feed(user_id: str, limit: int) -> list:
            return [user_id] * limit

        await get_feed("u1", 2)

        assert cache_service.stats.entries == ("feedpager:feed:u1:2",)

    async def test_preserves_function_metadata(self, cache_service: CacheService) -> None:
        """Test functools.wraps is applied."""

        @cached(cache_service, key="k")
        async def documented() -> int:
            """Docstring."""
            return 1

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."


class TestInvalidatesDecorator:
    """Tests for @invalidates decorator."""

    async def test_invalidates_after_mutation(self, cache_service: CacheService) -> None:
        """Test matching entries are dropped after the function runs."""
        cache_service.put("creator:42:posts:page:1", ["old"])
        cache_service.put("creator:7:posts:page:1", ["other"])

        @invalidates(cache_service, patterns=["creator:{creator_id}:"])
        async def create_post(creator_id: str, content: str) -> dict:
            return {"id": "p1", "content": content}

        result = await create_post("42", "hello")

        assert result == {"id": "p1", "content": "hello"}
        assert cache_service.peek("creator:42:posts:page:1") is None
        assert cache_service.peek("creator:7:posts:page:1") == ["other"]

    async def test_no_invalidation_on_error(self, cache_service: CacheService) -> None:
        """Test nothing is invalidated when the mutation raises."""
        cache_service.put("posts:page:1", ["cached"])

        @invalidates(cache_service, patterns=["posts:"])
        async def delete_post(post_id: str) -> None:
            raise PermissionError(post_id)

        with pytest.raises(PermissionError):
            await delete_post("p1")

        assert cache_service.peek("posts:page:1") == ["cached"]
