"""Feedpager - cached, filterable pagination for community post feeds.

A Python library for loading a feed of posts page by page from a remote
store, switching to client-side filtering when a search term or filter is
active, and memoizing repeated backend reads in a TTL cache.

Example:
    from feedpager import (
        CacheService,
        CachedPostDataSource,
        MemoryCache,
        PaginationManager,
        RestPostDataSource,
    )

    cache_service = CacheService(MemoryCache())

    async with RestPostDataSource(SUPABASE_URL, SUPABASE_ANON_KEY) as rest:
        source = CachedPostDataSource(rest, cache_service)

        async with PaginationManager(source) as manager:
            manager.subscribe(render)

            await manager.load_initial()
            await manager.load_more()

            # Search switches to client-side pagination over loaded posts
            await manager.update_search("mixing")
            await manager.clear_search()

Cached analytics reads:
    from datetime import timedelta
    from feedpager import cached

    @cached(cache_service, key="analytics:{creator_id}", ttl=timedelta(minutes=5))
    async def get_creator_analytics(creator_id: str) -> dict:
        return await fetch_analytics(creator_id)
"""

from feedpager.core.entities import (
    CacheConfig,
    CacheEntry,
    CacheStats,
    FilterCriteria,
    LoadMoreOutcome,
    LoadMoreResult,
    LoadMoreStatus,
    LoadMoreStrategy,
    PaginationConfig,
    PaginationMetadata,
    PaginationMode,
    PaginationState,
    Post,
    PostPage,
    PostType,
    RetryPolicy,
    SortBy,
    TimeRange,
)
from feedpager.core.interfaces import (
    DataSourceError,
    IKeyBuilder,
    IKeyValueCache,
    IPostDataSource,
)
from feedpager.core.services import (
    CacheService,
    InvalidTransitionError,
    LoadMoreStateMachine,
    PaginationManager,
    apply_filters,
    detect_pagination_mode,
    determine_load_more_strategy,
)
from feedpager.decorators import cached, invalidates
from feedpager.infrastructure import (
    CachedPostDataSource,
    InMemoryPostDataSource,
    MemoryCache,
    PageKeyBuilder,
    RestPostDataSource,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core entities
    "CacheConfig",
    "CacheEntry",
    "CacheStats",
    "PaginationConfig",
    # Posts and criteria
    "Post",
    "PostPage",
    "PostType",
    "FilterCriteria",
    "SortBy",
    "TimeRange",
    # Pagination state
    "PaginationState",
    "RetryPolicy",
    "PaginationMetadata",
    "PaginationMode",
    "LoadMoreStrategy",
    "LoadMoreStatus",
    "LoadMoreOutcome",
    "LoadMoreResult",
    # Core interfaces
    "IKeyValueCache",
    "IKeyBuilder",
    "IPostDataSource",
    "DataSourceError",
    # Core services
    "CacheService",
    "PaginationManager",
    "LoadMoreStateMachine",
    "InvalidTransitionError",
    "apply_filters",
    "detect_pagination_mode",
    "determine_load_more_strategy",
    # Infrastructure implementations
    "MemoryCache",
    "PageKeyBuilder",
    "CachedPostDataSource",
    "InMemoryPostDataSource",
    "RestPostDataSource",
    # Decorators
    "cached",
    "invalidates",
]
