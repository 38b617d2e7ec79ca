"""Core domain layer for feedpager."""

from feedpager.core.entities import (
    CacheConfig,
    CacheEntry,
    CacheStats,
    FilterCriteria,
    PaginationConfig,
    PaginationState,
    Post,
    PostPage,
    RetryPolicy,
)
from feedpager.core.interfaces import (
    DataSourceError,
    IKeyBuilder,
    IKeyValueCache,
    IPostDataSource,
)
from feedpager.core.services import CacheService, PaginationManager

__all__ = [
    # Entities
    "CacheConfig",
    "CacheEntry",
    "CacheStats",
    "FilterCriteria",
    "PaginationConfig",
    "PaginationState",
    "Post",
    "PostPage",
    "RetryPolicy",
    # Interfaces
    "IKeyValueCache",
    "IKeyBuilder",
    "IPostDataSource",
    "DataSourceError",
    # Services
    "CacheService",
    "PaginationManager",
]
