"""Domain entities for feedpager."""

from feedpager.core.entities.cache_config import CacheConfig, PaginationConfig, RetryPolicy
from feedpager.core.entities.cache_entry import CacheEntry
from feedpager.core.entities.cache_stats import CacheStats
from feedpager.core.entities.filter_criteria import FilterCriteria, SortBy, TimeRange
from feedpager.core.entities.pagination_state import (
    LoadMoreOutcome,
    LoadMoreResult,
    LoadMoreStatus,
    LoadMoreStrategy,
    PaginationMetadata,
    PaginationMode,
    PaginationState,
)
from feedpager.core.entities.post import Post, PostPage, PostType

__all__ = [
    "CacheEntry",
    "CacheStats",
    "CacheConfig",
    "PaginationConfig",
    # Posts and criteria
    "Post",
    "PostPage",
    "PostType",
    "FilterCriteria",
    "SortBy",
    "TimeRange",
    # Pagination
    "PaginationState",
    "RetryPolicy",
    "PaginationMetadata",
    "PaginationMode",
    "LoadMoreStrategy",
    "LoadMoreStatus",
    "LoadMoreOutcome",
    "LoadMoreResult",
]
