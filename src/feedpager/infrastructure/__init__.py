"""Infrastructure layer implementations for feedpager."""

from feedpager.infrastructure.caches import MemoryCache
from feedpager.infrastructure.data_sources import (
    CachedPostDataSource,
    InMemoryPostDataSource,
    RestPostDataSource,
)
from feedpager.infrastructure.key_builders import PageKeyBuilder

__all__ = [
    "MemoryCache",
    "PageKeyBuilder",
    "CachedPostDataSource",
    "InMemoryPostDataSource",
    "RestPostDataSource",
]
