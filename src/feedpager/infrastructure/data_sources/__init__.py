"""Post data source implementations."""

from feedpager.infrastructure.data_sources.cached import CachedPostDataSource
from feedpager.infrastructure.data_sources.in_memory import InMemoryPostDataSource
from feedpager.infrastructure.data_sources.rest import RestPostDataSource

__all__ = [
    "CachedPostDataSource",
    "InMemoryPostDataSource",
    "RestPostDataSource",
]
