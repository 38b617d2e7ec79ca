"""Core interfaces (Protocol classes) for feedpager."""

from feedpager.core.interfaces.data_source import DataSourceError, IPostDataSource
from feedpager.core.interfaces.key_builder import IKeyBuilder
from feedpager.core.interfaces.key_value_cache import IKeyValueCache

__all__ = [
    "IKeyValueCache",
    "IKeyBuilder",
    "IPostDataSource",
    "DataSourceError",
]
