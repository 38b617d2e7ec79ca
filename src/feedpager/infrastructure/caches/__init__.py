"""Cache implementations."""

from feedpager.infrastructure.caches.memory import MemoryCache

__all__ = ["MemoryCache"]
