"""Key builder implementations."""

from feedpager.infrastructure.key_builders.page import PageKeyBuilder

__all__ = ["PageKeyBuilder"]
