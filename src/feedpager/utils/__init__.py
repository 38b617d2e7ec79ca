"""Utility functions for feedpager."""

from feedpager.utils.hashing import hash_value

__all__ = ["hash_value"]
