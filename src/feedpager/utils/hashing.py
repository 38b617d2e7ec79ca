"""Hashing utilities for cache key generation."""

import hashlib
import json
from enum import Enum
from typing import Any


def _encode(value: Any) -> Any:
    """Fallback encoder so enums and datetimes hash by their plain value."""
    if isinstance(value, Enum):
        return value.value
    return str(value)


def hash_value(value: Any, length: int = 16) -> str:
    """Create a deterministic hash of a value.

    Mappings are serialized with sorted keys, so two dicts with the same
    items hash identically regardless of insertion order.

    Args:
        value: Any JSON-serializable value; enums hash by their value.
        length: Number of hex characters to keep.

    Returns:
        A hexadecimal hash string (prefix of the SHA-256 digest).
    """
    if value is None:
        return "none"

    normalized = json.dumps(value, sort_keys=True, default=_encode)
    return hashlib.sha256(normalized.encode()).hexdigest()[:length]
