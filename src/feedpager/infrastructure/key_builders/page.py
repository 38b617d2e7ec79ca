"""Page key builder implementation."""

from typing import Any

from feedpager.core.entities.filter_criteria import FilterCriteria
from feedpager.utils.hashing import hash_value


class PageKeyBuilder:
    """Key builder for paginated resources.

    Creates deterministic cache keys of the form
    ``{prefix}:page:{page}:size:{size}[:f:{hash}]``. The filter hash is
    only added when the criteria are active, so an unfiltered read and a
    read with default criteria share one entry.
    """

    def __init__(self, prefix: str = "posts") -> None:
        """Initialize the key builder.

        Args:
            prefix: Resource prefix for all keys, e.g. ``posts`` or
                ``creator:42:posts``.
        """
        if not prefix:
            raise ValueError("prefix must not be empty")
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        """Prefix shared by every key this builder produces."""
        return self._prefix

    def build(
        self,
        page: int,
        page_size: int,
        filters: FilterCriteria | None = None,
    ) -> str:
        """Build unique cache key for one page of the resource.

        Args:
            page: 1-based page number.
            page_size: Number of items per page.
            filters: Optional criteria the page was fetched with.

        Returns:
            A unique string key for caching the page.
        """
        parts = [self._prefix, "page", str(page), "size", str(page_size)]

        if filters is not None and filters.is_active:
            parts.append(f"f:{hash_value(filters.to_dict())}")

        return ":".join(parts)

    def build_resource_key(self, name: str, params: dict[str, Any] | None = None) -> str:
        """Build a key for a non-paginated read under the same prefix.

        Used for analytics and trending lists that belong to the resource,
        e.g. ``posts:trending_7d``.

        Args:
            name: Name of the read.
            params: Optional parameters; hashed when present.

        Returns:
            The cache key string.
        """
        parts = [self._prefix, name]
        if params:
            parts.append(f"p:{hash_value(params)}")
        return ":".join(parts)

    def family_pattern(self) -> str:
        """Return the substring matching every key of this resource."""
        return f"{self._prefix}:"
