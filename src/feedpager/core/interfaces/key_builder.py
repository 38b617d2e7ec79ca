"""Key builder interface."""

from typing import Protocol

from feedpager.core.entities.filter_criteria import FilterCriteria


class IKeyBuilder(Protocol):
    """Contract for building cache keys for paginated reads.

    Key builders are responsible for creating unique, deterministic
    cache keys from page parameters. All keys for one resource share
    the builder's prefix so the whole family can be invalidated with
    a single pattern.
    """

    @property
    def prefix(self) -> str:
        """Prefix shared by every key this builder produces."""
        ...

    def build(
        self,
        page: int,
        page_size: int,
        filters: FilterCriteria | None = None,
    ) -> str:
        """Build unique cache key for one page of a resource.

        Args:
            page: 1-based page number.
            page_size: Number of items per page.
            filters: Optional criteria the page was fetched with.

        Returns:
            A unique string key for caching the page.
        """
        ...
