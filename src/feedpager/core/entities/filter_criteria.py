"""Search and filter criteria for feed pagination."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from feedpager.core.entities.post import PostType


class SortBy(Enum):
    """Feed ordering."""

    NEWEST = "newest"
    OLDEST = "oldest"
    POPULAR = "popular"


class TimeRange(Enum):
    """Recency window applied to ``created_at``."""

    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class FilterCriteria:
    """Search term and filters supplied by the UI.

    Default values (no term, all types, newest first, any time) mean
    "inactive"; any non-default value switches pagination to client mode.
    """

    search_term: str | None = None
    post_type: PostType = PostType.ALL
    sort_by: SortBy = SortBy.NEWEST
    time_range: TimeRange = TimeRange.ALL

    @property
    def has_search(self) -> bool:
        """Check if a non-blank search term is set."""
        return bool(self.search_term and self.search_term.strip())

    @property
    def has_filters(self) -> bool:
        """Check if any filter differs from its default."""
        return (
            self.post_type != PostType.ALL
            or self.sort_by != SortBy.NEWEST
            or self.time_range != TimeRange.ALL
        )

    @property
    def is_active(self) -> bool:
        """Check if either a search or a filter is active."""
        return self.has_search or self.has_filters

    def with_search(self, term: str | None) -> "FilterCriteria":
        """Return a copy with the search term replaced.

        Blank terms are stored as None.
        """
        cleaned = term.strip() if term else None
        return replace(self, search_term=cleaned or None)

    def with_filters(self, other: "FilterCriteria") -> "FilterCriteria":
        """Return a copy taking the filter fields from another criteria.

        The search term of ``self`` is kept.
        """
        return replace(
            self,
            post_type=other.post_type,
            sort_by=other.sort_by,
            time_range=other.time_range,
        )

    def without_search(self) -> "FilterCriteria":
        """Return a copy with the search term removed."""
        return replace(self, search_term=None)

    def without_filters(self) -> "FilterCriteria":
        """Return a copy with all filters reset to defaults."""
        return FilterCriteria(search_term=self.search_term)

    def to_dict(self) -> dict[str, Any]:
        """Return a plain, JSON-friendly mapping of the active criteria.

        Only non-default values are included, so two criteria that filter
        the same way produce the same mapping.
        """
        data: dict[str, Any] = {}
        if self.has_search:
            data["search_term"] = self.search_term
        if self.post_type != PostType.ALL:
            data["post_type"] = self.post_type.value
        if self.sort_by != SortBy.NEWEST:
            data["sort_by"] = self.sort_by.value
        if self.time_range != TimeRange.ALL:
            data["time_range"] = self.time_range.value
        return data
