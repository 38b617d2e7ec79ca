"""Client-side post filtering and pagination mode detection.

Everything here is a pure function: the same posts, criteria and ``now``
always give the same result, which is what lets the pagination manager
re-derive ``display_posts`` at any time instead of patching it.
"""

import calendar
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone

from feedpager.core.entities.filter_criteria import FilterCriteria, SortBy, TimeRange
from feedpager.core.entities.pagination_state import LoadMoreStrategy, PaginationMode
from feedpager.core.entities.post import Post, PostType


def _one_month_before(moment: datetime) -> datetime:
    """Same day and time one calendar month earlier, clamped to month end."""
    if moment.month == 1:
        year, month = moment.year - 1, 12
    else:
        year, month = moment.year, moment.month - 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def time_range_cutoff(time_range: TimeRange, now: datetime) -> datetime | None:
    """Compute the oldest ``created_at`` a time range lets through.

    Args:
        time_range: The recency window.
        now: Reference time; its timezone defines "today".

    Returns:
        The cutoff datetime, or None for TimeRange.ALL.
    """
    if time_range is TimeRange.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if time_range is TimeRange.WEEK:
        return now - timedelta(days=7)
    if time_range is TimeRange.MONTH:
        return _one_month_before(now)
    return None


def sort_posts(posts: Iterable[Post], sort_by: SortBy) -> list[Post]:
    """Order posts for display.

    Popular sorts by like count and breaks ties newest first. Sorting is
    stable, so posts with equal keys keep their fetch order.
    """
    if sort_by is SortBy.OLDEST:
        return sorted(posts, key=lambda post: post.created_at)
    if sort_by is SortBy.POPULAR:
        return sorted(
            posts,
            key=lambda post: (post.like_count, post.created_at),
            reverse=True,
        )
    return sorted(posts, key=lambda post: post.created_at, reverse=True)


def apply_filters(
    posts: Sequence[Post],
    criteria: FilterCriteria,
    now: datetime | None = None,
) -> tuple[Post, ...]:
    """Derive the display list from loaded posts and criteria.

    Order of operations: search term, post type, time range, then sort.
    Inactive criteria return the posts unchanged, in fetch order.

    Args:
        posts: Loaded posts, in fetch order.
        criteria: Search term and filters to apply.
        now: Reference time for time ranges; defaults to the current UTC time.

    Returns:
        The filtered and ordered posts.
    """
    if not criteria.is_active:
        return tuple(posts)

    filtered: Iterable[Post] = posts

    if criteria.has_search:
        term = criteria.search_term or ""
        filtered = [post for post in filtered if post.matches(term)]

    if criteria.post_type is not PostType.ALL:
        filtered = [post for post in filtered if post.post_type is criteria.post_type]

    if criteria.time_range is not TimeRange.ALL:
        reference = now or datetime.now(timezone.utc)
        cutoff = time_range_cutoff(criteria.time_range, reference)
        if cutoff is not None:
            filtered = [post for post in filtered if post.created_at >= cutoff]

    return tuple(sort_posts(filtered, criteria.sort_by))


def detect_pagination_mode(criteria: FilterCriteria) -> PaginationMode:
    """Pick server mode for plain browsing, client mode for search/filters."""
    if criteria.is_active:
        return PaginationMode.CLIENT
    return PaginationMode.SERVER


def determine_load_more_strategy(mode: PaginationMode) -> LoadMoreStrategy:
    """Map a pagination mode to the action load more performs."""
    if mode is PaginationMode.SERVER:
        return LoadMoreStrategy.SERVER_FETCH
    return LoadMoreStrategy.CLIENT_PAGINATE
