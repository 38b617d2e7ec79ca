"""In-memory post data source implementation."""

from collections.abc import Iterable
from datetime import datetime, timezone

from feedpager.core.entities.filter_criteria import FilterCriteria, SortBy
from feedpager.core.entities.post import Post, PostPage
from feedpager.core.services.post_filter import apply_filters, sort_posts


class InMemoryPostDataSource:
    """List-backed post source for local development and tests.

    Posts are served newest first. When filters are passed they are applied
    before paging, the way the hosted backend would apply them.

    Attributes:
        calls: Every request made, as ``(page, page_size, filters)``.
    """

    def __init__(self, posts: Iterable[Post] = ()) -> None:
        self._posts = sort_posts(posts, SortBy.NEWEST)
        self.calls: list[tuple[int, int, FilterCriteria | None]] = []

    @property
    def call_count(self) -> int:
        """Number of fetch_posts calls served."""
        return len(self.calls)

    def add(self, post: Post) -> None:
        """Add a post, keeping newest-first order."""
        self._posts = sort_posts([*self._posts, post], SortBy.NEWEST)

    async def fetch_posts(
        self,
        page: int,
        page_size: int,
        filters: FilterCriteria | None = None,
    ) -> PostPage:
        """Fetch one page of posts."""
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be positive")

        self.calls.append((page, page_size, filters))

        posts: tuple[Post, ...] | list[Post] = self._posts
        if filters is not None and filters.is_active:
            posts = apply_filters(posts, filters, now=datetime.now(timezone.utc))

        start = (page - 1) * page_size
        return PostPage(items=tuple(posts[start : start + page_size]), total_count=len(posts))
