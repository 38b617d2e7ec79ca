"""Post data source interface."""

from typing import Protocol

from feedpager.core.entities.filter_criteria import FilterCriteria
from feedpager.core.entities.post import PostPage


class DataSourceError(Exception):
    """Raised when a data source cannot produce a page.

    Covers transport failures, error responses and malformed payloads.
    ``retryable`` tells callers whether repeating the same request can
    succeed: outages and timeouts can, rejected or malformed requests
    cannot.
    """

    def __init__(self, message: str, retryable: bool = True) -> None:
        super().__init__(message)
        self.retryable = retryable


class IPostDataSource(Protocol):
    """Contract for the remote store that serves feed posts.

    Implementations wrap the hosted backend (or a local stand-in). Pages
    are 1-based and ordered newest first unless filters say otherwise.
    """

    async def fetch_posts(
        self,
        page: int,
        page_size: int,
        filters: FilterCriteria | None = None,
    ) -> PostPage:
        """Fetch one page of posts.

        Args:
            page: 1-based page number.
            page_size: Maximum number of posts on the page.
            filters: Optional criteria to apply server-side.

        Returns:
            The page of posts and the total number of matching posts.

        Raises:
            DataSourceError: If the page cannot be fetched.
        """
        ...
