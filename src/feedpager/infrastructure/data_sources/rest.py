"""PostgREST post data source implementation.

Requires the httpx package.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import httpx

from feedpager.core.entities.filter_criteria import FilterCriteria, SortBy
from feedpager.core.entities.post import Post, PostPage, PostType
from feedpager.core.interfaces.data_source import DataSourceError
from feedpager.core.services.post_filter import time_range_cutoff

logger = logging.getLogger(__name__)

DEFAULT_SELECT = "*,user_profiles(username)"

_ORDERING = {
    SortBy.NEWEST: "created_at.desc",
    SortBy.OLDEST: "created_at.asc",
    SortBy.POPULAR: "likes_count.desc,created_at.desc",
}

_SEARCH_COLUMNS = ("content", "audio_filename")

# Statuses worth repeating: timeouts and rate limiting.
_RETRYABLE_CLIENT_STATUSES = frozenset({408, 429})


def search_filter(term: str) -> str | None:
    """Build the PostgREST ``or`` filter matching a term in any searchable column.

    The pattern is double-quoted so commas, dots, colons and parentheses
    in the term stay literal; quotes and backslashes are escaped and
    ``*`` (the PostgREST wildcard) is dropped.

    Args:
        term: Raw search term.

    Returns:
        The filter value, or None if nothing searchable is left.
    """
    cleaned = term.replace("*", "").strip()
    if not cleaned:
        return None
    escaped = cleaned.replace("\\", "\\\\").replace('"', '\\"')
    pattern = f'"*{escaped}*"'
    return "(" + ",".join(f"{column}.ilike.{pattern}" for column in _SEARCH_COLUMNS) + ")"


def parse_content_range(header: str | None) -> int | None:
    """Extract the total from a ``Content-Range`` header.

    Args:
        header: Header value such as ``0-14/57`` or ``*/0``.

    Returns:
        The total count, or None if the header is missing or the total
        is unknown (``0-14/*``).
    """
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1].strip()
    if total == "*":
        return None
    try:
        return int(total)
    except ValueError:
        return None


class RestPostDataSource:
    """Post source backed by a PostgREST endpoint (Supabase-style).

    Each page is one ``GET {base_url}/rest/v1/{table}`` with offset/limit
    paging and ``Prefer: count=exact`` so the response carries the total
    in ``Content-Range``. Active filters are pushed down as query
    operators; the client still re-filters locally, so pushdown only
    narrows what is transferred.

    Example:
        async with RestPostDataSource(url, anon_key) as source:
            manager = PaginationManager(source)
            await manager.load_initial()
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "posts",
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        select: str = DEFAULT_SELECT,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the data source.

        Args:
            base_url: Project URL, e.g. ``https://xyz.supabase.co``.
            api_key: API key sent as ``apikey`` and bearer token.
            table: Table or view to read from.
            client: Optional shared client. A client created here is
                owned and closed by ``aclose``.
            timeout: Request timeout in seconds for an owned client.
            select: PostgREST ``select`` expression.
            now: Clock used for time range cutoffs.
        """
        if not base_url:
            raise ValueError("base_url must not be empty")
        self._url = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Prefer": "count=exact",
        }
        self._select = select
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def url(self) -> str:
        """Endpoint queried for posts."""
        return self._url

    def build_params(
        self,
        page: int,
        page_size: int,
        filters: FilterCriteria | None = None,
    ) -> list[tuple[str, str]]:
        """Build the query parameters for one page.

        Args:
            page: 1-based page number.
            page_size: Number of posts per page.
            filters: Optional criteria to push down.

        Returns:
            Query parameters as ordered pairs.
        """
        criteria = filters or FilterCriteria()
        params: list[tuple[str, str]] = [
            ("select", self._select),
            ("order", _ORDERING[criteria.sort_by]),
            ("offset", str((page - 1) * page_size)),
            ("limit", str(page_size)),
        ]

        if criteria.post_type is not PostType.ALL:
            params.append(("post_type", f"eq.{criteria.post_type.value}"))

        cutoff = time_range_cutoff(criteria.time_range, self._now())
        if cutoff is not None:
            params.append(("created_at", f"gte.{cutoff.isoformat()}"))

        if criteria.has_search:
            search = search_filter(criteria.search_term or "")
            if search is not None:
                params.append(("or", search))

        return params

    async def fetch_posts(
        self,
        page: int,
        page_size: int,
        filters: FilterCriteria | None = None,
    ) -> PostPage:
        """Fetch one page of posts.

        Raises:
            DataSourceError: On transport errors, error responses or a
                malformed body.
        """
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be positive")

        params = self.build_params(page, page_size, filters)
        try:
            response = await self._client.get(
                self._url, params=params, headers=self._headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise DataSourceError(
                f"Post request failed with status {status}",
                retryable=status >= 500 or status in _RETRYABLE_CLIENT_STATUSES,
            ) from e
        except httpx.HTTPError as e:
            raise DataSourceError(f"Post request failed: {e}") from e

        try:
            rows: Any = response.json()
        except ValueError as e:
            raise DataSourceError("Post response is not valid JSON", retryable=False) from e
        if not isinstance(rows, list):
            raise DataSourceError("Post response is not a list of rows", retryable=False)

        try:
            items = tuple(Post.from_row(row) for row in rows)
        except (KeyError, TypeError, ValueError) as e:
            raise DataSourceError(f"Malformed post row: {e}", retryable=False) from e

        total = parse_content_range(response.headers.get("Content-Range"))
        if total is None:
            total = (page - 1) * page_size + len(items)

        logger.debug(
            "Fetched page %d (%d posts, total %d) from %s",
            page,
            len(items),
            total,
            self._url,
        )
        return PostPage(items=items, total_count=total)

    async def aclose(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RestPostDataSource":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
