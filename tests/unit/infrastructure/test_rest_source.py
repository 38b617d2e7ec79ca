"""Tests for RestPostDataSource."""

from datetime import datetime, timezone

import httpx
import pytest

from feedpager import (
    DataSourceError,
    FilterCriteria,
    PostType,
    RestPostDataSource,
    SortBy,
    TimeRange,
)
from feedpager.infrastructure.data_sources.rest import parse_content_range, search_filter

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

ROWS = [
    {
        "id": 1,
        "post_type": "text",
        "created_at": "2024-06-15T11:00:00+00:00",
        "content": "first",
        "likes_count": 2,
        "user_profiles": {"username": "ana"},
    },
    {
        "id": 2,
        "post_type": "audio",
        "created_at": "2024-06-15T10:00:00Z",
        "content": "second",
        "audio_filename": "take2.wav",
    },
]


def make_source(handler) -> RestPostDataSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RestPostDataSource(
        "https://example.supabase.co/",
        "anon-key",
        client=client,
        now=lambda: NOW,
    )


class TestParseContentRange:
    """Tests for parse_content_range."""

    def test_total(self) -> None:
        """Test the total after the slash is returned."""
        assert parse_content_range("0-14/57") == 57
        assert parse_content_range("*/0") == 0

    def test_unknown_total(self) -> None:
        """Test missing or unknown totals."""
        assert parse_content_range(None) is None
        assert parse_content_range("0-14/*") is None
        assert parse_content_range("garbage") is None


class TestRestPostDataSource:
    """Tests for RestPostDataSource."""

    async def test_fetch_page(self) -> None:
        """Test the request shape and the parsed page."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=ROWS, headers={"Content-Range": "15-16/17"})

        source = make_source(handler)

        page = await source.fetch_posts(2, 15)

        request = seen[0]
        assert request.url.path == "/rest/v1/posts"
        assert request.url.params["offset"] == "15"
        assert request.url.params["limit"] == "15"
        assert request.url.params["order"] == "created_at.desc"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer anon-key"
        assert request.headers["Prefer"] == "count=exact"

        assert page.total_count == 17
        assert [post.id for post in page.items] == ["1", "2"]
        assert page.items[0].author == "ana"
        assert page.items[1].post_type is PostType.AUDIO
        assert page.items[1].title == "take2.wav"

    async def test_total_without_header(self) -> None:
        """Test the total falls back to what has been seen."""
        source = make_source(lambda request: httpx.Response(200, json=ROWS))

        page = await source.fetch_posts(3, 15)

        assert page.total_count == 32

    def test_filters_are_pushed_down(self) -> None:
        """Test active criteria become PostgREST operators."""
        source = make_source(lambda request: httpx.Response(200, json=[]))
        criteria = FilterCriteria(
            search_term=" lofi ",
            post_type=PostType.AUDIO,
            sort_by=SortBy.POPULAR,
            time_range=TimeRange.TODAY,
        )

        params = dict(source.build_params(1, 15, criteria))

        assert params["order"] == "likes_count.desc,created_at.desc"
        assert params["post_type"] == "eq.audio"
        assert params["created_at"] == "gte.2024-06-15T00:00:00+00:00"
        assert params["or"] == '(content.ilike."*lofi*",audio_filename.ilike."*lofi*")'

    def test_search_term_is_quoted(self) -> None:
        """Test reserved characters in a search term stay literal."""
        assert search_filter('lo,fi (live) "mix"*') == (
            '(content.ilike."*lo,fi (live) \\"mix\\"*",'
            'audio_filename.ilike."*lo,fi (live) \\"mix\\"*")'
        )
        assert search_filter("a\\b") == (
            '(content.ilike."*a\\\\b*",audio_filename.ilike."*a\\\\b*")'
        )

    def test_wildcard_only_search_is_skipped(self) -> None:
        """Test a term made of wildcards adds no filter."""
        source = make_source(lambda request: httpx.Response(200, json=[]))

        params = dict(source.build_params(1, 15, FilterCriteria(search_term="**")))

        assert search_filter(" * ") is None
        assert "or" not in params

    def test_no_filters_no_operators(self) -> None:
        """Test default criteria add nothing."""
        source = make_source(lambda request: httpx.Response(200, json=[]))

        params = dict(source.build_params(1, 15))

        assert set(params) == {"select", "order", "offset", "limit"}

    async def test_http_error_maps_to_data_source_error(self) -> None:
        """Test error statuses raise DataSourceError."""
        source = make_source(lambda request: httpx.Response(503, json={"message": "down"}))

        with pytest.raises(DataSourceError, match="503") as exc_info:
            await source.fetch_posts(1, 15)

        assert exc_info.value.retryable is True

    @pytest.mark.parametrize(
        ("status", "retryable"),
        [(400, False), (401, False), (404, False), (408, True), (429, True), (500, True)],
    )
    async def test_status_decides_retryable(self, status: int, retryable: bool) -> None:
        """Test client errors are final except timeouts and rate limits."""
        source = make_source(lambda request: httpx.Response(status))

        with pytest.raises(DataSourceError) as exc_info:
            await source.fetch_posts(1, 15)

        assert exc_info.value.retryable is retryable

    async def test_transport_error_maps_to_data_source_error(self) -> None:
        """Test connection failures raise DataSourceError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        source = make_source(handler)

        with pytest.raises(DataSourceError) as exc_info:
            await source.fetch_posts(1, 15)

        assert exc_info.value.retryable is True

    async def test_malformed_body(self) -> None:
        """Test non-list and invalid bodies raise DataSourceError."""
        source = make_source(lambda request: httpx.Response(200, json={"rows": []}))
        with pytest.raises(DataSourceError) as exc_info:
            await source.fetch_posts(1, 15)
        assert exc_info.value.retryable is False

        source = make_source(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(DataSourceError):
            await source.fetch_posts(1, 15)

        source = make_source(lambda request: httpx.Response(200, json=[{"id": 1}]))
        with pytest.raises(DataSourceError):
            await source.fetch_posts(1, 15)

    async def test_shared_client_is_not_closed(self) -> None:
        """Test aclose leaves an injected client open."""
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        source = RestPostDataSource("https://example.supabase.co", "key", client=client)

        await source.aclose()

        assert client.is_closed is False
        await client.aclose()

    async def test_owned_client_is_closed(self) -> None:
        """Test the context manager closes a client it created."""
        async with RestPostDataSource("https://example.supabase.co", "key") as source:
            assert source.url == "https://example.supabase.co/rest/v1/posts"

        assert source._client.is_closed is True
