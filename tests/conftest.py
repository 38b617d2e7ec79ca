"""Pytest configuration for feedpager tests."""

import asyncio
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timedelta, timezone

import pytest

from feedpager import DataSourceError, FilterCriteria, Post, PostPage, PostType

BASE_TIME = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_post(
    index: int,
    post_type: PostType = PostType.TEXT,
    content: str | None = None,
    like_count: int = 0,
    created_at: datetime | None = None,
) -> Post:
    """Build a post; higher indexes are older (one minute apart)."""
    return Post(
        id=f"post-{index}",
        post_type=post_type,
        created_at=created_at or BASE_TIME - timedelta(minutes=index),
        content=content if content is not None else f"post number {index}",
        like_count=like_count,
        author=f"user{index % 3}",
    )


class ScriptedDataSource:
    """Serves predefined pages; can be made to fail or to block.

    Attributes:
        calls: Requested page numbers, in order.
        failures: Number of upcoming requests that raise DataSourceError.
        retryable: Whether those failures are marked retryable.
        gate: When set, requests wait on this event before answering.
    """

    def __init__(self, pages: Sequence[Iterable[Post]], total: int | None = None) -> None:
        self.pages = [tuple(page) for page in pages]
        self.total = total if total is not None else sum(len(p) for p in self.pages)
        self.calls: list[int] = []
        self.failures = 0
        self.retryable = True
        self.gate: asyncio.Event | None = None

    @classmethod
    def paged(
        cls,
        posts: Iterable[Post],
        page_size: int = 15,
        total: int | None = None,
    ) -> "ScriptedDataSource":
        items = list(posts)
        pages = [items[i : i + page_size] for i in range(0, len(items), page_size)]
        return cls(pages, total if total is not None else len(items))

    async def fetch_posts(
        self,
        page: int,
        page_size: int,
        filters: FilterCriteria | None = None,
    ) -> PostPage:
        self.calls.append(page)
        if self.gate is not None:
            await self.gate.wait()
        if self.failures:
            self.failures -= 1
            raise DataSourceError("backend unavailable", retryable=self.retryable)
        items = self.pages[page - 1] if page <= len(self.pages) else ()
        return PostPage(items=items, total_count=self.total)


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at BASE_TIME."""
    return FakeClock(BASE_TIME.timestamp())


@pytest.fixture
def post_factory() -> Callable[..., Post]:
    """Factory for test posts."""
    return make_post


@pytest.fixture
def source_factory() -> type[ScriptedDataSource]:
    """Factory for scripted data sources."""
    return ScriptedDataSource
