"""Pagination state entities.

The state is a frozen value object. The pagination manager never mutates it;
each transition builds a new instance with ``dataclasses.replace`` and swaps
it in as a whole.
"""

from dataclasses import dataclass, field
from enum import Enum

from feedpager.core.entities.filter_criteria import FilterCriteria
from feedpager.core.entities.post import Post


class PaginationMode(Enum):
    """Where the next slice of posts comes from.

    SERVER: each load more fetches the next page from the data source.
    CLIENT: load more reveals more of the already-loaded, filtered buffer.
    """

    SERVER = "server"
    CLIENT = "client"


class LoadMoreStrategy(Enum):
    """Action a load more performs in the current mode."""

    SERVER_FETCH = "server-fetch"
    CLIENT_PAGINATE = "client-paginate"


class LoadMoreStatus(Enum):
    """Named states of the load-more state machine."""

    IDLE = "idle"
    FETCHING = "fetching"
    AUTO_FETCHING = "auto-fetching"
    ERROR = "error"
    EXHAUSTED = "exhausted"


class LoadMoreOutcome(Enum):
    """What a single load-more call ended up doing."""

    LOADED = "loaded"
    REVEALED = "revealed"
    AUTO_FETCHED = "auto-fetched"
    EXHAUSTED = "exhausted"
    REJECTED = "rejected"
    DUPLICATE = "duplicate"
    STALE = "stale"
    FAILED = "failed"


@dataclass(frozen=True)
class PaginationMetadata:
    """Server cursor bookkeeping.

    Attributes:
        last_fetch_timestamp: Wall-clock time of the last applied fetch.
        total_server_posts: Total reported by the last server response.
        loaded_server_posts: Number of rows received from the server so far.
        last_server_page: Highest page successfully applied (0 = none).
        auto_fetch_batches: Pages fetched by the most recent auto-fetch run.
    """

    last_fetch_timestamp: float | None = None
    total_server_posts: int = 0
    loaded_server_posts: int = 0
    last_server_page: int = 0
    auto_fetch_batches: int = 0


@dataclass(frozen=True)
class PaginationState:
    """Snapshot of everything the load-more UI renders from."""

    page_size: int
    all_posts: tuple[Post, ...] = ()
    display_posts: tuple[Post, ...] = ()
    current_page: int = 1
    pagination_mode: PaginationMode = PaginationMode.SERVER
    load_more_strategy: LoadMoreStrategy = LoadMoreStrategy.SERVER_FETCH
    total_posts_count: int = 0
    has_more_posts: bool = False
    status: LoadMoreStatus = LoadMoreStatus.IDLE
    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    error: str | None = None
    metadata: PaginationMetadata = field(default_factory=PaginationMetadata)

    @property
    def visible_posts(self) -> tuple[Post, ...]:
        """Posts currently shown to the user."""
        if self.pagination_mode is PaginationMode.SERVER:
            return self.display_posts
        return self.display_posts[: self.current_page * self.page_size]

    @property
    def server_has_more(self) -> bool:
        """Check if the server still holds posts that were never fetched."""
        meta = self.metadata
        if meta.last_server_page == 0:
            return True
        return meta.loaded_server_posts < meta.total_server_posts

    @property
    def is_loading(self) -> bool:
        """Check if a request is in flight."""
        return self.status in (LoadMoreStatus.FETCHING, LoadMoreStatus.AUTO_FETCHING)


@dataclass(frozen=True)
class LoadMoreResult:
    """Result of a load-more style call.

    Attributes:
        outcome: What the call did.
        added: Posts appended to ``all_posts``.
        revealed: Posts that became visible.
        batches: Server pages fetched.
        error: The failure, for FAILED results or degraded auto-fetches.
    """

    outcome: LoadMoreOutcome
    added: int = 0
    revealed: int = 0
    batches: int = 0
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        """Check if the call completed without an error."""
        return self.error is None and self.outcome is not LoadMoreOutcome.FAILED
