"""Pagination manager - orchestrates load more across server and client modes."""

import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

from feedpager.core.entities.cache_config import PaginationConfig
from feedpager.core.entities.filter_criteria import FilterCriteria
from feedpager.core.entities.pagination_state import (
    LoadMoreOutcome,
    LoadMoreResult,
    LoadMoreStatus,
    PaginationMetadata,
    PaginationMode,
    PaginationState,
)
from feedpager.core.entities.post import Post, PostPage
from feedpager.core.interfaces.data_source import DataSourceError, IPostDataSource
from feedpager.core.services.load_more_state_machine import LoadMoreStateMachine
from feedpager.core.services.post_filter import (
    apply_filters,
    detect_pagination_mode,
    determine_load_more_strategy,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[PaginationState], None]
Sleep = Callable[[float], Awaitable[None]]


@dataclass
class _AutoFetchReport:
    batches: int = 0
    added: int = 0
    error: Exception | None = None
    stale: bool = False


class PaginationManager:
    """Decides, on every load more, whether to fetch or to reveal.

    In server mode each load more fetches the next page from the data
    source. Once a search term or filter is active the manager switches to
    client mode and pages through the filtered buffer it already holds,
    auto-fetching a bounded number of extra server pages when the filter
    leaves too few posts to fill the next slice.

    One manager belongs to one feed view. Create it when the view opens and
    ``close()`` it (or use ``async with``) when the view goes away; late
    responses are then discarded instead of being applied.

    Example:
        async with PaginationManager(source, PaginationConfig(page_size=15)) as pager:
            await pager.load_initial()
            await pager.update_search("lofi")
            result = await pager.load_more()
            posts = pager.state.visible_posts
    """

    def __init__(
        self,
        data_source: IPostDataSource,
        config: PaginationConfig | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Sleep = asyncio.sleep,
        jitter: Callable[[], float] = random.random,
    ) -> None:
        """Initialize the pagination manager.

        Args:
            data_source: Source of server pages.
            config: Optional pagination configuration. Uses defaults if not
                provided.
            clock: Wall-clock time in seconds; used for fetch timestamps and
                as "now" for time-range filters.
            sleep: Coroutine function used to wait between fetch retries.
            jitter: Source of random samples in [0, 1) for retry delays.
        """
        self._data_source = data_source
        self._config = config or PaginationConfig()
        self._clock = clock
        self._sleep = sleep
        self._jitter = jitter
        self._machine = LoadMoreStateMachine(
            history_size=self._config.history_size,
            clock=clock,
        )
        self._listeners: list[StateListener] = []
        self._seen_ids: set[str] = set()
        self._generation = 0
        self._failed_page: int | None = None
        self._closed = False
        self._state = self._initial_state(FilterCriteria())

    @property
    def config(self) -> PaginationConfig:
        """Get the pagination configuration."""
        return self._config

    @property
    def state(self) -> PaginationState:
        """Get the current pagination state."""
        return self._state

    @property
    def state_machine(self) -> LoadMoreStateMachine:
        """Get the load-more state machine (read access for diagnostics)."""
        return self._machine

    @property
    def closed(self) -> bool:
        """Check if the manager has been closed."""
        return self._closed

    @property
    def can_load_more(self) -> bool:
        """Check if a load more can still produce posts.

        True while loaded posts are hidden behind the cursor and, in client
        mode, while the server holds pages that auto-fetch may still pull.
        """
        state = self._state
        if state.has_more_posts:
            return True
        return (
            state.pagination_mode is PaginationMode.CLIENT
            and state.server_has_more
            and self._config.max_auto_fetch_batches > 0
        )

    def get_state(self) -> PaginationState:
        """Return the current pagination state.

        The state is immutable; hold on to it freely.
        """
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with every new state.

        Args:
            listener: Callable receiving the new PaginationState.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def load_initial(self) -> LoadMoreResult:
        """Discard everything loaded so far and fetch the first page.

        Current criteria are kept. Also used to refresh the feed.
        """
        self._ensure_open()
        if self._machine.is_busy:
            logger.debug("Initial load rejected: request already in flight")
            return LoadMoreResult(LoadMoreOutcome.REJECTED)

        self._generation += 1
        self._seen_ids.clear()
        self._machine.reset("initial load")
        self._state = self._initial_state(self._state.criteria)

        result = await self._fetch_server_page(1, reason="initial load")
        return await self._fill_first_page(result)

    async def load_more(self) -> LoadMoreResult:
        """Load or reveal the next slice of posts.

        Returns:
            What happened. REJECTED when a request is already in flight,
            FAILED (with the error) when the server fetch failed.
        """
        self._ensure_open()
        if self._machine.is_busy:
            logger.debug("Load more rejected: request already in flight")
            return LoadMoreResult(LoadMoreOutcome.REJECTED)

        if self._state.pagination_mode is PaginationMode.SERVER:
            return await self._load_more_server()
        return await self._load_more_client()

    async def retry(self) -> LoadMoreResult:
        """Re-issue the request that failed.

        The page that failed is requested again, whatever the pagination
        mode; nothing is appended twice.
        """
        self._ensure_open()
        if self._machine.state is not LoadMoreStatus.ERROR or self._failed_page is None:
            return LoadMoreResult(LoadMoreOutcome.REJECTED)

        page = self._failed_page
        result = await self._fetch_server_page(page, reason="retry")
        if page == 1:
            return await self._fill_first_page(result)
        return result

    async def update_search(self, term: str | None) -> LoadMoreResult:
        """Set the search term and switch to client-side pagination.

        A blank term clears the search.
        """
        criteria = self._state.criteria.with_search(term)
        return await self._apply_criteria(criteria, reason="search updated")

    async def update_filters(self, criteria: FilterCriteria) -> LoadMoreResult:
        """Replace the post type, sort and time range filters.

        The current search term is kept.
        """
        merged = self._state.criteria.with_filters(criteria)
        return await self._apply_criteria(merged, reason="filters updated")

    async def clear_search(self) -> LoadMoreResult:
        """Remove the search term; back to server mode if nothing else is active."""
        criteria = self._state.criteria.without_search()
        return await self._apply_criteria(criteria, reason="search cleared")

    async def clear_filters(self) -> LoadMoreResult:
        """Reset all filters; back to server mode if no search is active."""
        criteria = self._state.criteria.without_filters()
        return await self._apply_criteria(criteria, reason="filters cleared")

    def close(self) -> None:
        """Tear down the manager.

        In-flight responses are discarded when they arrive, listeners are
        dropped and further requests raise RuntimeError.
        """
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        self._listeners.clear()

    async def __aenter__(self) -> "PaginationManager":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    # Server mode

    async def _load_more_server(self) -> LoadMoreResult:
        if not self._state.has_more_posts:
            self._settle("nothing left on server")
            return LoadMoreResult(LoadMoreOutcome.EXHAUSTED)

        next_page = self._state.metadata.last_server_page + 1
        return await self._fetch_server_page(next_page, reason="load more")

    async def _fetch_server_page(self, page: int, reason: str) -> LoadMoreResult:
        if page <= self._state.metadata.last_server_page:
            logger.debug("Page %d already loaded, ignoring duplicate request", page)
            return LoadMoreResult(LoadMoreOutcome.DUPLICATE)

        generation = self._generation
        self._machine.transition(LoadMoreStatus.FETCHING, reason)
        self._publish(error=None)

        try:
            fetched = await self._fetch_with_retry(page, generation)
        except DataSourceError as exc:
            if generation != self._generation:
                self._settle("stale failure discarded")
                return LoadMoreResult(LoadMoreOutcome.STALE)
            logger.warning("Fetching page %d failed: %s", page, exc)
            self._machine.transition(LoadMoreStatus.ERROR, "fetch failed")
            self._failed_page = page
            self._publish(error=str(exc))
            return LoadMoreResult(LoadMoreOutcome.FAILED, error=exc)
        except BaseException:
            self._abort()
            raise

        if generation != self._generation:
            logger.debug("Discarding stale response for page %d", page)
            self._settle("stale response discarded")
            return LoadMoreResult(LoadMoreOutcome.STALE)

        before = len(self._state.visible_posts)
        current_page = self._state.current_page
        if self._state.pagination_mode is PaginationMode.SERVER and page > 1:
            current_page += 1
        added = self._apply_page(page, fetched, current_page)
        self._settle(f"page {page} loaded")

        return LoadMoreResult(
            LoadMoreOutcome.LOADED,
            added=added,
            revealed=len(self._state.visible_posts) - before,
            batches=1,
        )

    async def _fetch_with_retry(self, page: int, generation: int) -> PostPage:
        """Fetch a page, retrying retryable failures with backoff.

        Gives up after ``retry.max_attempts`` attempts, on a non-retryable
        error or once the criteria change; the last error is raised.
        """
        policy = self._config.retry
        attempt = 1
        while True:
            try:
                return await self._data_source.fetch_posts(page, self._config.page_size)
            except DataSourceError as exc:
                if (
                    not exc.retryable
                    or attempt >= policy.max_attempts
                    or generation != self._generation
                ):
                    raise
                error = exc

            delay = policy.delay_for(attempt, self._jitter())
            logger.warning(
                "Fetching page %d failed (attempt %d of %d), retrying in %.2fs: %s",
                page,
                attempt,
                policy.max_attempts,
                delay,
                error,
            )
            await self._sleep(delay)
            if generation != self._generation:
                raise error
            attempt += 1

    async def _fill_first_page(self, result: LoadMoreResult) -> LoadMoreResult:
        """Auto-fetch after a first page that leaves the filtered view short."""
        if result.outcome is not LoadMoreOutcome.LOADED:
            return result
        if self._should_auto_fetch_for_filter():
            report = await self._auto_fetch(target=self._config.page_size)
            return self._auto_fetch_result(report, added=result.added, batches=1)
        return result

    # Client mode

    async def _load_more_client(self) -> LoadMoreResult:
        page_size = self._config.page_size
        before = len(self._state.visible_posts)
        target = (self._state.current_page + 1) * page_size

        report = _AutoFetchReport()
        if self._can_auto_fetch() and len(self._state.display_posts) < target:
            report = await self._auto_fetch(target)
            if report.stale:
                return LoadMoreResult(LoadMoreOutcome.STALE, batches=report.batches)

        state = self._state
        current_page = state.current_page
        if len(state.display_posts) > current_page * page_size:
            current_page += 1
        self._state = replace(
            state,
            current_page=current_page,
            **self._derive(state.all_posts, state.criteria, current_page, state.metadata),
        )
        self._settle("client page revealed")

        revealed = len(self._state.visible_posts) - before
        if report.batches:
            outcome = LoadMoreOutcome.AUTO_FETCHED
        elif revealed > 0:
            outcome = LoadMoreOutcome.REVEALED
        else:
            outcome = LoadMoreOutcome.EXHAUSTED
        return LoadMoreResult(
            outcome,
            added=report.added,
            revealed=revealed,
            batches=report.batches,
            error=report.error,
        )

    async def _apply_criteria(self, criteria: FilterCriteria, reason: str) -> LoadMoreResult:
        self._ensure_open()
        if criteria == self._state.criteria:
            logger.debug("Criteria unchanged (%s), nothing to do", reason)
            return LoadMoreResult(
                LoadMoreOutcome.REVEALED,
                revealed=len(self._state.visible_posts),
            )
        self._generation += 1

        state = self._state
        previous_mode = state.pagination_mode
        self._state = replace(
            state,
            criteria=criteria,
            current_page=1,
            error=None,
            **self._derive(state.all_posts, criteria, 1, state.metadata),
        )
        if previous_mode is not self._state.pagination_mode:
            logger.info(
                "Pagination mode %s -> %s (%s)",
                previous_mode.value,
                self._state.pagination_mode.value,
                reason,
            )

        if self._machine.is_busy:
            # The in-flight request will see the new generation and settle.
            self._publish()
        else:
            self._settle(reason)

        if self._should_auto_fetch_for_filter():
            report = await self._auto_fetch(target=self._config.page_size)
            return self._auto_fetch_result(report)

        return LoadMoreResult(
            LoadMoreOutcome.REVEALED,
            revealed=len(self._state.visible_posts),
        )

    # Auto-fetch

    def _can_auto_fetch(self) -> bool:
        return (
            self._config.max_auto_fetch_batches > 0
            and self._state.server_has_more
            and not self._machine.is_busy
        )

    def _should_auto_fetch_for_filter(self) -> bool:
        return (
            self._config.auto_fetch_on_filter
            and self._state.pagination_mode is PaginationMode.CLIENT
            and len(self._state.display_posts) < self._config.page_size
            and self._can_auto_fetch()
        )

    async def _auto_fetch(self, target: int) -> _AutoFetchReport:
        """Fetch server pages until ``target`` filtered posts exist.

        Stops after ``max_auto_fetch_batches`` pages, when the server runs
        out, on failure (keeping what was fetched) or when the criteria
        change underneath it.
        """
        generation = self._generation
        report = _AutoFetchReport()
        self._machine.transition(LoadMoreStatus.AUTO_FETCHING, "auto-fetch")
        self._publish()

        while (
            report.batches < self._config.max_auto_fetch_batches
            and self._state.server_has_more
            and len(self._state.display_posts) < target
        ):
            page = self._state.metadata.last_server_page + 1
            try:
                fetched = await self._fetch_with_retry(page, generation)
            except DataSourceError as exc:
                if generation == self._generation:
                    logger.warning(
                        "Auto-fetch of page %d failed, keeping loaded posts: %s",
                        page,
                        exc,
                    )
                    report.error = exc
                else:
                    report.stale = True
                break
            except BaseException:
                self._abort()
                raise

            if generation != self._generation:
                logger.debug("Discarding stale auto-fetch response for page %d", page)
                report.stale = True
                break

            report.batches += 1
            report.added += self._apply_page(page, fetched, self._state.current_page)
            self._publish()

        if not report.stale:
            self._state = replace(
                self._state,
                metadata=replace(self._state.metadata, auto_fetch_batches=report.batches),
            )
            logger.debug(
                "Auto-fetch finished: %d batches, %d new posts, %d matching",
                report.batches,
                report.added,
                len(self._state.display_posts),
            )
        self._settle("auto-fetch finished")
        return report

    def _auto_fetch_result(
        self,
        report: _AutoFetchReport,
        added: int = 0,
        batches: int = 0,
    ) -> LoadMoreResult:
        if report.stale:
            return LoadMoreResult(LoadMoreOutcome.STALE, batches=batches + report.batches)
        return LoadMoreResult(
            LoadMoreOutcome.AUTO_FETCHED,
            added=added + report.added,
            revealed=len(self._state.visible_posts),
            batches=batches + report.batches,
            error=report.error,
        )

    # State helpers

    def _initial_state(self, criteria: FilterCriteria) -> PaginationState:
        metadata = PaginationMetadata()
        return PaginationState(
            page_size=self._config.page_size,
            criteria=criteria,
            metadata=metadata,
            **self._derive((), criteria, 1, metadata),
        )

    def _derive(
        self,
        all_posts: tuple[Post, ...],
        criteria: FilterCriteria,
        current_page: int,
        metadata: PaginationMetadata,
    ) -> dict[str, Any]:
        """Compute every field that depends on posts, criteria and cursor."""
        mode = detect_pagination_mode(criteria)
        strategy = determine_load_more_strategy(mode)

        if mode is PaginationMode.SERVER:
            if metadata.last_server_page == 0:
                has_more = True
            else:
                has_more = metadata.loaded_server_posts < metadata.total_server_posts
            return {
                "display_posts": all_posts,
                "pagination_mode": mode,
                "load_more_strategy": strategy,
                "total_posts_count": metadata.total_server_posts,
                "has_more_posts": has_more,
            }

        now = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
        display = apply_filters(all_posts, criteria, now=now)
        return {
            "display_posts": display,
            "pagination_mode": mode,
            "load_more_strategy": strategy,
            "total_posts_count": len(display),
            "has_more_posts": current_page * self._config.page_size < len(display),
        }

    def _apply_page(self, page: int, fetched: PostPage, current_page: int) -> int:
        """Append a fetched page to the buffer; return how many posts were new."""
        new_posts = list(self._unseen(fetched.items))

        state = self._state
        loaded = state.metadata.loaded_server_posts + len(fetched.items)
        total = fetched.total_count if fetched.items else loaded
        metadata = replace(
            state.metadata,
            last_fetch_timestamp=self._clock(),
            total_server_posts=max(total, loaded),
            loaded_server_posts=loaded,
            last_server_page=page,
        )
        all_posts = state.all_posts + tuple(new_posts)

        self._state = replace(
            state,
            all_posts=all_posts,
            current_page=current_page,
            metadata=metadata,
            error=None,
            **self._derive(all_posts, state.criteria, current_page, metadata),
        )
        return len(new_posts)

    def _unseen(self, posts: Iterable[Post]) -> Iterable[Post]:
        for post in posts:
            if post.id in self._seen_ids:
                continue
            self._seen_ids.add(post.id)
            yield post

    def _settle(self, reason: str) -> None:
        target = LoadMoreStatus.IDLE if self.can_load_more else LoadMoreStatus.EXHAUSTED
        self._failed_page = None
        self._machine.transition(target, reason)
        self._publish()

    def _abort(self) -> None:
        """Return to a resting state after a cancelled or crashed request."""
        self._machine.reset("request aborted")
        self._settle("request aborted")

    def _publish(self, **changes: Any) -> None:
        self._state = replace(self._state, status=self._machine.state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Pagination state listener failed")

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("PaginationManager is closed")
