"""Cache and pagination configuration entities."""

from dataclasses import dataclass, field
from datetime import timedelta


@dataclass
class CacheConfig:
    """Cache configuration.

    Provides configuration options for the in-memory cache and the
    cached-read helpers built on top of it.
    """

    enabled: bool = True
    default_ttl: timedelta | None = None
    max_size: int = 1000
    key_prefix: str = "feedpager"

    def __post_init__(self) -> None:
        """Set default TTL if not provided and validate limits."""
        if self.default_ttl is None:
            self.default_ttl = timedelta(minutes=5)
        if self.default_ttl <= timedelta(0):
            raise ValueError("default_ttl must be positive")
        if self.max_size < 1:
            raise ValueError("max_size must be at least 1")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded automatic retry for server page fetches.

    The delay before retry ``n`` is ``base_delay * multiplier ** (n - 1)``
    seconds, capped at ``max_delay`` and spread by up to ``jitter`` (a
    fraction of the delay) in either direction.

    Attributes:
        max_attempts: Total attempts per fetch, including the first. 1
            disables automatic retry.
        base_delay: Delay before the first retry, in seconds.
        multiplier: Growth factor between consecutive delays.
        max_delay: Upper bound for a single delay, in seconds.
        jitter: Relative spread applied to each delay.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 10.0
    jitter: float = 0.25

    def __post_init__(self) -> None:
        """Validate retry settings."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays cannot be negative")
        if self.multiplier < 1:
            raise ValueError("multiplier must be at least 1")
        if not 0 <= self.jitter <= 1:
            raise ValueError("jitter must be between 0 and 1")

    def delay_for(self, attempt: int, sample: float = 0.5) -> float:
        """Compute the wait after a failed attempt.

        Args:
            attempt: 1-based number of the attempt that failed.
            sample: Random value in [0, 1); 0.5 means no jitter.

        Returns:
            Seconds to wait before the next attempt.
        """
        delay = min(self.base_delay * self.multiplier ** (attempt - 1), self.max_delay)
        spread = (sample - 0.5) * 2 * self.jitter * delay
        return max(0.0, delay + spread)


@dataclass
class PaginationConfig:
    """Load-more pagination configuration.

    Attributes:
        page_size: Number of posts per server page and per revealed slice.
        max_auto_fetch_batches: Upper bound on extra server pages fetched
            by a single auto-fetch run.
        auto_fetch_on_filter: Run auto-fetch right after a search or filter
            change when the filtered set is shorter than one page.
        history_size: Number of state transitions kept for debugging.
        retry: Automatic retry policy for failed server fetches.
    """

    page_size: int = 15
    max_auto_fetch_batches: int = 3
    auto_fetch_on_filter: bool = True
    history_size: int = 50
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        """Validate numeric settings."""
        if self.page_size < 1:
            raise ValueError("page_size must be at least 1")
        if self.max_auto_fetch_batches < 0:
            raise ValueError("max_auto_fetch_batches cannot be negative")
        if self.history_size < 0:
            raise ValueError("history_size cannot be negative")
