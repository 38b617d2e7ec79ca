"""Domain services for feedpager."""

from feedpager.core.services.cache_service import CacheService
from feedpager.core.services.load_more_state_machine import (
    VALID_TRANSITIONS,
    InvalidTransitionError,
    LoadMoreStateMachine,
    StateTransition,
)
from feedpager.core.services.pagination_manager import PaginationManager
from feedpager.core.services.post_filter import (
    apply_filters,
    detect_pagination_mode,
    determine_load_more_strategy,
    sort_posts,
    time_range_cutoff,
)

__all__ = [
    "CacheService",
    "PaginationManager",
    # Load-more state machine
    "LoadMoreStateMachine",
    "StateTransition",
    "InvalidTransitionError",
    "VALID_TRANSITIONS",
    # Client-side filtering
    "apply_filters",
    "sort_posts",
    "time_range_cutoff",
    "detect_pagination_mode",
    "determine_load_more_strategy",
]
