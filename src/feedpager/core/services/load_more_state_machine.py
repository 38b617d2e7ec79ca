"""Load-more state machine.

Replaces ad hoc "fetch in progress" flags with named states and an explicit
transition table. Starting a fetch while one is running is simply not a
valid transition, so the pagination manager asks the machine instead of
checking flags.
"""

import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from feedpager.core.entities.pagination_state import LoadMoreStatus

logger = logging.getLogger(__name__)

VALID_TRANSITIONS: dict[LoadMoreStatus, frozenset[LoadMoreStatus]] = {
    LoadMoreStatus.IDLE: frozenset(
        {
            LoadMoreStatus.FETCHING,
            LoadMoreStatus.AUTO_FETCHING,
            LoadMoreStatus.EXHAUSTED,
        }
    ),
    LoadMoreStatus.FETCHING: frozenset(
        {
            LoadMoreStatus.IDLE,
            LoadMoreStatus.EXHAUSTED,
            LoadMoreStatus.ERROR,
        }
    ),
    # Auto-fetch failures degrade to whatever is loaded, never to ERROR.
    LoadMoreStatus.AUTO_FETCHING: frozenset(
        {
            LoadMoreStatus.IDLE,
            LoadMoreStatus.EXHAUSTED,
        }
    ),
    LoadMoreStatus.ERROR: frozenset(
        {
            LoadMoreStatus.IDLE,
            LoadMoreStatus.FETCHING,
            LoadMoreStatus.AUTO_FETCHING,
            LoadMoreStatus.EXHAUSTED,
        }
    ),
    LoadMoreStatus.EXHAUSTED: frozenset(
        {
            LoadMoreStatus.IDLE,
            LoadMoreStatus.FETCHING,
            LoadMoreStatus.AUTO_FETCHING,
        }
    ),
}


class InvalidTransitionError(Exception):
    """Raised when a transition is not allowed from the current state."""

    def __init__(self, current: LoadMoreStatus, target: LoadMoreStatus) -> None:
        super().__init__(f"Invalid state transition: {current.value} -> {target.value}")
        self.current = current
        self.target = target


@dataclass(frozen=True)
class StateTransition:
    """Record of one transition, kept for debugging."""

    previous: LoadMoreStatus
    current: LoadMoreStatus
    reason: str
    timestamp: float


class LoadMoreStateMachine:
    """Tracks the load-more status and enforces valid transitions."""

    def __init__(
        self,
        initial: LoadMoreStatus = LoadMoreStatus.IDLE,
        history_size: int = 50,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._state = initial
        self._clock = clock
        self._history: deque[StateTransition] = deque(maxlen=history_size)

    @property
    def state(self) -> LoadMoreStatus:
        """Return the current state."""
        return self._state

    @property
    def is_busy(self) -> bool:
        """Check if a request is in flight."""
        return self._state in (LoadMoreStatus.FETCHING, LoadMoreStatus.AUTO_FETCHING)

    @property
    def history(self) -> tuple[StateTransition, ...]:
        """Return the most recent transitions, oldest first."""
        return tuple(self._history)

    def can_transition(self, target: LoadMoreStatus) -> bool:
        """Check if moving to target is allowed.

        Staying in the current state is always allowed.
        """
        return target is self._state or target in VALID_TRANSITIONS[self._state]

    def transition(self, target: LoadMoreStatus, reason: str = "") -> LoadMoreStatus:
        """Move to target.

        Args:
            target: The state to enter.
            reason: Short description recorded in the history.

        Returns:
            The previous state.

        Raises:
            InvalidTransitionError: If the transition is not allowed.
        """
        if not self.can_transition(target):
            raise InvalidTransitionError(self._state, target)

        previous = self._state
        if target is previous:
            return previous

        self._state = target
        self._history.append(
            StateTransition(
                previous=previous,
                current=target,
                reason=reason,
                timestamp=self._clock(),
            )
        )
        logger.debug(
            "Load-more state %s -> %s (%s)", previous.value, target.value, reason
        )
        return previous

    def reset(self, reason: str = "reset") -> None:
        """Force the machine back to idle, whatever the current state."""
        if self._state is LoadMoreStatus.IDLE:
            return
        self._history.append(
            StateTransition(
                previous=self._state,
                current=LoadMoreStatus.IDLE,
                reason=reason,
                timestamp=self._clock(),
            )
        )
        self._state = LoadMoreStatus.IDLE
