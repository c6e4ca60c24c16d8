"""
Throttling between candidate enrichments.

Every candidate fans out to several public services. A fixed minimum
spacing between candidates keeps a run within their fair-use limits.
Individual source calls for one candidate are not throttled.
"""

import time
from dataclasses import dataclass
from typing import Callable

from entity_intel.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ThrottleState:
    """
    Tracks throttle state across one run.

    Attributes:
        last_release_time: Clock value when the previous candidate finished
        candidate_count: Candidates enriched so far
        total_waited: Seconds spent waiting
    """

    last_release_time: float | None = None
    candidate_count: int = 0
    total_waited: float = 0.0


class EnrichmentThrottle:
    """
    Enforces a minimum delay between successive candidates.

    Example:
        >>> throttle = EnrichmentThrottle(delay_seconds=0.2)
        >>> for candidate in candidates:
        ...     throttle.acquire()
        ...     enrich(candidate)
        ...     throttle.release()
    """

    def __init__(
        self,
        delay_seconds: float = 0.2,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize throttle.

        Args:
            delay_seconds: Minimum seconds between the end of one candidate
                and the start of the next
            sleep: Sleep function (tests inject a recorder)
            clock: Monotonic clock function
        """
        self.delay_seconds = max(0.0, delay_seconds)
        self._sleep = sleep
        self._clock = clock
        self._state = ThrottleState()

    @property
    def state(self) -> ThrottleState:
        return self._state

    def acquire(self) -> float:
        """
        Wait until the next candidate may start.

        Returns:
            Time waited in seconds
        """
        if self._state.last_release_time is None or self.delay_seconds == 0:
            return 0.0

        elapsed = self._clock() - self._state.last_release_time
        if elapsed >= self.delay_seconds:
            return 0.0

        wait_time = self.delay_seconds - elapsed
        logger.debug(f"Throttling enrichment for {wait_time:.2f}s")
        self._sleep(wait_time)
        self._state.total_waited += wait_time
        return wait_time

    def release(self) -> None:
        """Mark the current candidate as finished."""
        self._state.last_release_time = self._clock()
        self._state.candidate_count += 1

    def reset(self) -> None:
        """Forget previous runs."""
        self._state = ThrottleState()
