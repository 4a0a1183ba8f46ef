# brainquest/services/timer.py
"""
Wall-clock question timer.

Elapsed time is always derived from two sampled timestamps, never from a
decrementing tick counter, so a late or skipped poll cannot skew it.
"""
import time
from typing import Callable, Optional

Clock = Callable[[], float]


def elapsed_between(start: float, now: float) -> float:
    return max(0.0, now - start)


def remaining_between(limit: Optional[float], start: float, now: float) -> Optional[float]:
    """Seconds left before ``limit`` runs out, clamped at zero; None when untimed."""
    if limit is None:
        return None
    return max(0.0, limit - elapsed_between(start, now))


class QuestionTimer:
    """Countdown for the question currently on screen."""

    def __init__(self, limit: Optional[float], clock: Clock = time.monotonic):
        self.limit = limit
        self._clock = clock
        self._started_at: Optional[float] = None
        self._stopped_at: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self._started_at is not None and self._stopped_at is None

    def start(self, limit: Optional[float] = None) -> None:
        if limit is not None:
            self.limit = limit
        self._started_at = self._clock()
        self._stopped_at = None

    def stop(self) -> float:
        """Freeze the timer and return the elapsed seconds."""
        if self._started_at is not None and self._stopped_at is None:
            self._stopped_at = self._clock()
        return self.elapsed_seconds()

    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        end = self._stopped_at if self._stopped_at is not None else self._clock()
        return elapsed_between(self._started_at, end)

    def remaining_seconds(self) -> Optional[float]:
        if self._started_at is None:
            return self.limit
        end = self._stopped_at if self._stopped_at is not None else self._clock()
        return remaining_between(self.limit, self._started_at, end)

    def is_expired(self) -> bool:
        remaining = self.remaining_seconds()
        return remaining is not None and remaining <= 0

    def release(self) -> None:
        """Drop any running countdown."""
        self._started_at = None
        self._stopped_at = None
