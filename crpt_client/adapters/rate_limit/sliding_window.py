"""In-memory sliding-window admission gate for threads.

Notes:
- Per-process only: every process enforces its own independent limit.
- Thread-safe: one condition variable guards the admission log; waiting
  callers release it so others can keep evaluating their admission.
- FIFO: callers are served strictly in arrival order.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from collections import deque
from typing import Callable

from crpt_client.adapters.rate_limit.base import (
    AbstractWindowLimiter,
    CancelToken,
    WindowConfig,
)
from crpt_client.core.errors import AdmissionCancelledError

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter(AbstractWindowLimiter):
    """Blocking limiter admitting at most ``capacity`` callers per trailing window.

    Every admission is recorded with its timestamp. A caller is admitted when
    it is first in the waiting queue and fewer than ``capacity`` timestamps
    fall within the last ``window_seconds``. Otherwise the first caller sleeps
    until the oldest timestamp leaves the window, and later callers sleep
    until they are woken up by an admission or a cancellation.
    """

    def __init__(
        self,
        window_seconds: float,
        capacity: int,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the limiter.

        Args:
            window_seconds: Length of the sliding window in seconds.
            capacity: Maximum admissions within any trailing window.
            clock: Monotonic time source returning seconds.

        Raises:
            InvalidConfigurationError: If capacity or window_seconds are invalid.
        """
        self._config = WindowConfig(capacity=capacity, window_seconds=window_seconds)
        self._clock = clock
        self._cond = threading.Condition(threading.Lock())
        self._admissions: deque[float] = deque()
        self._waiters: deque[int] = deque()
        self._tickets = itertools.count()

    @classmethod
    def from_config(
        cls,
        config: WindowConfig,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> "SlidingWindowRateLimiter":
        return cls(config.window_seconds, config.capacity, clock=clock)

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"SlidingWindowRateLimiter(window_seconds={self._config.window_seconds}, "
            f"capacity={self._config.capacity})"
        )

    @property
    def config(self) -> WindowConfig:
        return self._config

    def in_window(self) -> int:
        """Return how many admissions fall within the current window."""

        with self._cond:
            self._prune_locked(self._clock())
            return len(self._admissions)

    def waiting(self) -> int:
        """Return how many callers are currently queued in ``acquire()``."""

        with self._cond:
            return len(self._waiters)

    def acquire(self, cancel_token: CancelToken | None = None) -> float:
        """Block until admission is granted and record it.

        Args:
            cancel_token: Optional token; cancelling it unblocks the caller
                with ``AdmissionCancelledError``.

        Returns:
            Admission timestamp on the limiter's clock.

        Raises:
            AdmissionCancelledError: If the token was cancelled first.
        """

        wake = self._notify_all
        if cancel_token is not None:
            cancel_token.add_callback(wake)

        try:
            with self._cond:
                ticket = next(self._tickets)
                self._waiters.append(ticket)
                started = self._clock()
                try:
                    return self._wait_for_turn_locked(ticket, started, cancel_token)
                except BaseException:
                    self._leave_queue_locked(ticket)
                    raise
        finally:
            if cancel_token is not None:
                cancel_token.remove_callback(wake)

    def _wait_for_turn_locked(
        self,
        ticket: int,
        started: float,
        cancel_token: CancelToken | None,
    ) -> float:
        capacity = self._config.capacity
        window = self._config.window_seconds

        while True:
            if cancel_token is not None and cancel_token.cancelled:
                logger.info(
                    "rate_limit.cancelled",
                    extra={"queue_size": len(self._waiters)},
                )
                raise AdmissionCancelledError(
                    code="admission_cancelled",
                    message="Waiting for admission was cancelled",
                )

            now = self._clock()
            self._prune_locked(now)
            is_head = self._waiters[0] == ticket

            if is_head and len(self._admissions) < capacity:
                self._waiters.popleft()
                self._admissions.append(now)
                # The next caller in line may be admissible right away.
                self._cond.notify_all()
                logger.debug(
                    "rate_limit.admitted",
                    extra={
                        "in_window": len(self._admissions),
                        "capacity": capacity,
                        "waited_ms": round((now - started) * 1000, 2),
                    },
                )
                return now

            if is_head:
                wait = window - (now - self._admissions[0])
                logger.debug(
                    "rate_limit.waiting",
                    extra={"wait_s": round(wait, 4), "queue_position": 0},
                )
                self._cond.wait(timeout=wait)
            else:
                logger.debug(
                    "rate_limit.waiting",
                    extra={"wait_s": None, "queue_position": self._waiters.index(ticket)},
                )
                self._cond.wait()

    def _prune_locked(self, now: float) -> None:
        horizon = now - self._config.window_seconds
        while self._admissions and self._admissions[0] <= horizon:
            self._admissions.popleft()

    def _leave_queue_locked(self, ticket: int) -> None:
        try:
            self._waiters.remove(ticket)
        except ValueError:
            return
        self._cond.notify_all()

    def _notify_all(self) -> None:
        with self._cond:
            self._cond.notify_all()
