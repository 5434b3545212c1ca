"""In-memory sliding-window admission gate for asyncio tasks.

Same admission rules as ``SlidingWindowRateLimiter``, built on an
``asyncio.Condition``. Must be used from a single event loop.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from collections import deque
from typing import Callable

from crpt_client.adapters.rate_limit.base import AbstractAsyncWindowLimiter, WindowConfig

logger = logging.getLogger(__name__)


class AsyncSlidingWindowRateLimiter(AbstractAsyncWindowLimiter):
    """Non-blocking (for the loop) limiter with FIFO admission order.

    Cancelling a task suspended in ``acquire()`` removes it from the queue
    without recording an admission, and wakes the remaining waiters.
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
        self._cond = asyncio.Condition()
        self._admissions: deque[float] = deque()
        self._waiters: deque[int] = deque()
        self._tickets = itertools.count()

    @classmethod
    def from_config(
        cls,
        config: WindowConfig,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> "AsyncSlidingWindowRateLimiter":
        return cls(config.window_seconds, config.capacity, clock=clock)

    @property
    def config(self) -> WindowConfig:
        return self._config

    def in_window(self) -> int:
        """Return how many admissions fall within the current window."""

        # Safe without the condition: no await between prune and len.
        self._prune(self._clock())
        return len(self._admissions)

    def waiting(self) -> int:
        return len(self._waiters)

    async def acquire(self) -> float:
        async with self._cond:
            ticket = next(self._tickets)
            self._waiters.append(ticket)
            started = self._clock()
            try:
                return await self._wait_for_turn(ticket, started)
            except BaseException:
                if ticket in self._waiters:
                    self._waiters.remove(ticket)
                    self._cond.notify_all()
                    logger.info(
                        "rate_limit.cancelled",
                        extra={"queue_size": len(self._waiters)},
                    )
                raise

    async def _wait_for_turn(self, ticket: int, started: float) -> float:
        capacity = self._config.capacity
        window = self._config.window_seconds

        while True:
            now = self._clock()
            self._prune(now)
            is_head = self._waiters[0] == ticket

            if is_head and len(self._admissions) < capacity:
                self._waiters.popleft()
                self._admissions.append(now)
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

            if not is_head:
                logger.debug(
                    "rate_limit.waiting",
                    extra={"wait_s": None, "queue_position": self._waiters.index(ticket)},
                )
                await self._cond.wait()
                continue

            wait = window - (now - self._admissions[0])
            logger.debug(
                "rate_limit.waiting",
                extra={"wait_s": round(wait, 4), "queue_position": 0},
            )
            try:
                await asyncio.wait_for(self._cond.wait(), timeout=wait)
            except asyncio.TimeoutError:
                pass

    def _prune(self, now: float) -> None:
        horizon = now - self._config.window_seconds
        while self._admissions and self._admissions[0] <= horizon:
            self._admissions.popleft()
