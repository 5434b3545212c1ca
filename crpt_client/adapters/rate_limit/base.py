"""Admission gate interfaces and configuration.

Services depend on these abstractions (not the concrete implementations) so
a thread-based and an asyncio-based limiter can share one contract.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from crpt_client.core.errors import InvalidConfigurationError


class TimeUnit(str, Enum):
    """Window lengths expressed as one unit of time."""

    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"

    @property
    def seconds(self) -> float:
        return _UNIT_SECONDS[self]


_UNIT_SECONDS: dict[TimeUnit, float] = {
    TimeUnit.SECONDS: 1.0,
    TimeUnit.MINUTES: 60.0,
    TimeUnit.HOURS: 3600.0,
    TimeUnit.DAYS: 86400.0,
}


@dataclass(frozen=True)
class WindowConfig:
    """Immutable sliding window configuration.

    Attributes:
        capacity: Maximum admissions within any trailing window.
        window_seconds: Length of the trailing window in seconds.
    """

    capacity: int
    window_seconds: float

    def __post_init__(self) -> None:
        if isinstance(self.capacity, bool) or not isinstance(self.capacity, int):
            raise InvalidConfigurationError(
                code="invalid_capacity",
                message="capacity must be an integer",
            )
        if self.capacity <= 0:
            raise InvalidConfigurationError(
                code="invalid_capacity",
                message="capacity must be positive",
                details={"capacity": self.capacity},
            )
        if not self.window_seconds > 0:
            raise InvalidConfigurationError(
                code="invalid_window",
                message="window_seconds must be positive",
                details={"window_seconds": self.window_seconds},
            )

    @classmethod
    def per(cls, unit: TimeUnit, capacity: int) -> "WindowConfig":
        """Build a config allowing ``capacity`` admissions per one ``unit``."""

        return cls(capacity=capacity, window_seconds=TimeUnit(unit).seconds)


class CancelToken:
    """Cancellation handle for a thread blocked in ``acquire()``.

    Threads cannot be interrupted from the outside, so a waiting caller
    passes a token and another thread calls ``cancel()`` on it. Limiters
    subscribe to the token to be woken up immediately.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Register ``callback`` to run on cancellation.

        Runs immediately when the token is already cancelled.
        """

        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass


class AbstractWindowLimiter(ABC):
    """Interface for blocking admission gates."""

    @property
    @abstractmethod
    def config(self) -> WindowConfig:
        """Configuration the limiter was built with."""
        raise NotImplementedError

    @abstractmethod
    def acquire(self, cancel_token: CancelToken | None = None) -> float:
        """Block until admission is granted.

        Args:
            cancel_token: Optional token; cancelling it unblocks the caller.

        Returns:
            Admission timestamp on the limiter's clock.

        Raises:
            AdmissionCancelledError: If ``cancel_token`` was cancelled before
                admission was granted.
        """
        raise NotImplementedError


class AbstractAsyncWindowLimiter(ABC):
    """Interface for admission gates used from asyncio tasks."""

    @property
    @abstractmethod
    def config(self) -> WindowConfig:
        """Configuration the limiter was built with."""
        raise NotImplementedError

    @abstractmethod
    async def acquire(self) -> float:
        """Suspend the current task until admission is granted.

        Returns:
            Admission timestamp on the limiter's clock.

        Raises:
            asyncio.CancelledError: If the waiting task is cancelled.
        """
        raise NotImplementedError
