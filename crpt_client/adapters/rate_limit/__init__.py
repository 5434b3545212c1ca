"""Admission gate adapters.

This package keeps the services independent of how admissions are tracked:
a thread-based and an asyncio-based sliding-window limiter share one
configuration type and error contract.
"""

from crpt_client.adapters.rate_limit.async_sliding_window import AsyncSlidingWindowRateLimiter
from crpt_client.adapters.rate_limit.base import (
    AbstractAsyncWindowLimiter,
    AbstractWindowLimiter,
    CancelToken,
    TimeUnit,
    WindowConfig,
)
from crpt_client.adapters.rate_limit.sliding_window import SlidingWindowRateLimiter

__all__ = [
    "AbstractAsyncWindowLimiter",
    "AbstractWindowLimiter",
    "AsyncSlidingWindowRateLimiter",
    "CancelToken",
    "SlidingWindowRateLimiter",
    "TimeUnit",
    "WindowConfig",
]
