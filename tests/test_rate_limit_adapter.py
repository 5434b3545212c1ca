"""Unit tests for the thread-based sliding-window limiter."""

from __future__ import annotations

import logging
import threading
import time

import pytest

from crpt_client.adapters.rate_limit.base import CancelToken, TimeUnit, WindowConfig
from crpt_client.adapters.rate_limit.sliding_window import SlidingWindowRateLimiter
from crpt_client.core.errors import AdmissionCancelledError, InvalidConfigurationError

SLACK = 0.25


def _run_in_threads(limiter: SlidingWindowRateLimiter, count: int) -> list[float]:
    barrier = threading.Barrier(count)
    stamps: list[float] = []
    lock = threading.Lock()

    def _worker() -> None:
        barrier.wait()
        ts = limiter.acquire()
        with lock:
            stamps.append(ts)

    threads = [threading.Thread(target=_worker) for _ in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    return sorted(stamps)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"window_seconds": 1.0, "capacity": 0},
        {"window_seconds": 1.0, "capacity": -3},
        {"window_seconds": 0, "capacity": 1},
        {"window_seconds": -1.0, "capacity": 1},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(InvalidConfigurationError):
        SlidingWindowRateLimiter(**kwargs)


def test_window_config_per_time_unit() -> None:
    assert WindowConfig.per(TimeUnit.SECONDS, 3).window_seconds == 1.0
    assert WindowConfig.per(TimeUnit.MINUTES, 3).window_seconds == 60.0
    assert WindowConfig.per(TimeUnit.HOURS, 3).window_seconds == 3600.0
    assert WindowConfig.per("days", 3).window_seconds == 86400.0

    limiter = SlidingWindowRateLimiter.from_config(WindowConfig.per(TimeUnit.MINUTES, 7))
    assert limiter.config.capacity == 7
    assert limiter.config.window_seconds == 60.0


def test_admits_up_to_capacity_without_blocking(fake_clock) -> None:
    limiter = SlidingWindowRateLimiter(60.0, 3, clock=fake_clock)

    assert limiter.acquire() == fake_clock.current
    fake_clock.advance(1)
    limiter.acquire()
    fake_clock.advance(1)
    limiter.acquire()

    assert limiter.in_window() == 3
    assert limiter.waiting() == 0


def test_prunes_entries_older_than_window(fake_clock) -> None:
    limiter = SlidingWindowRateLimiter(10.0, 2, clock=fake_clock)
    limiter.acquire()
    fake_clock.advance(4)
    limiter.acquire()

    fake_clock.advance(5.99)
    assert limiter.in_window() == 2

    # An entry exactly one window old no longer counts.
    fake_clock.advance(0.01)
    assert limiter.in_window() == 1

    fake_clock.advance(4)
    assert limiter.in_window() == 0


def test_window_is_sliding_not_fixed_bucket(fake_clock) -> None:
    limiter = SlidingWindowRateLimiter(60.0, 1, clock=fake_clock)
    fake_clock.current = 119.0  # one second before a "minute boundary"
    limiter.acquire()

    fake_clock.current = 121.0
    assert limiter.in_window() == 1


def test_third_caller_waits_for_oldest_to_expire() -> None:
    window = 0.3
    limiter = SlidingWindowRateLimiter(window, 2)

    start = time.monotonic()
    stamps = _run_in_threads(limiter, 3)

    assert len(stamps) == 3
    assert stamps[1] - start < SLACK
    assert stamps[2] - stamps[0] >= window
    assert stamps[2] - start < window + SLACK


def test_no_trailing_window_exceeds_capacity() -> None:
    window, capacity = 0.2, 3
    limiter = SlidingWindowRateLimiter(window, capacity)

    stamps = _run_in_threads(limiter, 8)

    assert len(stamps) == 8
    for i in range(len(stamps) - capacity):
        assert stamps[i + capacity] - stamps[i] >= window


def test_waiters_are_admitted_in_arrival_order(wait_until) -> None:
    limiter = SlidingWindowRateLimiter(0.2, 1)
    limiter.acquire()

    stamps: dict[str, float] = {}

    def _worker(name: str) -> None:
        stamps[name] = limiter.acquire()

    first = threading.Thread(target=_worker, args=("first",))
    first.start()
    wait_until(lambda: limiter.waiting() == 1)
    second = threading.Thread(target=_worker, args=("second",))
    second.start()
    wait_until(lambda: limiter.waiting() == 2)

    first.join(timeout=5)
    second.join(timeout=5)

    assert stamps["first"] < stamps["second"]
    assert stamps["second"] - stamps["first"] >= 0.2


def test_new_arrival_does_not_overtake_waiter(wait_until) -> None:
    limiter = SlidingWindowRateLimiter(0.2, 1)
    first_admission = limiter.acquire()

    order: list[str] = []

    def _waiter() -> None:
        limiter.acquire()
        order.append("waiter")

    t = threading.Thread(target=_waiter)
    t.start()
    wait_until(lambda: limiter.waiting() == 1)

    limiter.acquire()
    order.append("late")
    t.join(timeout=5)

    assert order == ["waiter", "late"]
    assert time.monotonic() - first_admission >= 0.4


def test_lock_is_released_while_waiting(wait_until) -> None:
    limiter = SlidingWindowRateLimiter(1.0, 1)
    limiter.acquire()

    t = threading.Thread(target=limiter.acquire, daemon=True)
    t.start()
    wait_until(lambda: limiter.waiting() == 1)

    started = time.monotonic()
    assert limiter.in_window() == 1
    assert time.monotonic() - started < 0.1

    t.join(timeout=5)
    assert limiter.waiting() == 0


def test_cancelling_waiter_does_not_affect_others(wait_until) -> None:
    window = 0.4
    limiter = SlidingWindowRateLimiter(window, 1)
    first = limiter.acquire()

    token = CancelToken()
    outcomes: dict[str, object] = {}

    def _cancelled_worker() -> None:
        try:
            limiter.acquire(token)
        except AdmissionCancelledError as exc:
            outcomes["cancelled"] = (exc, time.monotonic())

    def _worker() -> None:
        outcomes["admitted"] = limiter.acquire()

    a = threading.Thread(target=_cancelled_worker)
    b = threading.Thread(target=_worker)
    a.start()
    wait_until(lambda: limiter.waiting() == 1)
    b.start()
    wait_until(lambda: limiter.waiting() == 2)

    cancelled_at = time.monotonic()
    token.cancel()
    a.join(timeout=5)

    exc, returned_at = outcomes["cancelled"]
    assert exc.code == "admission_cancelled"
    assert returned_at - cancelled_at < 0.1
    assert limiter.waiting() == 1

    b.join(timeout=5)
    assert outcomes["admitted"] - first >= window
    assert outcomes["admitted"] - first < window + SLACK
    assert limiter.waiting() == 0


def test_cancelled_token_records_no_admission(fake_clock) -> None:
    limiter = SlidingWindowRateLimiter(10.0, 2, clock=fake_clock)
    token = CancelToken()
    token.cancel()

    with pytest.raises(AdmissionCancelledError):
        limiter.acquire(token)

    assert limiter.in_window() == 0
    assert limiter.waiting() == 0
    limiter.acquire()
    assert limiter.in_window() == 1


def test_cancel_token_callbacks() -> None:
    calls: list[str] = []
    token = CancelToken()
    token.add_callback(lambda: calls.append("a"))
    removed = lambda: calls.append("b")  # noqa: E731
    token.add_callback(removed)
    token.remove_callback(removed)

    token.cancel()
    token.cancel()
    token.add_callback(lambda: calls.append("late"))

    assert token.cancelled is True
    assert calls == ["a", "late"]


def test_waiting_log_reports_queue_position(wait_until, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="crpt_client.adapters.rate_limit.sliding_window")
    limiter = SlidingWindowRateLimiter(0.2, 1)
    limiter.acquire()

    threads = [threading.Thread(target=limiter.acquire) for _ in range(2)]
    threads[0].start()
    wait_until(lambda: limiter.waiting() == 1)
    threads[1].start()
    wait_until(lambda: limiter.waiting() == 2)
    for t in threads:
        t.join(timeout=5)

    waiting = [r for r in caplog.records if r.getMessage() == "rate_limit.waiting"]
    positions = {r.queue_position for r in waiting}

    assert positions == {0, 1}
    assert all(r.wait_s > 0 for r in waiting if r.queue_position == 0)
