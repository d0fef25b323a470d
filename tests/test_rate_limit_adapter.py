"""Unit tests for in-memory rate limiter adapter."""

from unittest.mock import Mock

import pytest

from abgate.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter


def test_admits_exactly_max_requests_per_window() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(clock=clock)

    decisions = [limiter.admit("1.2.3.4", 3, 60_000) for _ in range(4)]

    assert decisions == [True, True, True, False]


def test_remaining_counts_down_and_blocks_at_zero() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(clock=clock)

    first = limiter.consume("k", max_requests=2, window_ms=60_000)
    second = limiter.consume("k", max_requests=2, window_ms=60_000)
    blocked = limiter.consume("k", max_requests=2, window_ms=60_000)

    assert first.allowed is True
    assert first.remaining == 1
    assert second.remaining == 0
    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.retry_after_seconds == 60
    assert blocked.reset_at == 1060


def test_rejected_requests_do_not_increment_count() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(clock=clock)

    limiter.admit("k", 1, 10_000)
    limiter.admit("k", 1, 10_000)
    limiter.admit("k", 1, 10_000)

    entry = limiter.get_entry("k")
    assert entry is not None
    assert entry.count == 1


def test_window_resets_after_expiry_and_counter_restarts() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(clock=clock)

    assert limiter.admit("k", 1, 10_000) is True
    assert limiter.admit("k", 1, 10_000) is False

    clock.return_value = 1010.001
    assert limiter.admit("k", 1, 10_000) is True

    entry = limiter.get_entry("k")
    assert entry is not None
    assert entry.count == 1
    assert entry.window_reset_at == pytest.approx(1_020_001.0)


def test_request_exactly_at_window_end_is_still_in_window() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(clock=clock)

    assert limiter.admit("k", 1, 10_000) is True

    clock.return_value = 1010.0
    assert limiter.admit("k", 1, 10_000) is False


def test_window_starts_at_first_request_not_clock_boundary() -> None:
    clock = Mock(return_value=1005.0)
    limiter = InMemoryFixedWindowRateLimiter(clock=clock)

    assert limiter.admit("k", 1, 10_000) is True

    # A clock-aligned window would have reset at 1010
    clock.return_value = 1012.0
    assert limiter.admit("k", 1, 10_000) is False


def test_boundary_burst_allows_twice_the_limit() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(clock=clock)

    clock.return_value = 1000.0
    assert limiter.admit("k", 2, 1_000) is True
    clock.return_value = 1000.999
    assert limiter.admit("k", 2, 1_000) is True

    clock.return_value = 1001.001
    assert limiter.admit("k", 2, 1_000) is True
    assert limiter.admit("k", 2, 1_000) is True
    assert limiter.admit("k", 2, 1_000) is False


def test_isolated_by_key() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(clock=clock)

    assert limiter.admit("k1", 1, 60_000) is True
    assert limiter.admit("k1", 1, 60_000) is False

    assert limiter.admit("k2", 1, 60_000) is True


def test_entries_accumulate_until_purged() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(clock=clock)

    for idx in range(5):
        limiter.admit(f"client-{idx}", 3, 1_000)
    assert len(limiter) == 5

    clock.return_value = 1000.5
    assert limiter.purge_expired() == 0

    clock.return_value = 1002.0
    limiter.admit("client-new", 3, 1_000)
    assert limiter.purge_expired() == 5
    assert len(limiter) == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"key": "", "max_requests": 1, "window_ms": 60_000},
        {"key": "k", "max_requests": 0, "window_ms": 60_000},
        {"key": "k", "max_requests": 1, "window_ms": 0},
    ],
)
def test_invalid_consume_args(kwargs: dict) -> None:
    limiter = InMemoryFixedWindowRateLimiter()

    with pytest.raises(ValueError):
        limiter.consume(kwargs.pop("key"), **kwargs)
