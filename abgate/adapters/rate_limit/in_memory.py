"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Windows open at a key's first request and are never evicted implicitly;
  callers that run long-lived processes should invoke ``purge_expired``.
- Bursts of up to ``2 * max_requests`` can straddle a window boundary.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from abgate.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class RateLimitEntry:
    """Counter state for a single key."""

    count: int
    window_reset_at: float


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed time window per key.

    A key's window starts with its first request and lasts ``window_ms``. The
    counter restarts only once the clock has moved strictly past the window
    end. Rejected requests do not advance the counter.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            clock: Time source function returning UNIX time in seconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, RateLimitEntry] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def _build_allowed_result(self, *, limit: int, entry: RateLimitEntry) -> RateLimitResult:
        """Build a RateLimitResult for an allowed request."""
        return RateLimitResult(
            allowed=True,
            limit=limit,
            remaining=max(0, limit - entry.count),
            reset_at=int(math.ceil(entry.window_reset_at / 1000)),
            retry_after_seconds=None,
        )

    def _build_blocked_result(
        self, *, now_ms: float, limit: int, entry: RateLimitEntry
    ) -> RateLimitResult:
        """Build a RateLimitResult for a blocked request."""
        retry_after = max(0, int(math.ceil((entry.window_reset_at - now_ms) / 1000)))
        return RateLimitResult(
            allowed=False,
            limit=limit,
            remaining=0,
            reset_at=int(math.ceil(entry.window_reset_at / 1000)),
            retry_after_seconds=retry_after,
        )

    def consume(self, key: str, *, max_requests: int, window_ms: int) -> RateLimitResult:
        """Count one request for ``key``.

        Args:
            key: Unique identifier for rate limiting (e.g., client IP).
            max_requests: Requests admitted per window.
            window_ms: Window length in milliseconds.

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty or limits are invalid.
        """
        if not key:
            raise ValueError("key must be a non-empty string")
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")

        with self._lock:
            now_ms = self._now_ms()
            entry = self._entries.get(key)

            if entry is None or now_ms > entry.window_reset_at:
                entry = RateLimitEntry(count=1, window_reset_at=now_ms + window_ms)
                self._entries[key] = entry
                return self._build_allowed_result(limit=max_requests, entry=entry)

            if entry.count < max_requests:
                entry.count += 1
                return self._build_allowed_result(limit=max_requests, entry=entry)

            return self._build_blocked_result(now_ms=now_ms, limit=max_requests, entry=entry)

    def get_entry(self, key: str) -> RateLimitEntry | None:
        """Return a snapshot of the entry for ``key`` (None if never seen)."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            return RateLimitEntry(count=entry.count, window_reset_at=entry.window_reset_at)

    def purge_expired(self) -> int:
        """Drop entries whose window has closed.

        Returns:
            int: Number of entries removed.
        """
        with self._lock:
            now_ms = self._now_ms()
            expired = [k for k, entry in self._entries.items() if now_ms > entry.window_reset_at]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()
