"""Rate limiter interfaces.

Handlers depend on this abstraction (not the concrete implementation) so the
in-process store can later be swapped for a shared cache with TTL support.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the current window resets.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for per-key fixed-window rate limiters."""

    @abstractmethod
    def consume(self, key: str, *, max_requests: int, window_ms: int) -> RateLimitResult:
        """Count one request for ``key`` against a fixed window.

        Args:
            key: Client identifier (e.g., IP address or ``"unknown"``).
            max_requests: Requests admitted per window.
            window_ms: Window length in milliseconds.

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    def admit(self, key: str, max_requests: int, window_ms: int) -> bool:
        """Return True when the request for ``key`` is within budget."""
        return self.consume(key, max_requests=max_requests, window_ms=window_ms).allowed
