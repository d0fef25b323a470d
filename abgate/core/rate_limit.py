"""Rate limiting dependencies for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: routes depend on a dependency function only.
- Swap-friendly: the limiter lives on ``app.state`` behind an abstract
  interface, so a shared store can replace the in-memory one.
- Per-endpoint policies: each route family names a policy from settings.

Rate limiting strategy:
- Fixed window per client key, opened by the client's first request.
- Client key is the first X-Forwarded-For hop, else X-Real-IP, else the
  literal ``"unknown"`` (all anonymous clients then share one budget).
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from fastapi import Request

from abgate.adapters.rate_limit.base import AbstractRateLimiter
from abgate.core.config import RateLimitPolicy, settings
from abgate.core.errors import RateLimitAppError
from abgate.utils.hashing import hash_identifier

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter owned by the running application."""

    return request.app.state.rate_limiter


def client_key_from_request(request: Request) -> str:
    """Extract the rate limit key for the current request.

    Args:
        request: FastAPI request.

    Returns:
        str: Client address, or ``"unknown"`` when no proxy header is present.
    """

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip

    return UNKNOWN_CLIENT


def _policy_for(name: str) -> RateLimitPolicy:
    return getattr(settings.app, f"rate_limit_{name}")


def rate_limited(
    policy_name: str,
    message: str = "Too many requests. Please try again in a minute.",
    *,
    scope: str | None = None,
) -> Callable[[Request], Awaitable[None]]:
    """Build a dependency enforcing the named rate limit policy.

    Usage:
        @router.post("/contact/submit", dependencies=[Depends(rate_limited("contact"))])

    Args:
        policy_name: Suffix of an ``AppSettings.rate_limit_<name>`` field.
        message: Client-facing message when the budget is exhausted.
        scope: Counter namespace; defaults to ``policy_name``. Routes sharing
            a policy but given distinct scopes keep separate counters.

    Returns:
        Async dependency raising RateLimitAppError (HTTP 429) when exceeded.
    """

    _policy_for(policy_name)
    namespace = scope or policy_name

    async def enforce_rate_limit(request: Request) -> None:
        if not settings.app.rate_limit_enabled:
            return

        policy = _policy_for(policy_name)
        limiter = get_rate_limiter(request)
        key = client_key_from_request(request)

        result = limiter.consume(
            f"{namespace}:{key}",
            max_requests=policy.max_requests,
            window_ms=policy.window_ms,
        )
        if result.allowed:
            logger.debug(
                "rate_limit.allowed",
                extra={
                    "policy": policy_name,
                    "key_hash": hash_identifier(key),
                    "limit": result.limit,
                    "remaining": result.remaining,
                },
            )
            return

        retry_after = result.retry_after_seconds or 0
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "policy": policy_name,
                "key_hash": hash_identifier(key),
                "limit": result.limit,
                "window_ms": policy.window_ms,
                "retry_after_s": retry_after,
            },
        )

        headers: dict[str, str] = {}
        if settings.app.rate_limit_include_headers:
            headers["Retry-After"] = str(retry_after)
            headers["X-RateLimit-Limit"] = str(result.limit)
            headers["X-RateLimit-Remaining"] = str(result.remaining)
            headers["X-RateLimit-Reset"] = str(result.reset_at)

        raise RateLimitAppError(
            code="RATE_LIMIT_EXCEEDED",
            message=message,
            details={"limit": result.limit, "retry_after": retry_after},
            headers=headers,
        )

    return enforce_rate_limit
