"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    hint: str
    experiment: str
    field: str
    limit: int
    remaining: int
    reset_at: int
    retry_after: int
    issues: list[dict[str, Any]]
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request input fails validation."""


class NotFoundAppError(AppError):
    """Raised when a requested resource (e.g., experiment) does not exist."""


class ExperimentConfigError(AppError):
    """Raised when experiment definitions are malformed at load time."""


@dataclass
class RateLimitAppError(AppError):
    """Raised when a client exceeds its request budget.

    Attributes:
        headers: Response headers describing the limit state.
    """

    headers: dict[str, str] = field(default_factory=dict)
