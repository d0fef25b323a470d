from __future__ import annotations

"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) and
owns the process-local stores. Stores are injected so tests get isolated
state and a shared cache can replace the in-memory implementations.
"""

from fastapi import FastAPI

from abgate.adapters.assignment.base import AbstractAssignmentStore
from abgate.adapters.assignment.in_memory import InMemoryAssignmentStore
from abgate.adapters.rate_limit.base import AbstractRateLimiter
from abgate.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from abgate.api.routes import ab_test_router, analytics_router, forms_router, health_router
from abgate.core.config import settings
from abgate.core.exception_handlers import setup_exception_handlers
from abgate.core.logging import configure_logging
from abgate.core.middleware import request_id_middleware
from abgate.core.openapi import apply_openapi_customizations
from abgate.services.experiment_registry import ExperimentRegistry, load_registry
from abgate.services.result_tracker import ResultTracker
from abgate.services.variant_service import VariantAssignor


def create_app(
    *,
    registry: ExperimentRegistry | None = None,
    rate_limiter: AbstractRateLimiter | None = None,
    assignment_store: AbstractAssignmentStore | None = None,
    result_tracker: ResultTracker | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        registry: Experiment definitions; loaded from settings when omitted.
        rate_limiter: Limiter store; in-memory when omitted.
        assignment_store: Sticky assignment store; in-memory when omitted.
        result_tracker: Experiment result tracker.
        configure_logs: Install the root log handler (disable in tests that
            capture logs themselves).

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.

    Raises:
        ExperimentConfigError: If experiment definitions are malformed.
    """
    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(settings.log)

    app = FastAPI(
        title="abgate",
        description=(
            "Backend for the marketing site: sticky A/B variant assignment, "
            "per-client fixed-window rate limiting, and form/analytics intake."
        ),
        version="0.1.0",
    )

    # Explicit None checks: the stores define __len__ and are falsy when empty
    if registry is None:
        registry = load_registry(settings.app.experiments_file)
    if rate_limiter is None:
        rate_limiter = InMemoryFixedWindowRateLimiter()
    if assignment_store is None:
        assignment_store = InMemoryAssignmentStore()
    if result_tracker is None:
        result_tracker = ResultTracker()

    app.state.rate_limiter = rate_limiter
    app.state.variant_assignor = VariantAssignor(registry, assignment_store)
    app.state.result_tracker = result_tracker

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(ab_test_router, prefix="/api")
    app.include_router(analytics_router, prefix="/api")
    app.include_router(forms_router, prefix="/api")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
