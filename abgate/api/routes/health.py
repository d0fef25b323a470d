from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from abgate.core.config import settings

router = APIRouter(tags=["Health"])

_STARTED_AT = time.monotonic()
_NO_CACHE = {"Cache-Control": "no-cache, no-store, must-revalidate"}


def overall_status(features: dict[str, bool]) -> str:
    """Summarize feature checks as ``healthy``, ``degraded`` or ``unhealthy``.

    Forms are critical: if they are down the site is unhealthy. The remaining
    features are important; losing more than half of them degrades the site.
    """

    if not features["forms"]:
        return "unhealthy"
    important = [value for name, value in features.items() if name != "forms"]
    if sum(important) < len(important) * 0.5:
        return "degraded"
    return "healthy"


@router.get("/health")
def health_check(request: Request) -> JSONResponse:
    """Health check for load balancers and monitoring.

    Returns:
        JSONResponse: overall ``status``, uptime, running experiment count and
            per-feature checks. 503 when unhealthy, 200 otherwise.
    """

    registry = request.app.state.variant_assignor.registry
    active_count = len(registry.active_experiments())
    features = {
        "forms": True,
        "analytics": True,
        "ab_testing": active_count > 0,
        "rate_limiting": settings.app.rate_limit_enabled,
    }
    status = overall_status(features)

    return JSONResponse(
        status_code=503 if status == "unhealthy" else 200,
        content={
            "status": status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime_s": round(time.monotonic() - _STARTED_AT, 3),
            "active_experiments": active_count,
            "checks": {"features": features},
        },
        headers=_NO_CACHE,
    )


@router.head("/health")
def health_head() -> Response:
    """Body-less uptime check."""

    return Response(status_code=200, headers={"Cache-Control": "no-cache"})
