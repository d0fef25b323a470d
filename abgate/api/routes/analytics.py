from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from abgate.api.dependencies import client_info_from_request
from abgate.core.rate_limit import rate_limited
from abgate.schemas.intake import (
    AnalyticsEventRequest,
    AnalyticsEventResponse,
    PageViewRequest,
    PageViewResponse,
    StatusResponse,
)
from abgate.services.intake_service import track_event, track_page_view

router = APIRouter(prefix="/analytics", tags=["Analytics"])

_MESSAGE = "Analytics rate limit exceeded."


@router.post(
    "/track-event",
    response_model=AnalyticsEventResponse,
    dependencies=[Depends(rate_limited("analytics", _MESSAGE, scope="analytics_event"))],
)
def post_event(event: AnalyticsEventRequest, request: Request) -> AnalyticsEventResponse:
    """Record a custom analytics event."""
    event_id = track_event(event, client_info_from_request(request))
    return AnalyticsEventResponse(event_id=event_id)


@router.get("/track-event", response_model=StatusResponse)
def event_status() -> StatusResponse:
    return StatusResponse(
        message="Analytics tracking endpoint is operational",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.post(
    "/page-view",
    response_model=PageViewResponse,
    dependencies=[Depends(rate_limited("analytics", _MESSAGE, scope="analytics_page_view"))],
)
def post_page_view(view: PageViewRequest, request: Request) -> PageViewResponse:
    """Record a page view."""
    view_id = track_page_view(view, client_info_from_request(request))
    return PageViewResponse(view_id=view_id)


@router.get("/page-view", response_model=StatusResponse)
def page_view_status() -> StatusResponse:
    return StatusResponse(
        message="Page view tracking endpoint is operational",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
