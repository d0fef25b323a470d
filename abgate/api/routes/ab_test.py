from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request, Response

from abgate.api.dependencies import (
    SESSION_COOKIE,
    client_info_from_request,
    get_result_tracker,
    get_variant_assignor,
    session_id_from_request,
)
from abgate.core.errors import NotFoundAppError, ValidationAppError
from abgate.core.rate_limit import rate_limited
from abgate.schemas.experiment import (
    ExperimentListResponse,
    ExperimentSummary,
    VariantResponse,
)
from abgate.schemas.intake import ConversionRequest, ConversionResponse, StatusResponse
from abgate.services.result_tracker import ResultTracker
from abgate.services.variant_service import VariantAssignor

router = APIRouter(prefix="/ab-test", tags=["Experiments"])


@router.get(
    "/variant",
    response_model=VariantResponse,
    dependencies=[
        Depends(rate_limited("variant", "A/B test variant lookup rate limit exceeded."))
    ],
)
def get_variant(
    request: Request,
    response: Response,
    test: str | None = Query(None, description="Experiment key."),
    persona: str | None = Query(None, description="Optional salt mixed into bucketing."),
    assignor: VariantAssignor = Depends(get_variant_assignor),
) -> VariantResponse:
    """Resolve the caller's sticky variant for an experiment.

    The session comes from ``X-Session-ID`` or the ``session_id`` cookie; a
    new one is minted and set as a cookie when neither is present.

    Raises:
        ValidationAppError: 400 when ``test`` is missing.
        NotFoundAppError: 404 when the experiment is unknown or not running.
            Clients fall back to their default variant.
    """
    if not test:
        raise ValidationAppError(code="MISSING_PARAMETER", message="Test name is required")

    session_id, minted = session_id_from_request(request)
    variant = assignor.resolve(session_id, test, persona or None)
    if variant is None:
        raise NotFoundAppError(
            code="TEST_NOT_FOUND",
            message="Test not found or inactive",
            details={"experiment": test},
        )

    if minted:
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")

    return VariantResponse(variant=variant, testId=test, sessionId=session_id)


@router.get("/experiments", response_model=ExperimentListResponse)
def list_experiments(
    audience: Literal["smb", "agency"] | None = Query(None),
    assignor: VariantAssignor = Depends(get_variant_assignor),
) -> ExperimentListResponse:
    """List running experiments, optionally narrowed to a persona."""
    registry = assignor.registry
    if audience:
        running = registry.experiments_for_audience(audience)
    else:
        running = registry.active_experiments()

    return ExperimentListResponse(
        experiments=[
            ExperimentSummary(
                name=definition.name,
                title=definition.title,
                variants=list(definition.variants),
                distribution=list(definition.distribution),
                target_audience=definition.target_audience,
                success_metric=definition.success_metric,
            )
            for definition in running.values()
        ]
    )


@router.post(
    "/convert",
    response_model=ConversionResponse,
    dependencies=[
        Depends(rate_limited("conversion", "A/B test conversion tracking rate limit exceeded."))
    ],
)
def track_conversion(
    conversion: ConversionRequest,
    request: Request,
    tracker: ResultTracker = Depends(get_result_tracker),
) -> ConversionResponse:
    conversion_id = tracker.record_conversion(conversion, client_info_from_request(request))
    return ConversionResponse(conversion_id=conversion_id)


@router.get("/convert", response_model=StatusResponse)
def conversion_status() -> StatusResponse:
    return StatusResponse(
        message="A/B test conversion tracking endpoint is operational",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
