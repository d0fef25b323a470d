from fastapi import APIRouter, Depends

from abgate.core.rate_limit import rate_limited
from abgate.schemas.intake import (
    ContactFormRequest,
    ContactFormResponse,
    LeadMagnetRequest,
    LeadMagnetResponse,
)
from abgate.services.intake_service import submit_contact_form, submit_lead_magnet

router = APIRouter(tags=["Forms"])


@router.post(
    "/contact/submit",
    response_model=ContactFormResponse,
    dependencies=[
        Depends(
            rate_limited(
                "contact",
                "Too many contact form submissions. Please try again in a minute.",
            )
        )
    ],
)
def post_contact(form: ContactFormRequest) -> ContactFormResponse:
    """Submit the contact form.

    Raises:
        ValidationAppError: 400 SPAM_DETECTED for flagged messages.
    """
    return submit_contact_form(form)


@router.post(
    "/lead-magnets/submit",
    response_model=LeadMagnetResponse,
    dependencies=[Depends(rate_limited("lead_magnet"))],
)
def post_lead_magnet(form: LeadMagnetRequest) -> LeadMagnetResponse:
    """Sign up for a lead magnet (PDF guide or webinar)."""
    return submit_lead_magnet(form)
