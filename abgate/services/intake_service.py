"""Form and analytics intake.

There is no CRM, mailer or analytics warehouse behind these; each submission
is validated upstream, given an id, and logged (PII fields are redacted by
the logging filters).
"""

from __future__ import annotations

import logging
from typing import Any

from abgate.core.errors import ValidationAppError
from abgate.schemas.intake import (
    AnalyticsEventRequest,
    ContactFormRequest,
    ContactFormResponse,
    LeadMagnetRequest,
    LeadMagnetResponse,
    PageViewRequest,
)
from abgate.utils.ids import mint_id, mint_ticket_id

logger = logging.getLogger(__name__)

SPAM_KEYWORDS: tuple[str, ...] = ("viagra", "casino", "loan", "crypto", "bitcoin")


def contains_spam(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in SPAM_KEYWORDS)


def submit_contact_form(form: ContactFormRequest) -> ContactFormResponse:
    """Accept a contact inquiry.

    Support inquiries get a ticket id and a shorter response estimate.

    Raises:
        ValidationAppError: If the message looks like spam.
    """

    if contains_spam(form.message):
        logger.warning(
            "contact.spam_detected",
            extra={"inquiry_type": form.inquiry_type, "message_length": len(form.message)},
        )
        raise ValidationAppError(
            code="SPAM_DETECTED",
            message="Your message was flagged as potential spam. Please contact us directly.",
        )

    is_support = form.inquiry_type == "support"
    ticket_id = mint_ticket_id() if is_support else None
    response_time = "2-4 hours" if is_support else "24 hours"

    logger.info(
        "contact.submitted",
        extra={
            "contact": {
                "name": form.name,
                "email": form.email,
                "company": form.company,
            },
            "inquiry_type": form.inquiry_type,
            "ticket_id": ticket_id,
            "message_length": len(form.message),
        },
    )

    if ticket_id:
        text = (
            f"Thank you for contacting us! Your support ticket {ticket_id} has been "
            f"created. We'll respond within {response_time}."
        )
    else:
        text = (
            f"Thank you for contacting us! We've received your {form.inquiry_type} "
            f"inquiry and will respond within {response_time}."
        )
    return ContactFormResponse(message=text, ticket_id=ticket_id)


def submit_lead_magnet(form: LeadMagnetRequest) -> LeadMagnetResponse:
    """Register a lead magnet signup and return its delivery links."""

    lead_id = mint_id("lead")
    download_url = None
    access_link = None
    if form.magnet_type == "pdf":
        download_url = f"/downloads/{form.persona}-content-strategy-guide.pdf"
        message = "Download link sent to your email!"
    else:
        access_link = f"/webinars/automated-content-strategy?lead={lead_id}"
        message = "Webinar access details sent to your email!"

    logger.info(
        "lead_magnet.submitted",
        extra={
            "lead_id": lead_id,
            "email": form.email,
            "persona": form.persona,
            "magnet_type": form.magnet_type,
            "utm": form.utm_params.model_dump(exclude_none=True) if form.utm_params else {},
        },
    )
    return LeadMagnetResponse(
        message=message,
        lead_id=lead_id,
        download_url=download_url,
        access_link=access_link,
    )


def track_event(event: AnalyticsEventRequest, client_info: dict[str, Any]) -> str:
    """Log an analytics event and return its id."""

    event_id = mint_id("evt")
    logger.info(
        "analytics.event",
        extra={
            "event_id": event_id,
            "event": event.event,
            "properties": event.properties or {},
            "session_id": event.session_id,
            "user_id": event.user_id,
            "client_info": client_info,
        },
    )
    return event_id


def track_page_view(view: PageViewRequest, client_info: dict[str, Any]) -> str:
    """Log a page view and return its id."""

    view_id = mint_id("view")
    logger.info(
        "analytics.page_view",
        extra={
            "view_id": view_id,
            "page": view.page,
            "title": view.title,
            "referrer": view.referrer,
            "session_id": view.session_id,
            "utm": view.utm_params.model_dump(exclude_none=True) if view.utm_params else {},
            "client_info": client_info,
        },
    )
    return view_id
