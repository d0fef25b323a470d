"""Unit tests for form and analytics intake."""

import re

import pytest
from pydantic import ValidationError

from abgate.core.errors import ValidationAppError
from abgate.schemas.intake import (
    AnalyticsEventRequest,
    ContactFormRequest,
    LeadMagnetRequest,
    PageViewRequest,
)
from abgate.services.intake_service import (
    contains_spam,
    submit_contact_form,
    submit_lead_magnet,
    track_event,
    track_page_view,
)


def _contact(**overrides) -> ContactFormRequest:
    data = {
        "name": "Dana Lee",
        "email": "dana@example.com",
        "message": "We'd like a demo for our content team.",
        "inquiryType": "sales",
    }
    data.update(overrides)
    return ContactFormRequest(**data)


class TestContactForm:
    def test_general_inquiry_has_no_ticket(self) -> None:
        response = submit_contact_form(_contact())

        assert response.ticket_id is None
        assert "sales inquiry" in response.message
        assert "24 hours" in response.message

    def test_support_inquiry_creates_ticket(self) -> None:
        response = submit_contact_form(_contact(inquiryType="support"))

        assert response.ticket_id is not None
        assert re.fullmatch(r"SUP-\d+-[A-Z0-9]{6}", response.ticket_id)
        assert "2-4 hours" in response.message

    @pytest.mark.parametrize("word", ["Viagra", "CASINO", "payday loan", "crypto", "bitcoin"])
    def test_spam_is_rejected(self, word: str) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            submit_contact_form(_contact(message=f"Great offer on {word} today only"))

        assert exc_info.value.code == "SPAM_DETECTED"

    def test_contains_spam_is_case_insensitive(self) -> None:
        assert contains_spam("BITCOIN") is True
        assert contains_spam("content strategy") is False

    @pytest.mark.parametrize(
        "overrides",
        [
            {"email": "not-an-email"},
            {"message": "short"},
            {"inquiryType": "billing"},
            {"name": ""},
        ],
    )
    def test_schema_rejects_bad_input(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            _contact(**overrides)


class TestLeadMagnet:
    def test_pdf_signup_returns_download_url(self) -> None:
        form = LeadMagnetRequest(
            email="a@b.co", firstName="Ana", persona="smb", magnetType="pdf"
        )

        response = submit_lead_magnet(form)

        assert response.lead_id.startswith("lead_")
        assert response.download_url == "/downloads/smb-content-strategy-guide.pdf"
        assert response.access_link is None

    def test_webinar_signup_returns_access_link(self) -> None:
        form = LeadMagnetRequest(
            email="a@b.co", firstName="Ana", persona="agency", magnetType="webinar"
        )

        response = submit_lead_magnet(form)

        assert response.download_url is None
        assert response.access_link.endswith(f"?lead={response.lead_id}")


def test_track_event_and_page_view_mint_prefixed_ids() -> None:
    event = AnalyticsEventRequest(event="cta_click", sessionId="s")
    view = PageViewRequest(page="/pricing", title="Pricing", userAgent="pytest", sessionId="s")

    assert track_event(event, {}).startswith("evt_")
    assert track_page_view(view, {}).startswith("view_")
