"""Pydantic schemas for form, analytics and conversion intake.

Request bodies use the camelCase field names the site's browser code sends.
"""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _validate_email(value: str) -> str:
    value = value.strip()
    if not _EMAIL_RE.match(value):
        raise ValueError("Please enter a valid email address")
    return value


class UtmParams(_CamelModel):
    source: str | None = None
    medium: str | None = None
    campaign: str | None = None
    term: str | None = None
    content: str | None = None


class ContactFormRequest(_CamelModel):
    """Contact form submission."""

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=1)
    company: str | None = None
    message: str = Field(..., min_length=10, max_length=1000)
    inquiry_type: Literal["general", "sales", "support", "partnership"]
    phone: str | None = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _validate_email(value)


class ContactFormResponse(_CamelModel):
    success: bool = True
    message: str
    ticket_id: str | None = None


class LeadMagnetRequest(_CamelModel):
    """Lead magnet (guide download / webinar) signup."""

    email: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str | None = None
    company: str | None = None
    challenge: str | None = None
    persona: Literal["smb", "agency"]
    magnet_type: Literal["pdf", "webinar"]
    source: str | None = None
    utm_params: UtmParams | None = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _validate_email(value)


class LeadMagnetResponse(_CamelModel):
    success: bool = True
    message: str
    lead_id: str
    download_url: str | None = None
    access_link: str | None = None


class AnalyticsEventRequest(_CamelModel):
    event: str = Field(..., min_length=1)
    properties: dict[str, Any] | None = None
    user_id: str | None = None
    session_id: str = Field(..., min_length=1)


class AnalyticsEventResponse(_CamelModel):
    success: bool = True
    event_id: str


class PageViewRequest(_CamelModel):
    page: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    referrer: str | None = None
    user_agent: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    utm_params: UtmParams | None = None


class PageViewResponse(_CamelModel):
    success: bool = True
    view_id: str


class ConversionRequest(_CamelModel):
    """A/B test conversion reported by the browser."""

    test_id: str = Field(..., min_length=1)
    variant: str = Field(..., min_length=1)
    conversion_type: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1)
    value: float = 1.0
    user_id: str | None = None


class ConversionResponse(_CamelModel):
    success: bool = True
    conversion_id: str


class StatusResponse(BaseModel):
    success: bool = True
    message: str
    timestamp: str
