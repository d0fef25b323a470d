"""Pydantic schemas for experiment definitions and variant lookups."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Audience = Literal["smb", "agency", "all"]

DISTRIBUTION_TOTAL = 100


class ExperimentDefinition(BaseModel):
    """A statically configured A/B test.

    ``variants`` and ``distribution`` are parallel lists: the i-th weight is
    the percentage of buckets routed to the i-th variant.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique experiment key.")
    variants: tuple[str, ...] = Field(
        ..., min_length=1, description="Ordered variant identifiers."
    )
    distribution: tuple[int, ...] = Field(
        ..., min_length=1, description="Percentage weight per variant, summing to 100."
    )
    active: bool = Field(default=True, description="Inactive experiments never assign.")
    title: str | None = Field(default=None, description="Human-readable title.")
    description: str | None = None
    target_audience: Audience = Field(
        default="all", description="Persona the experiment targets."
    )
    start_date: datetime | None = Field(
        default=None, description="Experiment does not assign before this instant."
    )
    end_date: datetime | None = Field(
        default=None, description="Experiment does not assign after this instant."
    )
    success_metric: str | None = None
    hypothesis: str | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def check_distribution(self) -> "ExperimentDefinition":
        if len(self.variants) != len(self.distribution):
            raise ValueError(
                f"experiment '{self.name}' has {len(self.variants)} variants "
                f"but {len(self.distribution)} weights"
            )
        if len(set(self.variants)) != len(self.variants):
            raise ValueError(f"experiment '{self.name}' has duplicate variants")
        if any(weight < 0 for weight in self.distribution):
            raise ValueError(f"experiment '{self.name}' has a negative weight")
        total = sum(self.distribution)
        if total != DISTRIBUTION_TOTAL:
            raise ValueError(
                f"experiment '{self.name}' weights sum to {total}, expected {DISTRIBUTION_TOTAL}"
            )
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError(f"experiment '{self.name}' ends before it starts")
        return self

    def is_running(self, now: datetime) -> bool:
        """Return True when active and ``now`` falls inside the date window.

        A naive ``now`` is taken as UTC, like the configured dates.
        """
        if not self.active:
            return False
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        if self.start_date is not None and now < self.start_date:
            return False
        if self.end_date is not None and now > self.end_date:
            return False
        return True


class VariantResponse(BaseModel):
    """Successful variant lookup."""

    success: bool = True
    variant: str = Field(..., description="Assigned variant identifier.")
    testId: str = Field(..., description="Experiment key the variant belongs to.")
    sessionId: str = Field(..., description="Session the assignment is sticky to.")


class ExperimentSummary(BaseModel):
    """Public view of a running experiment."""

    name: str
    title: str | None = None
    variants: list[str]
    distribution: list[int]
    target_audience: Audience
    success_metric: str | None = None


class ExperimentListResponse(BaseModel):
    success: bool = True
    experiments: list[ExperimentSummary] = Field(default_factory=list)
