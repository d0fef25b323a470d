"""Experiment definitions loaded once at startup.

Definitions come either from the built-in catalogue below or from a JSON file
(``APP_EXPERIMENTS_FILE``) holding a list of objects, or a mapping of
experiment key to object. Every definition is validated on load; a malformed
catalogue stops the application from starting.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping

from pydantic import TypeAdapter, ValidationError

from abgate.core.errors import ExperimentConfigError
from abgate.schemas.experiment import ExperimentDefinition

logger = logging.getLogger(__name__)

_DEFINITIONS_ADAPTER = TypeAdapter(list[ExperimentDefinition])
_KEYED_DEFINITIONS_ADAPTER = TypeAdapter(dict[str, dict[str, Any]])

DEFAULT_EXPERIMENTS: list[dict[str, Any]] = [
    {
        "name": "lead_magnet_type",
        "title": "Lead Magnet Type Test",
        "description": "Test whether PDF guides or webinars perform better for lead generation",
        "variants": ["pdf", "webinar"],
        "distribution": [50, 50],
        "active": True,
        "target_audience": "all",
        "success_metric": "lead_conversion_rate",
        "hypothesis": "Webinars will have higher conversion rates but PDFs will have higher quality leads",
    },
    {
        "name": "cta_button_text",
        "title": "CTA Button Text Test",
        "description": "Test different call-to-action button texts for maximum click-through",
        "variants": ["Get Started Free", "Start Your Trial", "Try It Now"],
        "distribution": [34, 33, 33],
        "active": True,
        "target_audience": "all",
        "success_metric": "button_click_rate",
        "hypothesis": '"Get Started Free" will perform best due to emphasis on no cost',
    },
    {
        "name": "hero_headline",
        "title": "Hero Headline Test",
        "description": "Test different homepage hero headlines for engagement",
        "variants": ["variant_a", "variant_b"],
        "distribution": [50, 50],
        "active": False,
        "target_audience": "all",
        "success_metric": "page_engagement_time",
        "hypothesis": "More specific headlines will increase engagement",
    },
    {
        "name": "smb_pricing_display",
        "title": "SMB Pricing Display Test",
        "description": "Test monthly vs annual pricing emphasis for SMB persona",
        "variants": ["monthly_first", "annual_first"],
        "distribution": [50, 50],
        "active": False,
        "target_audience": "smb",
        "success_metric": "pricing_page_conversion",
        "hypothesis": "Annual pricing will increase customer lifetime value",
    },
    {
        "name": "agency_social_proof",
        "title": "Agency Social Proof Test",
        "description": "Test different types of social proof for agency landing page",
        "variants": ["testimonials", "case_studies", "client_logos"],
        "distribution": [33, 33, 34],
        "active": False,
        "target_audience": "agency",
        "success_metric": "lead_form_completion",
        "hypothesis": "Case studies will be most convincing for B2B agency audience",
    },
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExperimentRegistry:
    """Immutable lookup of experiment definitions by name."""

    def __init__(self, definitions: Iterable[ExperimentDefinition]) -> None:
        by_name: dict[str, ExperimentDefinition] = {}
        for definition in definitions:
            if definition.name in by_name:
                raise ExperimentConfigError(
                    code="duplicate_experiment",
                    message=f"Experiment '{definition.name}' is defined more than once",
                    details={"experiment": definition.name},
                )
            by_name[definition.name] = definition
        self._by_name = by_name

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> ExperimentDefinition | None:
        return self._by_name.get(name)

    def is_running(self, name: str, now: datetime | None = None) -> bool:
        """Return True when ``name`` exists, is active and is inside its dates."""
        definition = self._by_name.get(name)
        if definition is None:
            return False
        return definition.is_running(now or _utcnow())

    def active_experiments(self, now: datetime | None = None) -> dict[str, ExperimentDefinition]:
        moment = now or _utcnow()
        return {
            name: definition
            for name, definition in self._by_name.items()
            if definition.is_running(moment)
        }

    def experiments_for_audience(
        self, audience: str, now: datetime | None = None
    ) -> dict[str, ExperimentDefinition]:
        """Running experiments targeting ``audience`` or everyone."""
        return {
            name: definition
            for name, definition in self.active_experiments(now).items()
            if definition.target_audience in (audience, "all")
        }

    @classmethod
    def from_raw(cls, raw: Any) -> "ExperimentRegistry":
        """Validate raw (JSON-decoded) experiment data.

        Args:
            raw: A list of definition objects, or a mapping of experiment key
                to definition object (the key fills in ``name`` when absent).

        Raises:
            ExperimentConfigError: If any definition is malformed.
        """
        try:
            if isinstance(raw, Mapping):
                keyed = _KEYED_DEFINITIONS_ADAPTER.validate_python(raw)
                raw = [{"name": key, **value} for key, value in keyed.items()]
            definitions = _DEFINITIONS_ADAPTER.validate_python(raw)
        except ValidationError as exc:
            raise ExperimentConfigError(
                code="invalid_experiment_config",
                message="Experiment definitions failed validation",
                details={
                    "issues": [
                        {"loc": list(err["loc"]), "msg": err["msg"]}
                        for err in exc.errors()
                    ]
                },
            ) from exc
        return cls(definitions)

    @classmethod
    def from_file(cls, path: str | Path) -> "ExperimentRegistry":
        """Load definitions from a JSON file.

        Raises:
            ExperimentConfigError: If the file is missing, not JSON, or invalid.
        """
        file_path = Path(path)
        try:
            raw = json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ExperimentConfigError(
                code="experiment_file_unreadable",
                message=f"Cannot read experiment definitions from {file_path}",
                details={"hint": str(exc)},
            ) from exc
        return cls.from_raw(raw)


def load_registry(experiments_file: str | None = None) -> ExperimentRegistry:
    """Build the registry from ``experiments_file`` or the built-in catalogue."""

    if experiments_file:
        registry = ExperimentRegistry.from_file(experiments_file)
        source = "file"
    else:
        registry = ExperimentRegistry.from_raw(DEFAULT_EXPERIMENTS)
        source = "builtin"

    logger.info(
        "experiments.loaded",
        extra={
            "source": source,
            "experiment_count": len(registry),
            "active_count": len(registry.active_experiments()),
        },
    )
    return registry
