"""Deterministic, session-sticky A/B variant assignment.

Bucketing:
    key    = session_id + experiment_name + (salt or "")
    bucket = abs(string_hash32(key)) % 100
    pick the first variant whose cumulative weight exceeds ``bucket``

The computation is a pure function of its inputs; the assignment store only
caches its first answer so that later config edits (after a restart) cannot
move a session that was already assigned within the same process.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Sequence

from abgate.adapters.assignment.base import AbstractAssignmentStore
from abgate.schemas.experiment import ExperimentDefinition
from abgate.services.experiment_registry import ExperimentRegistry
from abgate.utils.hashing import bucket_for, hash_identifier

logger = logging.getLogger(__name__)


def bucketing_key(session_id: str, experiment_name: str, salt: str | None = None) -> str:
    return session_id + experiment_name + (salt or "")


def select_variant(bucket: int, variants: Sequence[str], distribution: Sequence[int]) -> str:
    """Walk cumulative weights and return the variant owning ``bucket``.

    Falls back to the first variant when the weights do not cover the bucket
    (e.g., they sum to less than 100).

    Examples:
        >>> select_variant(49, ["a", "b"], [50, 50])
        'a'
        >>> select_variant(50, ["a", "b"], [50, 50])
        'b'
        >>> select_variant(95, ["a", "b"], [40, 40])
        'a'
    """

    cumulative = 0
    for variant, weight in zip(variants, distribution):
        cumulative += weight
        if bucket < cumulative:
            return variant
    return variants[0]


def compute_variant(
    session_id: str,
    experiment: ExperimentDefinition,
    salt: str | None = None,
) -> str:
    """Compute the variant for a session without consulting any cache."""

    bucket = bucket_for(bucketing_key(session_id, experiment.name, salt))
    return select_variant(bucket, experiment.variants, experiment.distribution)


class VariantAssignor:
    """Resolves sticky variant assignments for sessions.

    Args:
        registry: Experiment definitions.
        store: Assignment table; first write wins per (session, experiment).
        clock: Returns the current aware datetime (used for date windows).
    """

    def __init__(
        self,
        registry: ExperimentRegistry,
        store: AbstractAssignmentStore,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._registry = registry
        self._store = store
        self._clock = clock

    @property
    def registry(self) -> ExperimentRegistry:
        return self._registry

    def resolve(
        self,
        session_id: str,
        experiment_name: str,
        salt: str | None = None,
    ) -> str | None:
        """Return the session's variant, or None for unknown/inactive experiments.

        ``salt`` only influences the first assignment; once recorded, the same
        variant is returned for any salt.
        """

        experiment = self._registry.get(experiment_name)
        if experiment is None or not experiment.is_running(self._clock()):
            logger.debug(
                "ab_test.not_running",
                extra={
                    "experiment": experiment_name,
                    "known": experiment is not None,
                },
            )
            return None

        existing = self._store.get(session_id, experiment_name)
        if existing is not None:
            return existing

        variant = compute_variant(session_id, experiment, salt)
        stored = self._store.set_if_absent(session_id, experiment_name, variant)

        logger.info(
            "ab_test.variant_assigned",
            extra={
                "experiment": experiment_name,
                "variant": stored,
                "session_hash": hash_identifier(session_id),
                "salted": bool(salt),
            },
        )
        return stored
