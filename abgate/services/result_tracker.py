"""Session-scoped experiment result tracking.

Results are kept per session in process memory and emitted as structured
log records; there is no analytics backend behind this.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from abgate.schemas.intake import ConversionRequest
from abgate.utils.hashing import hash_identifier
from abgate.utils.ids import mint_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExperimentResult:
    """A single metric observation for a session in an experiment."""

    test_name: str
    variant: str
    metric: str
    value: float
    session_id: str
    user_id: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ResultTracker:
    """Collects experiment results grouped by session."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_session: dict[str, list[ExperimentResult]] = {}

    def record(self, result: ExperimentResult) -> None:
        with self._lock:
            self._by_session.setdefault(result.session_id, []).append(result)

        payload = asdict(result)
        payload.pop("session_id")
        payload.pop("user_id")
        logger.info(
            "ab_test.result",
            extra={
                "result": payload,
                "session_hash": hash_identifier(result.session_id),
            },
        )

    def results_for_session(self, session_id: str) -> list[ExperimentResult]:
        with self._lock:
            return list(self._by_session.get(session_id, []))

    def record_conversion(
        self,
        conversion: ConversionRequest,
        client_info: dict[str, Any] | None = None,
    ) -> str:
        """Record a conversion reported by the browser.

        Args:
            conversion: Validated conversion payload.
            client_info: Request metadata (ip, user agent, referer, language).

        Returns:
            str: Generated conversion id (``conv_<ms>_<random>``).
        """

        conversion_id = mint_id("conv")
        self.record(
            ExperimentResult(
                test_name=conversion.test_id,
                variant=conversion.variant,
                metric=conversion.conversion_type,
                value=conversion.value,
                session_id=conversion.session_id,
                user_id=conversion.user_id,
            )
        )
        logger.info(
            "ab_test.conversion",
            extra={
                "conversion_id": conversion_id,
                "experiment": conversion.test_id,
                "variant": conversion.variant,
                "conversion_type": conversion.conversion_type,
                "client_info": client_info or {},
            },
        )
        return conversion_id
