"""In-memory session assignment table.

Notes:
- Per-process only: workers do not share assignments, so stickiness holds
  only while a session keeps hitting the same process. Assignments are still
  reproducible because the bucketing hash is deterministic.
- Rows are never evicted; memory grows with the number of distinct sessions.
"""

from __future__ import annotations

import threading

from abgate.adapters.assignment.base import AbstractAssignmentStore


class InMemoryAssignmentStore(AbstractAssignmentStore):
    """Thread-safe ``session_id -> {experiment -> variant}`` table."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._table: dict[str, dict[str, str]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._table)

    def get(self, session_id: str, experiment_name: str) -> str | None:
        with self._lock:
            row = self._table.get(session_id)
            if row is None:
                return None
            return row.get(experiment_name)

    def set_if_absent(self, session_id: str, experiment_name: str, variant: str) -> str:
        with self._lock:
            row = self._table.setdefault(session_id, {})
            return row.setdefault(experiment_name, variant)

    def assignments_for(self, session_id: str) -> dict[str, str]:
        with self._lock:
            return dict(self._table.get(session_id, {}))

    def clear(self) -> None:
        """Remove all assignments."""
        with self._lock:
            self._table.clear()
