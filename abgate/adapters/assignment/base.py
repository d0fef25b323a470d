"""Assignment store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractAssignmentStore(ABC):
    """Maps ``(session_id, experiment_name)`` to a variant, first write wins."""

    @abstractmethod
    def get(self, session_id: str, experiment_name: str) -> str | None:
        """Return the recorded variant, or None if the pair is unassigned."""
        raise NotImplementedError

    @abstractmethod
    def set_if_absent(self, session_id: str, experiment_name: str, variant: str) -> str:
        """Record ``variant`` unless the pair already has one.

        Returns:
            str: The variant now stored for the pair (existing one wins).
        """
        raise NotImplementedError

    @abstractmethod
    def assignments_for(self, session_id: str) -> dict[str, str]:
        """Return a copy of every assignment recorded for ``session_id``."""
        raise NotImplementedError
