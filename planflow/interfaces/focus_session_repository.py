"""
Focus session repository interface.

History is append-only: sessions are never updated or deleted.
"""

from abc import ABC, abstractmethod

from planflow.models.focus import FocusSession


class IFocusSessionRepository(ABC):
    """Abstract interface for focus session history."""

    @abstractmethod
    async def add(self, session: FocusSession) -> FocusSession:
        """Append a finished session."""
        pass

    @abstractmethod
    async def list(self) -> list[FocusSession]:
        """All sessions, newest first."""
        pass
