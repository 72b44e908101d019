"""In-memory focus session repository implementation."""

from planflow.interfaces.focus_session_repository import IFocusSessionRepository
from planflow.models.focus import FocusSession


class InMemoryFocusSessionRepository(IFocusSessionRepository):
    """Append-only, session-lifetime focus history."""

    def __init__(self):
        self._sessions: list[FocusSession] = []

    async def add(self, session: FocusSession) -> FocusSession:
        """Append a finished session."""
        self._sessions.append(session)
        return session

    async def list(self) -> list[FocusSession]:
        """All sessions, newest first."""
        return list(reversed(self._sessions))
