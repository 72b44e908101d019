"""In-memory project repository implementation."""

from typing import Iterable, Optional

from planflow.interfaces.project_repository import IProjectRepository, SnapshotUpdater
from planflow.models.project import Project, inbox_project


class InMemoryProjectRepository(IProjectRepository):
    """In-memory implementation of the task tree store.

    Holds one tuple of frozen projects. Suitable for a single-process,
    session-lifetime store; nothing is persisted.
    """

    def __init__(self, projects: Optional[Iterable[Project]] = None):
        self._projects: tuple[Project, ...] = (
            tuple(projects) if projects is not None else (inbox_project(),)
        )

    async def list(self) -> tuple[Project, ...]:
        """Get the current snapshot."""
        return self._projects

    async def get(self, project_id: str) -> Optional[Project]:
        """Get a project by ID."""
        return next((p for p in self._projects if p.id == project_id), None)

    async def apply(self, updater: SnapshotUpdater) -> tuple[Project, ...]:
        """Swap in the snapshot produced by `updater`."""
        self._projects = tuple(updater(self._projects))
        return self._projects

    async def add(self, project: Project, first: bool = False) -> Project:
        """Add a project at the front or the end of the list."""
        if first:
            self._projects = (project, *self._projects)
        else:
            self._projects = (*self._projects, project)
        return project

    async def delete(self, project_id: str) -> bool:
        """Remove a project by ID."""
        remaining = tuple(p for p in self._projects if p.id != project_id)
        if len(remaining) == len(self._projects):
            return False
        self._projects = remaining
        return True
