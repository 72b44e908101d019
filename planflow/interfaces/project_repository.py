"""
Project repository interface.

The repository holds the ordered project list as one immutable snapshot.
Writers never mutate it in place: they pass a pure update function that maps
the previous snapshot to the next one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence

from planflow.models.project import Project

SnapshotUpdater = Callable[[tuple[Project, ...]], Sequence[Project]]


class IProjectRepository(ABC):
    """Abstract interface for the task tree store."""

    @abstractmethod
    async def list(self) -> tuple[Project, ...]:
        """
        Get the current snapshot.

        Returns:
            All projects in display order
        """
        pass

    @abstractmethod
    async def get(self, project_id: str) -> Optional[Project]:
        """
        Get a project by ID.

        Returns:
            Project if found, None otherwise
        """
        pass

    @abstractmethod
    async def apply(self, updater: SnapshotUpdater) -> tuple[Project, ...]:
        """
        Replace the snapshot with `updater(current)`.

        The swap is all-or-nothing: if `updater` raises, the stored snapshot
        is unchanged.

        Returns:
            The new snapshot
        """
        pass

    async def add(self, project: Project, first: bool = False) -> Project:
        """Insert a project at the end (or the front)."""
        if first:
            await self.apply(lambda projects: (project, *projects))
        else:
            await self.apply(lambda projects: (*projects, project))
        return project

    async def delete(self, project_id: str) -> bool:
        """Remove a project. Returns False if it did not exist."""
        existed = await self.get(project_id) is not None
        if existed:
            await self.apply(lambda projects: tuple(p for p in projects if p.id != project_id))
        return existed

    @abstractmethod
    async def add(self, project: Project, first: bool = False) -> Project:
        """
        Add a project to the snapshot.

        Args:
            project: Project to add
            first: Insert before existing projects instead of appending

        Returns:
            The added project
        """
        pass

    @abstractmethod
    async def delete(self, project_id: str) -> bool:
        """
        Remove a project.

        Returns:
            True if deleted, False if not found
        """
        pass
