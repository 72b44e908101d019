"""
Focus Service for the pomodoro-style timer and its session history.

The timer is an explicit state object owned by the service instead of
process-wide UI state; every transition takes `now` so callers (and tests)
control the clock.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from planflow.core.config import Settings, get_settings
from planflow.core.exceptions import BusinessLogicError, NotFoundError
from planflow.core.logger import setup_logger
from planflow.interfaces.focus_session_repository import IFocusSessionRepository
from planflow.interfaces.project_repository import IProjectRepository
from planflow.models.enums import TaskStatus
from planflow.models.focus import FocusSession, TimerState
from planflow.models.project import GENERAL_PROJECT_ID, general_project
from planflow.models.task import Task
from planflow.services.ai_service import AIService, TIP_FALLBACK
from planflow.services.task_tree import find_task, update_task

logger = setup_logger(__name__)


class FocusService:
    """Service owning the focus timer and appending finished sessions."""

    def __init__(
        self,
        project_repo: IProjectRepository,
        session_repo: IFocusSessionRepository,
        ai_service: Optional[AIService] = None,
        settings: Optional[Settings] = None,
    ):
        self._project_repo = project_repo
        self._session_repo = session_repo
        self._ai_service = ai_service
        self._settings = settings or get_settings()
        self._state = self._idle_state()

    def _idle_state(self) -> TimerState:
        return TimerState(duration_seconds=self._settings.DEFAULT_FOCUS_MINUTES * 60)

    @property
    def state(self) -> TimerState:
        return self._state

    async def _selected_task(self) -> Optional[Task]:
        if self._state.subtask_id is None:
            return None
        project = await self._project_repo.get(self._state.project_id)
        if project is None:
            return None
        return find_task(project.subtasks, self._state.subtask_id)

    async def select(self, project_id: str = GENERAL_PROJECT_ID, task_id: Optional[str] = None) -> TimerState:
        """
        Point the idle timer at a project (and optionally one of its tasks).

        The timer duration becomes the task estimate, or the default focus
        length when there is no task or it has no estimate.

        Raises:
            BusinessLogicError: If the timer is running
            NotFoundError: If the project or task does not exist
        """
        if self._state.is_active:
            raise BusinessLogicError("Cannot switch focus while the timer is running")

        task: Optional[Task] = None
        project = await self._project_repo.get(project_id)
        if project is None and project_id != GENERAL_PROJECT_ID:
            raise NotFoundError(f"Project {project_id} not found")
        if task_id is not None:
            task = find_task(project.subtasks, task_id) if project else None
            if task is None:
                raise NotFoundError(f"Task {task_id} not found in project {project_id}")

        if task is not None and task.estimated_minutes > 0:
            seconds = task.estimated_minutes * 60
        else:
            seconds = self._settings.DEFAULT_FOCUS_MINUTES * 60

        self._state = TimerState(
            is_active=False,
            start_time=None,
            end_time=None,
            duration_seconds=seconds,
            project_id=project_id,
            subtask_id=task_id,
        )
        return self._state

    def start(self, now: Optional[datetime] = None) -> TimerState:
        """Start or resume. The session start time survives pauses."""
        if self._state.is_active:
            return self._state
        now = now or datetime.now()
        self._state = self._state.model_copy(
            update={
                "is_active": True,
                "start_time": self._state.start_time or now,
                "end_time": now + timedelta(seconds=self._state.duration_seconds),
            }
        )
        return self._state

    def pause(self, now: Optional[datetime] = None) -> TimerState:
        """Stop the countdown, keeping the remaining seconds for a resume."""
        if not self._state.is_active:
            return self._state
        remaining = self.remaining_seconds(now)
        self._state = self._state.model_copy(
            update={"is_active": False, "end_time": None, "duration_seconds": remaining}
        )
        return self._state

    def remaining_seconds(self, now: Optional[datetime] = None) -> int:
        """Seconds left, rounded up, never negative."""
        if not self._state.is_active or self._state.end_time is None:
            return self._state.duration_seconds
        left = (self._state.end_time - (now or datetime.now())).total_seconds()
        return max(0, math.ceil(left))

    async def finish(
        self,
        completed: bool,
        interruption_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> FocusSession:
        """
        End the current session and record it.

        A completed session counts the full planned length; an abandoned one
        counts wall time since the session started. Either way at least one
        minute is recorded. The selected task gets the minutes added and,
        when completed, is marked COMPLETED. The timer then resets.
        """
        now = now or datetime.now()
        state = self._state
        task = await self._selected_task()
        planned = self._settings.DEFAULT_FOCUS_MINUTES
        if task is not None and task.estimated_minutes > 0:
            planned = task.estimated_minutes
        start_time = state.start_time or now
        if completed:
            elapsed_seconds = planned * 60
        else:
            elapsed_seconds = int((now - start_time).total_seconds())
        actual = max(1, elapsed_seconds // 60)

        session = FocusSession(
            project_id=state.project_id,
            subtask_id=state.subtask_id,
            start_time=start_time,
            end_time=now,
            duration_minutes=planned,
            actual_duration_minutes=actual,
            completed=completed,
            interruption_reason=interruption_reason or None,
        )
        await self._session_repo.add(session)

        if task is not None:
            changes = {"actual_minutes": task.actual_minutes + actual}
            if completed:
                changes["status"] = TaskStatus.COMPLETED

            def updater(projects):
                return [
                    p.model_copy(update={"subtasks": update_task(p.subtasks, task.id, changes)})
                    if p.id == state.project_id
                    else p
                    for p in projects
                ]

            await self._project_repo.apply(updater)

        logger.info(
            f"Focus session {session.id}: {actual} min, "
            f"{'completed' if completed else 'interrupted'}"
        )
        self._state = self._idle_state()
        return session

    async def list_sessions(self) -> list[FocusSession]:
        return await self._session_repo.list()

    async def tip(self) -> str:
        """Motivational tip for whatever the timer is pointed at."""
        if self._ai_service is None:
            return TIP_FALLBACK
        task = await self._selected_task()
        if task is not None:
            title = task.title
        else:
            project = await self._project_repo.get(self._state.project_id)
            title = (project or general_project()).title
        return await self._ai_service.get_contextual_assistance(title)
