"""
Calendar Service orchestrating auto-scheduling, interactive placement and
external calendar imports over the project store.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Any, Mapping, Optional

from planflow.core.config import Settings, get_settings
from planflow.core.exceptions import BusinessLogicError, NotFoundError
from planflow.core.logger import setup_logger
from planflow.interfaces.calendar_provider import ICalendarProvider
from planflow.interfaces.project_repository import IProjectRepository
from planflow.models.enums import CalendarProviderType, CalendarView
from planflow.models.project import EXTERNAL_PROJECT_PREFIX, Project
from planflow.models.schedule import (
    AutoScheduleResult,
    CalendarTasksResponse,
    DayOccupancy,
    Placement,
)
from planflow.services import placement
from planflow.services.occupancy import OccupancyGrid, build_occupancy_grid
from planflow.services.scheduler_service import (
    SchedulerService,
    apply_placements,
    split_backlog,
    working_hours_from_settings,
)
from planflow.services.task_tree import find_task
from planflow.utils.datetime_utils import build_horizon, start_of_week, to_local, visible_days

logger = setup_logger(__name__)


class CalendarService:
    """
    Service for the calendar view.

    At most one auto-schedule run is pending at a time; a second request
    while one is pending is rejected rather than queued.
    """

    def __init__(
        self,
        project_repo: IProjectRepository,
        providers: Optional[Mapping[CalendarProviderType, ICalendarProvider]] = None,
        scheduler: Optional[SchedulerService] = None,
        settings: Optional[Settings] = None,
    ):
        self._project_repo = project_repo
        self._providers = dict(providers or {})
        self._settings = settings or get_settings()
        self._scheduler = scheduler or SchedulerService(working_hours_from_settings(self._settings))
        self._auto_scheduling = False
        self._connecting: Optional[CalendarProviderType] = None
        self._connected: set[CalendarProviderType] = set()

    @property
    def is_auto_scheduling(self) -> bool:
        return self._auto_scheduling

    @property
    def connected_providers(self) -> list[CalendarProviderType]:
        return sorted(self._connected, key=lambda provider: provider.value)

    def _horizon(self, view: CalendarView, anchor: Optional[date]) -> list[date]:
        return build_horizon(view, anchor or date.today(), self._settings.WEEK_START_DAY)

    def _grid(self, projects: tuple[Project, ...], horizon: list[date]) -> OccupancyGrid:
        scheduled, _ = split_backlog(projects)
        return build_occupancy_grid(
            horizon, (item.task for item in scheduled), self._settings.TIMEZONE
        )

    # ===========================================
    # Auto-schedule
    # ===========================================

    async def auto_schedule(
        self, view: CalendarView = CalendarView.WEEK, anchor: Optional[date] = None
    ) -> AutoScheduleResult:
        """
        Place every unscheduled, non-completed task into free working time.

        Args:
            view: Active calendar view; DAY limits the run to the anchor day
            anchor: Day the calendar shows (default today)

        Returns:
            AutoScheduleResult with the applied placements and the ids of
            tasks that did not fit

        Raises:
            BusinessLogicError: If a run is already pending
        """
        if self._auto_scheduling:
            raise BusinessLogicError("Auto-schedule already in progress")

        self._auto_scheduling = True
        try:
            delay = self._settings.AUTO_SCHEDULE_DELAY_MS
            if delay:
                await asyncio.sleep(delay / 1000)

            horizon = self._horizon(view, anchor)
            placements: list[Placement] = []
            unplaced: list[str] = []

            def updater(projects: tuple[Project, ...]) -> tuple[Project, ...]:
                scheduled, queue = split_backlog(projects)
                grid = build_occupancy_grid(
                    horizon, (item.task for item in scheduled), self._settings.TIMEZONE
                )
                placed, missed = self._scheduler.schedule(queue, grid)
                placements.extend(placed)
                unplaced.extend(missed)
                return apply_placements(projects, placed)

            await self._project_repo.apply(updater)
        except asyncio.CancelledError:
            logger.info("Auto-schedule cancelled before completion")
            raise
        finally:
            self._auto_scheduling = False

        return AutoScheduleResult(
            horizon=horizon, placements=placements, unscheduled_task_ids=unplaced
        )

    async def occupancy(
        self, view: CalendarView = CalendarView.WEEK, anchor: Optional[date] = None
    ) -> list[DayOccupancy]:
        """Busy intervals per horizon day, as an auto-schedule run would see them."""
        projects = await self._project_repo.list()
        return self._grid(projects, self._horizon(view, anchor)).summary()

    async def calendar_tasks(
        self, view: CalendarView = CalendarView.WEEK, anchor: Optional[date] = None
    ) -> CalendarTasksResponse:
        """Scheduled blocks on the visible days, plus the backlog."""
        days = visible_days(view, anchor or date.today(), self._settings.WEEK_START_DAY)
        visible = set(days)
        scheduled, backlog = split_backlog(await self._project_repo.list())
        in_range = [
            item
            for item in scheduled
            if to_local(item.task.scheduled_date, self._settings.TIMEZONE).date() in visible
        ]
        return CalendarTasksResponse(days=days, scheduled=in_range, backlog=backlog)

    # ===========================================
    # Interactive placement
    # ===========================================

    async def drop(self, payload: Any, day: date, hour: Optional[int] = None) -> tuple[Project, ...]:
        """Schedule the dragged task at a cell. Malformed payloads change nothing."""
        return await self._project_repo.apply(
            lambda projects: placement.drop_on_cell(projects, payload, day, hour)
        )

    async def unschedule(self, payload: Any) -> tuple[Project, ...]:
        """Return the dragged task to the backlog. Malformed payloads change nothing."""
        return await self._project_repo.apply(
            lambda projects: placement.drop_on_backlog(projects, payload)
        )

    async def resize(
        self, project_id: str, task_id: str, start_height: float, delta_y: float
    ) -> Optional[int]:
        """
        Commit a released resize drag as the task's new estimate.

        A zero `delta_y` still counts as a move; callers send a release only
        after the pointer moved.

        Returns:
            The committed minutes

        Raises:
            NotFoundError: If the task does not exist
        """
        project = await self._project_repo.get(project_id)
        if project is None or find_task(project.subtasks, task_id) is None:
            raise NotFoundError(f"Task {task_id} not found in project {project_id}")

        session = placement.ResizeSession(
            project_id=project_id, task_id=task_id, start_y=0, start_height=start_height
        )
        session.drag_to(delta_y)
        committed: list[Optional[int]] = []

        def updater(projects: tuple[Project, ...]) -> tuple[Project, ...]:
            snapshot, minutes = placement.commit_resize(projects, session)
            committed.append(minutes)
            return snapshot

        await self._project_repo.apply(updater)
        return committed[0]

    # ===========================================
    # External calendars
    # ===========================================

    async def connect_provider(
        self, provider_type: CalendarProviderType, anchor: Optional[date] = None
    ) -> Optional[Project]:
        """
        Import one week of events from an external calendar.

        Events land in a project `ext-<provider>`; connecting an already
        connected provider does nothing.

        Returns:
            The external project, or None when the provider had no events

        Raises:
            NotFoundError: If the provider is not configured
            BusinessLogicError: If another connection is in progress
        """
        provider = self._providers.get(provider_type)
        if provider is None:
            raise NotFoundError(f"Calendar provider {provider_type.value} not configured")

        project_id = f"{EXTERNAL_PROJECT_PREFIX}{provider_type.value}"
        if provider_type in self._connected:
            return await self._project_repo.get(project_id)
        if self._connecting is not None:
            raise BusinessLogicError(
                f"Already connecting to {self._connecting.value}",
                details={"provider": self._connecting.value},
            )

        self._connecting = provider_type
        try:
            week_start = start_of_week(anchor or date.today(), self._settings.WEEK_START_DAY)
            events = await provider.connect(week_start)
        finally:
            self._connecting = None

        self._connected.add(provider_type)
        if not events:
            logger.info(f"{provider.display_name} calendar connected with no events")
            return None

        project = Project(
            id=project_id,
            title=f"{provider.display_name} (Primary)",
            description=f"Events imported from {provider.display_name} Calendar",
            subtasks=tuple(events),
            total_estimated_minutes=sum(event.estimated_minutes for event in events),
        )
        if await self._project_repo.get(project_id) is None:
            await self._project_repo.add(project)
        logger.info(f"Imported {len(events)} events from {provider.display_name}")
        return project

