"""
Scheduler service for greedy first-fit calendar placement.

Places backlog tasks into free, step-aligned slots of the working window,
day by day in horizon order, without overlapping already scheduled work.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from planflow.core.config import Settings
from planflow.core.exceptions import ValidationError
from planflow.core.logger import setup_logger
from planflow.models.enums import TaskStatus
from planflow.models.project import Project
from planflow.models.schedule import Placement, WorkingHours
from planflow.models.task import ProjectTask, Task
from planflow.services.occupancy import OccupancyGrid
from planflow.services.task_tree import iter_project_tasks, update_task
from planflow.utils.datetime_utils import at_minute, parse_time_to_minutes

logger = setup_logger(__name__)


def working_hours_from_settings(settings: Settings) -> WorkingHours:
    """Build the working window from configuration."""
    start = parse_time_to_minutes(settings.WORK_DAY_START)
    end = parse_time_to_minutes(settings.WORK_DAY_END)
    if start is None or end is None or end <= start:
        raise ValidationError(
            "Invalid working hours",
            details={"start": settings.WORK_DAY_START, "end": settings.WORK_DAY_END},
        )
    return WorkingHours(
        start_minutes=start,
        end_minutes=end,
        step_minutes=settings.SLOT_STEP_MINUTES,
        min_duration_minutes=settings.MIN_BLOCK_MINUTES,
    )


def split_backlog(projects: Sequence[Project]) -> tuple[list[ProjectTask], list[ProjectTask]]:
    """
    Split non-completed tasks into (scheduled, unscheduled).

    Order is project order, then tree pre-order; the unscheduled list is the
    auto-scheduler queue. Containers are included like any other task.
    """
    scheduled: list[ProjectTask] = []
    unscheduled: list[ProjectTask] = []
    for project, task in iter_project_tasks(projects):
        if task.status == TaskStatus.COMPLETED:
            continue
        item = ProjectTask(project_id=project.id, project_title=project.title, task=task)
        if task.scheduled_date is not None:
            scheduled.append(item)
        else:
            unscheduled.append(item)
    return scheduled, unscheduled


def apply_placements(
    projects: Sequence[Project], placements: Sequence[Placement]
) -> tuple[Project, ...]:
    """Return a new snapshot with every placement's scheduled instant set."""
    by_project: dict[str, list[Placement]] = {}
    for placement in placements:
        by_project.setdefault(placement.project_id, []).append(placement)

    result = []
    for project in projects:
        pending = by_project.get(project.id)
        if pending:
            subtasks = project.subtasks
            for placement in pending:
                subtasks = update_task(
                    subtasks, placement.task_id, {"scheduled_date": placement.scheduled_date}
                )
            project = project.model_copy(update={"subtasks": subtasks})
        result.append(project)
    return tuple(result)


class SchedulerService:
    """
    Greedy first-fit auto-scheduler.

    Provides:
    - Effective duration clamp (minimum block length)
    - Step-aligned slot search inside the working window
    - Sequential, order-dependent packing over a horizon of days
    """

    def __init__(self, working_hours: Optional[WorkingHours] = None):
        self.working_hours = working_hours or WorkingHours()

    def effective_minutes(self, task: Task) -> int:
        """Duration used for placement: never below the minimum block."""
        return max(self.working_hours.min_duration_minutes, task.estimated_minutes)

    def find_slot(self, grid: OccupancyGrid, day: date, duration: int) -> Optional[int]:
        """
        First step-aligned start minute on `day` where `duration` fits.

        Candidates run from the window start to `window end - duration`
        inclusive, so a placed task always ends inside the window.
        """
        window = self.working_hours
        latest = window.end_minutes - duration
        for start in range(window.start_minutes, latest + 1, window.step_minutes):
            if grid.is_free(day, start, duration):
                return start
        return None

    def schedule(
        self,
        queue: Sequence[ProjectTask],
        grid: OccupancyGrid,
    ) -> tuple[list[Placement], list[str]]:
        """
        Place every queued task at the first feasible day and slot.

        Days are tried in horizon order; the first fit wins, with no load
        balancing. Each placement claims its minutes in `grid` immediately, so
        later tasks see earlier placements. Tasks that fit nowhere are
        reported as unplaced and stay in the backlog.

        Args:
            queue: Unscheduled tasks in discovery order
            grid: Occupancy of the horizon; updated in place by this run

        Returns:
            (placements, ids of tasks left unscheduled)
        """
        placements: list[Placement] = []
        unplaced: list[str] = []

        for item in queue:
            duration = self.effective_minutes(item.task)
            placement: Optional[Placement] = None
            for day in grid.days:
                start = self.find_slot(grid, day, duration)
                if start is None:
                    continue
                grid.mark(day, start, duration)
                placement = Placement(
                    project_id=item.project_id,
                    task_id=item.task.id,
                    scheduled_date=at_minute(day, start),
                    duration_minutes=duration,
                )
                break

            if placement is None:
                unplaced.append(item.task.id)
            else:
                placements.append(placement)

        logger.info(
            f"Auto-schedule: placed {len(placements)}/{len(queue)} tasks "
            f"over {len(grid.days)} day(s), {len(unplaced)} left in backlog"
        )
        return placements, unplaced
