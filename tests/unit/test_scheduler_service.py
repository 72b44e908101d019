"""
Unit tests for the greedy first-fit scheduler.
"""

from datetime import date, datetime, timedelta

import pytest

from planflow.core.config import Settings
from planflow.core.exceptions import ValidationError
from planflow.models.enums import TaskStatus
from planflow.models.project import Project
from planflow.models.schedule import WorkingHours
from planflow.models.task import ProjectTask, Task
from planflow.services.occupancy import OccupancyGrid, build_occupancy_grid
from planflow.services.scheduler_service import (
    SchedulerService,
    apply_placements,
    split_backlog,
    working_hours_from_settings,
)
from planflow.utils.datetime_utils import minute_of_day

MONDAY = date(2025, 3, 10)


def queued(title: str, minutes: int, project_id: str = "p1") -> ProjectTask:
    return ProjectTask(
        project_id=project_id,
        project_title=project_id,
        task=Task(id=title, title=title, estimated_minutes=minutes),
    )


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute)


@pytest.fixture
def scheduler():
    return SchedulerService(WorkingHours())


def test_places_after_existing_block(scheduler):
    """A task goes into the first free slot after existing work."""
    existing = Task(title="Standup", estimated_minutes=30, scheduled_date=at(MONDAY, 9))
    grid = build_occupancy_grid([MONDAY], [existing])

    placements, unplaced = scheduler.schedule([queued("A", 20)], grid)

    assert unplaced == []
    assert placements[0].scheduled_date == at(MONDAY, 9, 30)
    assert placements[0].duration_minutes == 20


def test_fully_booked_day_leaves_task_unscheduled(scheduler):
    """Test fully booked day."""
    blocker = Task(title="Offsite", estimated_minutes=480, scheduled_date=at(MONDAY, 9))
    grid = build_occupancy_grid([MONDAY], [blocker])

    placements, unplaced = scheduler.schedule([queued("B", 30)], grid)

    assert placements == []
    assert unplaced == ["B"]


def test_zero_estimate_uses_minimum_block(scheduler):
    """A zero estimate is placed as a 15 minute block."""
    grid = OccupancyGrid([MONDAY])

    placements, _ = scheduler.schedule([queued("Stage", 0), queued("Next", 30)], grid)

    assert placements[0].duration_minutes == 15
    assert placements[1].scheduled_date == at(MONDAY, 9, 15)


def test_placements_never_overlap_and_stay_in_window(scheduler):
    """Placements stay inside working hours and never overlap."""
    existing = [
        Task(title="Call", estimated_minutes=45, scheduled_date=at(MONDAY, 10)),
        Task(title="Lunch", estimated_minutes=60, scheduled_date=at(MONDAY, 12)),
    ]
    grid = build_occupancy_grid([MONDAY], existing)
    queue = [queued(f"t{i}", minutes) for i, minutes in enumerate([50, 20, 90, 5, 120, 35, 70])]

    placements, _ = scheduler.schedule(queue, grid)

    intervals = [
        (minute_of_day(p.scheduled_date), minute_of_day(p.scheduled_date) + p.duration_minutes)
        for p in placements
    ]
    intervals += [(600, 645), (720, 780)]
    intervals.sort()
    for (_, end), (next_start, _) in zip(intervals, intervals[1:]):
        assert end <= next_start
    for placement in placements:
        start = minute_of_day(placement.scheduled_date)
        assert start >= 540
        assert start + placement.duration_minutes <= 1020
        assert start % 15 == 0


def test_first_fit_fills_earliest_day_before_moving_on(scheduler):
    """Earlier days are filled before later ones."""
    days = [MONDAY, MONDAY + timedelta(days=1)]
    grid = OccupancyGrid(days)

    placements, _ = scheduler.schedule([queued("Long", 420), queued("Short", 60), queued("Tail", 60)], grid)

    assert placements[0].scheduled_date == at(MONDAY, 9)
    assert placements[1].scheduled_date == at(MONDAY, 16)
    assert placements[2].scheduled_date == at(MONDAY + timedelta(days=1), 9)


def test_task_longer_than_window_stays_unscheduled(scheduler):
    """Test task longer than the working day."""
    placements, unplaced = scheduler.schedule([queued("Marathon", 600)], OccupancyGrid([MONDAY]))

    assert placements == []
    assert unplaced == ["Marathon"]


def test_empty_horizon_places_nothing(scheduler):
    """Test empty horizon."""
    placements, unplaced = scheduler.schedule([queued("A", 30)], OccupancyGrid([]))

    assert placements == []
    assert unplaced == ["A"]


def test_runs_are_deterministic(scheduler):
    """The same input gives the same placements."""
    existing = [Task(title="Call", estimated_minutes=45, scheduled_date=at(MONDAY, 11))]
    queue = [queued("a", 60), queued("b", 25), queued("c", 100)]

    first, _ = scheduler.schedule(queue, build_occupancy_grid([MONDAY], existing))
    second, _ = scheduler.schedule(queue, build_occupancy_grid([MONDAY], existing))

    assert first == second


def test_completed_task_slot_can_be_reused(scheduler):
    """A completed task's slot is free for new work."""
    done = Task(
        title="Done", estimated_minutes=60, scheduled_date=at(MONDAY, 9), status=TaskStatus.COMPLETED
    )
    grid = build_occupancy_grid([MONDAY], [done])

    placements, _ = scheduler.schedule([queued("New", 60)], grid)

    assert placements[0].scheduled_date == at(MONDAY, 9)


def test_split_backlog_skips_completed_and_keeps_order():
    """Test backlog queue order."""
    stage = Task(
        id="stage",
        title="Stage",
        subtasks=(
            Task(id="a", title="A", estimated_minutes=10),
            Task(id="b", title="B", status=TaskStatus.COMPLETED),
            Task(id="c", title="C", scheduled_date=at(MONDAY, 10)),
        ),
    )
    projects = [Project(id="p1", title="P1", subtasks=(stage,)), Project(id="p2", title="P2", subtasks=(Task(id="d", title="D"),))]

    scheduled, unscheduled = split_backlog(projects)

    assert [item.task.id for item in scheduled] == ["c"]
    assert [item.task.id for item in unscheduled] == ["stage", "a", "d"]
    assert unscheduled[2].project_id == "p2"


def test_apply_placements_sets_instants(scheduler):
    """Test applying placements to a snapshot."""
    projects = (Project(id="p1", title="P1", subtasks=(Task(id="A", title="A", estimated_minutes=30),)),)
    placements, _ = scheduler.schedule([queued("A", 30)], OccupancyGrid([MONDAY]))

    updated = apply_placements(projects, placements)

    assert updated[0].subtasks[0].scheduled_date == at(MONDAY, 9)
    assert projects[0].subtasks[0].scheduled_date is None


def test_working_hours_from_settings():
    """Test working hours read from settings."""
    hours = working_hours_from_settings(Settings(WORK_DAY_START="08:30", WORK_DAY_END="12:00"))

    assert hours.start_minutes == 510
    assert hours.end_minutes == 720


def test_working_hours_rejects_inverted_window():
    """An end before the start is invalid."""
    with pytest.raises(ValidationError):
        working_hours_from_settings(Settings(WORK_DAY_START="18:00", WORK_DAY_END="09:00"))
