"""
Unit tests for the occupancy grid builder.
"""

from datetime import date, datetime, timedelta, timezone

from planflow.models.enums import TaskStatus
from planflow.models.task import Task
from planflow.services.occupancy import OccupancyGrid, build_occupancy_grid

MONDAY = date(2025, 3, 10)


def scheduled(title: str, day: date, hour: int, minute: int, minutes: int, **kwargs) -> Task:
    return Task(
        title=title,
        estimated_minutes=minutes,
        scheduled_date=datetime(day.year, day.month, day.day, hour, minute),
        **kwargs,
    )


def test_fresh_grid_is_free():
    """Test empty grid."""
    grid = OccupancyGrid([MONDAY])

    assert grid.is_free(MONDAY, 0, 1440)
    assert grid.summary()[0].busy_minutes == 0


def test_marks_half_open_interval():
    """The end minute of a block stays free."""
    grid = build_occupancy_grid([MONDAY], [scheduled("Standup", MONDAY, 9, 0, 30)])

    row = grid.row(MONDAY)
    assert row[539] is False
    assert row[540] is True
    assert row[569] is True
    assert row[570] is False
    assert grid.is_free(MONDAY, 570, 15)
    assert not grid.is_free(MONDAY, 555, 30)


def test_task_past_midnight_is_truncated():
    """A block running past midnight only marks its own day."""
    grid = build_occupancy_grid(
        [MONDAY, MONDAY + timedelta(days=1)], [scheduled("Late", MONDAY, 23, 30, 120)]
    )

    assert grid.summary()[0].busy_minutes == 30
    assert grid.summary()[1].busy_minutes == 0


def test_tasks_outside_horizon_are_ignored():
    """Test tasks outside the horizon."""
    grid = build_occupancy_grid([MONDAY], [scheduled("Other day", MONDAY + timedelta(days=2), 10, 0, 60)])

    assert grid.summary()[0].busy_minutes == 0


def test_completed_tasks_do_not_occupy_time():
    """Completed tasks free their slot."""
    done = scheduled("Done", MONDAY, 9, 0, 60, status=TaskStatus.COMPLETED)

    grid = build_occupancy_grid([MONDAY], [done])

    assert grid.is_free(MONDAY, 540, 60)


def test_unscheduled_tasks_are_skipped():
    """Test backlog tasks in the grid."""
    grid = build_occupancy_grid([MONDAY], [Task(title="Backlog", estimated_minutes=60)])

    assert grid.summary()[0].busy_minutes == 0


def test_aware_instants_are_read_in_configured_zone():
    """Timezone-aware instants are converted before marking."""
    utc_instant = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)
    task = Task(title="Remote", estimated_minutes=30, scheduled_date=utc_instant)

    grid = build_occupancy_grid([MONDAY], [task], timezone="Europe/Berlin")

    # 08:00 UTC is 09:00 in Berlin (CET)
    assert grid.busy_intervals(MONDAY)[0].start_minutes == 540


def test_busy_intervals_merge_adjacent_blocks():
    """Test merging of touching blocks."""
    grid = build_occupancy_grid(
        [MONDAY],
        [scheduled("A", MONDAY, 9, 0, 30), scheduled("B", MONDAY, 9, 30, 30), scheduled("C", MONDAY, 11, 0, 15)],
    )

    intervals = [(i.start_minutes, i.end_minutes) for i in grid.busy_intervals(MONDAY)]
    assert intervals == [(540, 600), (660, 675)]


def test_is_free_rejects_unknown_day_and_out_of_bounds():
    """Days outside the horizon and out-of-range minutes are never free."""
    grid = OccupancyGrid([MONDAY])

    assert not grid.is_free(MONDAY + timedelta(days=1), 540, 15)
    assert not grid.is_free(MONDAY, 1430, 15)
    assert not grid.is_free(MONDAY, -5, 15)


def test_duplicate_horizon_days_collapse():
    """Test repeated horizon days."""
    grid = OccupancyGrid([MONDAY, MONDAY])

    assert grid.days == [MONDAY]
