"""
Occupancy grid construction.

For each horizon day the grid keeps 1440 booleans, one per minute, marking
time already claimed by scheduled work. The grid is derived and ephemeral:
it is rebuilt from the current task snapshot on every scheduling run and is
never shared between runs.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from planflow.models.enums import TaskStatus
from planflow.models.schedule import MINUTES_PER_DAY, BusyInterval, DayOccupancy
from planflow.models.task import Task
from planflow.utils.datetime_utils import minute_of_day, to_local


class OccupancyGrid:
    """Per-day, per-minute busy/free bitmap over an explicit horizon."""

    def __init__(self, horizon: Sequence[date]):
        self._days: dict[date, list[bool]] = {}
        for day in horizon:
            if day not in self._days:
                self._days[day] = [False] * MINUTES_PER_DAY

    @property
    def days(self) -> list[date]:
        return list(self._days)

    def row(self, day: date) -> list[bool]:
        """The 1440-cell row of `day` (a copy)."""
        return list(self._days[day])

    def mark(self, day: date, start_minute: int, duration: int) -> None:
        """
        Mark [start, start + duration) busy on `day`.

        Days outside the horizon are ignored. The range is clamped to the
        day: work running past midnight does not wrap to the next day.
        """
        cells = self._days.get(day)
        if cells is None:
            return
        begin = max(0, start_minute)
        end = min(start_minute + duration, MINUTES_PER_DAY)
        for minute in range(begin, end):
            cells[minute] = True

    def is_free(self, day: date, start_minute: int, duration: int) -> bool:
        """True when every minute of [start, start + duration) is unclaimed."""
        cells = self._days.get(day)
        if cells is None:
            return False
        if start_minute < 0 or start_minute + duration > MINUTES_PER_DAY:
            return False
        return not any(cells[start_minute:start_minute + duration])

    def busy_intervals(self, day: date) -> list[BusyInterval]:
        """Collapse the busy cells of `day` into half-open intervals."""
        intervals: list[BusyInterval] = []
        start: Optional[int] = None
        for minute, busy in enumerate(self._days[day]):
            if busy and start is None:
                start = minute
            elif not busy and start is not None:
                intervals.append(BusyInterval(start_minutes=start, end_minutes=minute))
                start = None
        if start is not None:
            intervals.append(BusyInterval(start_minutes=start, end_minutes=MINUTES_PER_DAY))
        return intervals

    def summary(self) -> list[DayOccupancy]:
        return [
            DayOccupancy(
                date=day,
                busy=self.busy_intervals(day),
                busy_minutes=sum(cells),
            )
            for day, cells in self._days.items()
        ]


def build_occupancy_grid(
    horizon: Sequence[date],
    scheduled_tasks: Iterable[Task],
    timezone: str = "",
) -> OccupancyGrid:
    """
    Build the grid for `horizon` from the given scheduled tasks.

    Completed tasks do not occupy time, so a run may reuse the slot of
    finished work. Each task claims its raw estimate starting at the
    minute of day of its scheduled instant; a task scheduled on a day outside
    the horizon is ignored.

    Args:
        horizon: Ordered calendar days to build rows for
        scheduled_tasks: Tasks to read (start, duration) pairs from
        timezone: Zone used to read timezone-aware instants as local time

    Returns:
        A fresh OccupancyGrid
    """
    grid = OccupancyGrid(horizon)
    for task in scheduled_tasks:
        if task.scheduled_date is None or task.status == TaskStatus.COMPLETED:
            continue
        local = to_local(task.scheduled_date, timezone)
        grid.mark(local.date(), minute_of_day(local), task.estimated_minutes)
    return grid
