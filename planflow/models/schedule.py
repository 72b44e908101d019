"""
Schedule models for calendar placement and auto-scheduling outputs.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from planflow.models.enums import CalendarProviderType, CalendarView
from planflow.models.project import Project
from planflow.models.task import ProjectTask

MINUTES_PER_DAY = 24 * 60


class WorkingHours(BaseModel):
    """Window (minutes of day) inside which the auto-scheduler places tasks."""

    start_minutes: int = Field(9 * 60, ge=0, le=MINUTES_PER_DAY)
    end_minutes: int = Field(17 * 60, ge=0, le=MINUTES_PER_DAY)
    step_minutes: int = Field(15, ge=1)
    min_duration_minutes: int = Field(15, ge=1)

    @model_validator(mode="after")
    def validate_window(self):
        if self.end_minutes <= self.start_minutes:
            raise ValueError("end_minutes must be after start_minutes")
        return self


class Placement(BaseModel):
    """An auto-scheduler decision: put this task at this instant."""

    project_id: str
    task_id: str
    scheduled_date: datetime
    duration_minutes: int


class BusyInterval(BaseModel):
    """Half-open busy range [start, end) in minutes of day."""

    start_minutes: int
    end_minutes: int


class DayOccupancy(BaseModel):
    """Busy ranges of one horizon day."""

    date: date
    busy: list[BusyInterval] = Field(default_factory=list)
    busy_minutes: int = 0


class AutoScheduleRequest(BaseModel):
    """Parameters of an auto-schedule run."""

    view: CalendarView = CalendarView.WEEK
    anchor_date: Optional[date] = Field(None, description="Day the calendar is showing (default today)")


class AutoScheduleResult(BaseModel):
    """Outcome of an auto-schedule run."""

    horizon: list[date]
    placements: list[Placement] = Field(default_factory=list)
    unscheduled_task_ids: list[str] = Field(default_factory=list)


class CalendarTasksResponse(BaseModel):
    """Scheduled blocks within the visible range plus the backlog."""

    days: list[date]
    scheduled: list[ProjectTask] = Field(default_factory=list)
    backlog: list[ProjectTask] = Field(default_factory=list)


class DropRequest(BaseModel):
    """
    A drop onto a calendar cell.

    `payload` is whatever the drag source attached; it is parsed leniently and
    a malformed payload makes the drop a no-op.
    """

    payload: Any = None
    day: date
    hour: Optional[int] = Field(None, ge=0, le=23)


class UnscheduleRequest(BaseModel):
    """A drop onto the backlog target."""

    payload: Any = None


class ResizeRequest(BaseModel):
    """Release of a lower-edge resize drag."""

    project_id: str
    task_id: str
    start_height: float = Field(..., allow_inf_nan=False, description="Block height in px when the drag started")
    delta_y: float = Field(..., allow_inf_nan=False, description="Pointer movement in px since the drag started")


class ResizeResponse(BaseModel):
    """Committed duration of a resize (None when nothing was committed)."""

    committed_minutes: Optional[int] = None


class IntegrationConnectResponse(BaseModel):
    """Result of connecting an external calendar."""

    provider: CalendarProviderType
    connected: bool = True
    project: Optional[Project] = None
