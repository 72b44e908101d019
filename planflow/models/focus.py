"""
Focus session, timer and dashboard models.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from planflow.models.enums import ChartType, DateRange
from planflow.models.project import GENERAL_PROJECT_ID
from planflow.models.task import new_id


class FocusSession(BaseModel):
    """History record of one focus session. Append-only."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    project_id: str = GENERAL_PROJECT_ID
    subtask_id: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: int = Field(..., ge=0, description="Planned duration")
    actual_duration_minutes: int = Field(..., ge=1)
    completed: bool
    interruption_reason: Optional[str] = None


class TimerState(BaseModel):
    """Explicit timer state object (replaces hoisted global UI state)."""

    is_active: bool = False
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_seconds: int = Field(25 * 60, ge=0, description="Seconds left when not running")
    project_id: str = GENERAL_PROJECT_ID
    subtask_id: Optional[str] = None


class TimerSelectRequest(BaseModel):
    project_id: str = GENERAL_PROJECT_ID
    task_id: Optional[str] = None


class TimerFinishRequest(BaseModel):
    completed: bool
    interruption_reason: Optional[str] = Field(None, max_length=500)


class ChartPoint(BaseModel):
    name: str
    value: float


class DashboardSummary(BaseModel):
    """Aggregated focus metrics over a date range."""

    range: DateRange
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    total_focus_minutes: int = 0
    focus_hours: int = 0
    focus_minutes: int = 0
    total_sessions: int = 0
    completed_sessions: int = 0
    completion_rate: int = 0
    distraction_counts: dict[str, int] = Field(default_factory=dict)
    top_distraction: Optional[str] = None
    efficiency: list[ChartPoint] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=2000)
    range: DateRange = DateRange.SEVEN_DAYS
    custom_start: Optional[date] = None
    custom_end: Optional[date] = None


class AgentAnalysisResponse(BaseModel):
    """Answer of the productivity analyst agent."""

    text: str
    chart_data: Optional[list[ChartPoint]] = None
    chart_type: Optional[ChartType] = None
    chart_title: Optional[str] = None


class TimerStatus(BaseModel):
    """Timer state plus the seconds left at the time of the request."""

    state: TimerState
    remaining_seconds: int


class FocusTip(BaseModel):
    tip: str
