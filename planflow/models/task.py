"""
Task model definitions.

Tasks form a tree: top-level tasks of a project are stages, their children
are the actionable work items. A task without `scheduled_date` sits in the
backlog.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from planflow.models.enums import Priority, PriorityQuadrant, TaskStatus


def new_id() -> str:
    """Generate an opaque identifier for tasks, projects and sessions."""
    return str(uuid4())


class TaskBase(BaseModel):
    """Base task fields shared across create/read."""

    title: str = Field(..., min_length=1, max_length=500, description="Task title")
    status: TaskStatus = Field(TaskStatus.TODO, description="Status")
    estimated_minutes: int = Field(0, ge=0, description="Estimated duration in minutes")
    priority: Priority = Field(Priority.P4, description="Priority (P1-P4)")
    tags: list[str] = Field(default_factory=list)
    actual_minutes: int = Field(0, ge=0, description="Focused minutes logged against this task")
    scheduled_date: Optional[datetime] = Field(
        None, description="Scheduled start instant (None = backlog)"
    )
    deadline: Optional[datetime] = Field(None, description="Deadline")
    priority_quadrant: Optional[PriorityQuadrant] = None


class TaskCreate(TaskBase):
    """Schema for creating a new task (optionally with nested children)."""

    subtasks: list[TaskCreate] = Field(default_factory=list)


CLEARABLE_FIELDS = frozenset({"scheduled_date", "deadline", "priority_quadrant"})


class TaskUpdate(BaseModel):
    """Schema for a partial task update. Only explicitly set fields apply."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    status: Optional[TaskStatus] = None
    estimated_minutes: Optional[int] = Field(None, ge=0)
    priority: Optional[Priority] = None
    tags: Optional[list[str]] = None
    actual_minutes: Optional[int] = Field(None, ge=0)
    scheduled_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    priority_quadrant: Optional[PriorityQuadrant] = None

    @model_validator(mode="after")
    def reject_null_for_required_fields(self) -> TaskUpdate:
        # only the schedule, deadline and quadrant can be cleared with null
        for name in self.model_fields_set - CLEARABLE_FIELDS:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class Task(TaskBase):
    """Complete task node. Instances are treated as immutable snapshots."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    subtasks: tuple[Task, ...] = Field(default_factory=tuple)

    @property
    def is_leaf(self) -> bool:
        return not self.subtasks


class TaskRef(BaseModel):
    """A (project, task) reference, e.g. the payload of a drag operation."""

    project_id: str
    task_id: str


class ProjectTask(BaseModel):
    """A task together with the project that owns it."""

    project_id: str
    project_title: str
    task: Task


class QuickAddRequest(BaseModel):
    """One line of quick-add text typed while a list or project is active."""

    text: str = Field(..., min_length=1, max_length=500)
    filter: str = Field("INBOX", description="INBOX, TODAY, UPCOMING or a project id")


class TaskCounts(BaseModel):
    inbox: int = 0
    today: int = 0
    upcoming: int = 0
