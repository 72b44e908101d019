"""
Project model definitions.

A project owns a forest of top-level tasks ("stages") plus metadata and the
AI consultation chat history.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from planflow.models.enums import ChatRole, TaskStatus
from planflow.models.task import Task, TaskCreate, new_id

INBOX_PROJECT_ID = "inbox"
GENERAL_PROJECT_ID = "general"
EXTERNAL_PROJECT_PREFIX = "ext-"


class ChatAttachment(BaseModel):
    """Inline file sent along with a chat message."""

    mime_type: str
    data: str = Field(..., description="Base64 payload")


class ChatMessage(BaseModel):
    """A single chat turn with the planning agent."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    role: ChatRole
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)
    attachments: tuple[ChatAttachment, ...] = Field(default_factory=tuple)


class ProjectCreate(BaseModel):
    """Schema for creating a project manually."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=4000)
    subtasks: list[TaskCreate] = Field(default_factory=list)
    suggested_resources: list[str] = Field(default_factory=list)


class Project(BaseModel):
    """Complete project snapshot."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    title: str
    description: str = ""
    subtasks: tuple[Task, ...] = Field(default_factory=tuple)
    created_at: datetime = Field(default_factory=datetime.now)
    status: TaskStatus = TaskStatus.IN_PROGRESS
    suggested_resources: tuple[str, ...] = Field(default_factory=tuple)
    chat_history: tuple[ChatMessage, ...] = Field(default_factory=tuple)
    total_estimated_minutes: Optional[int] = None


class ProjectStats(BaseModel):
    """Leaf-only progress statistics of a project."""

    total: int
    completed: int
    percent: int
    total_hours: float
    completed_hours: float


def inbox_project() -> Project:
    """Default container for quick-added tasks."""
    return Project(
        id=INBOX_PROJECT_ID,
        title="Inbox",
        description="Default container for simple tasks",
    )


def general_project() -> Project:
    """Container for unstructured focus sessions not tied to any task."""
    return Project(
        id=GENERAL_PROJECT_ID,
        title="Deep Work",
        description="Unstructured high-focus session",
    )
