"""
Chat and AI planning model definitions.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from planflow.models.project import ChatAttachment, ChatMessage


class ConsultRequest(BaseModel):
    """A message to the project drafting agent."""

    history: list[ChatMessage] = Field(default_factory=list)
    text: str = Field(..., min_length=1, max_length=8000)
    attachments: list[ChatAttachment] = Field(default_factory=list)


class ConsultResponse(BaseModel):
    """Agent reply, with a project draft when the agent produced one."""

    text: str
    project_draft: Optional[dict[str, Any]] = None


class ProjectChatRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=8000)
    attachments: list[ChatAttachment] = Field(default_factory=list)


class SuggestedSubtask(BaseModel):
    """A subtask proposed by the breakdown agent."""

    title: str = Field(..., min_length=1, max_length=500)
    estimated_minutes: int = Field(30, ge=0, alias="estimatedMinutes")

    model_config = {"populate_by_name": True}
