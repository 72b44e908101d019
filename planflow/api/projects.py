"""Project and task tree API endpoints."""

from typing import Any, Optional

from fastapi import APIRouter, Body, HTTPException, Query, status

from planflow.api.deps import Planner
from planflow.core.exceptions import NotFoundError, ValidationError
from planflow.models.chat import ProjectChatRequest
from planflow.models.project import ChatMessage, Project, ProjectCreate, ProjectStats
from planflow.models.task import Task, TaskCreate, TaskUpdate

router = APIRouter()


@router.get("", response_model=list[Project])
async def list_projects(planner: Planner):
    """List all projects in display order."""
    return list(await planner.list_projects())


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(project: ProjectCreate, planner: Planner):
    """Create a project manually."""
    return await planner.create_project(project)


@router.post("/import-draft", response_model=Project, status_code=status.HTTP_201_CREATED)
async def import_draft(planner: Planner, draft: dict[str, Any] = Body(...)):
    """Create a project from an AI-generated draft (camelCase keys accepted)."""
    try:
        return await planner.import_draft(draft)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.get("/{project_id}", response_model=Project)
async def get_project(project_id: str, planner: Planner):
    try:
        return await planner.get_project(project_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, planner: Planner):
    try:
        await planner.delete_project(project_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.get("/{project_id}/stats", response_model=ProjectStats)
async def get_project_stats(project_id: str, planner: Planner):
    """Leaf-only progress statistics."""
    try:
        return await planner.get_stats(project_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.post("/{project_id}/tasks", response_model=Task, status_code=status.HTTP_201_CREATED)
async def add_task(
    project_id: str,
    task: TaskCreate,
    planner: Planner,
    parent_id: Optional[str] = Query(None, description="Add as a child of this task"),
):
    try:
        return await planner.add_task(project_id, task, parent_id=parent_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.patch("/{project_id}/tasks/{task_id}", response_model=Task)
async def update_task(project_id: str, task_id: str, update: TaskUpdate, planner: Planner):
    try:
        return await planner.update_task(project_id, task_id, update)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.delete("/{project_id}/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(project_id: str, task_id: str, planner: Planner):
    """Delete a task and its whole subtree."""
    try:
        await planner.delete_task(project_id, task_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.post("/{project_id}/tasks/{task_id}/toggle", response_model=Task)
async def toggle_task(project_id: str, task_id: str, planner: Planner):
    try:
        return await planner.toggle_status(project_id, task_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.post("/{project_id}/tasks/{task_id}/breakdown", response_model=Task)
async def breakdown_task(project_id: str, task_id: str, planner: Planner):
    """Append AI-suggested subtasks. The task is returned unchanged if none come back."""
    try:
        return await planner.auto_breakdown(project_id, task_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.post("/{project_id}/chat", response_model=ChatMessage)
async def chat_with_project(project_id: str, request: ProjectChatRequest, planner: Planner):
    """Ask the project assistant. Both turns are stored in the project's chat history."""
    try:
        return await planner.chat(project_id, request.text, request.attachments)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
