"""Cross-project task endpoints: quick add and smart lists."""

from fastapi import APIRouter, HTTPException, Query, status

from planflow.api.deps import Planner
from planflow.core.exceptions import NotFoundError, ValidationError
from planflow.models.task import ProjectTask, QuickAddRequest, TaskCounts
from planflow.services.planner_service import parse_filter

router = APIRouter()


@router.post("/quick-add", response_model=ProjectTask, status_code=status.HTTP_201_CREATED)
async def quick_add(request: QuickAddRequest, planner: Planner):
    """
    Add a task from one line of text.

    Understands "today", "tomorrow" and "!p1".."!p3".
    """
    try:
        return await planner.quick_add(request.text, parse_filter(request.filter))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.get("/counts", response_model=TaskCounts)
async def get_counts(planner: Planner):
    return TaskCounts(**await planner.counts())


@router.get("", response_model=list[ProjectTask])
async def list_tasks(
    planner: Planner,
    filter: str = Query("INBOX", description="INBOX, TODAY, UPCOMING or a project id"),
):
    """Flattened tasks of a smart list or project, sorted by priority."""
    return await planner.filter_tasks(parse_filter(filter))
