"""Calendar API endpoints: auto-schedule, drag-and-drop, resize, integrations."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from planflow.api.deps import Calendar
from planflow.core.exceptions import BusinessLogicError, NotFoundError
from planflow.models.enums import CalendarProviderType, CalendarView
from planflow.models.project import Project
from planflow.models.schedule import (
    AutoScheduleRequest,
    AutoScheduleResult,
    CalendarTasksResponse,
    DayOccupancy,
    DropRequest,
    IntegrationConnectResponse,
    ResizeRequest,
    ResizeResponse,
    UnscheduleRequest,
)

router = APIRouter()


@router.post("/auto-schedule", response_model=AutoScheduleResult)
async def auto_schedule(request: AutoScheduleRequest, calendar: Calendar):
    """
    Place every backlog task into free working time of the visible horizon.

    Returns 409 while another run is pending.
    """
    try:
        return await calendar.auto_schedule(request.view, request.anchor_date)
    except BusinessLogicError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)


@router.get("/occupancy", response_model=list[DayOccupancy])
async def get_occupancy(
    calendar: Calendar,
    view: CalendarView = Query(CalendarView.WEEK),
    anchor_date: Optional[date] = Query(None),
):
    """Busy intervals per horizon day."""
    return await calendar.occupancy(view, anchor_date)


@router.get("/tasks", response_model=CalendarTasksResponse)
async def get_calendar_tasks(
    calendar: Calendar,
    view: CalendarView = Query(CalendarView.WEEK),
    anchor_date: Optional[date] = Query(None),
):
    return await calendar.calendar_tasks(view, anchor_date)


@router.post("/drop", response_model=list[Project])
async def drop_on_cell(request: DropRequest, calendar: Calendar):
    """Schedule a dragged task. A malformed payload leaves everything as is."""
    return list(await calendar.drop(request.payload, request.day, request.hour))


@router.post("/unschedule", response_model=list[Project])
async def unschedule(request: UnscheduleRequest, calendar: Calendar):
    """Move a dragged task back to the backlog."""
    return list(await calendar.unschedule(request.payload))


@router.post("/resize", response_model=ResizeResponse)
async def resize(request: ResizeRequest, calendar: Calendar):
    try:
        minutes = await calendar.resize(
            request.project_id, request.task_id, request.start_height, request.delta_y
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return ResizeResponse(committed_minutes=minutes)


@router.post("/integrations/{provider}/connect", response_model=IntegrationConnectResponse)
async def connect_integration(
    provider: CalendarProviderType,
    calendar: Calendar,
    anchor_date: Optional[date] = Query(None, description="Import the week containing this day"),
):
    try:
        project = await calendar.connect_provider(provider, anchor_date)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except BusinessLogicError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return IntegrationConnectResponse(provider=provider, project=project)
