"""Focus timer API endpoints."""

from fastapi import APIRouter, HTTPException, status

from planflow.api.deps import Focus
from planflow.core.exceptions import BusinessLogicError, NotFoundError
from planflow.models.focus import (
    FocusSession,
    FocusTip,
    TimerFinishRequest,
    TimerSelectRequest,
    TimerStatus,
)

router = APIRouter()


def _status(focus) -> TimerStatus:
    return TimerStatus(state=focus.state, remaining_seconds=focus.remaining_seconds())


@router.get("/timer", response_model=TimerStatus)
async def get_timer(focus: Focus):
    return _status(focus)


@router.post("/select", response_model=TimerStatus)
async def select_task(request: TimerSelectRequest, focus: Focus):
    """Point the idle timer at a project or task."""
    try:
        await focus.select(request.project_id, request.task_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except BusinessLogicError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return _status(focus)


@router.post("/start", response_model=TimerStatus)
async def start_timer(focus: Focus):
    focus.start()
    return _status(focus)


@router.post("/pause", response_model=TimerStatus)
async def pause_timer(focus: Focus):
    focus.pause()
    return _status(focus)


@router.post("/finish", response_model=FocusSession)
async def finish_session(request: TimerFinishRequest, focus: Focus):
    """Record the session and reset the timer."""
    return await focus.finish(request.completed, request.interruption_reason)


@router.get("/sessions", response_model=list[FocusSession])
async def list_sessions(focus: Focus):
    """Session history, newest first."""
    return await focus.list_sessions()


@router.get("/tip", response_model=FocusTip)
async def get_tip(focus: Focus):
    return FocusTip(tip=await focus.tip())
