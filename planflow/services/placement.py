"""
Interactive placement rules: drag-to-schedule, drag-to-backlog and
drag-to-resize.

All snapshot functions are pure. A malformed drag payload is ignored and the
input snapshot is returned unchanged.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Mapping, Optional, Sequence

from planflow.core.logger import setup_logger
from planflow.models.project import Project
from planflow.models.task import Task, TaskRef
from planflow.services.task_tree import update_task

logger = setup_logger(__name__)

# 60px per hour grid: one pixel is one minute
PIXELS_PER_MINUTE = 1
MIN_RESIZE_MINUTES = 15
RESIZE_SNAP_MINUTES = 15
MIN_BLOCK_HEIGHT = 30


def js_round(value: float) -> int:
    """Round half up (2.5 -> 3), unlike Python's round-half-even."""
    return math.floor(value + 0.5)


def parse_drag_payload(raw: Any) -> Optional[TaskRef]:
    """
    Read a (project, task) reference from a drag payload.

    Accepts JSON text or a mapping with `projectId`/`taskId` (or snake_case)
    keys. Returns None for anything else.
    """
    data = raw
    if isinstance(raw, (str, bytes)):
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            return None
    if not isinstance(data, Mapping):
        return None

    project_id = data.get("projectId", data.get("project_id"))
    task_id = data.get("taskId", data.get("task_id"))
    if not isinstance(project_id, str) or not isinstance(task_id, str):
        return None
    if not project_id or not task_id:
        return None
    return TaskRef(project_id=project_id, task_id=task_id)


def set_task_fields(
    projects: Sequence[Project], ref: TaskRef, changes: Mapping[str, Any]
) -> tuple[Project, ...]:
    """Update one task of one project, returning a new snapshot."""
    result = []
    for project in projects:
        if project.id == ref.project_id:
            project = project.model_copy(
                update={"subtasks": update_task(project.subtasks, ref.task_id, changes)}
            )
        result.append(project)
    return tuple(result)


def drop_instant(day: date, hour: Optional[int] = None) -> datetime:
    """Instant a drop lands on: the cell's hour at minute 0, or midnight."""
    if hour is None:
        return datetime.combine(day, time.min)
    return datetime.combine(day, time(hour=hour))


def drop_on_cell(
    projects: Sequence[Project],
    raw_payload: Any,
    day: date,
    hour: Optional[int] = None,
) -> tuple[Project, ...]:
    """
    Schedule the dragged task at a calendar cell.

    Hour-grid cells (day/week views) place at `hour`:00, whole-day cells
    (month view) at midnight. This overwrites unconditionally: no overlap
    check is done and tasks may stack at the same instant.
    """
    ref = parse_drag_payload(raw_payload)
    if ref is None:
        logger.debug(f"Ignoring drop with malformed payload: {raw_payload!r}")
        return tuple(projects)
    return set_task_fields(projects, ref, {"scheduled_date": drop_instant(day, hour)})


def drop_on_backlog(projects: Sequence[Project], raw_payload: Any) -> tuple[Project, ...]:
    """Clear the dragged task's schedule, returning it to the backlog."""
    ref = parse_drag_payload(raw_payload)
    if ref is None:
        logger.debug(f"Ignoring backlog drop with malformed payload: {raw_payload!r}")
        return tuple(projects)
    return set_task_fields(projects, ref, {"scheduled_date": None})


def block_height(task: Task) -> int:
    """Rendered height (px) of a scheduled block, where a resize starts."""
    return max(task.estimated_minutes, MIN_BLOCK_HEIGHT) * PIXELS_PER_MINUTE


def candidate_height(start_height: float, delta_y: float) -> float:
    """
    Live height while dragging the lower edge. Never below the floor.

    A non-finite pointer reading counts as no movement.
    """
    floor = MIN_RESIZE_MINUTES * PIXELS_PER_MINUTE
    if not math.isfinite(start_height):
        return floor
    height = start_height + delta_y
    if not math.isfinite(height):
        height = start_height
    return max(floor, height)


def snap_duration(height: float) -> int:
    """
    Duration committed for a released resize.

    The height is read as minutes, snapped to the nearest 15-minute step and
    floored at 15. A non-finite height commits the floor.
    """
    if not math.isfinite(height):
        return MIN_RESIZE_MINUTES
    minutes = js_round(height / PIXELS_PER_MINUTE)
    return max(MIN_RESIZE_MINUTES, js_round(minutes / RESIZE_SNAP_MINUTES) * RESIZE_SNAP_MINUTES)


@dataclass
class ResizeSession:
    """State of one lower-edge resize drag."""

    project_id: str
    task_id: str
    start_y: float
    start_height: float
    current_height: Optional[float] = field(default=None)

    def drag_to(self, pointer_y: float) -> float:
        """Track the pointer; returns the live candidate height."""
        self.current_height = candidate_height(self.start_height, pointer_y - self.start_y)
        return self.current_height

    def release(self) -> Optional[int]:
        """Committed minutes, or None when the pointer never moved."""
        if self.current_height is None:
            return None
        return snap_duration(self.current_height)


def commit_resize(
    projects: Sequence[Project], session: ResizeSession
) -> tuple[tuple[Project, ...], Optional[int]]:
    """
    Apply a released resize as the task's new estimate.

    The scheduled start instant is left untouched.
    """
    minutes = session.release()
    if minutes is None:
        return tuple(projects), None
    ref = TaskRef(project_id=session.project_id, task_id=session.task_id)
    logger.debug(f"Resize commit {ref.task_id}: {minutes} min")
    return set_task_fields(projects, ref, {"estimated_minutes": minutes}), minutes
