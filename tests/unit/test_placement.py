"""
Unit tests for drag-to-schedule, drag-to-backlog and resize rules.
"""

import json
from datetime import date, datetime

import pytest

from planflow.models.project import Project
from planflow.models.task import Task
from planflow.services import placement
from planflow.services.scheduler_service import split_backlog

MONDAY = date(2025, 3, 10)


@pytest.fixture
def projects():
    task_c = Task(id="c", title="C", estimated_minutes=30, scheduled_date=datetime(2025, 3, 10, 14, 0))
    task_d = Task(id="d", title="D", estimated_minutes=30)
    return (Project(id="p1", title="P1", subtasks=(task_c, task_d)),)


def payload(task_id: str) -> str:
    return json.dumps({"projectId": "p1", "taskId": task_id})


@pytest.mark.parametrize(
    "raw",
    [None, "", "not json", "[]", json.dumps({"projectId": "p1"}), {"projectId": 3, "taskId": "c"}],
)
def test_malformed_payloads_are_rejected(raw):
    """Bad drag payloads parse to None."""
    assert placement.parse_drag_payload(raw) is None


def test_payload_accepts_mapping_and_snake_case():
    """Test payload key styles."""
    ref = placement.parse_drag_payload({"project_id": "p1", "task_id": "c"})

    assert ref.project_id == "p1"
    assert ref.task_id == "c"


def test_drop_on_hour_cell_sets_instant(projects):
    """Dropping on an hour cell schedules at the top of the hour."""
    updated = placement.drop_on_cell(projects, payload("d"), MONDAY, hour=11)

    assert updated[0].subtasks[1].scheduled_date == datetime(2025, 3, 10, 11, 0)


def test_drop_on_day_cell_uses_midnight(projects):
    """Test month cell drop."""
    updated = placement.drop_on_cell(projects, payload("d"), MONDAY)

    assert updated[0].subtasks[1].scheduled_date == datetime(2025, 3, 10, 0, 0)


def test_drop_allows_stacking(projects):
    """Drops do not check for overlap."""
    updated = placement.drop_on_cell(projects, payload("d"), MONDAY, hour=14)

    assert updated[0].subtasks[0].scheduled_date == updated[0].subtasks[1].scheduled_date


def test_malformed_drop_is_a_noop(projects):
    """Test drop with a bad payload."""
    assert placement.drop_on_cell(projects, "garbage", MONDAY, hour=9) == projects


def test_drop_on_backlog_returns_task_to_queue_once(projects):
    """A task dropped on the backlog shows up there exactly once."""
    updated = placement.drop_on_backlog(projects, payload("c"))
    again = placement.drop_on_backlog(updated, payload("c"))

    assert updated[0].subtasks[0].scheduled_date is None
    assert again == updated
    _, unscheduled = split_backlog(again)
    assert [item.task.id for item in unscheduled].count("c") == 1


def test_js_round_rounds_half_up():
    """Test half-up rounding."""
    assert placement.js_round(2.5) == 3
    assert placement.js_round(3.46) == 3
    assert placement.js_round(-0.5) == 0


def test_resize_commits_snapped_duration(projects):
    """Released resize snaps to 15 minutes and keeps the start."""
    session = placement.ResizeSession(project_id="p1", task_id="c", start_y=100, start_height=30)

    assert session.drag_to(122) == 52
    updated, minutes = placement.commit_resize(projects, session)

    assert minutes == 45
    assert updated[0].subtasks[0].estimated_minutes == 45
    # start instant is kept
    assert updated[0].subtasks[0].scheduled_date == datetime(2025, 3, 10, 14, 0)


def test_resize_clamps_to_floor(projects):
    """Shrinking past the floor commits 15 minutes."""
    session = placement.ResizeSession(project_id="p1", task_id="c", start_y=0, start_height=30)

    assert session.drag_to(-200) == 15
    _, minutes = placement.commit_resize(projects, session)

    assert minutes == 15


@pytest.mark.parametrize("height", [15, 22, 23, 52, 97, 1000.4])
def test_snap_duration_is_multiple_of_fifteen(height):
    """Test snapped durations."""
    minutes = placement.snap_duration(height)

    assert minutes >= 15
    assert minutes % 15 == 0


def test_release_without_move_commits_nothing(projects):
    """A release without movement commits nothing."""
    session = placement.ResizeSession(project_id="p1", task_id="c", start_y=0, start_height=30)

    updated, minutes = placement.commit_resize(projects, session)

    assert minutes is None
    assert updated == projects


def test_block_height_has_minimum():
    """Test minimum block height."""
    assert placement.block_height(Task(title="Short", estimated_minutes=10)) == 30
    assert placement.block_height(Task(title="Long", estimated_minutes=90)) == 90


@pytest.mark.parametrize("pointer_y", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_drag_counts_as_no_move(projects, pointer_y):
    """A non-finite pointer reading keeps the starting height."""
    session = placement.ResizeSession(project_id="p1", task_id="c", start_y=0, start_height=60)

    assert session.drag_to(pointer_y) == 60
    _, minutes = placement.commit_resize(projects, session)

    assert minutes == 60


@pytest.mark.parametrize("height", [float("inf"), float("nan")])
def test_snap_duration_of_non_finite_height_is_floor(height):
    """Snapping never raises; a non-finite height commits the minimum."""
    assert placement.snap_duration(height) == 15
    assert placement.candidate_height(height, 10) == 15
