"""
Integration tests for the calendar API.
"""

import json

import pytest

ANCHOR = "2025-03-10"


async def add_task(client, title: str, minutes: int) -> str:
    response = await client.post("/api/projects/inbox/tasks", json={"title": title, "estimated_minutes": minutes})
    return response.json()["id"]


@pytest.mark.asyncio
async def test_auto_schedule_day_view(client):
    """Test auto-schedule through the API."""
    first = await add_task(client, "Deep work", 90)
    second = await add_task(client, "Emails", 0)

    response = await client.post("/api/calendar/auto-schedule", json={"view": "DAY", "anchor_date": ANCHOR})

    assert response.status_code == 200
    body = response.json()
    assert body["horizon"] == [ANCHOR]
    placed = {p["task_id"]: p for p in body["placements"]}
    assert placed[first]["scheduled_date"] == "2025-03-10T09:00:00"
    assert placed[second]["scheduled_date"] == "2025-03-10T10:30:00"
    assert placed[second]["duration_minutes"] == 15

    occupancy = await client.get("/api/calendar/occupancy", params={"view": "DAY", "anchor_date": ANCHOR})
    # the zero-estimate task keeps its raw estimate in the grid
    assert occupancy.json()[0]["busy_minutes"] == 90


@pytest.mark.asyncio
async def test_auto_schedule_leaves_oversized_task_in_backlog(client):
    """A task that fits no day stays in the backlog."""
    task_id = await add_task(client, "Marathon session", 600)

    response = await client.post("/api/calendar/auto-schedule", json={"view": "WEEK", "anchor_date": ANCHOR})

    assert response.json()["unscheduled_task_ids"] == [task_id]
    tasks = await client.get("/api/calendar/tasks", params={"view": "WEEK", "anchor_date": ANCHOR})
    assert [item["task"]["id"] for item in tasks.json()["backlog"]] == [task_id]


@pytest.mark.asyncio
async def test_drop_unschedule_and_resize(client):
    """Test drop, resize and unschedule flow."""
    task_id = await add_task(client, "Review PR", 30)
    payload = json.dumps({"projectId": "inbox", "taskId": task_id})

    dropped = await client.post("/api/calendar/drop", json={"payload": payload, "day": ANCHOR, "hour": 15})
    assert dropped.status_code == 200
    tasks = await client.get("/api/calendar/tasks", params={"view": "DAY", "anchor_date": ANCHOR})
    scheduled = tasks.json()["scheduled"]
    assert scheduled[0]["task"]["scheduled_date"] == "2025-03-10T15:00:00"

    resized = await client.post(
        "/api/calendar/resize",
        json={"project_id": "inbox", "task_id": task_id, "start_height": 30, "delta_y": 22},
    )
    assert resized.json() == {"committed_minutes": 45}

    await client.post("/api/calendar/unschedule", json={"payload": {"projectId": "inbox", "taskId": task_id}})
    tasks = await client.get("/api/calendar/tasks", params={"view": "DAY", "anchor_date": ANCHOR})
    assert tasks.json()["scheduled"] == []
    backlog = tasks.json()["backlog"]
    assert [item["task"]["id"] for item in backlog] == [task_id]
    assert backlog[0]["task"]["estimated_minutes"] == 45


@pytest.mark.asyncio
async def test_malformed_drop_is_ignored(client):
    """A bad drop payload returns the unchanged projects."""
    task_id = await add_task(client, "Untouched", 30)

    response = await client.post("/api/calendar/drop", json={"payload": "nonsense", "day": ANCHOR, "hour": 9})

    assert response.status_code == 200
    inbox = next(p for p in response.json() if p["id"] == "inbox")
    assert inbox["subtasks"][0]["id"] == task_id
    assert inbox["subtasks"][0]["scheduled_date"] is None


@pytest.mark.asyncio
async def test_resize_unknown_task(client):
    """Test resize of a missing task."""
    response = await client.post(
        "/api/calendar/resize",
        json={"project_id": "inbox", "task_id": "ghost", "start_height": 30, "delta_y": 10},
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_connect_outlook(client):
    """Connecting Outlook imports three events that block time."""
    response = await client.post("/api/calendar/integrations/outlook/connect", params={"anchor_date": ANCHOR})

    assert response.status_code == 200
    body = response.json()
    assert body["connected"] is True
    assert body["project"]["id"] == "ext-outlook"
    assert body["project"]["title"] == "Outlook (Primary)"
    assert len(body["project"]["subtasks"]) == 3

    occupancy = await client.get("/api/calendar/occupancy", params={"view": "WEEK", "anchor_date": ANCHOR})
    assert sum(day["busy_minutes"] for day in occupancy.json()) == 150


@pytest.mark.asyncio
async def test_connect_unknown_provider(client):
    """Test unknown provider name."""
    response = await client.post("/api/calendar/integrations/exchange/connect")

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_resize_rejects_non_finite_numbers(client):
    """Infinity in a resize body is a validation error, not a server error."""
    task_id = await add_task(client, "Sketch", 30)
    body = '{"project_id": "inbox", "task_id": "%s", "start_height": 30, "delta_y": Infinity}' % task_id

    response = await client.post(
        "/api/calendar/resize", content=body, headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 422
    project = await client.get("/api/projects/inbox")
    assert project.json()["subtasks"][0]["estimated_minutes"] == 30
