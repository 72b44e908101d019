"""
Unit tests for the pure task tree functions.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from planflow.models.enums import TaskStatus
from planflow.models.task import Task, TaskCreate, TaskUpdate
from planflow.services import task_tree


def build_tree() -> tuple[Task, ...]:
    research = Task(id="research", title="Research", estimated_minutes=45)
    outline = Task(id="outline", title="Outline", estimated_minutes=30, status=TaskStatus.COMPLETED)
    stage = Task(id="stage", title="Preparation", subtasks=(research, outline))
    loose = Task(id="loose", title="Loose end", estimated_minutes=15)
    return (stage, loose)


def test_find_task_descends_into_children():
    """Test depth-first lookup."""
    tree = build_tree()

    assert task_tree.find_task(tree, "outline").title == "Outline"
    assert task_tree.find_task(tree, "missing") is None


def test_update_task_returns_new_tree_and_keeps_input():
    """Updates return a new tree and share untouched branches."""
    tree = build_tree()

    updated = task_tree.update_task(tree, "research", {"estimated_minutes": 60})

    assert task_tree.find_task(updated, "research").estimated_minutes == 60
    assert task_tree.find_task(tree, "research").estimated_minutes == 45
    # untouched branches are shared
    assert updated[1] is tree[1]


def test_update_task_with_explicit_none_clears_schedule():
    """An explicit null schedule sends the task to the backlog."""
    scheduled = Task(id="a", title="A", scheduled_date=datetime(2025, 3, 10, 9, 0))

    updated = task_tree.update_task((scheduled,), "a", TaskUpdate(scheduled_date=None))

    assert updated[0].scheduled_date is None


def test_update_task_ignores_unset_fields_and_id():
    """Test partial update leaves other fields and the id."""
    tree = build_tree()

    updated = task_tree.update_task(tree, "loose", {"id": "hijack", "title": "Renamed"})

    node = task_tree.find_task(updated, "loose")
    assert node.title == "Renamed"
    assert node.estimated_minutes == 15


def test_update_task_unknown_id_is_equal_tree():
    """Test update of a missing id."""
    tree = build_tree()

    assert task_tree.update_task(tree, "missing", {"title": "x"}) == tree


@pytest.mark.parametrize("field", ["title", "status", "estimated_minutes", "priority", "tags", "actual_minutes"])
def test_task_update_rejects_null_for_required_field(field):
    """Explicit null is refused for fields a task must always carry."""
    with pytest.raises(ValidationError):
        TaskUpdate.model_validate({field: None})


def test_task_update_allows_clearing_optional_fields():
    """Schedule, deadline and quadrant can be cleared with null."""
    update = TaskUpdate.model_validate({"scheduled_date": None, "deadline": None, "priority_quadrant": None})

    assert update.model_fields_set == {"scheduled_date", "deadline", "priority_quadrant"}


def test_update_task_validates_the_new_node():
    """A raw change that breaks a field constraint is refused, not stored."""
    tree = build_tree()

    with pytest.raises(ValidationError):
        task_tree.update_task(tree, "research", {"estimated_minutes": None})
    with pytest.raises(ValidationError):
        task_tree.update_task(tree, "research", {"estimated_minutes": -5})


def test_update_task_keeps_children_of_updated_node():
    """Updating a container keeps its subtree intact."""
    tree = build_tree()

    updated = task_tree.update_task(tree, "stage", {"title": "Prep"})

    assert updated[0].title == "Prep"
    assert updated[0].subtasks == tree[0].subtasks


def test_delete_task_removes_whole_subtree():
    """Deleting a stage removes its children too."""
    tree = build_tree()

    updated = task_tree.delete_task(tree, "stage")

    assert [task.id for task in updated] == ["loose"]
    assert task_tree.find_task(updated, "research") is None


def test_add_child_appends_last():
    """Test child append order."""
    tree = build_tree()
    child = Task(id="review", title="Review")

    updated = task_tree.add_child(tree, "stage", child)

    stage = task_tree.find_task(updated, "stage")
    assert [task.id for task in stage.subtasks] == ["research", "outline", "review"]


def test_flatten_tasks_is_pre_order():
    """Test pre-order flattening."""
    assert [task.id for task in task_tree.flatten_tasks(build_tree())] == [
        "stage",
        "research",
        "outline",
        "loose",
    ]


def test_project_stats_count_leaves_only():
    """Containers are not counted in progress."""
    stats = task_tree.calculate_project_stats(build_tree())

    assert stats.total == 3
    assert stats.completed == 1
    assert stats.percent == 33
    assert stats.total_hours == 1.5
    assert stats.completed_hours == 0.5


def test_project_stats_empty_project():
    """Test stats of an empty project."""
    stats = task_tree.calculate_project_stats(())

    assert stats.total == 0
    assert stats.percent == 0


def test_build_task_assigns_fresh_ids_recursively():
    """Every created node gets its own id."""
    data = TaskCreate(title="Stage", subtasks=[TaskCreate(title="Child", estimated_minutes=20)])

    first = task_tree.build_task(data)
    second = task_tree.build_task(data)

    assert first.id != second.id
    assert first.subtasks[0].title == "Child"
    assert first.subtasks[0].estimated_minutes == 20


def test_build_task_from_draft_defaults():
    """Draft nodes get a default estimate and TODO status."""
    draft = {
        "title": "Phase 1",
        "estimatedMinutes": 0,
        "subtasks": [
            {"title": "Research competitors", "estimatedMinutes": 45},
            {"estimated_minutes": "abc"},
            "not a task",
        ],
    }

    task = task_tree.build_task_from_draft(draft)

    assert task.estimated_minutes == task_tree.DRAFT_DEFAULT_MINUTES
    assert [child.title for child in task.subtasks] == ["Research competitors", "Untitled task"]
    assert task.subtasks[0].estimated_minutes == 45
    assert task.subtasks[1].estimated_minutes == task_tree.DRAFT_DEFAULT_MINUTES
    assert all(child.status == TaskStatus.TODO for child in task.subtasks)


def test_build_task_from_draft_parses_deadline():
    """Test draft deadline parsing."""
    task = task_tree.build_task_from_draft({"title": "Ship", "deadline": "2025-03-14T17:00:00"})
    broken = task_tree.build_task_from_draft({"title": "Ship", "deadline": "next friday"})

    assert task.deadline == datetime(2025, 3, 14, 17, 0)
    assert broken.deadline is None
