"""
Pure recursive operations over task trees.

Every function takes an immutable snapshot (a sequence of top-level tasks)
and returns a new snapshot. Inputs are never mutated; unchanged branches are
shared between the old and new trees.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterator, Mapping, Optional, Sequence, Union

from planflow.models.enums import TaskStatus
from planflow.models.project import Project, ProjectStats
from planflow.models.task import Task, TaskCreate, TaskUpdate

Changes = Union[TaskUpdate, Mapping[str, Any]]

DRAFT_DEFAULT_MINUTES = 30


def _as_changes(changes: Changes) -> dict[str, Any]:
    if isinstance(changes, TaskUpdate):
        return changes.model_dump(exclude_unset=True)
    return dict(changes)


def find_task(tasks: Sequence[Task], task_id: str) -> Optional[Task]:
    """Depth-first search for a task by id."""
    for task in tasks:
        if task.id == task_id:
            return task
        found = find_task(task.subtasks, task_id)
        if found is not None:
            return found
    return None


def update_task(tasks: Sequence[Task], task_id: str, changes: Changes) -> tuple[Task, ...]:
    """
    Apply a partial update to the task with `task_id`.

    Fields not present in `changes` keep their value. With a `TaskUpdate`,
    only explicitly set fields count, so `TaskUpdate(scheduled_date=None)`
    clears the schedule. The updated node is validated again, so a change
    that breaks a field constraint raises `pydantic.ValidationError`. An
    unknown id yields an equal tree.
    """
    values = _as_changes(changes)
    values.pop("id", None)

    def walk(nodes: Sequence[Task]) -> tuple[Task, ...]:
        result = []
        for node in nodes:
            if node.id == task_id:
                node = Task.model_validate({**dict(node), **values})
            elif node.subtasks:
                node = node.model_copy(update={"subtasks": walk(node.subtasks)})
            result.append(node)
        return tuple(result)

    return walk(tasks)


def delete_task(tasks: Sequence[Task], task_id: str) -> tuple[Task, ...]:
    """Remove the task with `task_id` together with its whole subtree."""
    result = []
    for task in tasks:
        if task.id == task_id:
            continue
        if task.subtasks:
            task = task.model_copy(update={"subtasks": delete_task(task.subtasks, task_id)})
        result.append(task)
    return tuple(result)


def add_child(tasks: Sequence[Task], parent_id: str, new_task: Task) -> tuple[Task, ...]:
    """Append `new_task` as the last child of `parent_id`."""
    return append_children(tasks, parent_id, [new_task])


def append_children(
    tasks: Sequence[Task], parent_id: str, children: Sequence[Task]
) -> tuple[Task, ...]:
    """Append several children to `parent_id`, keeping existing ones first."""
    result = []
    for task in tasks:
        if task.id == parent_id:
            task = task.model_copy(update={"subtasks": tuple(task.subtasks) + tuple(children)})
        elif task.subtasks:
            task = task.model_copy(
                update={"subtasks": append_children(task.subtasks, parent_id, children)}
            )
        result.append(task)
    return tuple(result)


def flatten_tasks(tasks: Sequence[Task]) -> list[Task]:
    """All tasks in pre-order (parent before its children)."""
    result: list[Task] = []
    for task in tasks:
        result.append(task)
        if task.subtasks:
            result.extend(flatten_tasks(task.subtasks))
    return result


def iter_project_tasks(projects: Sequence[Project]) -> Iterator[tuple[Project, Task]]:
    """Yield (project, task) in project order, then tree pre-order."""
    for project in projects:
        for task in flatten_tasks(project.subtasks):
            yield project, task


def calculate_project_stats(tasks: Sequence[Task]) -> ProjectStats:
    """
    Progress statistics counting leaf tasks only.

    Containers are skipped so that a stage and its children are not
    double counted.
    """
    total = 0
    completed = 0
    total_minutes = 0
    completed_minutes = 0

    for task in flatten_tasks(tasks):
        if not task.is_leaf:
            continue
        total += 1
        total_minutes += task.estimated_minutes
        if task.status == TaskStatus.COMPLETED:
            completed += 1
            completed_minutes += task.estimated_minutes

    return ProjectStats(
        total=total,
        completed=completed,
        percent=_round_half_up(completed / total * 100) if total > 0 else 0,
        total_hours=_round_half_up(total_minutes / 60 * 10) / 10,
        completed_hours=_round_half_up(completed_minutes / 60 * 10) / 10,
    )


def build_task(data: TaskCreate) -> Task:
    """Materialize a `TaskCreate` (and its nested children) with fresh ids."""
    values = data.model_dump(exclude={"subtasks"})
    return Task(**values, subtasks=tuple(build_task(child) for child in data.subtasks))


def build_task_from_draft(draft: Mapping[str, Any]) -> Task:
    """
    Materialize one node of an AI-generated project draft.

    Drafts use camelCase keys (`estimatedMinutes`); snake_case is accepted too.
    A missing, zero or invalid estimate becomes `DRAFT_DEFAULT_MINUTES`, and
    an unparsable deadline is dropped.
    """
    minutes = draft.get("estimatedMinutes", draft.get("estimated_minutes"))
    try:
        minutes = int(minutes or 0)
    except (TypeError, ValueError):
        minutes = 0
    if minutes <= 0:
        minutes = DRAFT_DEFAULT_MINUTES

    deadline = None
    raw_deadline = draft.get("deadline")
    if isinstance(raw_deadline, str) and raw_deadline:
        try:
            deadline = datetime.fromisoformat(raw_deadline)
        except ValueError:
            deadline = None

    children = draft.get("subtasks") or []
    return Task(
        title=str(draft.get("title") or "Untitled task")[:500],
        estimated_minutes=minutes,
        deadline=deadline,
        status=TaskStatus.TODO,
        subtasks=tuple(
            build_task_from_draft(child) for child in children if isinstance(child, Mapping)
        ),
    )


def _round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)
