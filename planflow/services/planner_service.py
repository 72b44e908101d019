"""
Planner Service for projects and their task trees.

Every write goes through `IProjectRepository.apply`, so each operation swaps
in a complete new snapshot built by the pure helpers of `task_tree`.
"""

from __future__ import annotations

import re
from datetime import datetime, time, timedelta
from typing import Any, Mapping, Optional, Sequence, Union

from planflow.core.config import Settings, get_settings
from planflow.core.exceptions import NotFoundError, ValidationError
from planflow.core.logger import setup_logger
from planflow.interfaces.project_repository import IProjectRepository
from planflow.models.enums import ChatRole, Priority, TaskFilter, TaskStatus
from planflow.models.project import (
    INBOX_PROJECT_ID,
    ChatAttachment,
    ChatMessage,
    Project,
    ProjectCreate,
    ProjectStats,
)
from planflow.models.task import ProjectTask, Task, TaskCreate, TaskUpdate
from planflow.services.ai_service import CHAT_FALLBACK, AIService
from planflow.services import task_tree
from planflow.utils.datetime_utils import to_local

logger = setup_logger(__name__)

PRIORITY_ORDER = {Priority.P1: 1, Priority.P2: 2, Priority.P3: 3, Priority.P4: 4}

# Checked in order; the first marker present wins.
PRIORITY_MARKERS = (("!p1", Priority.P1), ("!p2", Priority.P2), ("!p3", Priority.P3))

_TODAY = re.compile("today", re.IGNORECASE)
_TOMORROW = re.compile("tomorrow", re.IGNORECASE)


def parse_filter(value: str) -> Union[TaskFilter, str]:
    """INBOX/TODAY/UPCOMING become a TaskFilter; anything else is a project id."""
    try:
        return TaskFilter(value)
    except ValueError:
        return value


class PlannerService:
    """Service for project and task tree operations."""

    def __init__(
        self,
        project_repo: IProjectRepository,
        ai_service: Optional[AIService] = None,
        settings: Optional[Settings] = None,
    ):
        self._project_repo = project_repo
        self._ai_service = ai_service
        self._settings = settings or get_settings()

    # ===========================================
    # Projects
    # ===========================================

    async def list_projects(self) -> tuple[Project, ...]:
        return await self._project_repo.list()

    async def get_project(self, project_id: str) -> Project:
        project = await self._project_repo.get(project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found")
        return project

    async def create_project(self, data: ProjectCreate) -> Project:
        """Create a project from a manual definition."""
        subtasks = tuple(task_tree.build_task(task) for task in data.subtasks)
        project = Project(
            title=data.title,
            description=data.description,
            subtasks=subtasks,
            suggested_resources=tuple(data.suggested_resources),
            total_estimated_minutes=sum(
                task.estimated_minutes for task in task_tree.flatten_tasks(subtasks) if task.is_leaf
            ),
        )
        logger.info(f"Created project {project.id} ({len(subtasks)} top-level tasks)")
        return await self._project_repo.add(project, first=True)

    async def import_draft(self, draft: Mapping[str, Any]) -> Project:
        """
        Create a project from an AI-generated draft.

        Raises:
            ValidationError: If the draft has no title
        """
        title = str(draft.get("title") or "").strip()
        if not title:
            raise ValidationError("Project draft has no title")

        raw_subtasks = draft.get("subtasks") or []
        subtasks = tuple(
            task_tree.build_task_from_draft(item) for item in raw_subtasks if isinstance(item, Mapping)
        )
        resources = draft.get("suggestedResources", draft.get("suggested_resources")) or []
        project = Project(
            title=title[:200],
            description=str(draft.get("description") or ""),
            subtasks=subtasks,
            suggested_resources=tuple(str(item) for item in resources),
            total_estimated_minutes=sum(
                task.estimated_minutes for task in task_tree.flatten_tasks(subtasks) if task.is_leaf
            ),
        )
        logger.info(f"Imported project draft as {project.id}")
        return await self._project_repo.add(project, first=True)

    async def delete_project(self, project_id: str) -> None:
        if not await self._project_repo.delete(project_id):
            raise NotFoundError(f"Project {project_id} not found")

    async def get_stats(self, project_id: str) -> ProjectStats:
        project = await self.get_project(project_id)
        return task_tree.calculate_project_stats(project.subtasks)

    # ===========================================
    # Tasks
    # ===========================================

    async def _replace_subtasks(self, project_id: str, transform) -> Project:
        """Swap one project's task forest for `transform(subtasks)`."""
        await self.get_project(project_id)

        def updater(projects: tuple[Project, ...]) -> list[Project]:
            return [
                p.model_copy(update={"subtasks": transform(p.subtasks)}) if p.id == project_id else p
                for p in projects
            ]

        snapshot = await self._project_repo.apply(updater)
        return next(p for p in snapshot if p.id == project_id)

    async def get_task(self, project_id: str, task_id: str) -> Task:
        project = await self.get_project(project_id)
        task = task_tree.find_task(project.subtasks, task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found in project {project_id}")
        return task

    async def add_task(
        self, project_id: str, data: TaskCreate, parent_id: Optional[str] = None
    ) -> Task:
        """Add a task at the top level of a project, or under `parent_id`."""
        if parent_id is not None:
            await self.get_task(project_id, parent_id)
        task = task_tree.build_task(data)
        if parent_id is None:
            await self._replace_subtasks(project_id, lambda tasks: (*tasks, task))
        else:
            await self._replace_subtasks(
                project_id, lambda tasks: task_tree.add_child(tasks, parent_id, task)
            )
        return task

    async def update_task(self, project_id: str, task_id: str, update: TaskUpdate) -> Task:
        await self.get_task(project_id, task_id)
        project = await self._replace_subtasks(
            project_id, lambda tasks: task_tree.update_task(tasks, task_id, update)
        )
        return task_tree.find_task(project.subtasks, task_id)

    async def delete_task(self, project_id: str, task_id: str) -> None:
        await self.get_task(project_id, task_id)
        await self._replace_subtasks(
            project_id, lambda tasks: task_tree.delete_task(tasks, task_id)
        )

    async def toggle_status(self, project_id: str, task_id: str) -> Task:
        """COMPLETED becomes TODO; any other status becomes COMPLETED."""
        task = await self.get_task(project_id, task_id)
        status = TaskStatus.TODO if task.status == TaskStatus.COMPLETED else TaskStatus.COMPLETED
        return await self.update_task(project_id, task_id, TaskUpdate(status=status))

    async def auto_breakdown(self, project_id: str, task_id: str) -> Task:
        """
        Ask the AI for subtasks and append them as TODO children.

        When the AI is unavailable or returns nothing, the tree is unchanged.
        """
        task = await self.get_task(project_id, task_id)
        if self._ai_service is None:
            return task

        suggestions = await self._ai_service.suggest_subtasks(task.title)
        if not suggestions:
            logger.info(f"No subtasks suggested for {task_id}")
            return task

        children = [
            Task(title=item.title, estimated_minutes=item.estimated_minutes, status=TaskStatus.TODO)
            for item in suggestions
        ]
        project = await self._replace_subtasks(
            project_id, lambda tasks: task_tree.append_children(tasks, task_id, children)
        )
        return task_tree.find_task(project.subtasks, task_id)

    # ===========================================
    # Quick add / smart lists
    # ===========================================

    async def quick_add(
        self,
        text: str,
        active_filter: Union[TaskFilter, str] = TaskFilter.INBOX,
        now: Optional[datetime] = None,
    ) -> ProjectTask:
        """
        Create a task from one line of text.

        "today"/"tomorrow" schedule the task at the quick-add hour and are
        removed from the title; "!p1".."!p3" set the priority.

        Raises:
            ValidationError: If no title is left after parsing
            NotFoundError: If there is no project to add to
        """
        now = now or datetime.now()
        title = text
        lower = text.lower()
        scheduled: Optional[datetime] = None
        hour = time(hour=self._settings.QUICK_ADD_HOUR)

        if active_filter == TaskFilter.TODAY or "today" in lower:
            scheduled = datetime.combine(now.date(), hour)
            title = _TODAY.sub("", title, count=1).strip()
        elif active_filter == TaskFilter.UPCOMING or "tomorrow" in lower:
            scheduled = datetime.combine(now.date() + timedelta(days=1), hour)
            title = _TOMORROW.sub("", title, count=1).strip()

        priority = Priority.P4
        for marker, value in PRIORITY_MARKERS:
            if marker in title:
                priority = value
                title = title.replace(marker, "", 1).strip()
                break

        title = title.strip()
        if not title:
            raise ValidationError("Quick-add text has no title", details={"text": text})

        project = await self._quick_add_target(active_filter)
        task = Task(
            title=title,
            status=TaskStatus.TODO,
            estimated_minutes=self._settings.QUICK_ADD_MINUTES,
            scheduled_date=scheduled,
            priority=priority,
        )
        await self._replace_subtasks(project.id, lambda tasks: (*tasks, task))
        return ProjectTask(project_id=project.id, project_title=project.title, task=task)

    async def _quick_add_target(self, active_filter: Union[TaskFilter, str]) -> Project:
        target_id = INBOX_PROJECT_ID if isinstance(active_filter, TaskFilter) else active_filter
        project = await self._project_repo.get(target_id)
        if project is not None:
            return project
        project = await self._project_repo.get(INBOX_PROJECT_ID)
        if project is not None:
            return project
        projects = await self._project_repo.list()
        if not projects:
            raise NotFoundError("No project available for quick add")
        return projects[0]

    async def counts(self, now: Optional[datetime] = None) -> dict[str, int]:
        """
        Badge counts of the smart lists.

        A completed task is skipped together with its subtree.
        """
        start_today = datetime.combine((now or datetime.now()).date(), time.min)
        start_tomorrow = start_today + timedelta(days=1)
        result = {"inbox": 0, "today": 0, "upcoming": 0}
        zone = self._settings.TIMEZONE

        def walk(tasks) -> None:
            for task in tasks:
                if task.status == TaskStatus.COMPLETED:
                    continue
                if task.scheduled_date is None:
                    result["inbox"] += 1
                    walk(task.subtasks)
                    continue
                scheduled = to_local(task.scheduled_date, zone)
                if start_today <= scheduled < start_tomorrow:
                    result["today"] += 1
                elif scheduled >= start_tomorrow:
                    result["upcoming"] += 1
                walk(task.subtasks)

        for project in await self._project_repo.list():
            walk(project.subtasks)
        return result

    async def filter_tasks(
        self, active_filter: Union[TaskFilter, str], now: Optional[datetime] = None
    ) -> list[ProjectTask]:
        """
        Flattened tasks of a smart list or a project, sorted by priority then
        scheduled instant (unscheduled first).
        """
        start_today = datetime.combine((now or datetime.now()).date(), time.min)
        start_tomorrow = start_today + timedelta(days=1)

        zone = self._settings.TIMEZONE

        def scheduled_at(task: Task) -> Optional[datetime]:
            if task.scheduled_date is None:
                return None
            return to_local(task.scheduled_date, zone)

        def keep(project: Project, task: Task) -> bool:
            if not isinstance(active_filter, TaskFilter):
                return project.id == active_filter
            if task.status == TaskStatus.COMPLETED:
                return False
            scheduled = scheduled_at(task)
            if active_filter == TaskFilter.INBOX:
                return scheduled is None
            if scheduled is None:
                return False
            if active_filter == TaskFilter.TODAY:
                return start_today <= scheduled < start_tomorrow
            return scheduled >= start_tomorrow

        projects = await self._project_repo.list()
        items = [
            ProjectTask(project_id=project.id, project_title=project.title, task=task)
            for project, task in task_tree.iter_project_tasks(projects)
            if keep(project, task)
        ]
        items.sort(
            key=lambda item: (
                PRIORITY_ORDER[item.task.priority],
                scheduled_at(item.task) or datetime.min,
            )
        )
        return items

    # ===========================================
    # Project chat
    # ===========================================

    async def chat(
        self,
        project_id: str,
        text: str,
        attachments: Sequence[ChatAttachment] = (),
    ) -> ChatMessage:
        """
        Ask the project assistant and record both turns in the chat history.

        Returns:
            The assistant's reply message
        """
        project = await self.get_project(project_id)
        if self._ai_service is None:
            reply_text = CHAT_FALLBACK
        else:
            reply_text = await self._ai_service.chat_with_project_agent(project, text, attachments)

        question = ChatMessage(role=ChatRole.USER, text=text, attachments=tuple(attachments))
        reply = ChatMessage(role=ChatRole.MODEL, text=reply_text)

        def updater(projects: tuple[Project, ...]) -> list[Project]:
            return [
                p.model_copy(update={"chat_history": (*p.chat_history, question, reply)})
                if p.id == project_id
                else p
                for p in projects
            ]

        await self._project_repo.apply(updater)
        return reply
