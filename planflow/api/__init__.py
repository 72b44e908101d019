"""API routers."""

from planflow.api import calendar, chat, dashboard, focus, projects, tasks

__all__ = ["calendar", "chat", "dashboard", "focus", "projects", "tasks"]
