"""
Enum definitions for the application.

These enums are used across models and provide type-safe status/priority values.
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Task (and project) status."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class Priority(str, Enum):
    """Todoist style priority (P1 = most urgent)."""

    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"


class PriorityQuadrant(str, Enum):
    """Eisenhower matrix quadrant."""

    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"


class CalendarView(str, Enum):
    """Active calendar view. Also decides the auto-schedule horizon."""

    DAY = "DAY"
    WEEK = "WEEK"
    MONTH = "MONTH"


class TaskFilter(str, Enum):
    """Planner sidebar filters that are not a project id."""

    INBOX = "INBOX"
    TODAY = "TODAY"
    UPCOMING = "UPCOMING"


class DateRange(str, Enum):
    """Dashboard history ranges."""

    SEVEN_DAYS = "7D"
    MONTH = "MONTH"
    YEAR = "YEAR"
    CUSTOM = "CUSTOM"


class ChatRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    MODEL = "model"


class ChartType(str, Enum):
    """Chart kinds the analyst agent may suggest."""

    BAR = "bar"
    LINE = "line"
    PIE = "pie"


class CalendarProviderType(str, Enum):
    """Supported (mocked) external calendar providers."""

    GOOGLE = "google"
    OUTLOOK = "outlook"
    ICLOUD = "icloud"
