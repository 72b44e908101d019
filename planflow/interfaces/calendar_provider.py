"""
External calendar provider interface.

Implementations: mocked Google / Outlook / iCloud providers.
"""

from abc import ABC, abstractmethod
from datetime import date

from planflow.models.enums import CalendarProviderType
from planflow.models.task import Task


class ICalendarProvider(ABC):
    """Abstract interface for calendar integrations."""

    provider_type: CalendarProviderType

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable provider name, e.g. "Google"."""
        pass

    @abstractmethod
    async def connect(self, week_start: date) -> list[Task]:
        """
        Connect and fetch the provider's events for the given week.

        Args:
            week_start: First day of the week to import

        Returns:
            Events materialized as scheduled tasks
        """
        pass
