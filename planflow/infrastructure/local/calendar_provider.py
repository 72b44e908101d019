"""
Mocked calendar providers.

Each provider simulates network latency and then yields a fixed set of
events placed on days of the requested week.
"""

import asyncio
from datetime import date, datetime, time, timedelta

from planflow.interfaces.calendar_provider import ICalendarProvider
from planflow.models.enums import CalendarProviderType, TaskStatus
from planflow.models.task import Task

# (day offset from week start, hour, title, minutes)
MOCK_EVENTS: dict[CalendarProviderType, list[tuple[int, int, str, int]]] = {
    CalendarProviderType.GOOGLE: [
        (1, 10, "Team Standup (GCal)", 30),
        (3, 14, "Product Review (GCal)", 60),
        (4, 11, "1:1 Manager (GCal)", 45),
    ],
    CalendarProviderType.OUTLOOK: [
        (1, 9, "Weekly Sync (Outlook)", 60),
        (2, 15, "Client Call (Outlook)", 30),
        (5, 10, "All Hands (Outlook)", 60),
    ],
    CalendarProviderType.ICLOUD: [],
}

DISPLAY_NAMES = {
    CalendarProviderType.GOOGLE: "Google",
    CalendarProviderType.OUTLOOK: "Outlook",
    CalendarProviderType.ICLOUD: "iCloud",
}


class MockCalendarProvider(ICalendarProvider):
    """Calendar provider returning canned events after a fake delay."""

    def __init__(self, provider_type: CalendarProviderType, latency_ms: int = 1500):
        self.provider_type = provider_type
        self._latency_ms = latency_ms

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self.provider_type]

    async def connect(self, week_start: date) -> list[Task]:
        if self._latency_ms:
            await asyncio.sleep(self._latency_ms / 1000)
        return [
            Task(
                title=title,
                status=TaskStatus.TODO,
                estimated_minutes=minutes,
                actual_minutes=0,
                scheduled_date=datetime.combine(
                    week_start + timedelta(days=offset), time(hour=hour)
                ),
            )
            for offset, hour, title, minutes in MOCK_EVENTS[self.provider_type]
        ]
