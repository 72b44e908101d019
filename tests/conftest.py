"""
Shared fixtures.

Services are built with a zero auto-schedule delay, zero provider latency
and an LLM provider that is never available, so nothing sleeps or touches
the network.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from planflow.api import deps
from planflow.core.config import Settings
from planflow.infrastructure.local.calendar_provider import MockCalendarProvider
from planflow.infrastructure.local.focus_session_repository import InMemoryFocusSessionRepository
from planflow.infrastructure.local.project_repository import InMemoryProjectRepository
from planflow.interfaces.llm_provider import ILLMProvider
from planflow.models.enums import CalendarProviderType
from planflow.services.ai_service import AIService
from planflow.services.calendar_service import CalendarService
from planflow.services.dashboard_service import DashboardService
from planflow.services.focus_service import FocusService
from planflow.services.planner_service import PlannerService


class OfflineLLMProvider(ILLMProvider):
    """LLM provider without credentials: every AI call takes its fallback path."""

    def get_model(self) -> str:
        return "offline"

    def get_model_name(self) -> str:
        return "Offline"

    def is_available(self) -> bool:
        return False


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        AUTO_SCHEDULE_DELAY_MS=0,
        CALENDAR_CONNECT_LATENCY_MS=0,
        GOOGLE_API_KEY="",
        TIMEZONE="",
    )


@pytest.fixture
def project_repo() -> InMemoryProjectRepository:
    return InMemoryProjectRepository()


@pytest.fixture
def session_repo() -> InMemoryFocusSessionRepository:
    return InMemoryFocusSessionRepository()


@pytest.fixture
def ai_service() -> AIService:
    return AIService(OfflineLLMProvider())


@pytest.fixture
def calendar_providers():
    return {
        provider_type: MockCalendarProvider(provider_type, latency_ms=0)
        for provider_type in CalendarProviderType
    }


@pytest_asyncio.fixture
async def client(project_repo, session_repo, ai_service, calendar_providers, test_settings):
    """HTTP client against a fresh app whose services share one in-memory store."""
    from main import create_app

    app = create_app()
    planner = PlannerService(project_repo, ai_service, settings=test_settings)
    calendar = CalendarService(project_repo, calendar_providers, settings=test_settings)
    focus = FocusService(project_repo, session_repo, ai_service, settings=test_settings)
    dashboard = DashboardService(session_repo, ai_service)

    app.dependency_overrides[deps.get_ai_service] = lambda: ai_service
    app.dependency_overrides[deps.get_planner_service] = lambda: planner
    app.dependency_overrides[deps.get_calendar_service] = lambda: calendar
    app.dependency_overrides[deps.get_focus_service] = lambda: focus
    app.dependency_overrides[deps.get_dashboard_service] = lambda: dashboard

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
