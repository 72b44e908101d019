"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that wire the in-memory
repositories, providers and services. Each getter is cached so the whole
process shares one store, one timer and one auto-schedule gate.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from planflow.core.config import get_settings
from planflow.interfaces.calendar_provider import ICalendarProvider
from planflow.interfaces.focus_session_repository import IFocusSessionRepository
from planflow.interfaces.llm_provider import ILLMProvider
from planflow.interfaces.project_repository import IProjectRepository
from planflow.models.enums import CalendarProviderType
from planflow.services.ai_service import AIService
from planflow.services.calendar_service import CalendarService
from planflow.services.dashboard_service import DashboardService
from planflow.services.focus_service import FocusService
from planflow.services.planner_service import PlannerService


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_project_repository() -> IProjectRepository:
    """Get project repository instance."""
    from planflow.infrastructure.local.project_repository import InMemoryProjectRepository

    return InMemoryProjectRepository()


@lru_cache()
def get_focus_session_repository() -> IFocusSessionRepository:
    """Get focus session repository instance."""
    from planflow.infrastructure.local.focus_session_repository import (
        InMemoryFocusSessionRepository,
    )

    return InMemoryFocusSessionRepository()


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def get_llm_provider() -> ILLMProvider:
    """Get LLM provider instance."""
    from planflow.infrastructure.local.gemini_api_provider import GeminiAPIProvider

    return GeminiAPIProvider(get_settings().GEMINI_MODEL)


@lru_cache()
def get_calendar_providers() -> dict[CalendarProviderType, ICalendarProvider]:
    """Get one mocked provider per supported calendar."""
    from planflow.infrastructure.local.calendar_provider import MockCalendarProvider

    latency = get_settings().CALENDAR_CONNECT_LATENCY_MS
    return {
        provider_type: MockCalendarProvider(provider_type, latency_ms=latency)
        for provider_type in CalendarProviderType
    }


# ===========================================
# Service Dependencies
# ===========================================


@lru_cache()
def get_ai_service() -> AIService:
    return AIService(get_llm_provider())


@lru_cache()
def get_planner_service() -> PlannerService:
    return PlannerService(get_project_repository(), get_ai_service())


@lru_cache()
def get_calendar_service() -> CalendarService:
    return CalendarService(get_project_repository(), get_calendar_providers())


@lru_cache()
def get_focus_service() -> FocusService:
    return FocusService(
        get_project_repository(), get_focus_session_repository(), get_ai_service()
    )


@lru_cache()
def get_dashboard_service() -> DashboardService:
    return DashboardService(get_focus_session_repository(), get_ai_service())


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

AI = Annotated[AIService, Depends(get_ai_service)]
Planner = Annotated[PlannerService, Depends(get_planner_service)]
Calendar = Annotated[CalendarService, Depends(get_calendar_service)]
Focus = Annotated[FocusService, Depends(get_focus_service)]
Dashboard = Annotated[DashboardService, Depends(get_dashboard_service)]
