"""Dashboard API endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Query

from planflow.api.deps import Dashboard
from planflow.models.enums import DateRange
from planflow.models.focus import AgentAnalysisResponse, AnalyzeRequest, DashboardSummary

router = APIRouter()


@router.get("/summary", response_model=DashboardSummary)
async def get_summary(
    dashboard: Dashboard,
    range: DateRange = Query(DateRange.SEVEN_DAYS),
    custom_start: Optional[date] = Query(None),
    custom_end: Optional[date] = Query(None),
):
    """Focus metrics for a date range."""
    return await dashboard.summary(range, custom_start=custom_start, custom_end=custom_end)


@router.post("/analyze", response_model=AgentAnalysisResponse)
async def analyze(request: AnalyzeRequest, dashboard: Dashboard):
    """Ask the analyst agent a question about the selected range."""
    return await dashboard.analyze(
        request.question,
        request.range,
        custom_start=request.custom_start,
        custom_end=request.custom_end,
    )
