"""
Dashboard Service aggregating focus history into productivity metrics.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional, Sequence

from planflow.interfaces.focus_session_repository import IFocusSessionRepository
from planflow.models.enums import DateRange
from planflow.models.focus import AgentAnalysisResponse, ChartPoint, DashboardSummary, FocusSession
from planflow.services.ai_service import AIService, ANALYSIS_FALLBACK
from planflow.utils.datetime_utils import start_of_day


def range_bounds(
    date_range: DateRange,
    now: datetime,
    custom_start: Optional[date] = None,
    custom_end: Optional[date] = None,
) -> Optional[tuple[datetime, datetime]]:
    """
    Inclusive [start, end] window of a dashboard range.

    7D covers today and the six days before it; MONTH and YEAR run from the
    first day of the current month/year until `now`. CUSTOM spans whole days
    and defaults its end to the start day. Returns None for a CUSTOM range
    without a start.
    """
    if date_range == DateRange.SEVEN_DAYS:
        return start_of_day(now) - timedelta(days=6), now
    if date_range == DateRange.MONTH:
        return datetime(now.year, now.month, 1), now
    if date_range == DateRange.YEAR:
        return datetime(now.year, 1, 1), now

    if custom_start is None:
        return None
    last_day = custom_end or custom_start
    return datetime.combine(custom_start, time.min), datetime.combine(last_day, time.max)


def filter_sessions(
    sessions: Sequence[FocusSession], start: datetime, end: datetime
) -> list[FocusSession]:
    """Sessions that started inside [start, end], oldest first."""
    selected = [s for s in sessions if start <= s.start_time <= end]
    return sorted(selected, key=lambda s: s.start_time)


def _bucket(value: datetime, by_month: bool) -> tuple[int, ...]:
    if by_month:
        return (value.year, value.month)
    return (value.year, value.month, value.day)


def _label(key: tuple[int, ...]) -> str:
    if len(key) == 2:
        return date(key[0], key[1], 1).strftime("%b")
    day = date(*key)
    return f"{day:%b} {day.day}"


def efficiency_series(
    sessions: Sequence[FocusSession], date_range: DateRange, now: datetime
) -> list[ChartPoint]:
    """
    Focus minutes per day (per month for YEAR) in chronological order.

    7D and YEAR are prefilled with zeros so that empty days/months still
    show up; MONTH and CUSTOM only contain buckets that have sessions.
    """
    by_month = date_range == DateRange.YEAR
    totals: dict[tuple[int, ...], int] = {}

    if date_range == DateRange.SEVEN_DAYS:
        for offset in range(6, -1, -1):
            totals[_bucket(now - timedelta(days=offset), False)] = 0
    elif date_range == DateRange.YEAR:
        for month in range(1, 13):
            totals[(now.year, month)] = 0

    for session in sessions:
        key = _bucket(session.start_time, by_month)
        totals[key] = totals.get(key, 0) + session.actual_duration_minutes

    return [ChartPoint(name=_label(key), value=totals[key]) for key in sorted(totals)]


def summarize(
    sessions: Sequence[FocusSession],
    date_range: DateRange,
    now: datetime,
    custom_start: Optional[date] = None,
    custom_end: Optional[date] = None,
) -> DashboardSummary:
    """Compute all dashboard metrics for one range."""
    bounds = range_bounds(date_range, now, custom_start, custom_end)
    if bounds is None:
        return DashboardSummary(range=date_range)

    start, end = bounds
    selected = filter_sessions(sessions, start, end)
    total_minutes = sum(s.actual_duration_minutes for s in selected)
    completed = sum(1 for s in selected if s.completed)

    distractions: dict[str, int] = {}
    for session in selected:
        if not session.completed and session.interruption_reason:
            reason = session.interruption_reason
            distractions[reason] = distractions.get(reason, 0) + 1
    top = max(distractions, key=distractions.get) if distractions else None

    return DashboardSummary(
        range=date_range,
        start=start,
        end=end,
        total_focus_minutes=total_minutes,
        focus_hours=total_minutes // 60,
        focus_minutes=total_minutes % 60,
        total_sessions=len(selected),
        completed_sessions=completed,
        completion_rate=int(completed / len(selected) * 100 + 0.5) if selected else 0,
        distraction_counts=distractions,
        top_distraction=top,
        efficiency=efficiency_series(selected, date_range, now),
    )


class DashboardService:
    """Service for productivity metrics and the analyst agent."""

    def __init__(
        self,
        session_repo: IFocusSessionRepository,
        ai_service: Optional[AIService] = None,
    ):
        self._session_repo = session_repo
        self._ai_service = ai_service

    async def summary(
        self,
        date_range: DateRange = DateRange.SEVEN_DAYS,
        now: Optional[datetime] = None,
        custom_start: Optional[date] = None,
        custom_end: Optional[date] = None,
    ) -> DashboardSummary:
        sessions = await self._session_repo.list()
        return summarize(sessions, date_range, now or datetime.now(), custom_start, custom_end)

    async def analyze(
        self,
        question: str,
        date_range: DateRange = DateRange.SEVEN_DAYS,
        now: Optional[datetime] = None,
        custom_start: Optional[date] = None,
        custom_end: Optional[date] = None,
    ) -> AgentAnalysisResponse:
        """Ask the analyst agent about the sessions of one range."""
        if self._ai_service is None:
            return AgentAnalysisResponse(text=ANALYSIS_FALLBACK)

        sessions = await self._session_repo.list()
        bounds = range_bounds(date_range, now or datetime.now(), custom_start, custom_end)
        selected = filter_sessions(sessions, *bounds) if bounds else []
        return await self._ai_service.analyze_productivity_data(selected, question)
