"""
Local wall-clock datetime utilities.

Scheduling works on local calendar days and minutes of day. Naive datetimes
are taken as local wall time; aware datetimes are converted into the
configured zone (or the host zone) first.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from planflow.models.enums import CalendarView


def to_local(value: datetime, timezone: str = "") -> datetime:
    """
    Return `value` as a naive local wall-clock datetime.

    Args:
        value: Naive (already local) or timezone-aware datetime
        timezone: IANA zone name; empty string means the host's local zone

    Returns:
        datetime: Naive datetime in local wall time
    """
    if value.tzinfo is None:
        return value
    zone = ZoneInfo(timezone) if timezone else None
    return value.astimezone(zone).replace(tzinfo=None)


def minute_of_day(value: datetime) -> int:
    """hour * 60 + minute of a (local) datetime."""
    return value.hour * 60 + value.minute


def at_minute(day: date, minutes: int) -> datetime:
    """Local datetime `minutes` after midnight of `day`."""
    return datetime.combine(day, time.min) + timedelta(minutes=minutes)


def parse_time_to_minutes(value: str) -> Optional[int]:
    """Parse "HH:MM" into minutes of day, or None when malformed."""
    parts = value.split(":")
    if len(parts) != 2:
        return None
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None
    if hours == 24 and minutes == 0:
        return 24 * 60
    if hours < 0 or hours > 23 or minutes < 0 or minutes > 59:
        return None
    return hours * 60 + minutes


def start_of_week(day: date, week_start: int = 6) -> date:
    """
    First day of the week containing `day`.

    `week_start` uses `date.weekday()` numbering (Monday=0, Sunday=6).
    """
    offset = (day.weekday() - week_start) % 7
    return day - timedelta(days=offset)


def build_horizon(view: CalendarView, anchor: date, week_start: int = 6) -> list[date]:
    """
    Days considered by an auto-schedule run for the active calendar view.

    DAY schedules only the anchor day. WEEK and MONTH both use the 7-day week
    containing the anchor.
    """
    if view == CalendarView.DAY:
        return [anchor]
    first = start_of_week(anchor, week_start)
    return [first + timedelta(days=offset) for offset in range(7)]


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def visible_days(view: CalendarView, anchor: date, week_start: int = 6) -> list[date]:
    """
    Days rendered by a calendar view.

    Same as the scheduling horizon for DAY and WEEK; MONTH shows every day
    of the anchor's month.
    """
    if view != CalendarView.MONTH:
        return build_horizon(view, anchor, week_start)
    first = anchor.replace(day=1)
    days = calendar.monthrange(anchor.year, anchor.month)[1]
    return [first + timedelta(days=offset) for offset in range(days)]
