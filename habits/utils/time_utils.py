"""
Calendar and ISO-week utilities for the habit ledger.

Weeks are Monday-start ISO weeks identified as 'YYYY-Www' (e.g. '2026-W07');
week 1 is the week containing the year's first Thursday. Day indices run
Monday=0 .. Sunday=6.

Everything here is a pure function of its arguments. The only place that
turns a wall-clock "today" into the explicit (today_index, is_current_week)
pair consumed by the analytics core is `resolve_week_context`.
"""
import re
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

import pytz
from django.utils import timezone

from habits.exceptions import InvalidWeekIdError
from habits.utils.constants import DAYS_PER_WEEK, MONTH_NAMES_SHORT

WEEK_ID_PATTERN = re.compile(r'^(\d{4})-W(\d{2})$')


def get_week_id(target_date: date) -> str:
    """
    Get the ISO week id for a date.

    Examples:
        >>> get_week_id(date(2026, 2, 16))
        '2026-W08'
        >>> get_week_id(date(2027, 1, 1))  # Friday, still in 2026's last week
        '2026-W53'
    """
    iso_year, iso_week, _ = target_date.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def weeks_in_year(year: int) -> int:
    """Number of ISO weeks in a year (52 or 53). Dec 28 is always in the last week."""
    return date(year, 12, 28).isocalendar()[1]


def parse_week_id(week_id: str) -> Tuple[int, int]:
    """
    Parse a week id back to (year, week).

    Raises:
        InvalidWeekIdError: If the format is wrong or the year has no such week
    """
    match = WEEK_ID_PATTERN.match(week_id or '')
    if not match:
        raise InvalidWeekIdError(week_id)

    year, week = int(match.group(1)), int(match.group(2))
    if week < 1 or week > weeks_in_year(year):
        raise InvalidWeekIdError(week_id)
    return year, week


def get_first_day_of_week(year: int, week: int) -> date:
    """Get the Monday of a given ISO week."""
    return date.fromisocalendar(year, week, 1)


def get_week_dates(week_id: str) -> List[date]:
    """Get all seven dates (Mon..Sun) of a week."""
    monday = get_first_day_of_week(*parse_week_id(week_id))
    return [monday + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def get_day_index(target_date: date) -> int:
    """Day index within the ISO week (Monday=0, Sunday=6)."""
    return target_date.weekday()


def get_previous_week_id(week_id: str) -> str:
    """Week id of the week before `week_id` (crosses year boundaries)."""
    monday = get_first_day_of_week(*parse_week_id(week_id))
    return get_week_id(monday - timedelta(days=7))


def get_next_week_id(week_id: str) -> str:
    """Week id of the week after `week_id` (crosses year boundaries)."""
    monday = get_first_day_of_week(*parse_week_id(week_id))
    return get_week_id(monday + timedelta(days=7))


def get_week_label(week_id: str) -> str:
    """Label like 'Week 07 — Feb 2026' (month of the week's Monday)."""
    year, week = parse_week_id(week_id)
    monday = get_first_day_of_week(year, week)
    return f"Week {week:02d} — {MONTH_NAMES_SHORT[monday.month - 1]} {year}"


def get_short_week_label(week_id: str) -> str:
    """Short label like 'W07 2026' for pickers."""
    year, week = parse_week_id(week_id)
    return f"W{week:02d} {year}"


def get_week_range_label(week_id: str) -> str:
    """
    Date range label for a week.

    Examples:
        'Feb 16 - 22, 2026'
        'Dec 29 - Jan 4, 2026'
    """
    dates = get_week_dates(week_id)
    first_day, last_day = dates[0], dates[-1]
    first_month = MONTH_NAMES_SHORT[first_day.month - 1]
    last_month = MONTH_NAMES_SHORT[last_day.month - 1]

    if first_month == last_month:
        return f"{first_month} {first_day.day} - {last_day.day}, {last_day.year}"
    return f"{first_month} {first_day.day} - {last_month} {last_day.day}, {last_day.year}"


def get_week_id_list(reference_date: date, past_weeks: int = 12, future_weeks: int = 4) -> List[str]:
    """
    Week ids for navigation: `past_weeks` before the reference week, the
    reference week itself, then `future_weeks` after it.
    """
    current = get_week_id(reference_date)

    past = []
    week_id = current
    for _ in range(past_weeks):
        week_id = get_previous_week_id(week_id)
        past.insert(0, week_id)

    future = []
    week_id = current
    for _ in range(future_weeks):
        week_id = get_next_week_id(week_id)
        future.append(week_id)

    return past + [current] + future


def is_current_week(week_id: str, today: date) -> bool:
    """Check whether `week_id` is the week containing `today`."""
    return week_id == get_week_id(today)


def resolve_week_context(week_id: str, today: date) -> Tuple[int, bool]:
    """
    Turn a viewed week plus a calendar 'today' into the explicit parameters of
    the analytics core.

    Returns:
        (today_index, is_current_week)
    """
    parse_week_id(week_id)
    return get_day_index(today), is_current_week(week_id, today)


def get_user_today(user_timezone: str, now: Optional[datetime] = None) -> date:
    """
    Get 'today' in the user's timezone.

    The user's local date decides which day index counts as today, so this is
    resolved once at the service boundary and passed down explicitly.

    Args:
        user_timezone: IANA timezone string (e.g., 'America/New_York')
        now: Aware datetime to use instead of the current time

    Returns:
        date: Today's date in the user's timezone (UTC for unknown zones)
    """
    now = now or timezone.now()
    if timezone.is_naive(now):
        now = pytz.UTC.localize(now)

    try:
        tz = pytz.timezone(user_timezone)
    except pytz.UnknownTimeZoneError:
        tz = pytz.UTC
    return now.astimezone(tz).date()


def format_hours(hours: float) -> str:
    """
    Format hours for display.

    Examples:
        >>> format_hours(1.5)
        '1h 30m'
        >>> format_hours(0.5)
        '30m'
        >>> format_hours(0)
        '0m'
    """
    if hours == 0:
        return '0m'

    whole = int(hours // 1)
    minutes = int((hours - whole) * 60 + 0.5)
    if minutes == 60:
        whole, minutes = whole + 1, 0

    if whole == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{whole}h"
    return f"{whole}h {minutes}m"


def create_empty_week_log(habit_id: str, week_id: Optional[str] = None, updated_at: Optional[datetime] = None):
    """
    Build an all-zero week log for a habit. Absence of a stored log is
    equivalent to this value.
    """
    from habits.schemas import DailyLog, WeekLog

    return WeekLog(
        week_id=week_id or '',
        habit_id=habit_id,
        daily=[DailyLog(day_index=i, checked=False, actual_hours=0.0) for i in range(DAYS_PER_WEEK)],
        updated_at=updated_at,
    )
