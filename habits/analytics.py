"""
Weekly Progress Engine
Aggregates per-day habit logs into weekly, daily and pacing metrics.

All functions here are pure: they read only their arguments, never the clock
or the database, and return freshly built frozen structures. The viewed week's
"today" is passed in explicitly as (today_index, is_current_week).

Percent convention (used everywhere a percentage is shown):
    pct = min(100, round_half_up(actual / target * 100)), or 0 when target is 0
"""
import logging
import math
from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Sequence, Tuple

from habits.schemas import HabitWithWeekLog
from habits.utils.constants import DAYS_PER_WEEK, DAY_NAMES_SHORT

logger = logging.getLogger(__name__)

# Heatmap colour intensity saturates at 150% of target
HEATMAP_RATIO_CAP = 1.5


# ====================================================================
# METRIC STRUCTURES
# ====================================================================

@dataclass(frozen=True)
class HabitProgress:
    habit_id: str
    habit_name: str
    weekly_target: float       # target_hours_per_day * 7
    weekly_actual: float       # sum of the 7 actual hours
    weekly_pct: int            # capped at 100
    today_target: float
    today_actual: float
    today_pct: int


@dataclass(frozen=True)
class DailyProgress:
    day_index: int
    day_name: str
    target: float              # sum of every habit's daily target
    actual: float              # sum of every habit's actual hours that day
    pct: int


@dataclass(frozen=True)
class WeeklyOverview:
    total_target_week: float
    total_actual_week: float
    overall_weekly_pct: int
    today_target: float
    today_actual: float
    today_pct: int
    hours_completed: float
    hours_remaining: float     # target - actual, floored at 0
    days_elapsed: int
    expected_hours_to_date: float
    actual_hours_to_date: float
    pl_delta: float            # hours ahead (+) or behind (-) expected pace
    pl_delta_pct: int
    is_ahead: bool
    habit_progress: Tuple[HabitProgress, ...]
    daily_progress: Tuple[DailyProgress, ...]

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class HeatmapCell:
    habit_id: str
    habit_name: str
    day_index: int
    ratio: float               # uncapped actual / target
    intensity: float           # ratio capped at HEATMAP_RATIO_CAP
    actual_hours: float
    target_hours: float
    checked: bool
    is_today: bool
    is_future: bool


@dataclass(frozen=True)
class Candle:
    day_index: int
    day_name: str
    open: int
    close: int
    high: int
    low: int
    pct: int
    is_bullish: bool
    is_future: bool
    is_today: bool


# ====================================================================
# HELPERS
# ====================================================================

def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def capped_pct(actual: float, target: float) -> int:
    """Display percentage: capped at 100, and 0 when there is no target."""
    if target <= 0:
        return 0
    return min(100, round_half_up(actual / target * 100))


def raw_ratio(actual: float, target: float) -> float:
    """Uncapped actual/target ratio, 0 when there is no target."""
    if target <= 0:
        return 0.0
    return actual / target


def elapsed_day_count(today_index: int, is_current_week: bool) -> int:
    """Days of the viewed week that have started. A past week is fully elapsed."""
    return today_index + 1 if is_current_week else DAYS_PER_WEEK


# ====================================================================
# CORE METRICS
# ====================================================================

def calculate_weekly_progress(
    habits_with_logs: Sequence[HabitWithWeekLog],
    today_index: int,
    is_current_week: bool,
) -> WeeklyOverview:
    """
    Calculate per-habit, per-day and whole-week progress for one week.

    Args:
        habits_with_logs: Habit+log pairings for the viewed week. A pairing
            without a log counts as an all-zero week.
        today_index: Day index of today (0=Mon .. 6=Sun)
        is_current_week: Whether the viewed week contains today

    Returns:
        WeeklyOverview (never raises; zero habits yields all zeros)
    """
    day_targets = [0.0] * DAYS_PER_WEEK
    day_actuals = [0.0] * DAYS_PER_WEEK
    habit_progress: List[HabitProgress] = []

    total_target_week = 0.0
    total_actual_week = 0.0
    today_target = 0.0
    today_actual = 0.0

    for pairing in habits_with_logs:
        habit = pairing.habit
        log = pairing.log
        daily_target = habit.target_hours_per_day

        weekly_target = daily_target * DAYS_PER_WEEK
        weekly_actual = sum(log.actual_hours(i) for i in range(DAYS_PER_WEEK))
        habit_today_actual = log.actual_hours(today_index)

        habit_progress.append(HabitProgress(
            habit_id=habit.id,
            habit_name=habit.name,
            weekly_target=weekly_target,
            weekly_actual=weekly_actual,
            weekly_pct=capped_pct(weekly_actual, weekly_target),
            today_target=daily_target,
            today_actual=habit_today_actual,
            today_pct=capped_pct(habit_today_actual, daily_target),
        ))

        for i in range(DAYS_PER_WEEK):
            day_targets[i] += daily_target
            day_actuals[i] += log.actual_hours(i)

        total_target_week += weekly_target
        total_actual_week += weekly_actual
        today_target += daily_target
        today_actual += habit_today_actual

    daily_progress = tuple(
        DailyProgress(
            day_index=i,
            day_name=DAY_NAMES_SHORT[i],
            target=day_targets[i],
            actual=day_actuals[i],
            pct=capped_pct(day_actuals[i], day_targets[i]),
        )
        for i in range(DAYS_PER_WEEK)
    )

    # Pacing: expected = weekly target spread evenly over the elapsed days
    days_elapsed = elapsed_day_count(today_index, is_current_week)
    expected_hours = (total_target_week / DAYS_PER_WEEK) * days_elapsed
    if is_current_week:
        actual_to_date = sum(day.actual for day in daily_progress[:today_index + 1])
    else:
        actual_to_date = total_actual_week

    pl_delta = actual_to_date - expected_hours
    pl_delta_pct = round_half_up(pl_delta / expected_hours * 100) if expected_hours > 0 else 0

    logger.debug(
        "Weekly progress computed for %d habits (today=%d, current=%s)",
        len(habit_progress), today_index, is_current_week,
    )

    return WeeklyOverview(
        total_target_week=total_target_week,
        total_actual_week=total_actual_week,
        overall_weekly_pct=capped_pct(total_actual_week, total_target_week),
        today_target=today_target,
        today_actual=today_actual,
        today_pct=capped_pct(today_actual, today_target),
        hours_completed=total_actual_week,
        hours_remaining=max(0.0, total_target_week - total_actual_week),
        days_elapsed=days_elapsed,
        expected_hours_to_date=expected_hours,
        actual_hours_to_date=actual_to_date,
        pl_delta=pl_delta,
        pl_delta_pct=pl_delta_pct,
        is_ahead=pl_delta >= 0,
        habit_progress=tuple(habit_progress),
        daily_progress=daily_progress,
    )


# ====================================================================
# PRESENTATION DERIVATIONS
# ====================================================================

def build_heatmap(
    habits_with_logs: Sequence[HabitWithWeekLog],
    today_index: int,
    is_current_week: bool,
) -> List[List[HeatmapCell]]:
    """
    Per-habit rows of per-day cells. Each cell keeps the uncapped ratio next
    to the capped intensity used for colouring, both taken from the same
    actual/target pair.
    """
    rows = []
    for pairing in habits_with_logs:
        habit = pairing.habit
        log = pairing.log
        row = []
        for day_index in range(DAYS_PER_WEEK):
            actual = log.actual_hours(day_index)
            ratio = raw_ratio(actual, habit.target_hours_per_day)
            row.append(HeatmapCell(
                habit_id=habit.id,
                habit_name=habit.name,
                day_index=day_index,
                ratio=ratio,
                intensity=min(HEATMAP_RATIO_CAP, ratio),
                actual_hours=actual,
                target_hours=habit.target_hours_per_day,
                checked=log.is_checked(day_index),
                is_today=is_current_week and day_index == today_index,
                is_future=is_current_week and day_index > today_index,
            ))
        rows.append(row)
    return rows


def build_candles(
    daily_progress: Sequence[DailyProgress],
    today_index: int,
    is_current_week: bool,
) -> List[Candle]:
    """Day-over-day candles: open at the previous day's pct (0 on Monday), close at today's."""
    candles = []
    for index, day in enumerate(daily_progress):
        prev_pct = daily_progress[index - 1].pct if index > 0 else 0
        candles.append(Candle(
            day_index=day.day_index,
            day_name=day.day_name,
            open=prev_pct,
            close=day.pct,
            high=max(prev_pct, day.pct),
            low=min(prev_pct, day.pct),
            pct=day.pct,
            is_bullish=day.pct >= prev_pct,
            is_future=is_current_week and index > today_index,
            is_today=is_current_week and index == today_index,
        ))
    return candles


# UI letter grades. The export summary uses its own, coarser table.
UI_GRADE_THRESHOLDS = [
    (95, 'A+'),
    (90, 'A'),
    (85, 'A-'),
    (80, 'B+'),
    (75, 'B'),
    (70, 'B-'),
    (65, 'C+'),
    (60, 'C'),
    (55, 'C-'),
    (50, 'D'),
]


def get_grade(pct: float) -> str:
    """Dashboard letter grade for a completion percentage."""
    for threshold, grade in UI_GRADE_THRESHOLDS:
        if pct >= threshold:
            return grade
    return 'F'


def format_hours_short(hours: float) -> str:
    """10.5 -> '10.5h'"""
    return f"{format_fixed(hours)}h"


def format_pl_delta(delta: float) -> str:
    """2.5 -> '+2.5h', -1 -> '-1.0h'"""
    sign = '+' if delta >= 0 else ''
    return f"{sign}{format_fixed(delta)}h"


def format_fixed(value: float, digits: int = 1) -> str:
    """
    Fixed-point formatting with halves rounded away from zero on the exact
    binary value (0.25 -> '0.3'), unlike str.format's half-even.
    """
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def format_number(value: float) -> str:
    """
    Shortest round-trip rendering with integral values printed without a
    fraction: 2.0 -> '2', 0.5 -> '0.5', 0.1 + 0.2 -> '0.30000000000000004'.
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)
