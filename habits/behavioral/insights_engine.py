"""
Behavioral Insights Engine

Rule-based coaching insights computed from one week of progress metrics.

No AI/ML - purely deterministic rules. Each rule is a stateless function
`rule(metrics, pairings, context) -> List[InsightDraft]`; the engine applies
them in declared order, numbers the drafts with a counter local to the call,
and stable-sorts the pooled result by priority (5 = most urgent first).
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from habits.analytics import (
    DailyProgress,
    HabitProgress,
    calculate_weekly_progress,
    format_fixed,
    format_number,
    round_half_up,
)
from habits.schemas import HabitWithWeekLog
from habits.utils.constants import DAY_NAMES_FULL, DAY_NAMES_SHORT, DAYS_PER_WEEK


class InsightTag(Enum):
    """Closed set of insight categories"""
    RISK = "RISK"
    ALPHA = "ALPHA"
    DISCIPLINE = "DISCIPLINE"
    RECOVERY = "RECOVERY"


@dataclass
class Insight:
    """
    A generated coaching message.

    Attributes:
        id: 'insight-N', unique within one generation run
        tag: Category (InsightTag)
        title: Short headline
        message: Coaching text, may embed computed numbers
        priority: 1-5, higher is more urgent
        habit_id: Habit the insight concerns, if any
        timestamp: When the batch was generated
    """
    id: str
    tag: InsightTag
    title: str
    message: str
    priority: int
    habit_id: Optional[str] = None
    timestamp: Optional[datetime] = None

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'tag': self.tag.value,
            'title': self.title,
            'message': self.message,
            'priority': self.priority,
            'habit_id': self.habit_id,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass(frozen=True)
class InsightDraft:
    """What a rule emits; the engine turns drafts into numbered Insights."""
    tag: InsightTag
    title: str
    message: str
    priority: int
    habit_id: Optional[str] = None


@dataclass(frozen=True)
class RuleMetrics:
    habit_progress: Sequence[HabitProgress]
    daily_progress: Sequence[DailyProgress]


@dataclass(frozen=True)
class RuleContext:
    today_index: int
    is_current_week: bool

    @property
    def last_day(self) -> int:
        """Last day index that has started in the viewed week."""
        return self.today_index if self.is_current_week else DAYS_PER_WEEK - 1


InsightRule = Callable[[RuleMetrics, Sequence[HabitWithWeekLog], RuleContext], List[InsightDraft]]


# =============================================================================
# HELPERS
# =============================================================================

def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def _habit_rows(metrics: RuleMetrics, pairings: Sequence[HabitWithWeekLog]):
    """
    Yield (progress, pairing) for each habit metric whose source pairing is
    present. Metrics without a pairing are skipped.
    """
    by_id = {}
    for pairing in pairings:
        by_id.setdefault(pairing.habit.id, pairing)
    for hp in metrics.habit_progress:
        pairing = by_id.get(hp.habit_id)
        if pairing is not None:
            yield hp, pairing


def _elapsed_days(metrics: RuleMetrics, context: RuleContext) -> Sequence[DailyProgress]:
    return list(metrics.daily_progress)[:context.last_day + 1]


# =============================================================================
# PER-HABIT RULES
# =============================================================================

def discipline_leak_rule(metrics, pairings, context) -> List[InsightDraft]:
    """Habit under 60% with elapsed days below half of the daily target."""
    drafts = []
    for hp, pairing in _habit_rows(metrics, pairings):
        if hp.weekly_pct >= 60:
            continue

        habit, log = pairing.habit, pairing.log
        missed = [
            DAY_NAMES_SHORT[i]
            for i in range(context.last_day + 1)
            if log.actual_hours(i) < habit.target_hours_per_day * 0.5
        ]
        if missed:
            drafts.append(InsightDraft(
                tag=InsightTag.DISCIPLINE,
                title=f"{habit.name} Underperforming",
                message=(
                    f"Discipline leak: {habit.name} missed {_plural(len(missed), 'day')} "
                    f"({', '.join(missed)})."
                ),
                priority=4,
                habit_id=hp.habit_id,
            ))
    return drafts


def under_executed_rule(metrics, pairings, context) -> List[InsightDraft]:
    """Days marked done but executed well below target on average."""
    drafts = []
    for hp, pairing in _habit_rows(metrics, pairings):
        habit, log = pairing.habit, pairing.log
        checked_hours = [
            log.actual_hours(i)
            for i in range(context.last_day + 1)
            if log.is_checked(i)
        ]
        if len(checked_hours) < 2:
            continue

        avg_actual = float(np.mean(checked_hours))
        target = habit.target_hours_per_day
        execution_ratio = avg_actual / target if target > 0 else 0

        if 0 < execution_ratio < 0.7:
            drafts.append(InsightDraft(
                tag=InsightTag.RISK,
                title=f"{habit.name} Under-Executed",
                message=(
                    f"Under-executed: avg {format_fixed(avg_actual)}/{format_number(target)}h target. "
                    f"Marking complete without full execution."
                ),
                priority=3,
                habit_id=hp.habit_id,
            ))
    return drafts


def recovery_plan_rule(metrics, pairings, context) -> List[InsightDraft]:
    """Hours per remaining day needed to reach 80% of the weekly target."""
    if not context.is_current_week:
        return []

    days_remaining = 6 - context.today_index
    if days_remaining <= 0:
        return []

    drafts = []
    for hp, pairing in _habit_rows(metrics, pairings):
        if hp.weekly_pct >= 80:
            continue

        target_80 = hp.weekly_target * 0.8
        remaining = max(0, target_80 - hp.weekly_actual)
        if remaining > 0:
            per_day = remaining / days_remaining
            drafts.append(InsightDraft(
                tag=InsightTag.RECOVERY,
                title=f"{pairing.habit.name} Recovery Plan",
                message=(
                    f"To reach 80% by Sunday, you need {format_fixed(remaining)}h "
                    f"(~{format_fixed(per_day)}h/day for {days_remaining} remaining days)."
                ),
                priority=2,
                habit_id=hp.habit_id,
            ))
    return drafts


def target_hit_rule(metrics, pairings, context) -> List[InsightDraft]:
    drafts = []
    for hp, pairing in _habit_rows(metrics, pairings):
        if hp.weekly_pct >= 100:
            name = pairing.habit.name
            drafts.append(InsightDraft(
                tag=InsightTag.ALPHA,
                title=f"{name} Target Hit!",
                message=f"Strong execution: {name} at {hp.weekly_pct}% of weekly target. Keep the momentum!",
                priority=1,
                habit_id=hp.habit_id,
            ))
    return drafts


# =============================================================================
# WEEK-LEVEL RULES
# =============================================================================

def performer_spread_rule(metrics, pairings, context) -> List[InsightDraft]:
    """Name the best habit, and the worst one when it is below 50%."""
    if len(metrics.habit_progress) < 2:
        return []

    ranked = sorted(metrics.habit_progress, key=lambda hp: -hp.weekly_pct)
    best, worst = ranked[0], ranked[-1]
    if best.weekly_pct <= worst.weekly_pct:
        return []

    drafts = [InsightDraft(
        tag=InsightTag.ALPHA,
        title="Top Performer",
        message=f'Best habit: "{best.habit_name}" at {best.weekly_pct}%. This is your strength, leverage it.',
        priority=1,
    )]
    if worst.weekly_pct < 50:
        drafts.append(InsightDraft(
            tag=InsightTag.RISK,
            title="Weakest Position",
            message=(
                f'Worst habit: "{worst.habit_name}" at {worst.weekly_pct}%. '
                f'Consider reducing scope or re-prioritizing.'
            ),
            priority=4,
        ))
    return drafts


def weak_day_rule(metrics, pairings, context) -> List[InsightDraft]:
    days = _elapsed_days(metrics, context)
    if len(days) < 2:
        return []

    worst_day = min(days, key=lambda d: d.pct)
    if worst_day.pct >= 50:
        return []
    return [InsightDraft(
        tag=InsightTag.DISCIPLINE,
        title="Weak Day Identified",
        message=(
            f"Most missed day: {DAY_NAMES_FULL[worst_day.day_index]} at {worst_day.pct}%. "
            f"Schedule lighter or block focus time."
        ),
        priority=3,
    )]


def streak_break_rule(metrics, pairings, context) -> List[InsightDraft]:
    """A day under 40% straight after a day at 70% or better breaks momentum."""
    days = _elapsed_days(metrics, context)
    broken = [
        DAY_NAMES_SHORT[day.day_index]
        for prev, day in zip(days, days[1:])
        if prev.pct >= 70 and day.pct < 40
    ]
    if not broken:
        return []
    return [InsightDraft(
        tag=InsightTag.DISCIPLINE,
        title="Streak Broken",
        message=(
            f"Consistency alert: You broke momentum on {', '.join(broken)}. "
            f"Address root cause to prevent pattern."
        ),
        priority=4,
    )]


def monthly_projection_rule(metrics, pairings, context) -> List[InsightDraft]:
    """Extrapolate the elapsed-days completion ratio; 70-89% is a quiet band."""
    days = _elapsed_days(metrics, context)
    total_actual = sum(d.actual for d in days)
    total_target = sum(d.target for d in days)

    if len(days) < 3 or total_target <= 0:
        return []

    projected = min(100, round_half_up(total_actual / total_target * 100))
    if projected < 70:
        return [InsightDraft(
            tag=InsightTag.RISK,
            title="Monthly Projection",
            message=f"If you repeat this pattern, monthly consistency will be ~{projected}%. Course correct now.",
            priority=5,
        )]
    if projected >= 90:
        return [InsightDraft(
            tag=InsightTag.ALPHA,
            title="Strong Trajectory",
            message=f"Projected monthly consistency: ~{projected}%. Elite-level discipline, maintain this edge.",
            priority=1,
        )]
    return []


def perfect_days_rule(metrics, pairings, context) -> List[InsightDraft]:
    perfect = [d for d in _elapsed_days(metrics, context) if d.pct >= 100]
    if len(perfect) < 3:
        return []
    return [InsightDraft(
        tag=InsightTag.ALPHA,
        title="Winning Streak",
        message=f"{len(perfect)} perfect days this week! You're operating at peak performance.",
        priority=1,
    )]


def today_rule(metrics, pairings, context) -> List[InsightDraft]:
    if not context.is_current_week:
        return []
    if not 0 <= context.today_index < len(metrics.daily_progress):
        return []

    today = metrics.daily_progress[context.today_index]
    if today.pct == 0 and today.target > 0:
        return [InsightDraft(
            tag=InsightTag.DISCIPLINE,
            title="Day Not Started",
            message=f"Today's target: {format_fixed(today.target)}h. Market is open, start executing!",
            priority=5,
        )]
    if 50 <= today.pct < 100:
        remaining = today.target - today.actual
        return [InsightDraft(
            tag=InsightTag.RECOVERY,
            title="Close the Day Strong",
            message=f"{format_fixed(remaining)}h remaining today. You're {today.pct}% done, push to 100%.",
            priority=3,
        )]
    if today.pct >= 100:
        return [InsightDraft(
            tag=InsightTag.ALPHA,
            title="Today Complete!",
            message=(
                f"Daily target achieved! {format_fixed(today.actual)}/{format_fixed(today.target)}h executed. "
                f"Book the profit."
            ),
            priority=1,
        )]
    return []


# Applied in this order; ties in priority keep this order.
INSIGHT_RULES: List[InsightRule] = [
    discipline_leak_rule,
    under_executed_rule,
    recovery_plan_rule,
    target_hit_rule,
    performer_spread_rule,
    weak_day_rule,
    streak_break_rule,
    monthly_projection_rule,
    perfect_days_rule,
    today_rule,
]


# =============================================================================
# ENGINE
# =============================================================================

def generate_insights(
    habits_with_logs: Sequence[HabitWithWeekLog],
    habit_progress: Sequence[HabitProgress],
    daily_progress: Sequence[DailyProgress],
    today_index: int,
    is_current_week: bool,
    generated_at: Optional[datetime] = None,
    rules: Optional[Sequence[InsightRule]] = None,
) -> List[Insight]:
    """
    Evaluate every rule and return the pooled insights, most urgent first.

    Args:
        habits_with_logs: Habit+log pairings for the viewed week
        habit_progress: Per-habit metrics from calculate_weekly_progress
        daily_progress: Per-day metrics from calculate_weekly_progress
        today_index: Day index of today (0=Mon .. 6=Sun)
        is_current_week: Whether the viewed week contains today
        generated_at: Timestamp stamped on every insight of this batch
        rules: Override the rule list (defaults to INSIGHT_RULES)

    Returns:
        List of Insight sorted by priority descending, stable on ties
    """
    metrics = RuleMetrics(habit_progress=habit_progress, daily_progress=daily_progress)
    context = RuleContext(today_index=today_index, is_current_week=is_current_week)

    insights: List[Insight] = []
    sequence = 0
    for rule in (INSIGHT_RULES if rules is None else rules):
        for draft in rule(metrics, habits_with_logs, context):
            sequence += 1
            insights.append(Insight(
                id=f"insight-{sequence}",
                tag=draft.tag,
                title=draft.title,
                message=draft.message,
                priority=draft.priority,
                habit_id=draft.habit_id,
                timestamp=generated_at,
            ))

    insights.sort(key=lambda insight: -insight.priority)
    return insights


def summarize_tags(insights: Sequence[Insight]) -> Dict[str, int]:
    """Count insights per tag; every tag is present."""
    counts = {tag.value: 0 for tag in InsightTag}
    for insight in insights:
        counts[insight.tag.value] += 1
    return counts


def get_top_insights(insights: Sequence[Insight], limit: int) -> List[Insight]:
    """Truncate an already sorted batch for display."""
    return list(insights[:max(0, limit)])


class InsightsEngine:
    """
    Generates coaching insights for one week of habit data.

    Example usage:
        engine = InsightsEngine(pairings, today_index=2, is_current_week=True)
        insights = engine.generate_insights()
        for insight in insights:
            print(f"[{insight.tag.value}] {insight.title}: {insight.message}")
    """

    def __init__(
        self,
        habits_with_logs: Sequence[HabitWithWeekLog],
        today_index: int,
        is_current_week: bool,
        generated_at: Optional[datetime] = None,
    ):
        self.habits_with_logs = list(habits_with_logs)
        self.today_index = today_index
        self.is_current_week = is_current_week
        self.generated_at = generated_at
        self.overview = calculate_weekly_progress(self.habits_with_logs, today_index, is_current_week)
        self.insights: List[Insight] = []

    def generate_insights(self) -> List[Insight]:
        self.insights = generate_insights(
            self.habits_with_logs,
            self.overview.habit_progress,
            self.overview.daily_progress,
            self.today_index,
            self.is_current_week,
            generated_at=self.generated_at,
        )
        return self.insights

    def to_dict(self) -> List[Dict]:
        """Convert insights to dictionary format for JSON serialization."""
        return [insight.to_dict() for insight in self.insights]


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def get_insights(
    habits_with_logs: Sequence[HabitWithWeekLog],
    today_index: int,
    is_current_week: bool,
    generated_at: Optional[datetime] = None,
) -> List[Dict]:
    """Generate insights for a week and return them as dictionaries."""
    engine = InsightsEngine(habits_with_logs, today_index, is_current_week, generated_at)
    engine.generate_insights()
    return engine.to_dict()


def get_top_insight(
    habits_with_logs: Sequence[HabitWithWeekLog],
    today_index: int,
    is_current_week: bool,
) -> Optional[Dict]:
    """Most urgent insight for a week, or None."""
    insights = get_insights(habits_with_logs, today_index, is_current_week)
    return insights[0] if insights else None
