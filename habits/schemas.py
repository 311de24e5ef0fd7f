"""
Plain data types consumed by the analytics core, and the marshmallow schemas
that load them from (and dump them to) document-store snapshots.

The store keeps camelCase documents:

    /users/{uid}/habits/{habitId}
    /users/{uid}/weekLogs/{weekId}_{habitId}

Loading a snapshot through these schemas yields the dataclasses below, which
is all the progress aggregator and the insights engine ever see.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from marshmallow import Schema, fields, validate, post_load, validates_schema
from marshmallow import ValidationError as SchemaValidationError

from habits.utils.constants import COLOR_TAG_CHOICES, COLOR_GREEN, DAYS_PER_WEEK, MAX_HOURS_PER_DAY


@dataclass
class Habit:
    """A tracked habit with a (possibly fractional) daily hour target."""
    id: str
    name: str
    target_hours_per_day: float
    color_tag: str = COLOR_GREEN
    created_at: Optional[datetime] = None

    @property
    def weekly_target(self) -> float:
        return self.target_hours_per_day * DAYS_PER_WEEK


@dataclass
class DailyLog:
    """One day of one habit's week."""
    day_index: int
    checked: bool = False
    actual_hours: float = 0.0


@dataclass
class WeekLog:
    """The seven daily entries of one habit in one ISO week."""
    week_id: str
    habit_id: str
    daily: List[DailyLog] = field(default_factory=list)
    updated_at: Optional[datetime] = None

    def day(self, day_index: int) -> Optional[DailyLog]:
        if 0 <= day_index < len(self.daily):
            return self.daily[day_index]
        return None

    def actual_hours(self, day_index: int) -> float:
        entry = self.day(day_index)
        return entry.actual_hours if entry else 0.0

    def is_checked(self, day_index: int) -> bool:
        entry = self.day(day_index)
        return bool(entry and entry.checked)

    @property
    def total_hours(self) -> float:
        return sum(self.actual_hours(i) for i in range(DAYS_PER_WEEK))


@dataclass
class HabitWithWeekLog:
    """
    A habit joined with its log for the week under view.

    `week_log` may be None when nothing was ever recorded; `log` then yields an
    all-zero week so callers never need to special-case absence.
    """
    habit: Habit
    week_log: Optional[WeekLog] = None
    week_id: str = ''

    @property
    def log(self) -> WeekLog:
        if self.week_log is not None:
            return self.week_log
        from habits.utils.time_utils import create_empty_week_log
        return create_empty_week_log(self.habit.id, self.week_id or None)


# =============================================================================
# MARSHMALLOW SCHEMAS
# =============================================================================

class HabitSchema(Schema):
    id = fields.Str(required=True)
    name = fields.Str(required=True, validate=validate.Length(min=1))
    target_hours_per_day = fields.Float(
        required=True,
        data_key='targetHoursPerDay',
        validate=validate.Range(min=0, max=MAX_HOURS_PER_DAY),
    )
    color_tag = fields.Str(
        data_key='colorTag',
        load_default=COLOR_GREEN,
        validate=validate.OneOf(COLOR_TAG_CHOICES),
    )
    created_at = fields.DateTime(data_key='createdAt', format='timestamp_ms', load_default=None, allow_none=True)

    @post_load
    def make_habit(self, data, **kwargs):
        return Habit(**data)


class DailyLogSchema(Schema):
    day_index = fields.Int(required=True, data_key='dayIndex', validate=validate.Range(min=0, max=DAYS_PER_WEEK - 1))
    checked = fields.Bool(load_default=False)
    actual_hours = fields.Float(
        data_key='actualHours',
        load_default=0.0,
        validate=validate.Range(min=0, max=MAX_HOURS_PER_DAY),
    )

    @post_load
    def make_daily_log(self, data, **kwargs):
        return DailyLog(**data)


class WeekLogSchema(Schema):
    week_id = fields.Str(required=True, data_key='weekId', validate=validate.Regexp(r'^\d{4}-W\d{2}$'))
    habit_id = fields.Str(required=True, data_key='habitId')
    daily = fields.List(fields.Nested(DailyLogSchema), required=True)
    updated_at = fields.DateTime(data_key='updatedAt', format='timestamp_ms', load_default=None, allow_none=True)

    @validates_schema
    def validate_daily(self, data, **kwargs):
        daily = data.get('daily') or []
        if len(daily) != DAYS_PER_WEEK:
            raise SchemaValidationError(f'Expected {DAYS_PER_WEEK} daily entries, got {len(daily)}', 'daily')
        if len({entry.day_index for entry in daily}) != len(daily):
            raise SchemaValidationError('Duplicate dayIndex in daily entries', 'daily')

    @post_load
    def make_week_log(self, data, **kwargs):
        data['daily'] = sorted(data['daily'], key=lambda d: d.day_index)
        return WeekLog(**data)


class PairingSchema(Schema):
    habit = fields.Nested(HabitSchema, required=True)
    week_log = fields.Nested(WeekLogSchema, data_key='weekLog', load_default=None, allow_none=True)
    week_id = fields.Str(data_key='weekId', load_default='')

    @post_load
    def make_pairing(self, data, **kwargs):
        return HabitWithWeekLog(**data)


def load_pairings(documents: List[dict]) -> List[HabitWithWeekLog]:
    """
    Load a list of `{habit, weekLog}` documents into pairings.

    Raises:
        marshmallow.ValidationError: If any document is malformed
    """
    return PairingSchema(many=True).load(documents)
