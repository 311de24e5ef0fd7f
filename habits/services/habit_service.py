"""
Habit Store Service

Persistence of habits and their per-week daily logs. Logs are materialized
lazily: reading a week that was never written yields an all-zero log without
touching the database; the row is created on the first write.
"""
from datetime import datetime
from typing import Dict, List, Optional
import logging

from django.db import transaction

from habits import schemas
from habits.exceptions import HabitNotFoundError, ValidationError as AppValidationError
from habits.helpers.cache_helpers import CacheInvalidator
from habits.models import Habit, UserPreferences, WeekLog, empty_daily
from habits.serializers import (
    DayHoursSerializer,
    HabitCreateSerializer,
    HabitUpdateSerializer,
    WeekDaySerializer,
    validate_or_raise,
)
from habits.utils.constants import DAYS_PER_WEEK
from habits.utils.logging_utils import log_with_context
from habits.utils.time_utils import create_empty_week_log, parse_week_id

logger = logging.getLogger(__name__)


def habit_to_dict(habit: Habit) -> Dict:
    """Document (camelCase) form of a habit."""
    return schemas.HabitSchema().dump(habit.to_domain())


def week_log_to_dict(week_log: schemas.WeekLog) -> Dict:
    """Document (camelCase) form of a week log."""
    return schemas.WeekLogSchema().dump(week_log)


def _normalize_daily(daily) -> List[Dict]:
    """Seven entries indexed by day, filling any that are missing."""
    entries = empty_daily()
    for entry in daily or []:
        index = entry.get('dayIndex')
        if isinstance(index, int) and 0 <= index < DAYS_PER_WEEK:
            entries[index] = {
                'dayIndex': index,
                'checked': bool(entry.get('checked', False)),
                'actualHours': float(entry.get('actualHours', 0.0) or 0.0),
            }
    return entries


class HabitService:
    """
    Service for one user's habits and week logs.

    Usage:
        service = HabitService(request.user)
        service.toggle_day(habit_id, '2026-W08', 2)
    """

    def __init__(self, user):
        self.user = user

    # ------------------------------------------------------------------
    # Habits
    # ------------------------------------------------------------------

    def _habits(self):
        return Habit.objects.filter(user=self.user).order_by('created_at')

    def list_habits(self) -> List[Dict]:
        """All habits of the user, oldest first."""
        return [habit_to_dict(h) for h in self._habits()]

    def get_habit(self, habit_id: str) -> Habit:
        try:
            return Habit.objects.get(habit_id=habit_id, user=self.user)
        except Habit.DoesNotExist:
            raise HabitNotFoundError(habit_id)

    def create_habit(self, data: Dict, habit_id: Optional[str] = None) -> Dict:
        """
        Create a habit.

        Args:
            data: name, target_hours_per_day, color_tag
            habit_id: Client-generated id (offline creates); generated if omitted

        Returns:
            Created habit in document form
        """
        validated = validate_or_raise(HabitCreateSerializer, data)

        with CacheInvalidator(self.user.id):
            fields = dict(
                user=self.user,
                name=validated['name'],
                target_hours_per_day=validated['target_hours_per_day'],
                color_tag=validated['color_tag'],
            )
            if habit_id:
                if Habit.objects.filter(habit_id=habit_id).exists():
                    raise AppValidationError('id', f"Habit '{habit_id}' already exists")
                fields['habit_id'] = habit_id
            habit = Habit.objects.create(**fields)

        log_with_context('info', 'Habit created', habit_id=habit.habit_id, user_id=self.user.id)
        return habit_to_dict(habit)

    def update_habit(self, habit_id: str, data: Dict) -> Dict:
        """Apply a partial update (name, target_hours_per_day, color_tag)."""
        validated = validate_or_raise(HabitUpdateSerializer, data)
        habit = self.get_habit(habit_id)

        with CacheInvalidator(self.user.id):
            for field, value in validated.items():
                setattr(habit, field, value)
            habit.save()

        return habit_to_dict(habit)

    def delete_habit(self, habit_id: str) -> Dict:
        """Delete a habit together with all of its week logs."""
        habit = self.get_habit(habit_id)
        name = habit.name

        with transaction.atomic(), CacheInvalidator(self.user.id):
            deleted_logs, _ = WeekLog.objects.filter(habit=habit).delete()
            habit.delete()

        log_with_context('info', 'Habit deleted', habit_id=habit_id, week_logs=deleted_logs)
        return {'habit_id': habit_id, 'name': name, 'deleted_week_logs': deleted_logs}

    # ------------------------------------------------------------------
    # Week logs
    # ------------------------------------------------------------------

    def get_week_log(self, habit_id: str, week_id: str) -> schemas.WeekLog:
        """Stored log for the week, or an all-zero one (not persisted)."""
        parse_week_id(week_id)
        habit = self.get_habit(habit_id)
        log = WeekLog.objects.filter(habit=habit, week_id=week_id).first()
        if log is None:
            return create_empty_week_log(str(habit.habit_id), week_id)
        return log.to_domain()

    def get_week_log_updated_at(self, habit_id: str, week_id: str) -> Optional[datetime]:
        return (
            WeekLog.objects.filter(habit_id=habit_id, user=self.user, week_id=week_id)
            .values_list('updated_at', flat=True)
            .first()
        )

    def _write_day(self, habit_id: str, week_id: str, day_index: int, mutate) -> Dict:
        """
        Load (or create) the week log row under a row lock, let `mutate`
        change one daily entry, and save.
        """
        habit = self.get_habit(habit_id)

        with transaction.atomic(), CacheInvalidator(self.user.id):
            log, created = WeekLog.objects.select_for_update().get_or_create(
                habit=habit,
                week_id=week_id,
                defaults={'user': self.user, 'daily': empty_daily()},
            )
            daily = _normalize_daily(log.daily)
            mutate(daily[day_index], habit)
            log.daily = daily
            log.save()

        if created:
            logger.debug("Created week log %s", log.document_id)

        entry = daily[day_index]
        return {
            'habit_id': str(habit.habit_id),
            'week_id': week_id,
            'day_index': day_index,
            'checked': entry['checked'],
            'actual_hours': entry['actualHours'],
            'week_log': week_log_to_dict(log.to_domain()),
        }

    def toggle_day(self, habit_id: str, week_id: str, day_index: int) -> Dict:
        """
        Flip a day's checked state. Checking records the full daily target as
        executed; unchecking records zero hours.
        """
        validate_or_raise(WeekDaySerializer, {'week_id': week_id, 'day_index': day_index})
        parse_week_id(week_id)

        def mutate(entry, habit):
            entry['checked'] = not entry['checked']
            entry['actualHours'] = habit.target_hours_per_day if entry['checked'] else 0.0

        return self._write_day(habit_id, week_id, day_index, mutate)

    def update_day_hours(self, habit_id: str, week_id: str, day_index: int, hours: float) -> Dict:
        """Record executed hours (0-24). A day counts as checked when hours > 0."""
        validated = validate_or_raise(
            DayHoursSerializer,
            {'week_id': week_id, 'day_index': day_index, 'hours': hours},
        )
        parse_week_id(week_id)
        hours = validated['hours']

        def mutate(entry, habit):
            entry['actualHours'] = hours
            entry['checked'] = hours > 0

        return self._write_day(habit_id, week_id, day_index, mutate)

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    def get_habits_with_logs(self, week_id: str) -> List[schemas.HabitWithWeekLog]:
        """
        Pair every habit with its log for the week, ordered by creation time.
        Habits without a stored log get an all-zero log.
        """
        parse_week_id(week_id)
        habits = list(self._habits())
        logs = {
            log.habit_id: log
            for log in WeekLog.objects.filter(user=self.user, week_id=week_id)
        }

        pairings = []
        for habit in habits:
            stored = logs.get(habit.habit_id)
            pairings.append(schemas.HabitWithWeekLog(
                habit=habit.to_domain(),
                week_log=stored.to_domain() if stored else create_empty_week_log(str(habit.habit_id), week_id),
                week_id=week_id,
            ))
        return pairings

    def get_changes_since(self, since: Optional[datetime], week_ids: Optional[List[str]] = None) -> Dict:
        """
        Snapshot of what changed after `since` (everything when None).

        Deleted habits come from the audit history. `week_ids` restricts the
        week logs of a full snapshot.
        """
        habits = self._habits()
        logs = WeekLog.objects.filter(user=self.user).select_related('habit')
        deleted_ids = []

        if since is not None:
            habits = habits.filter(updated_at__gt=since)
            logs = logs.filter(updated_at__gt=since)
            deleted_ids = list(
                Habit.history.filter(user=self.user, history_type='-', history_date__gt=since)
                .values_list('habit_id', flat=True)
                .distinct()
            )
        elif week_ids:
            logs = logs.filter(week_id__in=week_ids)

        return {
            'habits': {
                'updated': [habit_to_dict(h) for h in habits],
                'deleted': deleted_ids,
            },
            'week_logs': {
                'updated': [week_log_to_dict(log.to_domain()) for log in logs.order_by('week_id', 'habit__created_at')],
            },
            'is_full_sync': since is None,
        }


def get_habits_with_logs(user, week_id: str) -> List[schemas.HabitWithWeekLog]:
    """Convenience wrapper for HabitService(user).get_habits_with_logs(week_id)"""
    return HabitService(user).get_habits_with_logs(week_id)


def get_user_timezone(user) -> str:
    """IANA timezone from the user's preferences, 'UTC' when none are stored."""
    tz = (
        UserPreferences.objects.filter(user=user)
        .values_list('timezone', flat=True)
        .first()
    )
    return tz or 'UTC'
