"""
Test factories for creating test data.

Usage:
    from habits.tests.factories import HabitFactory, make_pairing

    habit = HabitFactory.create(user, target_hours_per_day=2)
    pairing = make_pairing('h1', 'Deep Work', 2, [2, 2, 0, 0, 0, 0, 0])
"""
from typing import List, Optional
import uuid

from django.contrib.auth import get_user_model

from habits.schemas import DailyLog, Habit, HabitWithWeekLog, WeekLog


# ============================================================================
# DOMAIN BUILDERS (no database)
# ============================================================================

def make_pairing(
    habit_id: str,
    name: str,
    target: float,
    hours: List[float],
    checked: Optional[List[bool]] = None,
    week_id: str = '2026-W08',
    color_tag: str = 'green',
) -> HabitWithWeekLog:
    """
    Habit + week log pairing. `checked` defaults to "hours > 0" per day.
    """
    if checked is None:
        checked = [h > 0 for h in hours]
    daily = [
        DailyLog(day_index=i, checked=checked[i], actual_hours=hours[i])
        for i in range(len(hours))
    ]
    return HabitWithWeekLog(
        habit=Habit(id=habit_id, name=name, target_hours_per_day=target, color_tag=color_tag),
        week_log=WeekLog(week_id=week_id, habit_id=habit_id, daily=daily),
        week_id=week_id,
    )


def make_unlogged_pairing(habit_id: str, name: str, target: float, week_id: str = '2026-W08') -> HabitWithWeekLog:
    return HabitWithWeekLog(
        habit=Habit(id=habit_id, name=name, target_hours_per_day=target),
        week_log=None,
        week_id=week_id,
    )


# ============================================================================
# DATABASE FACTORIES
# ============================================================================

class UserFactory:
    """Factory for creating test users."""

    counter = 0

    @classmethod
    def create(cls, **kwargs):
        cls.counter += 1
        defaults = {
            'username': f'habituser_{cls.counter}_{uuid.uuid4().hex[:4]}',
            'email': f'habituser_{cls.counter}@example.com',
            'password': 'testpass123'
        }
        defaults.update(kwargs)
        User = get_user_model()
        return User.objects.create_user(**defaults)


class HabitFactory:
    """Factory for creating stored habits."""

    @staticmethod
    def create(user, **kwargs):
        from habits.models import Habit as HabitModel

        defaults = {
            'name': f'Habit {uuid.uuid4().hex[:6]}',
            'target_hours_per_day': 1.0,
            'color_tag': 'green',
        }
        defaults.update(kwargs)
        return HabitModel.objects.create(user=user, **defaults)


class WeekLogFactory:
    """Factory for creating stored week logs from a list of 7 hour values."""

    @staticmethod
    def create(habit, week_id='2026-W08', hours=None, checked=None):
        from habits.models import WeekLog as WeekLogModel

        hours = hours if hours is not None else [0.0] * 7
        if checked is None:
            checked = [h > 0 for h in hours]
        daily = [
            {'dayIndex': i, 'checked': checked[i], 'actualHours': float(hours[i])}
            for i in range(7)
        ]
        return WeekLogModel.objects.create(user=habit.user, habit=habit, week_id=week_id, daily=daily)
