from django.db import models
from simple_history.models import HistoricalRecords
import uuid

from habits import schemas
from habits.utils.constants import (
    COLOR_GREEN,
    COLOR_TAG_CHOICES,
    DAYS_PER_WEEK,
    HABIT_NAME_MAX_LENGTH,
)


def generate_id() -> str:
    return str(uuid.uuid4())


def empty_daily() -> list:
    """Seven unchecked zero-hour entries, stored in document (camelCase) form."""
    return [
        {'dayIndex': i, 'checked': False, 'actualHours': 0.0}
        for i in range(DAYS_PER_WEEK)
    ]


class Habit(models.Model):
    """A tracked habit with a daily hour target (e.g., Deep Work, 2.5h/day)"""

    COLOR_CHOICES = [(tag, tag.title()) for tag in COLOR_TAG_CHOICES]

    habit_id = models.CharField(max_length=36, primary_key=True, default=generate_id, editable=False)
    user = models.ForeignKey('auth.User', on_delete=models.CASCADE, related_name='habits')
    name = models.CharField(max_length=HABIT_NAME_MAX_LENGTH)
    target_hours_per_day = models.FloatField(default=1.0)
    color_tag = models.CharField(max_length=10, choices=COLOR_CHOICES, default=COLOR_GREEN)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Audit history - also the record of deletions for sync
    history = HistoricalRecords()

    class Meta:
        db_table = 'habits'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='habits_user_id_7c9f0e_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.target_hours_per_day}h/day)"

    def to_domain(self) -> schemas.Habit:
        return schemas.Habit(
            id=str(self.habit_id),
            name=self.name,
            target_hours_per_day=self.target_hours_per_day,
            color_tag=self.color_tag,
            created_at=self.created_at,
        )


class WeekLog(models.Model):
    """
    One habit's seven daily entries for one ISO week.

    `daily` holds exactly 7 `{dayIndex, checked, actualHours}` entries.
    A missing row means "nothing recorded"; it is created on first write.
    """

    user = models.ForeignKey('auth.User', on_delete=models.CASCADE, related_name='week_logs')
    habit = models.ForeignKey(Habit, on_delete=models.CASCADE, related_name='week_logs')
    week_id = models.CharField(max_length=8, db_index=True)  # 'YYYY-Www'
    daily = models.JSONField(default=empty_daily)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'week_logs'
        unique_together = [['habit', 'week_id']]
        indexes = [
            models.Index(fields=['user', 'week_id'], name='week_logs_user_id_3a1b2c_idx'),
            models.Index(fields=['user', 'updated_at'], name='week_logs_user_id_8d4e5f_idx'),
        ]

    def __str__(self):
        return self.document_id

    @property
    def document_id(self) -> str:
        """Store key of the log: '{weekId}_{habitId}'"""
        return f"{self.week_id}_{self.habit_id}"

    def to_domain(self) -> schemas.WeekLog:
        daily = schemas.DailyLogSchema(many=True).load(self.daily or [])
        return schemas.WeekLog(
            week_id=self.week_id,
            habit_id=str(self.habit_id),
            daily=sorted(daily, key=lambda d: d.day_index),
            updated_at=self.updated_at,
        )


class UserPreferences(models.Model):
    """User-specific settings. The timezone decides which day is 'today'."""

    user = models.OneToOneField('auth.User', on_delete=models.CASCADE, primary_key=True, related_name='habit_preferences')
    timezone = models.CharField(max_length=50, default='UTC')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'user_preferences'

    def __str__(self):
        return f"Preferences for {self.user.username}"
