"""
Input Validation Serializers

Validates user input with Django REST Framework serializers before it
reaches the store. REST bodies are snake_case; offline-queue payloads keep
the client's camelCase keys and are mapped onto the same names via `source`.
"""
from rest_framework import serializers

from habits.exceptions import ValidationError as AppValidationError
from habits.utils.constants import (
    COLOR_GREEN,
    COLOR_TAG_CHOICES,
    DAYS_PER_WEEK,
    HABIT_NAME_MAX_LENGTH,
    MAX_HOURS_PER_DAY,
    MIN_HOURS,
    SYNC_OPERATION_CHOICES,
)
from habits.utils.time_utils import WEEK_ID_PATTERN


def _clean_name(value):
    value = (value or '').strip()
    if not value:
        raise serializers.ValidationError("Name is required")
    return value


def validate_or_raise(serializer_class, data, **kwargs):
    """
    Run a serializer and return its validated data.

    Raises:
        habits.exceptions.ValidationError: For the first failing field
    """
    serializer = serializer_class(data=data, **kwargs)
    if not serializer.is_valid():
        field, messages = next(iter(serializer.errors.items()))
        message = messages[0] if isinstance(messages, list) and messages else messages
        if isinstance(message, dict):
            field, nested = next(iter(message.items()))
            message = nested[0] if isinstance(nested, list) and nested else nested
        raise AppValidationError(field, str(message))
    return serializer.validated_data


# ============================================================================
# HABITS
# ============================================================================

class HabitCreateSerializer(serializers.Serializer):
    """Validate habit creation data"""

    name = serializers.CharField(
        max_length=HABIT_NAME_MAX_LENGTH,
        help_text="Habit name (e.g., 'Deep Work')"
    )

    target_hours_per_day = serializers.FloatField(
        min_value=MIN_HOURS,
        max_value=MAX_HOURS_PER_DAY,
        help_text="Daily target in hours, fractional allowed"
    )

    color_tag = serializers.ChoiceField(
        choices=COLOR_TAG_CHOICES,
        default=COLOR_GREEN,
    )

    def validate_name(self, value):
        return _clean_name(value)


class HabitUpdateSerializer(serializers.Serializer):
    """Validate partial habit updates"""

    name = serializers.CharField(max_length=HABIT_NAME_MAX_LENGTH, required=False)
    target_hours_per_day = serializers.FloatField(
        min_value=MIN_HOURS,
        max_value=MAX_HOURS_PER_DAY,
        required=False
    )
    color_tag = serializers.ChoiceField(choices=COLOR_TAG_CHOICES, required=False)

    def validate_name(self, value):
        return _clean_name(value)


# ============================================================================
# DAILY ENTRIES
# ============================================================================

class WeekDaySerializer(serializers.Serializer):
    """A (week, day) coordinate"""

    week_id = serializers.RegexField(WEEK_ID_PATTERN)
    day_index = serializers.IntegerField(min_value=0, max_value=DAYS_PER_WEEK - 1)


class DayHoursSerializer(WeekDaySerializer):
    """Hours actually executed on one day (0-24)"""

    hours = serializers.FloatField(min_value=MIN_HOURS, max_value=MAX_HOURS_PER_DAY)


# ============================================================================
# OFFLINE SYNC
# ============================================================================

class ToggleDayPayloadSerializer(serializers.Serializer):
    habitId = serializers.CharField(source='habit_id')
    weekId = serializers.RegexField(WEEK_ID_PATTERN, source='week_id')
    dayIndex = serializers.IntegerField(source='day_index', min_value=0, max_value=DAYS_PER_WEEK - 1)


class UpdateDayHoursPayloadSerializer(ToggleDayPayloadSerializer):
    hours = serializers.FloatField(min_value=MIN_HOURS, max_value=MAX_HOURS_PER_DAY)


class CreateHabitPayloadSerializer(serializers.Serializer):
    id = serializers.CharField(source='habit_id', required=False, max_length=36)
    name = serializers.CharField(max_length=HABIT_NAME_MAX_LENGTH)
    targetHoursPerDay = serializers.FloatField(
        source='target_hours_per_day',
        min_value=MIN_HOURS,
        max_value=MAX_HOURS_PER_DAY
    )
    colorTag = serializers.ChoiceField(source='color_tag', choices=COLOR_TAG_CHOICES, default=COLOR_GREEN)

    def validate_name(self, value):
        return _clean_name(value)


class UpdateHabitPayloadSerializer(serializers.Serializer):
    habitId = serializers.CharField(source='habit_id')
    name = serializers.CharField(max_length=HABIT_NAME_MAX_LENGTH, required=False)
    targetHoursPerDay = serializers.FloatField(
        source='target_hours_per_day',
        min_value=MIN_HOURS,
        max_value=MAX_HOURS_PER_DAY,
        required=False
    )
    colorTag = serializers.ChoiceField(source='color_tag', choices=COLOR_TAG_CHOICES, required=False)

    def validate_name(self, value):
        return _clean_name(value)


class DeleteHabitPayloadSerializer(serializers.Serializer):
    habitId = serializers.CharField(source='habit_id')


class SyncOperationSerializer(serializers.Serializer):
    """One queued offline operation"""

    id = serializers.CharField()
    type = serializers.ChoiceField(choices=SYNC_OPERATION_CHOICES)
    payload = serializers.DictField()
    timestamp = serializers.IntegerField(required=False)
    retries = serializers.IntegerField(min_value=0, default=0)


class SyncRequestSerializer(serializers.Serializer):
    """Validate a bidirectional sync request"""

    last_sync = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    pending_actions = serializers.ListField(child=serializers.DictField(), default=list)
    device_id = serializers.CharField(required=False, default='unknown', max_length=100)
