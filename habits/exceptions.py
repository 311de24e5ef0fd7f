"""
Custom Exception Classes

Provides specific exception types for better error handling and user feedback.
"""


class HabitException(Exception):
    """Base exception for all habit-ledger errors"""
    pass


class HabitNotFoundError(HabitException):
    """Raised when a habit does not exist"""
    def __init__(self, habit_id: str):
        self.habit_id = habit_id
        super().__init__(f"Habit '{habit_id}' not found")


class WeekLogNotFoundError(HabitException):
    """Raised when a week log does not exist for a habit"""
    def __init__(self, habit_id: str, week_id: str):
        self.habit_id = habit_id
        self.week_id = week_id
        super().__init__(f"No week log for habit '{habit_id}' in {week_id}")


class InvalidWeekIdError(HabitException, ValueError):
    """Raised when a week id is not in ISO 'YYYY-Www' format"""
    def __init__(self, week_id):
        self.week_id = week_id
        super().__init__(f"Invalid week ID format: {week_id}")


class InvalidDayIndexError(HabitException):
    """Raised when a day index is outside Monday(0)..Sunday(6)"""
    def __init__(self, day_index):
        self.day_index = day_index
        super().__init__(f"Invalid day index {day_index!r}. Expected 0 (Mon) to 6 (Sun)")


class ValidationError(HabitException):
    """Raised when data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Validation error for '{field}': {message}")


class SyncOperationError(HabitException):
    """Raised when a queued offline operation cannot be applied"""
    def __init__(self, operation_type: str, reason: str):
        self.operation_type = operation_type
        self.reason = reason
        super().__init__(f"Sync operation '{operation_type}' failed: {reason}")


class ExportError(HabitException):
    """Raised when data export fails"""
    def __init__(self, export_type: str, reason: str):
        self.export_type = export_type
        self.reason = reason
        super().__init__(f"Export failed ({export_type}): {reason}")
