# habits/utils/constants.py
"""
Central constants for the habit ledger.
Use these constants instead of hardcoded strings and magic numbers.
"""

# ============================================
# DAYS OF THE WEEK (ISO order, Monday first)
# ============================================
DAYS_PER_WEEK = 7

DAY_NAMES_SHORT = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']

DAY_NAMES_FULL = [
    'Monday',
    'Tuesday',
    'Wednesday',
    'Thursday',
    'Friday',
    'Saturday',
    'Sunday',
]

MONTH_NAMES_SHORT = [
    'Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
    'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec',
]

# ============================================
# HABIT COLOR TAGS
# ============================================
COLOR_GREEN = 'green'
COLOR_CYAN = 'cyan'
COLOR_RED = 'red'
COLOR_YELLOW = 'yellow'
COLOR_PURPLE = 'purple'

COLOR_TAG_CHOICES = [
    COLOR_GREEN,
    COLOR_CYAN,
    COLOR_RED,
    COLOR_YELLOW,
    COLOR_PURPLE,
]

# ============================================
# DATA ENTRY LIMITS
# ============================================
MIN_HOURS = 0
MAX_HOURS_PER_DAY = 24
HABIT_NAME_MAX_LENGTH = 100

# ============================================
# OFFLINE SYNC
# ============================================
OP_TOGGLE_DAY = 'toggleDay'
OP_UPDATE_DAY_HOURS = 'updateDayHours'
OP_CREATE_HABIT = 'createHabit'
OP_UPDATE_HABIT = 'updateHabit'
OP_DELETE_HABIT = 'deleteHabit'

SYNC_OPERATION_CHOICES = [
    OP_TOGGLE_DAY,
    OP_UPDATE_DAY_HOURS,
    OP_CREATE_HABIT,
    OP_UPDATE_HABIT,
    OP_DELETE_HABIT,
]

# ============================================
# APPLICATION DEFAULTS (overridable via settings.HABITS)
# ============================================
DEFAULTS = {
    'INSIGHTS_LIMIT': 10,
    'INSIGHTS_LIMIT_COMPACT': 5,
    'OFFLINE_CACHE_WEEKS': 4,
    'MAX_SYNC_RETRIES': 3,
    'DASHBOARD_CACHE_TIMEOUT': 60,
    'WEEK_LIST_PAST': 12,
    'WEEK_LIST_FUTURE': 4,
}


# ============================================
# HELPER FUNCTIONS
# ============================================

def get_setting(name: str):
    """
    Read an application tunable from settings.HABITS, falling back to DEFAULTS.
    """
    from django.conf import settings

    overrides = getattr(settings, 'HABITS', None) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
