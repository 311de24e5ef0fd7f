"""
Habit Ledger - JSON API Views
Endpoints for the weekly dashboard, habit editing, export and offline sync.
"""
import json
import logging
from functools import wraps

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from habits.exceptions import ValidationError as AppValidationError
from habits.services.dashboard_service import DashboardService
from habits.services.export_service import ExportService
from habits.services.habit_service import HabitService
from habits.services.sync_service import SyncService
from habits.utils.error_handlers import handle_service_errors
from habits.utils.response_helpers import UXResponse

logger = logging.getLogger(__name__)


def require_auth(view_func):
    """
    Ensure the session user is logged in.
    Returns 401 JSON instead of redirecting to a login page.
    """
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        if request.user.is_authenticated:
            return view_func(request, *args, **kwargs)

        return JsonResponse({
            'success': False,
            'error': {
                'message': 'Authentication required',
                'code': 'UNAUTHORIZED',
                'retry': False
            }
        }, status=401)

    return csrf_exempt(_wrapped_view)


def _json_body(request) -> dict:
    """Parsed JSON object body ({} when empty)."""
    if not request.body:
        return {}
    try:
        text = request.body.decode('utf-8')
    except UnicodeDecodeError:
        raise AppValidationError('body', 'Request body is not valid UTF-8')
    data = json.loads(text)
    if not isinstance(data, dict):
        raise AppValidationError('body', 'Expected a JSON object')
    return data


def _int_param(request, name: str, default=None):
    value = request.GET.get(name)
    if value in (None, ''):
        return default
    try:
        return int(value)
    except ValueError:
        raise AppValidationError(name, f"'{value}' is not an integer")


# ============================================================================
# DASHBOARD ENDPOINTS
# ============================================================================

@require_auth
@require_GET
@handle_service_errors
def api_dashboard(request):
    """Full weekly dashboard. ?week=YYYY-Www defaults to the current week."""
    service = DashboardService(request.user, week_id=request.GET.get('week') or None)
    use_cache = request.GET.get('refresh') != '1'
    return UXResponse.success(message='Dashboard loaded', data=service.get_full_dashboard(use_cache=use_cache))


@require_auth
@require_GET
@handle_service_errors
def api_insights(request):
    """Coaching insights for a week. ?limit=N truncates the list."""
    service = DashboardService(request.user, week_id=request.GET.get('week') or None)
    limit = _int_param(request, 'limit')
    data = service.get_insights(limit)
    data['week_id'] = service.week_id
    return UXResponse.success(message='Insights generated', data=data)


@require_auth
@require_GET
@handle_service_errors
def api_weeks(request):
    """Week ids around the current week for the week picker."""
    service = DashboardService(request.user)
    return UXResponse.success(
        message='Weeks loaded',
        data={'weeks': service.get_week_list(), 'current_week_id': service.week_id}
    )


# ============================================================================
# HABIT ENDPOINTS
# ============================================================================

@require_auth
@require_http_methods(['GET', 'POST'])
@handle_service_errors
def api_habits(request):
    """List habits (GET) or create one (POST)."""
    service = HabitService(request.user)

    if request.method == 'GET':
        return UXResponse.success(message='Habits loaded', data={'habits': service.list_habits()})

    habit = service.create_habit(_json_body(request))
    return UXResponse.success(
        message=f"Habit '{habit['name']}' created",
        data={'habit': habit},
        feedback={'type': 'success', 'toast': True, 'message': 'Habit created'},
        status=201
    )


@require_auth
@require_http_methods(['PATCH', 'PUT', 'POST'])
@handle_service_errors
def api_habit_update(request, habit_id):
    habit = HabitService(request.user).update_habit(habit_id, _json_body(request))
    return UXResponse.success(message='Habit updated', data={'habit': habit})


@require_auth
@require_http_methods(['DELETE', 'POST'])
@handle_service_errors
def api_habit_delete(request, habit_id):
    """Delete a habit and all of its week logs."""
    info = HabitService(request.user).delete_habit(habit_id)
    return UXResponse.success(
        message='Habit deleted',
        data={'deleted': True, **info},
        feedback={'type': 'info', 'toast': True, 'message': 'Habit deleted'}
    )


# ============================================================================
# DAY ENDPOINTS
# ============================================================================

@require_auth
@require_POST
@handle_service_errors
def api_day_toggle(request, habit_id, week_id, day_index):
    """Check/uncheck a day. Checking records the daily target as executed."""
    result = HabitService(request.user).toggle_day(habit_id, week_id, day_index)

    feedback = None
    if result['checked']:
        feedback = UXResponse.milestone('Day complete!')

    return UXResponse.success(
        message='Day checked' if result['checked'] else 'Day unchecked',
        data=result,
        feedback=feedback
    )


@require_auth
@require_http_methods(['POST', 'PUT', 'PATCH'])
@handle_service_errors
def api_day_hours(request, habit_id, week_id, day_index):
    """Record executed hours for a day. Body: {"hours": 1.5}"""
    data = _json_body(request)
    if 'hours' not in data:
        raise AppValidationError('hours', 'This field is required.')

    result = HabitService(request.user).update_day_hours(habit_id, week_id, day_index, data['hours'])
    return UXResponse.success(message='Hours updated', data=result)


# ============================================================================
# EXPORT & SYNC
# ============================================================================

@require_auth
@require_GET
@handle_service_errors
def api_export(request, week_id):
    """Download a week as ?format=json|csv|txt|xlsx (default json)."""
    export_format = request.GET.get('format', 'json').lower()
    return ExportService(request.user).export_week(week_id, export_format)


@require_auth
@require_POST
@handle_service_errors
def api_sync(request):
    """Apply queued offline operations and return server changes."""
    result = SyncService(request.user).process_sync_request(_json_body(request))
    return UXResponse.success(message='Sync complete', data=result)
