"""
Structured Logging with Request Correlation IDs.

- A request id is attached to every log record emitted while a request is
  being served (RequestIDMiddleware + RequestIDFilter)
- StructuredFormatter renders records as one JSON object per line
- log_function_call times service calls at DEBUG level
"""
import json
import logging
import threading
import time
import uuid
from functools import wraps

logger = logging.getLogger(__name__)

_request_context = threading.local()

# LogRecord attributes that are not user-supplied `extra` fields
_RESERVED_ATTRS = frozenset({
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'thread', 'threadName',
    'exc_info', 'exc_text', 'message', 'taskName', 'request_id',
})


# ============================================================================
# REQUEST ID MANAGEMENT
# ============================================================================

def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def get_request_id() -> str:
    """Request id of the request being served, or '-' outside a request."""
    return getattr(_request_context, 'request_id', None) or '-'


def set_request_id(request_id: str):
    _request_context.request_id = request_id


def clear_request_context():
    if hasattr(_request_context, 'request_id'):
        del _request_context.request_id


class RequestIDFilter(logging.Filter):
    """Stamp `record.request_id` so any formatter can reference it."""

    def filter(self, record):
        record.request_id = get_request_id()
        return True


# ============================================================================
# STRUCTURED LOG FORMATTER
# ============================================================================

class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Output:
    {"timestamp": "...", "level": "INFO", "logger": "...", "request_id": "ab12cd34", "message": "...", ...extra}
    """

    def format(self, record):
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'logger': record.name,
            'request_id': getattr(record, 'request_id', None) or get_request_id(),
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith('_'):
                continue
            log_data[key] = value

        return json.dumps(log_data, default=str)


def get_logging_config(level: str = 'INFO', use_json: bool = False) -> dict:
    """
    dictConfig for settings.LOGGING: one console handler, JSON or plain text,
    with the request id on every line.
    """
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'filters': {
            'request_id': {'()': 'habits.utils.logging_utils.RequestIDFilter'},
        },
        'formatters': {
            'json': {'()': 'habits.utils.logging_utils.StructuredFormatter'},
            'plain': {'format': '%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s'},
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'filters': ['request_id'],
                'formatter': 'json' if use_json else 'plain',
            },
        },
        'root': {'handlers': ['console'], 'level': 'WARNING'},
        'loggers': {
            'habits': {'handlers': ['console'], 'level': level, 'propagate': False},
            'django.request': {'handlers': ['console'], 'level': 'WARNING', 'propagate': False},
        },
    }


# ============================================================================
# LOGGING UTILITIES
# ============================================================================

def log_with_context(level: str, message: str, **extra):
    """
    Log with extra structured fields.

    Usage:
        log_with_context('info', 'Habit created', habit_id=habit.habit_id)
    """
    log_func = getattr(logger, level.lower(), logger.info)
    log_func(message, extra=extra)


def log_api_request(request, response_status: int, duration_ms: float):
    log_with_context(
        'info',
        f'{request.method} {request.path}',
        method=request.method,
        path=request.path,
        status=response_status,
        duration_ms=round(duration_ms, 2),
        user_id=getattr(getattr(request, 'user', None), 'id', None),
    )


# ============================================================================
# MIDDLEWARE
# ============================================================================

class RequestIDMiddleware:
    """
    Correlate log lines of one request and echo the id back.

    settings.MIDDLEWARE:
        'habits.utils.logging_utils.RequestIDMiddleware',
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.META.get('HTTP_X_REQUEST_ID') or new_request_id()
        set_request_id(request_id)
        start = time.monotonic()

        try:
            response = self.get_response(request)
            response['X-Request-ID'] = request_id
            log_api_request(request, response.status_code, (time.monotonic() - start) * 1000)
            return response
        finally:
            clear_request_context()


# ============================================================================
# DECORATOR FOR FUNCTION LOGGING
# ============================================================================

def log_function_call(log_args: bool = False):
    """
    Log exit (with duration) of the wrapped call at DEBUG, failures at ERROR.

    Usage:
        @log_function_call(log_args=True)
        def export_week(self, week_id, fmt):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            func_name = f"{func.__module__}.{func.__qualname__}"
            fields = {}
            if log_args:
                fields['func_args'] = str(args)[:200]
                fields['func_kwargs'] = str(kwargs)[:200]

            start = time.monotonic()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                log_with_context(
                    'error', f'Error in {func_name}: {e}',
                    duration_ms=round((time.monotonic() - start) * 1000, 2),
                    error_type=type(e).__name__,
                    **fields,
                )
                raise

            log_with_context(
                'debug', f'Exited {func_name}',
                duration_ms=round((time.monotonic() - start) * 1000, 2),
                **fields,
            )
            return result

        return wrapper
    return decorator
