"""
Error Handling Utilities

Decorator that turns service-layer exceptions into uniform JSON error
envelopes (see UXResponse.error).
"""
import json
import logging
from functools import wraps

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from marshmallow import ValidationError as SchemaValidationError
from rest_framework.exceptions import ValidationError as DRFValidationError

from habits.exceptions import (
    HabitException,
    HabitNotFoundError,
    WeekLogNotFoundError,
    InvalidWeekIdError,
    InvalidDayIndexError,
    ExportError,
    ValidationError as HabitValidationError,
)
from habits.utils.response_helpers import UXResponse

logger = logging.getLogger(__name__)


def _first_error(errors) -> str:
    """'field: message' for the first entry of a field -> messages mapping."""
    if isinstance(errors, dict) and errors:
        field = next(iter(errors))
        detail = errors[field]
        if isinstance(detail, (list, tuple)) and detail:
            detail = detail[0]
        if isinstance(detail, dict):
            return f"{field}.{_first_error(detail)}"
        return f"{field}: {detail}"
    if isinstance(errors, (list, tuple)) and errors:
        return str(errors[0])
    return str(errors)


def handle_service_errors(view_func):
    """
    Decorator for API views.

    not found -> 404, validation -> 400, other HabitException -> 400,
    anything else -> 500 (logged with traceback).
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)

        # --- Not Found Errors ---
        except (HabitNotFoundError, WeekLogNotFoundError, Http404, ObjectDoesNotExist) as e:
            return UXResponse.error(
                message=str(e) or "Not found",
                error_code="NOT_FOUND",
                status=404
            )

        # --- Validation Errors ---
        except HabitValidationError as e:
            return UXResponse.error(
                message=e.message,
                error_code="VALIDATION_ERROR",
                field=e.field,
                status=400
            )

        except (InvalidWeekIdError, InvalidDayIndexError, ExportError) as e:
            return UXResponse.error(
                message=str(e),
                error_code="VALIDATION_ERROR",
                status=400
            )

        except json.JSONDecodeError:
            return UXResponse.error(
                message="Invalid JSON body",
                error_code="VALIDATION_ERROR",
                status=400
            )

        except DRFValidationError as e:
            return UXResponse.error(
                message=_first_error(e.detail),
                error_code="VALIDATION_ERROR",
                status=400
            )

        except SchemaValidationError as e:
            return UXResponse.error(
                message=_first_error(e.messages),
                error_code="VALIDATION_ERROR",
                status=400
            )

        except DjangoValidationError as e:
            msg = _first_error(e.message_dict) if hasattr(e, 'error_dict') else _first_error(e.messages)
            return UXResponse.error(
                message=msg,
                error_code="VALIDATION_ERROR",
                status=400
            )

        # --- Generic Habit Errors ---
        except HabitException as e:
            return UXResponse.error(
                message=str(e),
                error_code="HABIT_ERROR",
                status=400
            )

        # --- Unexpected Errors ---
        except Exception:
            logger.exception("Unhandled error in %s", view_func.__name__)
            return UXResponse.error(
                message="An unexpected error occurred",
                error_code="INTERNAL_ERROR",
                retry=True,
                status=500
            )

    return wrapper
