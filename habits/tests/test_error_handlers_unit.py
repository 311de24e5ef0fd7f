"""
Unit tests for habits/utils/error_handlers.py and the response envelopes
"""
import json

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from django.test import RequestFactory
from marshmallow import ValidationError as SchemaValidationError
from rest_framework.exceptions import ValidationError as DRFValidationError

from habits.exceptions import (
    ExportError,
    HabitNotFoundError,
    InvalidDayIndexError,
    InvalidWeekIdError,
    SyncOperationError,
    ValidationError,
)
from habits.utils.error_handlers import handle_service_errors
from habits.utils.response_helpers import UXResponse


def call_raising(exc):
    @handle_service_errors
    def view(request):
        raise exc

    response = view(RequestFactory().get('/'))
    return response.status_code, json.loads(response.content)


class TestHandleServiceErrors:

    def test_passes_through_success(self):
        @handle_service_errors
        def view(request):
            return UXResponse.success(message='ok', data={'x': 1})

        response = view(RequestFactory().get('/'))
        body = json.loads(response.content)
        assert response.status_code == 200
        assert body['data'] == {'x': 1}
        assert body['feedback']['toast'] is False

    @pytest.mark.parametrize('exc', [HabitNotFoundError('h1'), Http404('gone')])
    def test_not_found(self, exc):
        status, body = call_raising(exc)

        assert status == 404
        assert body['success'] is False
        assert body['error']['code'] == 'NOT_FOUND'

    def test_validation_error_names_field(self):
        status, body = call_raising(ValidationError('hours', 'Too many hours'))

        assert status == 400
        assert body['error'] == {
            'message': 'Too many hours',
            'code': 'VALIDATION_ERROR',
            'retry': False,
            'field': 'hours',
        }

    @pytest.mark.parametrize('exc', [
        InvalidWeekIdError('2026-W99'),
        InvalidDayIndexError(9),
        ExportError('pdf', 'Unsupported format'),
    ])
    def test_input_errors(self, exc):
        status, body = call_raising(exc)

        assert status == 400
        assert body['error']['code'] == 'VALIDATION_ERROR'
        assert body['error']['message'] == str(exc)

    def test_invalid_json(self):
        status, body = call_raising(json.JSONDecodeError('Expecting value', '', 0))
        assert status == 400
        assert body['error']['message'] == 'Invalid JSON body'

    def test_drf_validation(self):
        status, body = call_raising(DRFValidationError({'name': ['This field is required.']}))
        assert status == 400
        assert body['error']['message'] == 'name: This field is required.'

    def test_schema_validation(self):
        status, body = call_raising(SchemaValidationError({'daily': ['Expected 7 daily entries, got 6']}))
        assert status == 400
        assert body['error']['message'] == 'daily: Expected 7 daily entries, got 6'

    def test_django_validation(self):
        status, body = call_raising(DjangoValidationError({'week_id': ['Bad week']}))
        assert status == 400
        assert body['error']['message'] == 'week_id: Bad week'

    def test_other_habit_errors(self):
        status, body = call_raising(SyncOperationError('toggleDay', 'queue full'))
        assert status == 400
        assert body['error']['code'] == 'HABIT_ERROR'

    def test_unexpected_error_is_500_and_retryable(self):
        status, body = call_raising(RuntimeError('database on fire'))

        assert status == 500
        assert body['error']['code'] == 'INTERNAL_ERROR'
        assert body['error']['retry'] is True
        assert 'database on fire' not in body['error']['message']


class TestUXResponse:

    def test_success_with_custom_status(self):
        response = UXResponse.success(message='Created', status=201)
        body = json.loads(response.content)

        assert response.status_code == 201
        assert body['data'] == {}
        assert body['feedback']['message'] == 'Created'

    def test_error_without_field(self):
        body = json.loads(UXResponse.error(message='Nope').content)
        assert 'field' not in body['error']
        assert body['error']['code'] == 'GENERAL_ERROR'

    def test_milestone(self):
        assert UXResponse.milestone('Day complete!')['type'] == 'celebration'
