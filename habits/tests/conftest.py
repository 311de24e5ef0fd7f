"""
Pytest configuration and fixtures for the habit ledger tests.
"""
from datetime import date

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def clear_cache():
    """Dashboard caches and offline queues live in the cache; isolate tests."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def user(db):
    """Creates and returns a test user."""
    User = get_user_model()
    return User.objects.create_user(
        username='testuser',
        email='test@example.com',
        password='testpass123'
    )


@pytest.fixture
def other_user(db):
    """Another user, for access control tests."""
    User = get_user_model()
    return User.objects.create_user(
        username='otheruser',
        email='other@example.com',
        password='otherpass123'
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Session-authenticated API client."""
    api_client.force_login(user)
    return api_client


@pytest.fixture
def habit(user):
    from habits.tests.factories import HabitFactory
    return HabitFactory.create(user, name='Deep Work', target_hours_per_day=2.0)


@pytest.fixture
def week_id():
    return '2026-W08'


@pytest.fixture
def wednesday():
    """Wednesday of 2026-W08 (day index 2)."""
    return date(2026, 2, 18)
