"""
Tests for the dashboard service (week resolution, assembly and caching)
"""
from datetime import date

import pytest

from habits.exceptions import InvalidWeekIdError
from habits.models import UserPreferences, WeekLog
from habits.services.dashboard_service import DashboardService
from habits.services.habit_service import HabitService
from habits.services.sync_service import get_cached_week
from habits.tests.factories import HabitFactory, WeekLogFactory


@pytest.mark.django_db
class TestWeekResolution:

    def test_defaults_to_week_of_today(self, user, wednesday):
        service = DashboardService(user, today=wednesday)

        assert service.week_id == '2026-W08'
        assert service.today_index == 2
        assert service.is_current_week is True

    def test_today_follows_user_timezone(self, user):
        from freezegun import freeze_time

        UserPreferences.objects.create(user=user, timezone='America/New_York')
        # Monday 03:00 UTC is still Sunday evening in New York
        with freeze_time('2026-02-23 03:00:00'):
            service = DashboardService(user)

        assert service.week_id == '2026-W08'
        assert service.today_index == 6

    def test_past_week_is_not_current(self, user, wednesday):
        service = DashboardService(user, week_id='2026-W05', today=wednesday)
        assert service.is_current_week is False

    def test_rejects_bad_week(self, user, wednesday):
        with pytest.raises(InvalidWeekIdError):
            DashboardService(user, week_id='2026-W54', today=wednesday)

    def test_navigation(self, user, wednesday):
        nav = DashboardService(user, week_id='2026-W01', today=wednesday).get_week_navigation()

        assert nav['previous_week_id'] == '2025-W52'
        assert nav['next_week_id'] == '2026-W02'
        assert nav['current_week_id'] == '2026-W08'
        assert nav['dates'][0] == '2025-12-29'
        assert nav['is_current_week'] is False

    def test_week_list_marks_current(self, user, wednesday):
        weeks = DashboardService(user, today=wednesday).get_week_list()

        assert len(weeks) == 17
        assert [w['week_id'] for w in weeks if w['is_current']] == ['2026-W08']


@pytest.mark.django_db
class TestDashboardAssembly:

    def test_overview_with_display_strings(self, user, habit, week_id, wednesday):
        WeekLogFactory.create(habit, week_id, hours=[2, 2, 0, 0, 0, 0, 0])
        overview = DashboardService(user, week_id=week_id, today=wednesday).get_week_overview()

        assert overview['total_target_week'] == 14
        assert overview['overall_weekly_pct'] == 29
        assert overview['grade'] == 'F'
        assert overview['hours_completed_display'] == '4.0h'
        assert overview['pl_delta_display'] == '-2.0h'
        assert overview['pl_delta_pct'] == -33

    def test_insights_for_untouched_week(self, user, habit, week_id, wednesday):
        data = DashboardService(user, week_id=week_id, today=wednesday).get_insights(limit=2)

        assert [i['title'] for i in data['insights']] == ['Monthly Projection', 'Day Not Started']
        assert data['total'] == 5
        assert data['tag_counts'] == {'RISK': 1, 'ALPHA': 0, 'DISCIPLINE': 3, 'RECOVERY': 1}
        assert all(i['timestamp'] for i in data['insights'])

    def test_full_dashboard_shape(self, user, habit, week_id, wednesday):
        HabitFactory.create(user, name='Reading', target_hours_per_day=0.5)
        data = DashboardService(user, week_id=week_id, today=wednesday).get_full_dashboard()

        assert set(data) == {'week', 'habits', 'overview', 'insights', 'heatmap', 'candles'}
        assert [h['habit']['name'] for h in data['habits']] == ['Deep Work', 'Reading']
        assert all(len(h['daily']) == 7 for h in data['habits'])
        assert len(data['heatmap']) == 2
        assert len(data['candles']) == 7
        assert data['candles'][3]['is_future'] is True
        assert len(data['insights']['insights']) <= 5

    def test_empty_dashboard(self, user, week_id, wednesday):
        data = DashboardService(user, week_id=week_id, today=wednesday).get_full_dashboard()

        assert data['habits'] == []
        assert data['overview']['overall_weekly_pct'] == 0
        assert [i['title'] for i in data['insights']['insights']] == ['Weak Day Identified']


@pytest.mark.django_db
class TestDashboardCache:

    def test_cached_until_a_write(self, user, habit, week_id, wednesday):
        first = DashboardService(user, week_id=week_id, today=wednesday).get_full_dashboard()

        # Bypasses the service, so the cache is not invalidated
        WeekLog.objects.create(
            user=user, habit=habit, week_id=week_id,
            daily=[{'dayIndex': i, 'checked': True, 'actualHours': 2.0} for i in range(7)],
        )
        cached = DashboardService(user, week_id=week_id, today=wednesday).get_full_dashboard()
        assert cached['overview']['total_actual_week'] == first['overview']['total_actual_week'] == 0

        HabitService(user).update_day_hours(habit.habit_id, week_id, 0, 1)
        fresh = DashboardService(user, week_id=week_id, today=wednesday).get_full_dashboard()
        assert fresh['overview']['total_actual_week'] == 13

    def test_refresh_skips_cache(self, user, habit, week_id, wednesday):
        DashboardService(user, week_id=week_id, today=wednesday).get_full_dashboard()
        WeekLogFactory.create(habit, week_id, hours=[1] * 7)

        fresh = DashboardService(user, week_id=week_id, today=wednesday).get_full_dashboard(use_cache=False)
        assert fresh['overview']['total_actual_week'] == 7

    def test_cache_is_per_day(self, user, habit, week_id, wednesday):
        DashboardService(user, week_id=week_id, today=wednesday).get_full_dashboard()
        WeekLogFactory.create(habit, week_id, hours=[1] * 7)

        thursday = DashboardService(user, week_id=week_id, today=date(2026, 2, 19)).get_full_dashboard()
        assert thursday['week']['today_index'] == 3
        assert thursday['overview']['total_actual_week'] == 7

    def test_dashboard_is_kept_for_offline_reading(self, user, habit, week_id, wednesday):
        data = DashboardService(user, week_id=week_id, today=wednesday).get_full_dashboard()
        assert get_cached_week(user.id, week_id) == data
