"""
Unit tests for habits/utils/time_utils.py

- ISO week ids across year boundaries (52 and 53 week years)
- Week labels and ranges
- Resolution of "today" into (today_index, is_current_week)
"""
import pytest
from datetime import date, datetime
import pytz

from habits.exceptions import InvalidWeekIdError
from habits.utils.time_utils import (
    create_empty_week_log,
    format_hours,
    get_day_index,
    get_first_day_of_week,
    get_next_week_id,
    get_previous_week_id,
    get_short_week_label,
    get_user_today,
    get_week_dates,
    get_week_id,
    get_week_id_list,
    get_week_label,
    get_week_range_label,
    is_current_week,
    parse_week_id,
    resolve_week_context,
    weeks_in_year,
)


class TestWeekIds:

    def test_week_id_is_zero_padded(self):
        """Monday 2026-02-16 falls in week 8."""
        assert get_week_id(date(2026, 2, 16)) == '2026-W08'

    def test_sunday_belongs_to_the_same_week(self):
        assert get_week_id(date(2026, 2, 22)) == '2026-W08'

    def test_early_january_can_belong_to_previous_iso_year(self):
        """Jan 1 2027 is a Friday, still in the last week of 2026."""
        assert get_week_id(date(2027, 1, 1)) == '2026-W53'

    def test_late_december_can_belong_to_next_iso_year(self):
        """Dec 29 2025 is the Monday of 2026-W01."""
        assert get_week_id(date(2025, 12, 29)) == '2026-W01'

    def test_weeks_in_year(self):
        assert weeks_in_year(2026) == 53
        assert weeks_in_year(2025) == 52

    def test_parse_round_trip(self):
        assert parse_week_id('2026-W08') == (2026, 8)

    @pytest.mark.parametrize('week_id', ['2026-W8', '2026W08', 'W08-2026', '', None, '2025-W53', '2026-W00'])
    def test_parse_rejects_malformed_or_missing_weeks(self, week_id):
        with pytest.raises(InvalidWeekIdError):
            parse_week_id(week_id)

    def test_invalid_week_id_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_week_id('garbage')


class TestWeekDates:

    def test_first_day_is_monday(self):
        monday = get_first_day_of_week(2026, 1)
        assert monday == date(2025, 12, 29)
        assert monday.weekday() == 0

    def test_week_dates_span_monday_to_sunday(self):
        dates = get_week_dates('2026-W08')
        assert len(dates) == 7
        assert dates[0] == date(2026, 2, 16)
        assert dates[-1] == date(2026, 2, 22)

    def test_day_index_monday_zero_sunday_six(self):
        assert get_day_index(date(2026, 2, 16)) == 0
        assert get_day_index(date(2026, 2, 22)) == 6


class TestWeekNavigation:

    def test_previous_week_crosses_into_52_week_year(self):
        assert get_previous_week_id('2026-W01') == '2025-W52'

    def test_next_week_after_week_53(self):
        assert get_next_week_id('2026-W53') == '2027-W01'

    def test_week_id_list_order(self):
        weeks = get_week_id_list(date(2026, 2, 18), past_weeks=2, future_weeks=1)
        assert weeks == ['2026-W06', '2026-W07', '2026-W08', '2026-W09']

    def test_week_id_list_default_size(self):
        assert len(get_week_id_list(date(2026, 2, 18))) == 12 + 1 + 4


class TestLabels:

    def test_week_label_uses_month_of_monday(self):
        assert get_week_label('2026-W07') == 'Week 07 — Feb 2026'

    def test_short_label(self):
        assert get_short_week_label('2026-W07') == 'W07 2026'

    def test_range_label_same_month(self):
        assert get_week_range_label('2026-W08') == 'Feb 16 - 22, 2026'

    def test_range_label_across_years(self):
        assert get_week_range_label('2026-W01') == 'Dec 29 - Jan 4, 2026'

    @pytest.mark.parametrize('hours,expected', [
        (0, '0m'),
        (0.5, '30m'),
        (1.5, '1h 30m'),
        (2, '2h'),
        (1.999, '2h'),
    ])
    def test_format_hours(self, hours, expected):
        assert format_hours(hours) == expected


class TestTodayResolution:

    def test_current_week_context(self):
        assert resolve_week_context('2026-W08', date(2026, 2, 18)) == (2, True)

    def test_past_week_context(self):
        assert resolve_week_context('2026-W07', date(2026, 2, 18)) == (2, False)

    def test_is_current_week(self):
        assert is_current_week('2026-W08', date(2026, 2, 22))
        assert not is_current_week('2026-W09', date(2026, 2, 22))

    def test_resolve_rejects_bad_week(self):
        with pytest.raises(InvalidWeekIdError):
            resolve_week_context('2026-08', date(2026, 2, 18))

    def test_user_today_follows_timezone(self):
        """03:00 UTC on Monday is still Sunday evening in New York."""
        now = pytz.UTC.localize(datetime(2026, 2, 16, 3, 0))
        assert get_user_today('America/New_York', now=now) == date(2026, 2, 15)
        assert get_user_today('Asia/Kolkata', now=now) == date(2026, 2, 16)

    def test_unknown_timezone_falls_back_to_utc(self):
        now = pytz.UTC.localize(datetime(2026, 2, 16, 3, 0))
        assert get_user_today('Mars/Olympus', now=now) == date(2026, 2, 16)


class TestEmptyWeekLog:

    def test_has_seven_unchecked_zero_days(self):
        log = create_empty_week_log('h1', '2026-W08')
        assert log.habit_id == 'h1'
        assert log.week_id == '2026-W08'
        assert [d.day_index for d in log.daily] == list(range(7))
        assert not any(d.checked for d in log.daily)
        assert log.total_hours == 0
