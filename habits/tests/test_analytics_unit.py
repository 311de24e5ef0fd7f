"""
Unit tests for habits/analytics.py (weekly progress engine)

No database: pairings are built in memory.
"""
import pytest

from habits.analytics import (
    HEATMAP_RATIO_CAP,
    build_candles,
    build_heatmap,
    calculate_weekly_progress,
    capped_pct,
    format_fixed,
    format_hours_short,
    format_number,
    format_pl_delta,
    get_grade,
    raw_ratio,
    round_half_up,
)
from habits.tests.factories import make_pairing, make_unlogged_pairing


class TestRounding:

    @pytest.mark.parametrize('value,expected', [
        (2.5, 3), (2.4999, 2), (-2.5, -2), (-2.51, -3), (0, 0), (99.5, 100),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_capped_pct_caps_at_100(self):
        assert capped_pct(48, 1) == 100

    def test_capped_pct_zero_target(self):
        assert capped_pct(5, 0) == 0

    def test_raw_ratio_is_uncapped(self):
        assert raw_ratio(3, 1) == 3.0
        assert raw_ratio(3, 0) == 0.0

    @pytest.mark.parametrize('value,expected', [
        (0.25, '0.3'), (2, '2.0'), (1.05, '1.1'), (-1, '-1.0'), (10.44, '10.4'),
    ])
    def test_format_fixed_half_up(self, value, expected):
        assert format_fixed(value) == expected

    def test_format_number(self):
        assert format_number(2.0) == '2'
        assert format_number(0.5) == '0.5'
        assert format_number(14) == '14'


class TestEmptyWeek:

    def test_zero_habits_yields_all_zeros(self):
        overview = calculate_weekly_progress([], today_index=3, is_current_week=True)

        assert overview.total_target_week == 0
        assert overview.total_actual_week == 0
        assert overview.overall_weekly_pct == 0
        assert overview.today_pct == 0
        assert overview.pl_delta == 0
        assert overview.pl_delta_pct == 0
        assert overview.habit_progress == ()
        assert all(day.pct == 0 and day.target == 0 for day in overview.daily_progress)
        assert len(overview.daily_progress) == 7

    def test_unlogged_habit_counts_as_zero_week(self):
        overview = calculate_weekly_progress(
            [make_unlogged_pairing('h1', 'Reading', 1)], today_index=0, is_current_week=True
        )
        assert overview.total_target_week == 7
        assert overview.total_actual_week == 0
        assert overview.habit_progress[0].weekly_pct == 0

    def test_short_log_contributes_zero_for_missing_days(self):
        pairing = make_pairing('h1', 'Reading', 1, [1, 1, 1])
        overview = calculate_weekly_progress([pairing], today_index=6, is_current_week=False)
        assert overview.total_actual_week == 3
        assert overview.daily_progress[5].actual == 0


class TestHabitProgress:

    def test_scenario_full_week_hits_target(self):
        """1h/day target executed every day, viewed on Sunday."""
        pairing = make_pairing('h1', 'Meditation', 1, [1] * 7)
        overview = calculate_weekly_progress([pairing], today_index=6, is_current_week=True)

        hp = overview.habit_progress[0]
        assert hp.weekly_pct == 100
        assert overview.overall_weekly_pct == 100
        assert overview.pl_delta == 0
        assert overview.is_ahead is True

    def test_scenario_weekend_only(self):
        """2h/day, only Saturday and Sunday done: 4/14 -> 29%."""
        pairing = make_pairing('h1', 'Gym', 2, [0, 0, 0, 0, 0, 2, 2])
        overview = calculate_weekly_progress([pairing], today_index=6, is_current_week=True)

        hp = overview.habit_progress[0]
        assert hp.weekly_target == 14
        assert hp.weekly_actual == 4
        assert hp.weekly_pct == 29

    def test_weekly_pct_capped_for_overachiever(self):
        pairing = make_pairing('h1', 'Coding', 0.5, [24] * 7)
        overview = calculate_weekly_progress([pairing], today_index=6, is_current_week=True)
        assert overview.habit_progress[0].weekly_pct == 100
        assert all(0 <= day.pct <= 100 for day in overview.daily_progress)

    def test_zero_target_habit_never_divides(self):
        pairing = make_pairing('h1', 'Optional', 0, [1, 0, 0, 0, 0, 0, 0])
        overview = calculate_weekly_progress([pairing], today_index=0, is_current_week=True)

        assert overview.habit_progress[0].weekly_pct == 0
        assert overview.daily_progress[0].pct == 0
        assert overview.today_pct == 0
        assert overview.pl_delta_pct == 0

    def test_today_fields_use_today_index(self):
        pairing = make_pairing('h1', 'Gym', 2, [0, 0, 1, 0, 0, 0, 0])
        overview = calculate_weekly_progress([pairing], today_index=2, is_current_week=True)

        hp = overview.habit_progress[0]
        assert hp.today_target == 2
        assert hp.today_actual == 1
        assert hp.today_pct == 50
        assert overview.today_pct == 50

    def test_habit_order_follows_input(self):
        pairings = [
            make_pairing('b', 'B', 1, [0] * 7),
            make_pairing('a', 'A', 1, [1] * 7),
        ]
        overview = calculate_weekly_progress(pairings, today_index=0, is_current_week=False)
        assert [hp.habit_id for hp in overview.habit_progress] == ['b', 'a']


class TestDailyProgress:

    def test_daily_sums_across_habits(self):
        pairings = [
            make_pairing('h1', 'A', 1, [1, 0, 0, 0, 0, 0, 0]),
            make_pairing('h2', 'B', 3, [1, 3, 0, 0, 0, 0, 0]),
        ]
        overview = calculate_weekly_progress(pairings, today_index=6, is_current_week=False)

        monday = overview.daily_progress[0]
        assert monday.day_name == 'Mon'
        assert monday.target == 4
        assert monday.actual == 2
        assert monday.pct == 50
        assert overview.daily_progress[1].pct == 75


class TestPacing:

    def test_behind_pace_mid_week(self):
        """Wednesday, 2h/day target, 4h done: expected 6h -> delta -2h, -33%."""
        pairing = make_pairing('h1', 'Gym', 2, [2, 2, 0, 0, 0, 0, 0])
        overview = calculate_weekly_progress([pairing], today_index=2, is_current_week=True)

        assert overview.days_elapsed == 3
        assert overview.expected_hours_to_date == pytest.approx(6)
        assert overview.actual_hours_to_date == 4
        assert overview.pl_delta == pytest.approx(-2)
        assert overview.pl_delta_pct == -33
        assert overview.is_ahead is False

    def test_future_days_do_not_count_towards_pace(self):
        pairing = make_pairing('h1', 'Gym', 1, [1, 0, 0, 0, 0, 0, 5])
        overview = calculate_weekly_progress([pairing], today_index=0, is_current_week=True)
        assert overview.actual_hours_to_date == 1
        assert overview.pl_delta == pytest.approx(0)

    @pytest.mark.parametrize('today_index', [0, 3, 6])
    def test_past_week_is_fully_elapsed(self, today_index):
        pairing = make_pairing('h1', 'Gym', 1, [1, 1, 0, 0, 0, 0, 1])
        overview = calculate_weekly_progress([pairing], today_index=today_index, is_current_week=False)

        assert overview.days_elapsed == 7
        assert overview.actual_hours_to_date == overview.total_actual_week == 3
        assert overview.expected_hours_to_date == pytest.approx(7)

    def test_hours_remaining_floored_at_zero(self):
        pairing = make_pairing('h1', 'Gym', 1, [5] * 7)
        overview = calculate_weekly_progress([pairing], today_index=6, is_current_week=True)
        assert overview.hours_remaining == 0


class TestPurity:

    def test_idempotent(self):
        pairings = [make_pairing('h1', 'Gym', 1.5, [1, 2, 0, 1.5, 0, 0, 0])]
        first = calculate_weekly_progress(pairings, today_index=3, is_current_week=True)
        second = calculate_weekly_progress(pairings, today_index=3, is_current_week=True)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_input_not_mutated(self):
        pairing = make_pairing('h1', 'Gym', 1, [1, 0, 0, 0, 0, 0, 0])
        before = [d.actual_hours for d in pairing.week_log.daily]
        calculate_weekly_progress([pairing], today_index=0, is_current_week=True)
        assert [d.actual_hours for d in pairing.week_log.daily] == before


class TestPresentation:

    def test_heatmap_keeps_uncapped_ratio(self):
        pairing = make_pairing('h1', 'Gym', 1, [2, 0.5, 0, 0, 0, 0, 0])
        rows = build_heatmap([pairing], today_index=1, is_current_week=True)

        monday, tuesday, wednesday = rows[0][0], rows[0][1], rows[0][2]
        assert monday.ratio == 2.0
        assert monday.intensity == HEATMAP_RATIO_CAP
        assert tuesday.ratio == tuesday.intensity == 0.5
        assert tuesday.is_today and not tuesday.is_future
        assert wednesday.is_future

    def test_candles_open_at_previous_close(self):
        pairing = make_pairing('h1', 'Gym', 1, [1, 0.5, 1, 0, 0, 0, 0])
        overview = calculate_weekly_progress([pairing], today_index=2, is_current_week=True)
        candles = build_candles(overview.daily_progress, today_index=2, is_current_week=True)

        assert candles[0].open == 0 and candles[0].close == 100
        assert candles[1].open == 100 and candles[1].close == 50
        assert candles[1].is_bullish is False
        assert candles[1].high == 100 and candles[1].low == 50
        assert candles[2].is_bullish is True and candles[2].is_today
        assert candles[3].is_future

    @pytest.mark.parametrize('pct,grade', [
        (100, 'A+'), (95, 'A+'), (90, 'A'), (85, 'A-'), (80, 'B+'), (75, 'B'),
        (70, 'B-'), (65, 'C+'), (60, 'C'), (55, 'C-'), (50, 'D'), (49, 'F'), (0, 'F'),
    ])
    def test_ui_grade_table(self, pct, grade):
        assert get_grade(pct) == grade

    def test_display_strings(self):
        assert format_hours_short(10.5) == '10.5h'
        assert format_pl_delta(2.5) == '+2.5h'
        assert format_pl_delta(-1) == '-1.0h'
        assert format_pl_delta(0) == '+0.0h'
