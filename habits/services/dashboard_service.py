"""
Dashboard Service

Assembles the weekly dashboard: progress overview, coaching insights,
heatmap, day candles and week navigation. This is where the user's local
"today" is resolved into the explicit (today_index, is_current_week) pair
that the pure analytics functions take.
"""
from dataclasses import asdict
from datetime import date
from typing import Dict, List, Optional
import logging

from django.utils import timezone

from habits import analytics
from habits.behavioral.insights_engine import (
    generate_insights,
    get_top_insights,
    summarize_tags,
)
from habits.helpers.cache_helpers import get_cached_dashboard, set_cached_dashboard
from habits.services.habit_service import HabitService, get_user_timezone
from habits.services.sync_service import cache_week_snapshot
from habits.utils.constants import get_setting
from habits.utils.logging_utils import log_function_call
from habits.utils.time_utils import (
    get_next_week_id,
    get_previous_week_id,
    get_short_week_label,
    get_user_today,
    get_week_dates,
    get_week_id,
    get_week_id_list,
    get_week_label,
    get_week_range_label,
    parse_week_id,
    resolve_week_context,
)

logger = logging.getLogger(__name__)


class DashboardService:
    """
    Dashboard data for one user and one week.

    Usage:
        service = DashboardService(request.user, week_id='2026-W08')
        data = service.get_full_dashboard()
    """

    def __init__(self, user, week_id: Optional[str] = None, today: Optional[date] = None):
        self.user = user
        self.timezone = get_user_timezone(user)
        self.today = today or get_user_today(self.timezone)
        self.week_id = week_id or get_week_id(self.today)
        parse_week_id(self.week_id)
        self.today_index, self.is_current_week = resolve_week_context(self.week_id, self.today)
        self._pairings = None
        self._overview = None

    @property
    def pairings(self):
        if self._pairings is None:
            self._pairings = HabitService(self.user).get_habits_with_logs(self.week_id)
        return self._pairings

    @property
    def overview(self) -> analytics.WeeklyOverview:
        if self._overview is None:
            self._overview = analytics.calculate_weekly_progress(
                self.pairings, self.today_index, self.is_current_week
            )
        return self._overview

    def get_week_overview(self) -> Dict:
        """Overview metrics with display strings."""
        overview = self.overview
        data = overview.to_dict()
        data.update({
            'grade': analytics.get_grade(overview.overall_weekly_pct),
            'hours_completed_display': analytics.format_hours_short(overview.hours_completed),
            'hours_remaining_display': analytics.format_hours_short(overview.hours_remaining),
            'pl_delta_display': analytics.format_pl_delta(overview.pl_delta),
        })
        return data

    def get_insights(self, limit: Optional[int] = None) -> Dict:
        """Coaching insights, most urgent first, truncated to `limit`."""
        if limit is None:
            limit = get_setting('INSIGHTS_LIMIT')

        insights = generate_insights(
            self.pairings,
            self.overview.habit_progress,
            self.overview.daily_progress,
            self.today_index,
            self.is_current_week,
            generated_at=timezone.now(),
        )
        return {
            'insights': [i.to_dict() for i in get_top_insights(insights, limit)],
            'tag_counts': summarize_tags(insights),
            'total': len(insights),
        }

    def get_heatmap(self) -> List[List[Dict]]:
        rows = analytics.build_heatmap(self.pairings, self.today_index, self.is_current_week)
        return [[asdict(cell) for cell in row] for row in rows]

    def get_candles(self) -> List[Dict]:
        candles = analytics.build_candles(self.overview.daily_progress, self.today_index, self.is_current_week)
        return [asdict(c) for c in candles]

    def get_week_navigation(self) -> Dict:
        return {
            'week_id': self.week_id,
            'label': get_week_label(self.week_id),
            'short_label': get_short_week_label(self.week_id),
            'range_label': get_week_range_label(self.week_id),
            'dates': [d.isoformat() for d in get_week_dates(self.week_id)],
            'previous_week_id': get_previous_week_id(self.week_id),
            'next_week_id': get_next_week_id(self.week_id),
            'current_week_id': get_week_id(self.today),
            'is_current_week': self.is_current_week,
            'today_index': self.today_index,
        }

    def get_week_list(self) -> List[Dict]:
        week_ids = get_week_id_list(
            self.today,
            past_weeks=get_setting('WEEK_LIST_PAST'),
            future_weeks=get_setting('WEEK_LIST_FUTURE'),
        )
        current = get_week_id(self.today)
        return [
            {'week_id': w, 'label': get_short_week_label(w), 'is_current': w == current}
            for w in week_ids
        ]

    @log_function_call()
    def get_full_dashboard(self, use_cache: bool = True) -> Dict:
        """
        Everything the dashboard renders for the week, cached per user, week
        and local day. Any write by the user invalidates the cache.
        """
        today_iso = self.today.isoformat()
        if use_cache:
            cached = get_cached_dashboard(self.user.id, self.week_id, today_iso)
            if cached is not None:
                return cached

        data = {
            'week': self.get_week_navigation(),
            'habits': [
                {
                    'habit': {
                        'id': p.habit.id,
                        'name': p.habit.name,
                        'target_hours_per_day': p.habit.target_hours_per_day,
                        'color_tag': p.habit.color_tag,
                    },
                    'daily': [asdict(d) for d in p.log.daily],
                }
                for p in self.pairings
            ],
            'overview': self.get_week_overview(),
            'insights': self.get_insights(get_setting('INSIGHTS_LIMIT_COMPACT')),
            'heatmap': self.get_heatmap(),
            'candles': self.get_candles(),
        }

        set_cached_dashboard(self.user.id, self.week_id, today_iso, data)
        cache_week_snapshot(self.user.id, self.week_id, data)
        logger.debug("Built dashboard for user %s week %s", self.user.id, self.week_id)
        return data
