"""
Export Service
Weekly report export as JSON, CSV, plain-text summary or Excel.

The report shape is built by pure functions (generate_export_data, to_csv,
generate_shareable_summary); ExportService wraps them in file downloads.
"""
from datetime import datetime, timezone as dt_timezone
from io import BytesIO
from typing import Dict, List, Optional, Sequence
import logging

from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

from habits.analytics import (
    WeeklyOverview,
    calculate_weekly_progress,
    capped_pct,
    format_number,
    round_half_up,
)
from habits.exceptions import ExportError
from habits.schemas import HabitWithWeekLog
from habits.services.habit_service import HabitService, get_user_timezone
from habits.utils.constants import DAY_NAMES_FULL, DAY_NAMES_SHORT, DAYS_PER_WEEK
from habits.utils.logging_utils import log_function_call
from habits.utils.time_utils import get_user_today, resolve_week_context

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ('json', 'csv', 'txt', 'xlsx')

# Export report grades. The dashboard uses the finer table in habits.analytics.
EXPORT_GRADE_THRESHOLDS = [
    (95, 'S'),
    (85, 'A'),
    (70, 'B'),
    (50, 'C'),
    (30, 'D'),
]


def get_export_grade(pct: float) -> str:
    for threshold, grade in EXPORT_GRADE_THRESHOLDS:
        if pct >= threshold:
            return grade
    return 'F'


def round_tenth(value: float) -> float:
    """Round to one decimal, halves up (2.25 -> 2.3)."""
    return round_half_up(value * 10) / 10


def format_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a 'Z' suffix."""
    if timezone.is_naive(moment):
        moment = moment.replace(tzinfo=dt_timezone.utc)
    moment = moment.astimezone(dt_timezone.utc)
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f"{moment.microsecond // 1000:03d}Z"


# ============================================================================
# REPORT DATA
# ============================================================================

def generate_export_data(
    habits_with_logs: Sequence[HabitWithWeekLog],
    week_id: str,
    overview: WeeklyOverview,
    exported_at: datetime,
) -> Dict:
    """
    Build the export report for one week.

    Args:
        habits_with_logs: Pairings of the week, in display order
        week_id: Week being exported
        overview: Aggregator output for the same pairings
        exported_at: Export timestamp

    Returns:
        {weekId, exportedAt, summary{...}, habits[{..., daily[{day, checked, hours}]}]}
    """
    habits = []
    for pairing in habits_with_logs:
        habit, log = pairing.habit, pairing.log
        weekly_actual = sum(log.actual_hours(i) for i in range(DAYS_PER_WEEK))
        weekly_target = habit.target_hours_per_day * DAYS_PER_WEEK

        habits.append({
            'name': habit.name,
            'colorTag': habit.color_tag,
            'targetPerDay': habit.target_hours_per_day,
            'weeklyTarget': weekly_target,
            'weeklyActual': round_tenth(weekly_actual),
            'weeklyPct': capped_pct(weekly_actual, weekly_target),
            'daily': [
                {
                    'day': DAY_NAMES_FULL[i],
                    'checked': log.is_checked(i),
                    'hours': log.actual_hours(i),
                }
                for i in range(DAYS_PER_WEEK)
            ],
        })

    return {
        'weekId': week_id,
        'exportedAt': format_timestamp(exported_at),
        'summary': {
            'totalHabits': len(habits_with_logs),
            'weeklyCompletion': overview.overall_weekly_pct,
            'hoursCompleted': round_tenth(overview.hours_completed),
            'hoursTarget': round_tenth(overview.total_target_week),
            'grade': get_export_grade(overview.overall_weekly_pct),
        },
        'habits': habits,
    }


def to_csv(data: Dict) -> str:
    """
    CSV rendering: '#' comment header, one row per habit (Mon..Sun hours,
    total, percent) and a summary comment.
    """
    lines: List[str] = [
        f"# Habit Tracker Export - {data['weekId']}",
        f"# Exported: {data['exportedAt']}",
        f"# Weekly Completion: {data['summary']['weeklyCompletion']}%",
        f"# Grade: {data['summary']['grade']}",
        '',
        ','.join(['Habit', 'Color', 'Target/Day', *DAY_NAMES_SHORT, 'Total', '%']),
    ]

    for habit in data['habits']:
        row = [
            f'"{habit["name"]}"',
            habit['colorTag'],
            format_number(habit['targetPerDay']),
            *(format_number(day['hours']) for day in habit['daily']),
            format_number(habit['weeklyActual']),
            f"{habit['weeklyPct']}%",
        ]
        lines.append(','.join(row))

    lines.append('')
    lines.append(
        f"# Summary: {format_number(data['summary']['hoursCompleted'])}h / "
        f"{format_number(data['summary']['hoursTarget'])}h target"
    )
    return '\n'.join(lines)


def _status_marker(pct: int) -> str:
    if pct >= 80:
        return '🟢'
    if pct >= 50:
        return '🟡'
    return '🔴'


def generate_shareable_summary(data: Dict) -> str:
    """Short plain-text report suitable for pasting into a chat."""
    summary = data['summary']
    lines = [
        f"📊 Weekly Habit Report - {data['weekId']}",
        '',
        f"✅ Completion: {summary['weeklyCompletion']}% | Grade: {summary['grade']}",
        f"⏱️ Hours: {format_number(summary['hoursCompleted'])}h / {format_number(summary['hoursTarget'])}h",
        '',
        '📈 Habits:',
    ]
    for habit in data['habits']:
        lines.append(f"{_status_marker(habit['weeklyPct'])} {habit['name']}: {habit['weeklyPct']}%")

    lines.append('')
    lines.append('- Habit Tracker Dashboard')
    return '\n'.join(lines)


# ============================================================================
# FILE DOWNLOADS
# ============================================================================

class ExportService:
    """Service for exporting one user's week in various formats"""

    def __init__(self, user):
        self.user = user

    def build_report(self, week_id: str, today=None, exported_at: Optional[datetime] = None) -> Dict:
        """Report data for a week of this user."""
        pairings = HabitService(self.user).get_habits_with_logs(week_id)
        today = today or get_user_today(get_user_timezone(self.user))
        today_index, is_current = resolve_week_context(week_id, today)
        overview = calculate_weekly_progress(pairings, today_index, is_current)
        return generate_export_data(pairings, week_id, overview, exported_at or timezone.now())

    @log_function_call(log_args=True)
    def export_week(self, week_id: str, format: str = 'json', today=None) -> HttpResponse:
        """
        Export a week as a file download.

        Args:
            week_id: 'YYYY-Www'
            format: 'json', 'csv', 'txt' or 'xlsx'
            today: Override of the user's local date

        Returns:
            HttpResponse with Content-Disposition attachment

        Raises:
            ExportError: For an unsupported format
        """
        if format not in EXPORT_FORMATS:
            raise ExportError(format, f"Unsupported format. Use one of: {', '.join(EXPORT_FORMATS)}")

        data = self.build_report(week_id, today=today)

        if format == 'json':
            response = JsonResponse(data, json_dumps_params={'indent': 2, 'ensure_ascii': False})
        elif format == 'csv':
            response = HttpResponse(to_csv(data), content_type='text/csv; charset=utf-8')
        elif format == 'txt':
            response = HttpResponse(generate_shareable_summary(data), content_type='text/plain; charset=utf-8')
        else:
            response = HttpResponse(
                self._build_workbook(data),
                content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
            )

        response['Content-Disposition'] = f'attachment; filename="habit-tracker-{week_id}.{format}"'
        logger.info("Exported %s as %s for user %s", week_id, format, self.user.id)
        return response

    def _build_workbook(self, data: Dict) -> bytes:
        """Excel rendering with openpyxl, laid out like the CSV."""
        wb = Workbook()
        ws = wb.active
        ws.title = data['weekId']

        ws['A1'] = f"Habit Tracker Export - {data['weekId']}"
        ws['A1'].font = Font(size=14, bold=True)
        ws.merge_cells('A1:L1')
        ws['A2'] = f"Weekly Completion: {data['summary']['weeklyCompletion']}% | Grade: {data['summary']['grade']}"

        headers = ['Habit', 'Color', 'Target/Day', *DAY_NAMES_SHORT, 'Total', '%']
        header_fill = PatternFill(start_color='0277BD', end_color='0277BD', fill_type='solid')
        header_font = Font(color='FFFFFF', bold=True)

        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=4, column=col, value=header)
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = Alignment(horizontal='center')

        for row_idx, habit in enumerate(data['habits'], 5):
            values = [
                habit['name'],
                habit['colorTag'],
                habit['targetPerDay'],
                *(day['hours'] for day in habit['daily']),
                habit['weeklyActual'],
                habit['weeklyPct'] / 100,
            ]
            for col, value in enumerate(values, 1):
                ws.cell(row=row_idx, column=col, value=value)
            ws.cell(row=row_idx, column=len(values)).number_format = '0%'

        summary_row = len(data['habits']) + 6
        ws.cell(row=summary_row, column=1, value='Summary').font = Font(bold=True)
        ws.cell(row=summary_row, column=11, value=data['summary']['hoursCompleted'])
        ws.cell(row=summary_row, column=12, value=f"of {format_number(data['summary']['hoursTarget'])}h")

        ws.column_dimensions['A'].width = 24
        ws.column_dimensions['B'].width = 10
        ws.column_dimensions['C'].width = 12

        output = BytesIO()
        wb.save(output)
        return output.getvalue()
