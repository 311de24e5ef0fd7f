"""
Services package for the habit ledger.

- habit_service: Habits and week logs (the persistent store)
- dashboard_service: Weekly overview, insights, heatmap and candles
- export_service: JSON / CSV / text / Excel week reports
- sync_service: Offline operation queue and bidirectional sync
"""
from .habit_service import HabitService
from .dashboard_service import DashboardService
from .export_service import ExportService
from .sync_service import SyncService, OfflineQueue

__all__ = [
    'HabitService',
    'DashboardService',
    'ExportService',
    'SyncService',
    'OfflineQueue',
]
