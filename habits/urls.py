"""
API v1 URL Configuration for the habit ledger.
"""
from django.urls import path

from habits import views_api

app_name = 'api_v1'

urlpatterns = [
    # =========================================================================
    # DASHBOARD
    # =========================================================================
    path('dashboard/', views_api.api_dashboard, name='dashboard'),
    path('insights/', views_api.api_insights, name='insights'),
    path('weeks/', views_api.api_weeks, name='weeks'),

    # =========================================================================
    # HABITS
    # =========================================================================
    path('habits/', views_api.api_habits, name='habits'),
    path('habit/<str:habit_id>/', views_api.api_habit_update, name='habit_update'),
    path('habit/<str:habit_id>/delete/', views_api.api_habit_delete, name='habit_delete'),

    # =========================================================================
    # DAILY ENTRIES
    # =========================================================================
    path(
        'habit/<str:habit_id>/week/<str:week_id>/day/<int:day_index>/toggle/',
        views_api.api_day_toggle,
        name='day_toggle',
    ),
    path(
        'habit/<str:habit_id>/week/<str:week_id>/day/<int:day_index>/hours/',
        views_api.api_day_hours,
        name='day_hours',
    ),

    # =========================================================================
    # EXPORT & SYNC
    # =========================================================================
    path('export/<str:week_id>/', views_api.api_export, name='export'),
    path('sync/', views_api.api_sync, name='sync'),
]
