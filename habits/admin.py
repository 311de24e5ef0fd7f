from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from habits.models import Habit, WeekLog, UserPreferences


@admin.register(Habit)
class HabitAdmin(SimpleHistoryAdmin):
    list_display = ['name', 'user', 'target_hours_per_day', 'color_tag', 'created_at']
    list_filter = ['color_tag', 'created_at', 'user']
    search_fields = ['name']
    readonly_fields = ['habit_id', 'created_at', 'updated_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('habit_id', 'user', 'name', 'target_hours_per_day', 'color_tag')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        """Filter to show only user's own habits (unless superuser)"""
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        return qs.filter(user=request.user)

    def save_model(self, request, obj, form, change):
        """Auto-assign user on create if not set"""
        if not change and not obj.user_id:
            obj.user = request.user
        super().save_model(request, obj, form, change)


@admin.register(WeekLog)
class WeekLogAdmin(admin.ModelAdmin):
    list_display = ['week_id', 'habit', 'user', 'updated_at']
    list_filter = ['week_id', 'user']
    search_fields = ['habit__name', 'week_id']
    readonly_fields = ['updated_at']


@admin.register(UserPreferences)
class UserPreferencesAdmin(admin.ModelAdmin):
    list_display = ['user', 'timezone', 'updated_at']
    search_fields = ['user__username']
