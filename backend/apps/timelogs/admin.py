from django.contrib import admin
from .models import TimeLog


@admin.register(TimeLog)
class TimeLogAdmin(admin.ModelAdmin):
    list_display = ['id', 'employee_id', 'clock_in', 'clock_out', 'status']
    list_filter = ['status', 'clock_in']
    search_fields = ['note', 'line_name']
    readonly_fields = ['created_at']
    date_hierarchy = 'clock_in'

    fieldsets = (
        ('Session', {
            'fields': ('employee_id', 'clock_in', 'clock_out', 'status', 'note')
        }),
        ('Location', {
            'fields': ('latitude_in', 'longitude_in', 'latitude_out', 'longitude_out')
        }),
        ('LINE', {
            'fields': ('line_name', 'line_picture')
        }),
        ('Timestamps', {
            'fields': ('created_at',)
        }),
    )
