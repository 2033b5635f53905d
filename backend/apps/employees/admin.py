from django.contrib import admin
from .models import Employee


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['emp_code', 'full_name', 'position', 'department', 'status', 'mobile_enabled']
    list_filter = ['status', 'department', 'mobile_enabled']
    search_fields = ['emp_code', 'full_name', 'line_name']
    readonly_fields = ['created_at', 'last_mobile_login']

    fieldsets = (
        ('Employee', {
            'fields': ('emp_code', 'full_name', 'position', 'department', 'status')
        }),
        ('LINE profile', {
            'fields': ('line_id', 'line_name', 'line_picture')
        }),
        ('Mobile', {
            'fields': ('mobile_enabled', 'last_mobile_login', 'created_at')
        }),
    )
