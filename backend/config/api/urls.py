"""
API URL configuration for the time clock.
"""
from django.urls import path

from .viewsets import (
    MobileViewSet,
    CompatViewSet,
    AdminAuthViewSet,
    AdminDashboardViewSet,
    AdminEmployeesViewSet,
    AdminTimeLogsViewSet,
    AdminSettingsViewSet,
)

urlpatterns = [
    # Mobile endpoints (no auth required)
    path('mobile/employees', MobileViewSet.as_view({'get': 'employees'}), name='mobile-employees'),
    path('mobile/status/<str:name>', MobileViewSet.as_view({'get': 'employee_status'}), name='mobile-status'),
    path('mobile/history/<str:name>', MobileViewSet.as_view({'get': 'history'}), name='mobile-history'),
    path('mobile/dashboard', MobileViewSet.as_view({'get': 'dashboard'}), name='mobile-dashboard'),
    path('mobile/config', MobileViewSet.as_view({'get': 'config'}), name='mobile-config'),
    path('mobile/health', MobileViewSet.as_view({'get': 'health'}), name='mobile-health'),
    path('mobile/batch', MobileViewSet.as_view({'post': 'batch'}), name='mobile-batch'),
    path('mobile/clockin', MobileViewSet.as_view({'post': 'clockin'}), name='mobile-clockin'),
    path('mobile/clockout', MobileViewSet.as_view({'post': 'clockout'}), name='mobile-clockout'),

    # Compatibility reads
    path('getLiffId', CompatViewSet.as_view({'get': 'liff_id'}), name='get-liff-id'),
    path('getTimeOffset', CompatViewSet.as_view({'get': 'time_offset'}), name='get-time-offset'),

    # Admin endpoints
    path('admin/login', AdminAuthViewSet.as_view({'post': 'login'}), name='admin-login'),
    path('admin/dashboard', AdminDashboardViewSet.as_view({'get': 'list'}), name='admin-dashboard'),
    path('admin/employees', AdminEmployeesViewSet.as_view({'get': 'list', 'post': 'create'}), name='admin-employees'),
    path(
        'admin/employees/<int:pk>',
        AdminEmployeesViewSet.as_view({'get': 'retrieve', 'put': 'update', 'delete': 'destroy'}),
        name='admin-employee-detail'
    ),
    path(
        'admin/import-employees',
        AdminEmployeesViewSet.as_view({'post': 'import_employees'}),
        name='admin-import-employees'
    ),
    path('admin/time-logs', AdminTimeLogsViewSet.as_view({'get': 'list', 'post': 'create'}), name='admin-time-logs'),
    path(
        'admin/time-logs/<int:pk>',
        AdminTimeLogsViewSet.as_view({'get': 'retrieve', 'put': 'update', 'delete': 'destroy'}),
        name='admin-time-log-detail'
    ),
    path(
        'admin/export-time-logs',
        AdminTimeLogsViewSet.as_view({'post': 'export'}),
        name='admin-export-time-logs'
    ),
    path(
        'admin/cleanup-time-logs',
        AdminTimeLogsViewSet.as_view({'post': 'cleanup'}),
        name='admin-cleanup-time-logs'
    ),
    path('admin/settings', AdminSettingsViewSet.as_view({'get': 'list', 'post': 'create'}), name='admin-settings'),
]
