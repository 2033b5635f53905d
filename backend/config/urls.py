"""
URL configuration for the time clock backend.

Note: URLs are declared at project level, not per app.
"""
from django.contrib import admin
from django.urls import path, include

from config.api.views import health_check, metrics

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health_check, name='health-check'),
    path('metrics', metrics, name='metrics'),
    path('api/', include('config.api.urls')),
]
