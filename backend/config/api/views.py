"""
API views (non-viewset endpoints).
"""
import logging
import os
import platform
import sys
import time

from django.conf import settings
from django.db import DatabaseError
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from infrastructure.bootstrap import get_container
from infrastructure.cache import Cache
from infrastructure.clock import Clock
from utils.datetime import local_day_bounds

logger = logging.getLogger(__name__)

HEALTH_CACHE_KEY = 'health:probe'
_STARTED_AT = time.monotonic()


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    """
    Deep health check for load balancers and monitoring.

    The database is required; the cache only degrades roster and dashboard
    reads, so a cache failure is reported but still answers 200.
    Kiosks use the cheaper GET /api/mobile/health as their connectivity probe.
    """
    container = get_container()
    clock = container.get(Clock)
    health = {
        'status': 'healthy',
        'time_zone': settings.TIME_ZONE,
        'business_date': clock.local_date(settings.TIME_ZONE).isoformat(),
        'checks': {},
    }

    try:
        from apps.employees.models import Employee
        health['checks']['database'] = 'ok'
        health['active_employees'] = Employee.objects.filter(status=Employee.Status.ACTIVE).count()
    except DatabaseError as e:
        health['status'] = 'unhealthy'
        health['checks']['database'] = str(e)

    try:
        cache = container.get(Cache)
        cache.set(HEALTH_CACHE_KEY, 'ok', ttl=10)
        health['checks']['cache'] = 'ok' if cache.get(HEALTH_CACHE_KEY) == 'ok' else 'read failed'
    except Exception as e:
        health['checks']['cache'] = f'error: {e}'

    status_code = 200 if health['status'] == 'healthy' else 503
    return Response(health, status=status_code)


@api_view(['GET'])
@permission_classes([AllowAny])
def metrics(request):
    """
    Process, database and cache figures for monitoring dashboards (JSON).

    A database failure answers 500; cache figures are best effort.
    """
    from apps.employees.models import Employee
    from apps.timelogs.models import TimeLog
    from services.queries.get_dashboard_stats import DASHBOARD_CACHE_PREFIX
    from services.queries.get_employees import EMPLOYEES_CACHE_KEY

    container = get_container()
    clock = container.get(Clock)
    tz_name = settings.TIME_ZONE
    data = {
        'timestamp': clock.now().isoformat(),
        'uptime': int(time.monotonic() - _STARTED_AT),
        'platform': sys.platform,
        'python_version': platform.python_version(),
        'environment': os.environ.get('ENVIRONMENT', 'development'),
        'fake_infrastructure': container.uses_fakes,
    }

    try:
        start, end = local_day_bounds(clock.local_date(tz_name), tz_name)
        data['database'] = {
            'employees': Employee.objects.count(),
            'active_employees': Employee.objects.filter(status=Employee.Status.ACTIVE).count(),
            'time_logs': TimeLog.objects.count(),
            'open_sessions': TimeLog.objects.filter(clock_out__isnull=True).count(),
            'clock_ins_today': TimeLog.objects.filter(clock_in__gte=start, clock_in__lt=end).count(),
        }
    except DatabaseError as e:
        logger.error(f"Metrics database query failed: {e}")
        return Response({'error': str(e), 'timestamp': data['timestamp']}, status=500)

    try:
        cache = container.get(Cache)
        roster = cache.get_json(EMPLOYEES_CACHE_KEY)
        data['cache'] = {
            'roster_cached': roster is not None,
            'roster_size': len(roster) if roster else 0,
            'dashboard_entries': len(cache.keys(DASHBOARD_CACHE_PREFIX)),
        }
    except Exception as e:
        data['cache'] = {'error': str(e)}

    return Response(data)
