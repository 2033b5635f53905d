"""
Get Dashboard Stats Query - today's attendance summary.

GET /api/mobile/dashboard and GET /api/admin/dashboard
"""
from typing import Any, Dict, List
from dataclasses import dataclass, field

from .base import BaseQuery
from utils.datetime import local_date_str, local_day_bounds, local_time_str

DASHBOARD_CACHE_TTL = 60  # seconds
RECENT_LOGS = 10
DASHBOARD_CACHE_PREFIX = 'dashboard:stats:'


def dashboard_cache_key(day) -> str:
    return f'{DASHBOARD_CACHE_PREFIX}{day.isoformat()}'


@dataclass
class GetDashboardStatsResult:
    """Result of getting dashboard stats."""
    date: str
    total_employees: int
    checked_in: int
    not_checked_out: int
    checked_out: int
    recent_logs: List[Dict[str, Any]] = field(default_factory=list)

    def today(self) -> Dict[str, Any]:
        return {
            'date': self.date,
            'total_employees': self.total_employees,
            'checked_in': self.checked_in,
            'not_checked_out': self.not_checked_out,
            'checked_out': self.checked_out,
        }


class GetDashboardStatsQuery(BaseQuery[GetDashboardStatsResult]):

    def execute(self, include_recent: bool = False) -> GetDashboardStatsResult:
        tz_name = self.tz_name
        today = self.today()

        stats = self.cached(
            dashboard_cache_key(today),
            lambda: self._count(today, tz_name),
            ttl=DASHBOARD_CACHE_TTL,
        )

        result = GetDashboardStatsResult(date=today.isoformat(), **stats)
        if include_recent:
            result.recent_logs = self._recent_logs(tz_name)
        return result

    def _count(self, today, tz_name: str) -> Dict[str, int]:
        from apps.employees.models import Employee
        from apps.timelogs.models import TimeLog

        start, end = local_day_bounds(today, tz_name)
        todays = TimeLog.objects.filter(clock_in__gte=start, clock_in__lt=end)
        checked_in = todays.values('employee_id').distinct().count()
        not_checked_out = todays.filter(clock_out__isnull=True).values('employee_id').distinct().count()
        return {
            'total_employees': Employee.objects.filter(status=Employee.Status.ACTIVE).count(),
            'checked_in': checked_in,
            'not_checked_out': not_checked_out,
            'checked_out': checked_in - not_checked_out,
        }

    def _recent_logs(self, tz_name: str) -> List[Dict[str, Any]]:
        from apps.employees.models import Employee
        from apps.timelogs.models import TimeLog

        logs = list(TimeLog.objects.order_by('-clock_in')[:RECENT_LOGS])
        employees = Employee.objects.in_bulk({log.employee_id for log in logs})
        recent = []
        for log in logs:
            employee = employees.get(log.employee_id)
            recent.append({
                'id': log.id,
                'emp_code': employee.emp_code if employee else '',
                'full_name': employee.full_name if employee else '',
                'clock_in_date': local_date_str(log.clock_in, tz_name),
                'clock_in_time': local_time_str(log.clock_in, tz_name),
                'clock_out_time': local_time_str(log.clock_out, tz_name),
                'note': log.note,
            })
        return recent
