"""
Get Employee History Query - recent time logs of one employee.

GET /api/mobile/history/{name}?limit=
"""
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from .base import BaseQuery
from utils.datetime import local_date_str, local_time_str


MAX_HISTORY = 90


@dataclass
class GetEmployeeHistoryResult:
    found: bool
    employee_name: Optional[str] = None
    history: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None


class GetEmployeeHistoryQuery(BaseQuery[GetEmployeeHistoryResult]):

    def execute(self, identifier: str, limit: int = 7) -> GetEmployeeHistoryResult:
        from apps.employees.models import Employee
        from apps.timelogs.models import TimeLog

        employee = Employee.find(identifier)
        if employee is None:
            return GetEmployeeHistoryResult(found=False, error="Employee not found")

        limit = max(1, min(int(limit), MAX_HISTORY))
        tz_name = self.tz_name
        logs = TimeLog.objects.filter(employee_id=employee.id).order_by('-clock_in')[:limit]

        history = [
            {
                'date': local_date_str(log.clock_in, tz_name),
                'clock_in': local_time_str(log.clock_in, tz_name),
                'clock_out': local_time_str(log.clock_out, tz_name) or None,
                'note': log.note,
                'status': log.status,
                'duration': log.duration_text(),
            }
            for log in logs
        ]
        return GetEmployeeHistoryResult(found=True, employee_name=employee.full_name, history=history)
