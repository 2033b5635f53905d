"""
Get Time Logs Query - admin listing of time logs.

GET /api/admin/time-logs, GET /api/admin/time-logs/{id},
POST /api/admin/export-time-logs
"""
from datetime import date
from typing import Any, Dict, List, Optional
from dataclasses import dataclass

from .base import BaseQuery
from utils.datetime import local_date_str, local_day_bounds, local_time_str


def serialize_time_log(log, employee, tz_name: str) -> Dict[str, Any]:
    return {
        'id': log.id,
        'employee_id': log.employee_id,
        'emp_code': employee.emp_code if employee else '',
        'full_name': employee.full_name if employee else '',
        'position': employee.position if employee else '',
        'department': employee.department if employee else '',
        'clock_in': log.clock_in.isoformat(),
        'clock_out': log.clock_out.isoformat() if log.clock_out else None,
        'clock_in_date': local_date_str(log.clock_in, tz_name),
        'clock_in_time': local_time_str(log.clock_in, tz_name),
        'clock_out_date': local_date_str(log.clock_out, tz_name),
        'clock_out_time': local_time_str(log.clock_out, tz_name),
        'duration': log.duration_text() or '',
        'note': log.note,
        'status': log.status,
        'latitude_in': log.latitude_in,
        'longitude_in': log.longitude_in,
        'latitude_out': log.latitude_out,
        'longitude_out': log.longitude_out,
    }


def _filtered_logs(logs, from_date, to_date, employee_id, tz_name: str):
    """Narrow a TimeLog queryset to local calendar days [from_date, to_date] and one employee."""
    if from_date:
        logs = logs.filter(clock_in__gte=local_day_bounds(from_date, tz_name)[0])
    if to_date:
        logs = logs.filter(clock_in__lt=local_day_bounds(to_date, tz_name)[1])
    if employee_id:
        logs = logs.filter(employee_id=employee_id)
    return logs


@dataclass
class GetTimeLogsResult:
    logs: List[Dict[str, Any]]


class GetTimeLogsQuery(BaseQuery[GetTimeLogsResult]):

    def execute(
        self,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        employee_id: Optional[int] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> GetTimeLogsResult:
        from apps.employees.models import Employee
        from apps.timelogs.models import TimeLog

        tz_name = self.tz_name
        logs = _filtered_logs(TimeLog.objects.all(), from_date, to_date, employee_id, tz_name)
        page = list(logs.order_by('-clock_in')[offset:offset + limit])
        employees = Employee.objects.in_bulk({log.employee_id for log in page})
        return GetTimeLogsResult(
            logs=[serialize_time_log(log, employees.get(log.employee_id), tz_name) for log in page]
        )


@dataclass
class GetTimeLogResult:
    found: bool
    log: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class GetTimeLogQuery(BaseQuery[GetTimeLogResult]):

    def execute(self, log_id: int) -> GetTimeLogResult:
        from apps.employees.models import Employee
        from apps.timelogs.models import TimeLog

        log = TimeLog.objects.filter(id=log_id).first()
        if log is None:
            return GetTimeLogResult(found=False, error="Time log not found")
        employee = Employee.objects.filter(id=log.employee_id).first()
        return GetTimeLogResult(found=True, log=serialize_time_log(log, employee, self.tz_name))


def _coordinates(latitude, longitude) -> str:
    if latitude is None or longitude is None:
        return ''
    return f'{latitude}, {longitude}'


def export_row(log, employee, tz_name: str) -> Dict[str, Any]:
    """Flat, spreadsheet-friendly row: local dates and times, no ids."""
    return {
        'emp_code': employee.emp_code if employee else '',
        'full_name': employee.full_name if employee else '',
        'position': employee.position if employee else '',
        'department': employee.department if employee else '',
        'clock_in_date': local_date_str(log.clock_in, tz_name),
        'clock_in_time': local_time_str(log.clock_in, tz_name),
        'clock_out_date': local_date_str(log.clock_out, tz_name),
        'clock_out_time': local_time_str(log.clock_out, tz_name),
        'note': log.note,
        'status': log.status,
        'location_in': _coordinates(log.latitude_in, log.longitude_in),
        'location_out': _coordinates(log.latitude_out, log.longitude_out),
    }


@dataclass
class ExportTimeLogsResult:
    rows: List[Dict[str, Any]]

    @property
    def count(self) -> int:
        return len(self.rows)


class ExportTimeLogsQuery(BaseQuery[ExportTimeLogsResult]):
    """Every matching time log, newest first. Not paginated."""

    def execute(
        self,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        employee_id: Optional[int] = None,
    ) -> ExportTimeLogsResult:
        from apps.employees.models import Employee
        from apps.timelogs.models import TimeLog

        tz_name = self.tz_name
        logs = list(
            _filtered_logs(TimeLog.objects.all(), from_date, to_date, employee_id, tz_name).order_by('-clock_in')
        )
        employees = Employee.objects.in_bulk({log.employee_id for log in logs})
        rows = [export_row(log, employees.get(log.employee_id), tz_name) for log in logs]
        self.log_info("Time logs exported", count=len(rows))
        return ExportTimeLogsResult(rows=rows)
