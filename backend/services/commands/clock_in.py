"""
Clock In Command - opens today's time log for an employee.

POST /api/mobile/clockin
"""
from typing import Optional
from dataclasses import dataclass
from datetime import datetime

from .base import BaseCommand
from services.notifications.service import CLOCK_IN
from utils.datetime import local_time_str


@dataclass
class ClockResult:
    """Result of a clock-in or clock-out."""
    success: bool
    time_log_id: Optional[int] = None
    employee_name: Optional[str] = None
    timestamp: Optional[datetime] = None
    time: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


def resolve_employee(identifier: str):
    """Active employee by code or full name, or an error ClockResult."""
    from apps.employees.models import Employee

    if not (identifier or '').strip():
        return None, ClockResult(
            success=False,
            error="Employee name is required",
            error_code="EMPLOYEE_REQUIRED"
        )
    employee = Employee.find(identifier)
    if employee is None or not employee.is_active:
        return None, ClockResult(
            success=False,
            error="Employee not found",
            error_code="EMPLOYEE_NOT_FOUND"
        )
    return employee, None


class ClockInCommand(BaseCommand[ClockResult]):
    """
    Record a clock-in.

    One clock-in per employee per local calendar day. The day is taken from
    the effective timestamp, so a clock-in replayed from an offline queue
    lands on the day it was made.
    """

    def execute(
        self,
        employee: str,
        userinfo: Optional[str] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        line_name: Optional[str] = None,
        line_picture: Optional[str] = None,
        client_time: Optional[str] = None,
    ) -> ClockResult:
        from apps.timelogs.models import TimeLog

        emp, error = resolve_employee(employee)
        if error:
            return error

        tz_name = self.tz_name
        now = self.effective_time(client_time)
        day = self.business_day(now)

        if TimeLog.for_day(emp.id, day, tz_name).exists():
            return ClockResult(
                success=False,
                employee_name=emp.full_name,
                error="You have already clocked in today",
                error_code="ALREADY_CLOCKED_IN"
            )

        log = TimeLog.objects.create(
            employee_id=emp.id,
            clock_in=now,
            note=userinfo or '',
            latitude_in=lat,
            longitude_in=lon,
            line_name=line_name or '',
            line_picture=line_picture or '',
        )

        self.forget_dashboard(day)
        self.publish_event('timelog.clock_in', {
            'time_log_id': log.id,
            'employee_id': emp.id,
            'clock_in': now.isoformat(),
        })
        self.notify_clock(
            CLOCK_IN,
            employee_name=emp.full_name,
            timestamp=now,
            note=userinfo,
            lat=lat,
            lon=lon,
            line_name=line_name,
        )
        self.log_info("Clocked in", time_log_id=log.id, employee_id=emp.id)

        return ClockResult(
            success=True,
            time_log_id=log.id,
            employee_name=emp.full_name,
            timestamp=now,
            time=local_time_str(now, tz_name),
        )
