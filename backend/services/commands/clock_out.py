"""
Clock Out Command - closes today's open time log.

POST /api/mobile/clockout
"""
from typing import Optional

from .base import BaseCommand
from .clock_in import ClockResult, resolve_employee
from services.notifications.service import CLOCK_OUT
from utils.datetime import local_time_str


class ClockOutCommand(BaseCommand[ClockResult]):
    """Record a clock-out against the clock-in of the same local day."""

    def execute(
        self,
        employee: str,
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

        log = TimeLog.for_day(emp.id, day, tz_name).order_by('-clock_in').first()
        if log is None:
            return ClockResult(
                success=False,
                employee_name=emp.full_name,
                error="You have not clocked in today",
                error_code="NOT_CLOCKED_IN"
            )
        if not log.is_open:
            return ClockResult(
                success=False,
                employee_name=emp.full_name,
                error="You have already clocked out today",
                error_code="ALREADY_CLOCKED_OUT"
            )

        log.clock_out = now
        log.latitude_out = lat
        log.longitude_out = lon
        if line_name:
            log.line_name = line_name
        if line_picture:
            log.line_picture = line_picture
        log.save(update_fields=['clock_out', 'latitude_out', 'longitude_out', 'line_name', 'line_picture'])

        self.forget_dashboard(day)
        self.publish_event('timelog.clock_out', {
            'time_log_id': log.id,
            'employee_id': emp.id,
            'clock_out': now.isoformat(),
        })
        self.notify_clock(
            CLOCK_OUT,
            employee_name=emp.full_name,
            timestamp=now,
            lat=lat,
            lon=lon,
            line_name=line_name,
        )
        self.log_info("Clocked out", time_log_id=log.id, employee_id=emp.id)

        return ClockResult(
            success=True,
            time_log_id=log.id,
            employee_name=emp.full_name,
            timestamp=now,
            time=local_time_str(now, tz_name),
        )
