"""
Time log admin commands.

POST /api/admin/time-logs, PUT|DELETE /api/admin/time-logs/{id},
POST /api/admin/cleanup-time-logs

Admin times without an offset are wall-clock times in the business timezone.
"""
from datetime import date
from typing import Optional
from dataclasses import dataclass

from .base import BaseCommand
from services.notifications.service import CLOCK_IN, CLOCK_OUT
from utils.datetime import local_day_bounds, months_before, parse_admin_time

CLEANUP_AGES = {
    'older_than_6_months': 6,
    'older_than_1_year': 12,
}
CLEANUP_BATCH_SIZE = 1000


@dataclass
class TimeLogCommandResult:
    success: bool
    time_log_id: Optional[int] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


class CreateTimeLogCommand(BaseCommand[TimeLogCommandResult]):

    def execute(
        self,
        employee_id: int,
        clock_in: str,
        clock_out: Optional[str] = None,
        note: str = '',
        skip_notification: bool = False,
    ) -> TimeLogCommandResult:
        from apps.employees.models import Employee
        from apps.timelogs.models import TimeLog

        tz_name = self.tz_name
        clock_in_at = parse_admin_time(clock_in, tz_name)
        if clock_in_at is None:
            return TimeLogCommandResult(
                success=False,
                error="A valid clock-in time is required",
                error_code="VALIDATION_ERROR"
            )
        clock_out_at = parse_admin_time(clock_out, tz_name) if clock_out else None

        employee = Employee.objects.filter(id=employee_id).first()
        if employee is None:
            return TimeLogCommandResult(success=False, error="Employee not found", error_code="EMPLOYEE_NOT_FOUND")

        log = TimeLog.objects.create(
            employee_id=employee.id,
            clock_in=clock_in_at,
            clock_out=clock_out_at,
            note=note or '',
            status=TimeLog.Status.MANUAL,
        )

        self.forget_dashboard(self.business_day(clock_in_at))
        self.publish_event('timelog.created', {'time_log_id': log.id, 'employee_id': employee.id})

        if not skip_notification:
            self.notify_clock(
                CLOCK_IN,
                employee_name=employee.full_name,
                timestamp=clock_in_at,
                note=note,
                recorded_by_admin=True,
            )
            if clock_out_at:
                self.notify_clock(
                    CLOCK_OUT,
                    employee_name=employee.full_name,
                    timestamp=clock_out_at,
                    recorded_by_admin=True,
                )

        self.log_info("Time log added by admin", time_log_id=log.id, employee_id=employee.id)
        return TimeLogCommandResult(success=True, time_log_id=log.id)


class UpdateTimeLogCommand(BaseCommand[TimeLogCommandResult]):

    def execute(
        self,
        log_id: int,
        clock_in: str,
        clock_out: Optional[str] = None,
        note: str = '',
    ) -> TimeLogCommandResult:
        from apps.timelogs.models import TimeLog

        log = TimeLog.objects.filter(id=log_id).first()
        if log is None:
            return TimeLogCommandResult(success=False, error="Time log not found", error_code="NOT_FOUND")

        tz_name = self.tz_name
        clock_in_at = parse_admin_time(clock_in, tz_name)
        if clock_in_at is None:
            return TimeLogCommandResult(
                success=False,
                error="A valid clock-in time is required",
                error_code="VALIDATION_ERROR"
            )

        previous_day = self.business_day(log.clock_in)
        log.clock_in = clock_in_at
        log.clock_out = parse_admin_time(clock_out, tz_name) if clock_out else None
        log.note = note or ''
        log.status = TimeLog.Status.EDITED
        log.save(update_fields=['clock_in', 'clock_out', 'note', 'status'])

        self.forget_dashboard(previous_day)
        self.forget_dashboard(self.business_day(clock_in_at))
        self.publish_event('timelog.updated', {'time_log_id': log.id})
        self.log_info("Time log updated by admin", time_log_id=log.id)
        return TimeLogCommandResult(success=True, time_log_id=log.id)


class DeleteTimeLogCommand(BaseCommand[TimeLogCommandResult]):

    def execute(self, log_id: int) -> TimeLogCommandResult:
        from apps.timelogs.models import TimeLog

        log = TimeLog.objects.filter(id=log_id).first()
        if log is None:
            return TimeLogCommandResult(success=False, error="Time log not found", error_code="NOT_FOUND")

        day = self.business_day(log.clock_in)
        log.delete()

        self.forget_dashboard(day)
        self.publish_event('timelog.deleted', {'time_log_id': log_id})
        self.log_warning("Time log deleted by admin", time_log_id=log_id)
        return TimeLogCommandResult(success=True, time_log_id=log_id)


@dataclass
class CleanupTimeLogsResult:
    success: bool
    deleted_count: int = 0
    cutoff: Optional[date] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


class CleanupTimeLogsCommand(BaseCommand[CleanupTimeLogsResult]):
    """
    Delete time logs clocked in before a business day.

    The cutoff is date_before, or a preset age (CLEANUP_AGES) counted back
    from today; given both, the earlier day wins. employee_id limits the
    cleanup to one employee.
    """

    def execute(
        self,
        date_before: Optional[date] = None,
        cleanup_type: Optional[str] = None,
        employee_id: Optional[int] = None,
    ) -> CleanupTimeLogsResult:
        from apps.timelogs.models import TimeLog

        if cleanup_type is not None and cleanup_type not in CLEANUP_AGES:
            return CleanupTimeLogsResult(
                success=False,
                error=f"Unknown cleanup type: {cleanup_type}",
                error_code="VALIDATION_ERROR"
            )

        cutoffs = []
        if date_before is not None:
            cutoffs.append(date_before)
        if cleanup_type is not None:
            cutoffs.append(months_before(self._clock.local_date(self.tz_name), CLEANUP_AGES[cleanup_type]))
        if not cutoffs:
            return CleanupTimeLogsResult(
                success=False,
                error="date_before or cleanup_type is required",
                error_code="VALIDATION_ERROR"
            )
        cutoff = min(cutoffs)

        logs = TimeLog.objects.filter(clock_in__lt=local_day_bounds(cutoff, self.tz_name)[0])
        if employee_id:
            logs = logs.filter(employee_id=employee_id)
        ids = list(logs.values_list('id', flat=True))
        if not ids:
            return CleanupTimeLogsResult(
                success=False,
                cutoff=cutoff,
                error="No time logs match the cleanup filters",
                error_code="NOT_FOUND"
            )

        deleted = 0
        for start in range(0, len(ids), CLEANUP_BATCH_SIZE):
            count, _ = TimeLog.objects.filter(id__in=ids[start:start + CLEANUP_BATCH_SIZE]).delete()
            deleted += count

        self.forget_all_dashboards()
        self.publish_event('timelog.cleaned_up', {
            'cutoff': cutoff.isoformat(),
            'employee_id': employee_id,
            'deleted_count': deleted,
        })
        self.log_warning("Time logs cleaned up", cutoff=cutoff.isoformat(), employee_id=employee_id, deleted=deleted)
        return CleanupTimeLogsResult(success=True, deleted_count=deleted, cutoff=cutoff)
