"""
Get Employee Status Query - today's clock state of one employee.

GET /api/mobile/status/{name}
"""
from typing import Optional
from dataclasses import dataclass

from .base import BaseQuery
from utils.datetime import local_time_str


NOT_CLOCKED_IN = 'not_clocked_in'
CLOCKED_IN = 'clocked_in'
COMPLETED = 'completed'
EMPLOYEE_NOT_FOUND = 'employee_not_found'


@dataclass
class GetEmployeeStatusResult:
    success: bool
    status: str
    message: str
    employee_name: Optional[str] = None
    clock_in_time: Optional[str] = None
    clock_out_time: Optional[str] = None


class GetEmployeeStatusQuery(BaseQuery[GetEmployeeStatusResult]):

    def execute(self, identifier: str) -> GetEmployeeStatusResult:
        from apps.employees.models import Employee
        from apps.timelogs.models import TimeLog

        employee = Employee.find(identifier)
        if employee is None:
            return GetEmployeeStatusResult(
                success=False,
                status=EMPLOYEE_NOT_FOUND,
                message="Employee not found"
            )

        tz_name = self.tz_name
        today = self.today()
        record = TimeLog.for_day(employee.id, today, tz_name).order_by('-clock_in').first()

        if record is None:
            return GetEmployeeStatusResult(
                success=True,
                status=NOT_CLOCKED_IN,
                message="Not clocked in yet",
                employee_name=employee.full_name
            )

        if record.is_open:
            return GetEmployeeStatusResult(
                success=True,
                status=CLOCKED_IN,
                message="Clocked in, currently working",
                employee_name=employee.full_name,
                clock_in_time=local_time_str(record.clock_in, tz_name)
            )

        return GetEmployeeStatusResult(
            success=True,
            status=COMPLETED,
            message="Clocked in and out today",
            employee_name=employee.full_name,
            clock_in_time=local_time_str(record.clock_in, tz_name),
            clock_out_time=local_time_str(record.clock_out, tz_name)
        )
