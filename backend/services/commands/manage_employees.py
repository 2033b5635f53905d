"""
Employee admin commands.

POST /api/admin/employees, PUT|DELETE /api/admin/employees/{id},
POST /api/admin/import-employees

Every change drops the cached kiosk roster.
"""
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from django.db import DatabaseError, transaction

from .base import BaseCommand


@dataclass
class EmployeeCommandResult:
    success: bool
    employee_id: Optional[int] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


class CreateEmployeeCommand(BaseCommand[EmployeeCommandResult]):

    def execute(
        self,
        emp_code: str,
        full_name: str,
        position: str = '',
        department: str = '',
    ) -> EmployeeCommandResult:
        from apps.employees.models import Employee

        emp_code = (emp_code or '').strip()
        full_name = (full_name or '').strip()
        if not emp_code or not full_name:
            return EmployeeCommandResult(
                success=False,
                error="Employee code and full name are required",
                error_code="VALIDATION_ERROR"
            )

        if Employee.objects.filter(emp_code=emp_code).exists():
            return EmployeeCommandResult(
                success=False,
                error="This employee code already exists",
                error_code="EMPLOYEE_CODE_EXISTS"
            )

        employee = Employee.objects.create(
            emp_code=emp_code,
            full_name=full_name,
            position=position or '',
            department=department or '',
        )

        self.forget_roster()
        self.publish_event('employee.created', {'employee_id': employee.id, 'emp_code': emp_code})
        self.log_info("Employee created", employee_id=employee.id, emp_code=emp_code)
        return EmployeeCommandResult(success=True, employee_id=employee.id)


class UpdateEmployeeCommand(BaseCommand[EmployeeCommandResult]):

    def execute(
        self,
        employee_id: int,
        emp_code: str,
        full_name: str,
        position: str = '',
        department: str = '',
        status: Optional[str] = None,
        mobile_enabled: Optional[bool] = None,
    ) -> EmployeeCommandResult:
        from apps.employees.models import Employee

        emp_code = (emp_code or '').strip()
        full_name = (full_name or '').strip()
        if not emp_code or not full_name:
            return EmployeeCommandResult(
                success=False,
                error="Employee code and full name are required",
                error_code="VALIDATION_ERROR"
            )

        employee = Employee.objects.filter(id=employee_id).first()
        if employee is None:
            return EmployeeCommandResult(success=False, error="Employee not found", error_code="NOT_FOUND")

        if Employee.objects.filter(emp_code=emp_code).exclude(id=employee_id).exists():
            return EmployeeCommandResult(
                success=False,
                error="This employee code already exists",
                error_code="EMPLOYEE_CODE_EXISTS"
            )

        if status is not None and status not in Employee.Status.values:
            return EmployeeCommandResult(
                success=False,
                error=f"Unknown status: {status}",
                error_code="VALIDATION_ERROR"
            )

        employee.emp_code = emp_code
        employee.full_name = full_name
        employee.position = position or ''
        employee.department = department or ''
        employee.status = status or Employee.Status.ACTIVE
        employee.mobile_enabled = True if mobile_enabled is None else mobile_enabled
        employee.save()

        self.forget_roster()
        self.publish_event('employee.updated', {'employee_id': employee.id})
        self.log_info("Employee updated", employee_id=employee.id)
        return EmployeeCommandResult(success=True, employee_id=employee.id)


class DeleteEmployeeCommand(BaseCommand[EmployeeCommandResult]):
    """Hard delete. Time logs are kept and keep their employee_id."""

    def execute(self, employee_id: int) -> EmployeeCommandResult:
        from apps.employees.models import Employee

        employee = Employee.objects.filter(id=employee_id).first()
        if employee is None:
            return EmployeeCommandResult(success=False, error="Employee not found", error_code="NOT_FOUND")

        full_name = employee.full_name
        employee.delete()

        self.forget_roster()
        self.publish_event('employee.deleted', {'employee_id': employee_id})
        self.log_warning("Employee deleted", employee_id=employee_id, full_name=full_name)
        return EmployeeCommandResult(success=True, employee_id=employee_id)


@dataclass
class ImportEmployeesResult:
    success: bool
    total: int = 0
    imported: int = 0
    skipped: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[str] = None


def _row_error(row: Dict[str, Any], message: str) -> Dict[str, str]:
    return {
        'emp_code': row.get('emp_code') or '',
        'full_name': row.get('full_name') or '',
        'error': message,
    }


class ImportEmployeesCommand(BaseCommand[ImportEmployeesResult]):
    """
    Bulk upsert keyed by emp_code.

    Existing codes are overwritten, or counted as skipped with
    skip_existing. The batch is rejected up front if any row lacks a code
    or a name; after that a failing row is reported in errors and the
    others still import.
    """

    def execute(self, employees: List[Dict[str, Any]], skip_existing: bool = False) -> ImportEmployeesResult:
        from apps.employees.models import Employee

        if not employees:
            return ImportEmployeesResult(success=False, error="Nothing to import", error_code="VALIDATION_ERROR")

        for row in employees:
            if not (row.get('emp_code') or '').strip() or not (row.get('full_name') or '').strip():
                return ImportEmployeesResult(
                    success=False,
                    error="Every row needs an employee code and a full name",
                    error_code="VALIDATION_ERROR"
                )

        result = ImportEmployeesResult(success=True, total=len(employees))
        with transaction.atomic():
            for row in employees:
                emp_code = row['emp_code'].strip()
                status = row.get('status') or Employee.Status.ACTIVE
                if status not in Employee.Status.values:
                    result.errors.append(_row_error(row, f"Unknown status: {status}"))
                    continue

                if skip_existing and Employee.objects.filter(emp_code=emp_code).exists():
                    result.skipped += 1
                    continue

                mobile_enabled = row.get('mobile_enabled')
                try:
                    with transaction.atomic():
                        Employee.objects.update_or_create(
                            emp_code=emp_code,
                            defaults={
                                'full_name': row['full_name'].strip(),
                                'position': row.get('position') or '',
                                'department': row.get('department') or '',
                                'status': status,
                                'mobile_enabled': True if mobile_enabled is None else mobile_enabled,
                            },
                        )
                except DatabaseError as e:
                    self.log_warning(f"Import of {emp_code} failed: {e}", emp_code=emp_code)
                    result.errors.append(_row_error(row, str(e)))
                    continue
                result.imported += 1

        if result.imported:
            self.forget_roster()
        self.publish_event('employees.imported', {
            'total': result.total,
            'imported': result.imported,
            'skipped': result.skipped,
            'failed': len(result.errors),
        })
        self.log_info(
            "Employees imported",
            total=result.total, imported=result.imported, skipped=result.skipped, failed=len(result.errors)
        )
        return result
