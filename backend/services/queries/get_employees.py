"""
Employee roster queries.

- GetEmployeesQuery: active roster for the kiosk autocomplete (cached)
- ListEmployeesQuery / GetEmployeeQuery: admin views
"""
from typing import Any, Dict, List, Optional
from dataclasses import dataclass

from django.conf import settings

from .base import BaseQuery

EMPLOYEES_CACHE_KEY = 'employees:active'


def serialize_employee(employee) -> Dict[str, Any]:
    return {
        'id': employee.id,
        'emp_code': employee.emp_code,
        'full_name': employee.full_name,
        'position': employee.position,
        'department': employee.department,
        'line_id': employee.line_id,
        'line_name': employee.line_name,
        'status': employee.status,
        'mobile_enabled': employee.mobile_enabled,
        'created_at': employee.created_at.isoformat() if employee.created_at else None,
    }


@dataclass
class GetEmployeesResult:
    employees: List[Dict[str, str]]

    @property
    def count(self) -> int:
        return len(self.employees)


class GetEmployeesQuery(BaseQuery[GetEmployeesResult]):
    """
    Active roster as {name, code, id} entries.

    GET /api/mobile/employees
    """

    def execute(self) -> GetEmployeesResult:
        employees = self.cached(
            EMPLOYEES_CACHE_KEY,
            self._load,
            ttl=getattr(settings, 'EMPLOYEE_CACHE_TTL', 300),
        )
        return GetEmployeesResult(employees=employees)

    def _load(self) -> List[Dict[str, str]]:
        from apps.employees.models import Employee

        rows = Employee.objects.filter(status=Employee.Status.ACTIVE).order_by('full_name')
        employees = [
            # The kiosk identifies people by name; code falls back to it.
            {'name': e.full_name, 'code': e.emp_code or e.full_name, 'id': e.full_name}
            for e in rows
        ]

        self.log_info("Employee roster refreshed", count=len(employees))
        return employees


@dataclass
class ListEmployeesResult:
    employees: List[Dict[str, Any]]


class ListEmployeesQuery(BaseQuery[ListEmployeesResult]):
    """
    All employees, any status.

    GET /api/admin/employees
    """

    def execute(self, limit: int = 100, offset: int = 0) -> ListEmployeesResult:
        from apps.employees.models import Employee

        rows = Employee.objects.order_by('emp_code')[offset:offset + limit]
        return ListEmployeesResult(employees=[serialize_employee(e) for e in rows])


@dataclass
class GetEmployeeResult:
    found: bool
    employee: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class GetEmployeeQuery(BaseQuery[GetEmployeeResult]):
    """GET /api/admin/employees/{id}"""

    def execute(self, employee_id: int) -> GetEmployeeResult:
        from apps.employees.models import Employee

        employee = Employee.objects.filter(id=employee_id).first()
        if employee is None:
            return GetEmployeeResult(found=False, error="Employee not found")
        return GetEmployeeResult(found=True, employee=serialize_employee(employee))
