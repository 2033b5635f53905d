"""
Admin ViewSets - back-office endpoints (JWT required except login).

- POST /api/admin/login
- GET  /api/admin/dashboard
- GET|POST /api/admin/employees, GET|PUT|DELETE /api/admin/employees/{id}
- POST /api/admin/import-employees
- GET|POST /api/admin/time-logs, PUT|DELETE /api/admin/time-logs/{id}
- POST /api/admin/export-time-logs, POST /api/admin/cleanup-time-logs
- GET|POST /api/admin/settings
"""
from datetime import date

from rest_framework import status
from rest_framework.permissions import AllowAny

from .base import BaseViewSet
from config.api.authentication import AdminJWTAuthentication, IsAdmin
from config.api.contracts import (
    AdminLoginRequest,
    CleanupTimeLogsRequest,
    EmployeeRequest,
    ExportTimeLogsRequest,
    ImportEmployeesRequest,
    SettingsUpdateRequest,
    TimeLogRequest,
)
from services.commands import (
    AdminLoginCommand,
    CleanupTimeLogsCommand,
    CreateEmployeeCommand,
    CreateTimeLogCommand,
    DeleteEmployeeCommand,
    DeleteTimeLogCommand,
    ImportEmployeesCommand,
    UpdateEmployeeCommand,
    UpdateSettingsCommand,
    UpdateTimeLogCommand,
)
from services.queries import (
    ExportTimeLogsQuery,
    GetDashboardStatsQuery,
    GetEmployeeQuery,
    GetSettingsQuery,
    GetTimeLogQuery,
    GetTimeLogsQuery,
    ListEmployeesQuery,
)


def _int_param(params, name: str, default: int) -> int:
    try:
        return int(params.get(name, default))
    except (TypeError, ValueError):
        return default


def _date_param(params, name: str):
    value = params.get(name)
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class AdminBaseViewSet(BaseViewSet):

    authentication_classes = [AdminJWTAuthentication]
    permission_classes = [IsAdmin]


class AdminAuthViewSet(AdminBaseViewSet):

    authentication_classes = []
    permission_classes = [AllowAny]

    def login(self, request):
        """POST /api/admin/login"""
        data, error = self.validate_request(AdminLoginRequest, request.data)
        if error:
            return error

        result = self.get_command(AdminLoginCommand).execute(
            username=data.username,
            password=data.password,
        )
        if not result.success:
            return self.command_error(result)

        return self.success({
            'success': True,
            'token': result.token,
            'expires_in': result.expires_in,
        })


class AdminDashboardViewSet(AdminBaseViewSet):

    def list(self, request):
        """GET /api/admin/dashboard"""
        result = self.get_query(GetDashboardStatsQuery).execute(include_recent=True)
        return self.success({
            'success': True,
            'today': result.today(),
            'recent_logs': result.recent_logs,
        })


class AdminEmployeesViewSet(AdminBaseViewSet):

    def list(self, request):
        """GET /api/admin/employees"""
        result = self.get_query(ListEmployeesQuery).execute(
            limit=_int_param(request.query_params, 'limit', 100),
            offset=_int_param(request.query_params, 'offset', 0),
        )
        return self.success({'success': True, 'employees': result.employees})

    def create(self, request):
        """POST /api/admin/employees"""
        data, error = self.validate_request(EmployeeRequest, request.data)
        if error:
            return error

        result = self.get_command(CreateEmployeeCommand).execute(
            emp_code=data.emp_code,
            full_name=data.full_name,
            position=data.position,
            department=data.department,
        )
        if not result.success:
            return self.command_error(result)

        return self.success(
            {'success': True, 'id': result.employee_id},
            status_code=status.HTTP_201_CREATED
        )

    def retrieve(self, request, pk=None):
        """GET /api/admin/employees/{id}"""
        result = self.get_query(GetEmployeeQuery).execute(employee_id=pk)
        if not result.found:
            return self.not_found(result.error)
        return self.success({'success': True, 'employee': result.employee})

    def update(self, request, pk=None):
        """PUT /api/admin/employees/{id}"""
        data, error = self.validate_request(EmployeeRequest, request.data)
        if error:
            return error

        result = self.get_command(UpdateEmployeeCommand).execute(employee_id=pk, **data.model_dump())
        if not result.success:
            return self.command_error(result)
        return self.success({'success': True, 'id': result.employee_id})

    def destroy(self, request, pk=None):
        """DELETE /api/admin/employees/{id}"""
        result = self.get_command(DeleteEmployeeCommand).execute(employee_id=pk)
        if not result.success:
            return self.command_error(result)
        return self.success({'success': True})

    def import_employees(self, request):
        """POST /api/admin/import-employees"""
        data, error = self.validate_request(ImportEmployeesRequest, request.data)
        if error:
            return error

        result = self.get_command(ImportEmployeesCommand).execute(
            employees=[row.model_dump() for row in data.employees],
            skip_existing=data.skip_existing,
        )
        if not result.success:
            return self.command_error(result)

        return self.success({
            'success': True,
            'total': result.total,
            'imported': result.imported,
            'skipped': result.skipped,
            'errors': result.errors,
        })


class AdminTimeLogsViewSet(AdminBaseViewSet):

    def list(self, request):
        """GET /api/admin/time-logs?from=&to=&employee_id=&limit=&offset="""
        params = request.query_params
        result = self.get_query(GetTimeLogsQuery).execute(
            from_date=_date_param(params, 'from'),
            to_date=_date_param(params, 'to'),
            employee_id=_int_param(params, 'employee_id', None),
            limit=_int_param(params, 'limit', 100),
            offset=_int_param(params, 'offset', 0),
        )
        return self.success({'success': True, 'logs': result.logs})

    def retrieve(self, request, pk=None):
        """GET /api/admin/time-logs/{id}"""
        result = self.get_query(GetTimeLogQuery).execute(log_id=pk)
        if not result.found:
            return self.not_found(result.error)
        return self.success({'success': True, 'log': result.log})

    def create(self, request):
        """POST /api/admin/time-logs"""
        data, error = self.validate_request(TimeLogRequest, request.data)
        if error:
            return error
        if data.employee_id is None:
            return self.error("employee_id is required", "VALIDATION_ERROR")

        result = self.get_command(CreateTimeLogCommand).execute(**data.model_dump())
        if not result.success:
            return self.command_error(result)

        return self.success(
            {'success': True, 'id': result.time_log_id},
            status_code=status.HTTP_201_CREATED
        )

    def update(self, request, pk=None):
        """PUT /api/admin/time-logs/{id}"""
        data, error = self.validate_request(TimeLogRequest, request.data)
        if error:
            return error

        result = self.get_command(UpdateTimeLogCommand).execute(
            log_id=pk,
            clock_in=data.clock_in,
            clock_out=data.clock_out,
            note=data.note,
        )
        if not result.success:
            return self.command_error(result)
        return self.success({'success': True, 'id': result.time_log_id})

    def destroy(self, request, pk=None):
        """DELETE /api/admin/time-logs/{id}"""
        result = self.get_command(DeleteTimeLogCommand).execute(log_id=pk)
        if not result.success:
            return self.command_error(result)
        return self.success({'success': True})

    def export(self, request):
        """POST /api/admin/export-time-logs"""
        data, error = self.validate_request(ExportTimeLogsRequest, request.data)
        if error:
            return error

        result = self.get_query(ExportTimeLogsQuery).execute(**data.model_dump())
        if not result.count:
            return self.not_found("No time logs match the filters")
        return self.success({'success': True, 'data': result.rows, 'count': result.count})

    def cleanup(self, request):
        """POST /api/admin/cleanup-time-logs"""
        data, error = self.validate_request(CleanupTimeLogsRequest, request.data)
        if error:
            return error

        result = self.get_command(CleanupTimeLogsCommand).execute(**data.model_dump())
        if not result.success:
            return self.command_error(result)

        return self.success({
            'success': True,
            'message': f"Deleted {result.deleted_count} time log(s)",
            'deleted_count': result.deleted_count,
            'cutoff': result.cutoff.isoformat(),
        })


class AdminSettingsViewSet(AdminBaseViewSet):

    def list(self, request):
        """GET /api/admin/settings"""
        result = self.get_query(GetSettingsQuery).execute()
        return self.success({'success': True, 'settings': result.settings})

    def create(self, request):
        """POST /api/admin/settings"""
        data, error = self.validate_request(SettingsUpdateRequest, request.data)
        if error:
            return error

        result = self.get_command(UpdateSettingsCommand).execute(
            settings=[item.model_dump() for item in data.settings]
        )
        if not result.success:
            return self.command_error(result)
        return self.success({'success': True, 'updated': result.updated})
