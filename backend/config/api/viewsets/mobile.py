"""
Mobile ViewSet - endpoints used by kiosks and the mobile shell.

- GET  /api/mobile/employees
- GET  /api/mobile/status/{name}
- GET  /api/mobile/history/{name}?limit=
- GET  /api/mobile/dashboard
- GET  /api/mobile/config
- GET  /api/mobile/health
- POST /api/mobile/batch
- POST /api/mobile/clockin
- POST /api/mobile/clockout

Clock rejections ("already clocked in today" and the like) are answered with
HTTP 200 and success=false. Offline clients replay queued actions and drop
them on any 2xx, so a duplicate replay is acknowledged instead of retried.
"""
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny

from .base import BaseViewSet
from infrastructure.clock import Clock
from config.api.contracts import BatchRequest, ClockRequest, ClockResponse, StatusResponse
from services.commands import ClockInCommand, ClockOutCommand
from services.queries import (
    GetAppConfigQuery,
    GetDashboardStatsQuery,
    GetEmployeeHistoryQuery,
    GetEmployeeStatusQuery,
    GetEmployeesQuery,
    RunMobileBatchQuery,
)

CLOCK_IN_MESSAGE = 'Clock-in recorded'
CLOCK_OUT_MESSAGE = 'Clock-out recorded'


class MobileViewSet(BaseViewSet):
    """Time clock for employees (no login)."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def employees(self, request):
        """GET /api/mobile/employees"""
        result = self.get_query(GetEmployeesQuery).execute()
        return self.success({
            'success': True,
            'employees': result.employees,
            'count': result.count,
        })

    def employee_status(self, request, name=None):
        """GET /api/mobile/status/{name}"""
        result = self.get_query(GetEmployeeStatusQuery).execute(identifier=name)
        return self.success(result, response_model=StatusResponse)

    def history(self, request, name=None):
        """GET /api/mobile/history/{name}?limit="""
        try:
            limit = int(request.query_params.get('limit', 7))
        except ValueError:
            return self.error("limit must be a number", "VALIDATION_ERROR")

        result = self.get_query(GetEmployeeHistoryQuery).execute(identifier=name, limit=limit)
        if not result.found:
            return self.success({'success': False, 'message': result.error, 'history': []})

        return self.success({
            'success': True,
            'employee_name': result.employee_name,
            'history': result.history,
        })

    def dashboard(self, request):
        """GET /api/mobile/dashboard"""
        result = self.get_query(GetDashboardStatsQuery).execute()
        return self.success({'success': True, 'today': result.today()})

    def config(self, request):
        """GET /api/mobile/config"""
        result = self.get_query(GetAppConfigQuery).execute()
        return self.success({'success': True, 'config': result.to_dict()})

    def health(self, request):
        """GET /api/mobile/health - connectivity probe for offline clients."""
        clock = self.get_container().get(Clock)
        return self.success({
            'success': True,
            'status': 'ok',
            'timestamp': clock.now().isoformat(),
        })

    @action(detail=False, methods=['post'])
    def batch(self, request):
        """POST /api/mobile/batch"""
        data, error = self.validate_request(BatchRequest, request.data)
        if error:
            return error

        result = self.get_query(RunMobileBatchQuery).execute(
            operations=[operation.type for operation in data.operations]
        )
        return self.success({'success': True, 'results': result.results})

    @action(detail=False, methods=['post'])
    def clockin(self, request):
        """POST /api/mobile/clockin"""
        data, error = self.validate_request(ClockRequest, request.data)
        if error:
            return error

        result = self.get_command(ClockInCommand).execute(**data.model_dump())
        return self._clock_response(result, CLOCK_IN_MESSAGE)

    @action(detail=False, methods=['post'])
    def clockout(self, request):
        """POST /api/mobile/clockout"""
        data, error = self.validate_request(ClockRequest, request.data)
        if error:
            return error

        fields = data.model_dump(exclude={'userinfo'})
        result = self.get_command(ClockOutCommand).execute(**fields)
        return self._clock_response(result, CLOCK_OUT_MESSAGE)

    def _clock_response(self, result, message: str):
        if not result.success:
            return self.success(
                {'success': False, 'message': result.error, 'code': result.error_code},
                response_model=ClockResponse,
                status_code=status.HTTP_200_OK,
            )

        return self.success({
            'success': True,
            'message': message,
            'data': {
                'time_log_id': result.time_log_id,
                'employee_name': result.employee_name,
                'time': result.time,
                'timestamp': result.timestamp.isoformat(),
            },
        }, response_model=ClockResponse)
