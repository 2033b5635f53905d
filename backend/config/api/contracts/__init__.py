# API contracts (pydantic request/response models)
from .base import ErrorResponse
from .mobile import BatchOperation, BatchRequest, ClockRequest, ClockResponse, StatusResponse
from .admin import (
    AdminLoginRequest,
    EmployeeRequest,
    EmployeeImportRow,
    ImportEmployeesRequest,
    TimeLogRequest,
    ExportTimeLogsRequest,
    CleanupTimeLogsRequest,
    SettingItem,
    SettingsUpdateRequest,
)

__all__ = [
    'ErrorResponse',
    'BatchOperation',
    'BatchRequest',
    'ClockRequest',
    'ClockResponse',
    'StatusResponse',
    'AdminLoginRequest',
    'EmployeeRequest',
    'EmployeeImportRow',
    'ImportEmployeesRequest',
    'TimeLogRequest',
    'ExportTimeLogsRequest',
    'CleanupTimeLogsRequest',
    'SettingItem',
    'SettingsUpdateRequest',
]
