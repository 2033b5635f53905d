# Commands package (Write operations)
from .base import BaseCommand
from .clock_in import ClockInCommand, ClockResult
from .clock_out import ClockOutCommand
from .manage_employees import (
    CreateEmployeeCommand,
    UpdateEmployeeCommand,
    DeleteEmployeeCommand,
    ImportEmployeesCommand,
)
from .manage_time_logs import (
    CreateTimeLogCommand,
    UpdateTimeLogCommand,
    DeleteTimeLogCommand,
    CleanupTimeLogsCommand,
)
from .update_settings import UpdateSettingsCommand
from .admin_login import AdminLoginCommand

__all__ = [
    'BaseCommand',
    'ClockInCommand',
    'ClockOutCommand',
    'ClockResult',
    'CreateEmployeeCommand',
    'UpdateEmployeeCommand',
    'DeleteEmployeeCommand',
    'ImportEmployeesCommand',
    'CreateTimeLogCommand',
    'UpdateTimeLogCommand',
    'DeleteTimeLogCommand',
    'CleanupTimeLogsCommand',
    'UpdateSettingsCommand',
    'AdminLoginCommand',
]
