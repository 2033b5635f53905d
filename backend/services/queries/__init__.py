# Queries package (Read operations)
from .base import BaseQuery
from .get_employees import GetEmployeesQuery, ListEmployeesQuery, GetEmployeeQuery
from .get_employee_status import GetEmployeeStatusQuery
from .get_employee_history import GetEmployeeHistoryQuery
from .get_dashboard_stats import GetDashboardStatsQuery
from .get_app_config import GetAppConfigQuery
from .get_time_logs import GetTimeLogsQuery, GetTimeLogQuery, ExportTimeLogsQuery
from .get_settings import GetSettingsQuery
from .run_mobile_batch import RunMobileBatchQuery

__all__ = [
    'BaseQuery',
    'GetEmployeesQuery',
    'ListEmployeesQuery',
    'GetEmployeeQuery',
    'GetEmployeeStatusQuery',
    'GetEmployeeHistoryQuery',
    'GetDashboardStatsQuery',
    'GetAppConfigQuery',
    'GetTimeLogsQuery',
    'GetTimeLogQuery',
    'ExportTimeLogsQuery',
    'GetSettingsQuery',
    'RunMobileBatchQuery',
]
