"""
Admin API contracts (/api/admin/*).
"""
from datetime import date
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class AdminLoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=200)


class EmployeeRequest(BaseModel):
    emp_code: str = Field(min_length=1, max_length=50)
    full_name: str = Field(min_length=1, max_length=200)
    position: str = Field(default='', max_length=100)
    department: str = Field(default='', max_length=100)
    status: Optional[str] = None
    mobile_enabled: Optional[bool] = None


class TimeLogRequest(BaseModel):
    employee_id: Optional[int] = None
    clock_in: str = Field(min_length=1)
    clock_out: Optional[str] = None
    note: str = Field(default='', max_length=1000)
    skip_notification: bool = False


class SettingItem(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    value: Any = None


class SettingsUpdateRequest(BaseModel):
    settings: List[SettingItem] = Field(min_length=1)


class EmployeeImportRow(BaseModel):
    emp_code: str = Field(min_length=1, max_length=50)
    full_name: str = Field(min_length=1, max_length=200)
    position: Optional[str] = Field(default=None, max_length=100)
    department: Optional[str] = Field(default=None, max_length=100)
    status: Optional[str] = None
    mobile_enabled: Optional[bool] = None


class ImportEmployeesRequest(BaseModel):
    """Body of POST /api/admin/import-employees (skipExisting is the spreadsheet tool's name)."""
    model_config = ConfigDict(populate_by_name=True)

    employees: List[EmployeeImportRow] = Field(min_length=1, max_length=5000)
    skip_existing: bool = Field(default=False, alias='skipExisting')


class ExportTimeLogsRequest(BaseModel):
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    employee_id: Optional[int] = None


class CleanupTimeLogsRequest(BaseModel):
    date_before: Optional[date] = None
    cleanup_type: Optional[Literal['older_than_6_months', 'older_than_1_year']] = None
    employee_id: Optional[int] = None
