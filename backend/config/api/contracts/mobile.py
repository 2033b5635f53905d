"""
Mobile API contracts (/api/mobile/*).
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class ClockRequest(BaseModel):
    """Body of POST /api/mobile/clockin and /api/mobile/clockout."""
    employee: str = Field(default='', max_length=200)
    userinfo: Optional[str] = Field(default=None, max_length=1000)
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lon: Optional[float] = Field(default=None, ge=-180, le=180)
    line_name: Optional[str] = Field(default=None, max_length=200)
    line_picture: Optional[str] = Field(default=None, max_length=500)
    client_time: Optional[str] = None

    @field_validator('employee')
    @classmethod
    def strip_employee(cls, v: str) -> str:
        return (v or '').strip()


class ClockResponse(BaseModel):
    success: bool
    message: str
    code: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class StatusResponse(BaseModel):
    success: bool
    status: str
    message: str
    employee_name: Optional[str] = None
    clock_in_time: Optional[str] = None
    clock_out_time: Optional[str] = None


class BatchOperation(BaseModel):
    type: str = Field(min_length=1, max_length=50)


class BatchRequest(BaseModel):
    """Body of POST /api/mobile/batch."""
    operations: List[BatchOperation] = Field(max_length=20)
