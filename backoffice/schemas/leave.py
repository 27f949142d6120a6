from datetime import date, datetime
from typing import List, Optional

from pydantic import ConfigDict, field_validator

from backoffice.core.schemas import CamelModel
from backoffice.models.leave_request import LeaveStatus, LeaveType


class LeaveRecord(CamelModel):
    model_config = ConfigDict(use_enum_values=True)

    id: str
    employee_name: Optional[str] = None
    employee_email: Optional[str] = None
    from_date: date
    to_date: date
    days: int = 0
    type: str = LeaveType.CASUAL.value
    reason: Optional[str] = None
    status: LeaveStatus = LeaveStatus.PENDING
    monthly_quota: Optional[int] = None
    leaves_taken_this_month: Optional[int] = None
    created_at: datetime


class LeaveSubmission(CamelModel):
    """
    Body of POST /leaves.
    Older clients also send days, status, monthlyQuota and leavesTakenThisMonth;
    those are derived server-side and silently ignored here.
    """
    employee_name: Optional[str] = None
    employee_email: str
    from_date: date
    to_date: date
    type: str = LeaveType.CASUAL.value
    reason: Optional[str] = None

    @field_validator("employee_email")
    @classmethod
    def email_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("employeeEmail is required")
        return v

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, v):
        return v or LeaveType.CASUAL.value


class BulkActionRequest(CamelModel):
    ids: List[str]
    action: str


class AutoApproveRequest(CamelModel):
    email: Optional[str] = None


class BulkResolveResult(CamelModel):
    matched: int
    modified: int
    missing: List[str] = []


class AutoApproveResult(CamelModel):
    message: str
    matched: int
    modified: int


class QuotaSummary(CamelModel):
    employee_email: str
    monthly_quota: int
    leaves_taken_this_month: int
    leaves_left: int
