from datetime import datetime
from typing import Any, Optional

from pydantic import field_validator, model_validator

from backoffice.core.schemas import CamelModel


class SalarySlipRecord(CamelModel):
    id: str
    employee_name: Optional[str] = None
    emp_id: Optional[str] = None
    email: Optional[str] = None
    designation: Optional[str] = None
    month: Optional[str] = None
    year: Optional[int] = None
    basic: float = 0.0
    hra: float = 0.0
    allowances: float = 0.0
    pf: float = 0.0
    tax: float = 0.0
    other_deductions: float = 0.0
    total_earnings: float = 0.0
    total_deductions: float = 0.0
    net_pay: float = 0.0
    pdf_path: Optional[str] = None
    created_at: datetime


class SalarySlipSubmission(CamelModel):
    """
    Payroll form as posted by the dashboard.
    Amounts are kept raw; the payroll calculator owns their coercion.
    Client totals (totalEarnings, netPay, ...) are ignored.
    """
    employee_name: Optional[str] = None
    emp_id: Optional[str] = None
    email: Optional[str] = None
    designation: Optional[str] = None
    month: Optional[str] = None
    year: Optional[int] = None
    basic: Any = None
    hra: Any = None
    allowances: Any = None
    pf: Any = None
    tax: Any = None
    other_deductions: Any = None

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_deductions(cls, data: Any) -> Any:
        # Older forms posted a single "deductions" field
        if isinstance(data, dict) and "deductions" in data:
            data = dict(data)
            legacy = data.pop("deductions")
            if not data.get("otherDeductions") and not data.get("other_deductions"):
                data["otherDeductions"] = legacy
        return data

    @field_validator("employee_name", "emp_id", "email", "designation", "month", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("year", mode="before")
    @classmethod
    def lenient_year(cls, v):
        if v is None or isinstance(v, int):
            return v
        try:
            return int(str(v).strip())
        except ValueError:
            return None


class SlipDocumentResponse(CamelModel):
    pdf_path: str
