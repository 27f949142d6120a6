# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import leave_request, salary_slip

# Explicit class exports for cleaner imports
from .leave_request import LeaveRequest, LeaveStatus
from .salary_slip import SalarySlip

__all__ = [
    "LeaveRequest",
    "LeaveStatus",
    "SalarySlip",
]
