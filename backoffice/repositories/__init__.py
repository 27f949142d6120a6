from backoffice.repositories.base import LeaveStore, SalarySlipStore
from backoffice.repositories.leave_repository import SqlLeaveStore, MemoryLeaveStore
from backoffice.repositories.salary_slip_repository import SqlSalarySlipStore, MemorySalarySlipStore


class Storage:
    """
    Storage mode chosen once at startup.
    In "memory" mode the in-process stores below serve every request;
    in "sql" mode the dependencies build SQL stores on the request session.
    """

    def __init__(self, mode: str = "sql"):
        self.mode = mode
        self.leaves = MemoryLeaveStore()
        self.salary_slips = MemorySalarySlipStore()

    @property
    def degraded(self) -> bool:
        return self.mode == "memory"


__all__ = [
    "LeaveStore",
    "SalarySlipStore",
    "SqlLeaveStore",
    "MemoryLeaveStore",
    "SqlSalarySlipStore",
    "MemorySalarySlipStore",
    "Storage",
]
