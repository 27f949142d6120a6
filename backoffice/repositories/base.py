"""
Storage contracts for the leave workflow and the salary slips.

Two implementations exist for each contract: a SQLAlchemy one bound to the
request's session, and an in-process one used when the database is not
available (degraded mode). Both hand back pydantic records, never ORM rows,
so callers cannot tell them apart.
"""
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple

from backoffice.schemas.leave import LeaveRecord
from backoffice.schemas.salary_slip import SalarySlipRecord


class LeaveStore(ABC):

    @abstractmethod
    def add(self, record: LeaveRecord) -> LeaveRecord:
        ...

    @abstractmethod
    def get(self, leave_id: str) -> Optional[LeaveRecord]:
        ...

    @abstractmethod
    def set_status(self, leave_id: str, status: str) -> Optional[LeaveRecord]:
        """Returns the updated record, or None when the id is unknown."""

    @abstractmethod
    def set_status_many(self, leave_ids: Iterable[str], status: str) -> Tuple[List[str], int]:
        """
        Applies one status to a set of ids in a single operation.
        Returns (ids that exist, number of records whose status changed).
        """

    @abstractmethod
    def resolve_pending(self, status: str, employee_email: Optional[str] = None) -> Tuple[int, int]:
        """Moves every pending record (optionally one employee's) to status. Returns (matched, modified)."""

    @abstractmethod
    def search(
        self,
        employee_email: Optional[str] = None,
        status: Optional[str] = None,
        text: Optional[str] = None,
    ) -> List[LeaveRecord]:
        """Newest first."""


class SalarySlipStore(ABC):

    @abstractmethod
    def add(self, record: SalarySlipRecord) -> SalarySlipRecord:
        ...

    @abstractmethod
    def get(self, slip_id: str) -> Optional[SalarySlipRecord]:
        ...

    @abstractmethod
    def list(self, email: Optional[str] = None) -> List[SalarySlipRecord]:
        """Newest first."""

    @abstractmethod
    def set_pdf_path(self, slip_id: str, pdf_path: str) -> Optional[SalarySlipRecord]:
        ...
