"""
Monthly leave quota arithmetic.

The quota is informational: the request form uses it to refuse a submission
once nothing is left, but the workflow engine never rejects on it unless a
policy hook is installed (see LeaveWorkflowService).
"""
from datetime import date, datetime, timezone
from typing import Callable, Iterable, Optional

from backoffice.models.leave_request import LeaveStatus
from backoffice.repositories.base import LeaveStore
from backoffice.schemas.leave import LeaveRecord, QuotaSummary


def days_requested(from_date: date, to_date: date) -> int:
    """Inclusive calendar-day count. Inverted ranges count as zero days."""
    if to_date < from_date:
        return 0
    return (to_date - from_date).days + 1


def leaves_taken_this_month(records: Iterable[LeaveRecord], today: date) -> int:
    """Days of non-denied leave starting in today's month."""
    total = 0
    for record in records:
        if record.status == LeaveStatus.DENIED.value:
            continue
        if record.from_date.year != today.year or record.from_date.month != today.month:
            continue
        total += record.days or days_requested(record.from_date, record.to_date)
    return total


def leaves_left(monthly_quota: int, taken: int) -> int:
    return max(0, monthly_quota - taken)


class QuotaCalculator:
    def __init__(
        self,
        store: LeaveStore,
        monthly_quota: int,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self.monthly_quota = monthly_quota
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def summarize(self, employee_email: str) -> QuotaSummary:
        # Scans every record of the employee; there is no per-month index
        records = self.store.search(employee_email=employee_email)
        taken = leaves_taken_this_month(records, self._clock().date())
        return QuotaSummary(
            employee_email=employee_email,
            monthly_quota=self.monthly_quota,
            leaves_taken_this_month=taken,
            leaves_left=leaves_left(self.monthly_quota, taken),
        )
