"""
Payroll Service Layer

Salary slip arithmetic and persistence. Totals are always recomputed here
from the individual earnings and deductions; whatever totals a client posts
are ignored.
"""
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from backoffice.core.exceptions import AppException, NotFoundError
from backoffice.repositories.base import SalarySlipStore
from backoffice.schemas.salary_slip import SalarySlipRecord, SalarySlipSubmission
from backoffice.services.slip_document import SlipDocumentGenerator

logger = logging.getLogger(__name__)

EARNING_FIELDS = ("basic", "hra", "allowances")
DEDUCTION_FIELDS = ("pf", "tax", "other_deductions")


def to_amount(value: Any) -> float:
    """Coerce form input to a number. Missing or non-numeric input counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    return amount


def compute_totals(
    basic: Any = 0,
    hra: Any = 0,
    allowances: Any = 0,
    pf: Any = 0,
    tax: Any = 0,
    other_deductions: Any = 0
) -> Dict[str, float]:
    """
    Earnings, deductions and net pay for one slip.
    Net pay is not floored: deductions larger than earnings give a negative value.
    """
    total_earnings = to_amount(basic) + to_amount(hra) + to_amount(allowances)
    total_deductions = to_amount(pf) + to_amount(tax) + to_amount(other_deductions)
    return {
        "total_earnings": total_earnings,
        "total_deductions": total_deductions,
        "net_pay": total_earnings - total_deductions,
    }


class PayrollService:
    def __init__(
        self,
        store: SalarySlipStore,
        documents: SlipDocumentGenerator,
        generate_inline: bool = False,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self.documents = documents
        # Degraded mode renders the document at creation so it can be downloaded right away
        self.generate_inline = generate_inline
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def create_slip(self, submission: SalarySlipSubmission) -> SalarySlipRecord:
        amounts = {
            name: to_amount(getattr(submission, name))
            for name in EARNING_FIELDS + DEDUCTION_FIELDS
        }
        totals = compute_totals(**amounts)

        record = SalarySlipRecord(
            id=uuid.uuid4().hex,
            employee_name=submission.employee_name,
            emp_id=submission.emp_id,
            email=submission.email,
            designation=submission.designation,
            month=submission.month,
            year=submission.year,
            **amounts,
            **totals,
            created_at=self._clock(),
        )
        saved = self.store.add(record)
        logger.info(f"Salary slip {saved.id} created for {saved.email or saved.employee_name}")

        if self.generate_inline:
            try:
                self.documents.generate(saved.id)
                saved = self.store.get(saved.id) or saved
            except AppException as e:
                # The slip is kept; the document can be generated again on demand
                logger.error(f"Inline document generation failed for slip {saved.id}: {e.message}")
        return saved

    def list_slips(self, email: Optional[str] = None) -> List[SalarySlipRecord]:
        return self.store.list(email=email or None)

    def get_slip(self, slip_id: str) -> SalarySlipRecord:
        slip = self.store.get(slip_id)
        if slip is None:
            raise NotFoundError("Salary slip", slip_id)
        return slip
