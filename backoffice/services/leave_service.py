"""
Leave Workflow Service

Owns the leave request lifecycle: submission, approval/denial (single and
bulk), auto-approval of pending requests and listing for the dashboards.

State machine: pending -> approved | pending -> denied.
resolve() does not guard against re-resolving a record that is already
approved or denied; auto_approve_pending() only ever touches pending ones.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from backoffice.core.exceptions import NotFoundError, ValidationError
from backoffice.models.leave_request import LeaveStatus
from backoffice.repositories.base import LeaveStore
from backoffice.schemas.leave import (
    AutoApproveResult,
    BulkResolveResult,
    LeaveRecord,
    LeaveSubmission,
    QuotaSummary,
)
from backoffice.services.notification import LeaveChangeEvent, LeaveNotifier
from backoffice.services.quota import QuotaCalculator, days_requested

logger = logging.getLogger(__name__)

ACTION_TO_STATUS = {
    "approve": LeaveStatus.APPROVED.value,
    "deny": LeaveStatus.DENIED.value,
}

# Optional hook run before a submission is stored; may raise ValidationError
QuotaPolicy = Callable[[LeaveSubmission, QuotaSummary], None]


def status_for_action(action: str) -> str:
    status = ACTION_TO_STATUS.get((action or "").lower())
    if status is None:
        raise ValidationError(
            f"Unknown action '{action}'. Expected one of: {', '.join(ACTION_TO_STATUS)}",
            details={"action": action}
        )
    return status


class LeaveWorkflowService:
    def __init__(
        self,
        store: LeaveStore,
        notifier: LeaveNotifier,
        monthly_quota: int,
        quota_policy: Optional[QuotaPolicy] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self.notifier = notifier
        self.quota_policy = quota_policy
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.quota = QuotaCalculator(store, monthly_quota, clock=self._clock)

    def submit(self, submission: LeaveSubmission) -> LeaveRecord:
        """
        Store a new request as pending.

        days and the quota snapshot are always derived here; the values older
        clients send are never trusted. The quota itself is not enforced.
        """
        if not submission.employee_email:
            raise ValidationError("employeeEmail is required")

        summary = self.quota.summarize(submission.employee_email)
        if self.quota_policy is not None:
            self.quota_policy(submission, summary)

        record = LeaveRecord(
            id=uuid.uuid4().hex,
            employee_name=submission.employee_name,
            employee_email=submission.employee_email,
            from_date=submission.from_date,
            to_date=submission.to_date,
            days=days_requested(submission.from_date, submission.to_date),
            type=submission.type,
            reason=submission.reason,
            status=LeaveStatus.PENDING,
            monthly_quota=summary.monthly_quota,
            leaves_taken_this_month=summary.leaves_taken_this_month,
            created_at=self._clock(),
        )
        saved = self.store.add(record)
        logger.info(
            f"Leave request {saved.id} submitted for {saved.employee_email} ({saved.days} days)",
            extra={"leaves_left": summary.leaves_left}
        )
        self.notifier.publish(LeaveChangeEvent("submit", (saved.id,)))
        return saved

    def resolve(self, leave_id: str, action: str) -> LeaveRecord:
        status = status_for_action(action)
        updated = self.store.set_status(leave_id, status)
        if updated is None:
            raise NotFoundError("Leave request", leave_id)

        logger.info(f"Leave request {leave_id} -> {status}")
        self.notifier.publish(LeaveChangeEvent(action.lower(), (leave_id,)))
        return updated

    def bulk_resolve(self, leave_ids: Iterable[str], action: str) -> BulkResolveResult:
        """
        Apply one action to many requests in a single store operation.
        Unknown ids are skipped and reported back in `missing`; there is no
        rollback across the batch if the store fails midway.
        """
        status = status_for_action(action)
        requested = list(dict.fromkeys(leave_ids))
        found, modified = self.store.set_status_many(requested, status)

        found_set = set(found)
        missing = [i for i in requested if i not in found_set]
        if missing:
            logger.warning(f"Bulk {action}: {len(missing)} of {len(requested)} ids not found")
        logger.info(f"Bulk {action}: matched={len(found)} modified={modified}")

        if found:
            self.notifier.publish(LeaveChangeEvent(f"bulk_{action.lower()}", tuple(found)))
        return BulkResolveResult(matched=len(found), modified=modified, missing=missing)

    def auto_approve_pending(self, employee_email: Optional[str] = None) -> AutoApproveResult:
        matched, modified = self.store.resolve_pending(LeaveStatus.APPROVED.value, employee_email)
        if not matched:
            return AutoApproveResult(message="No pending leaves matched", matched=0, modified=0)

        logger.info(f"Auto-approved {modified} pending leave(s)", extra={"employee_email": employee_email})
        self.notifier.publish(LeaveChangeEvent("auto_approve"))
        return AutoApproveResult(message="Auto-approve completed", matched=matched, modified=modified)

    def list_leaves(
        self,
        employee_email: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None
    ) -> List[LeaveRecord]:
        if status and status.lower() == "all":
            status = None
        return self.store.search(
            employee_email=employee_email or None,
            status=status.lower() if status else None,
            text=search.strip() if search and search.strip() else None,
        )

    def get(self, leave_id: str) -> LeaveRecord:
        record = self.store.get(leave_id)
        if record is None:
            raise NotFoundError("Leave request", leave_id)
        return record

    def quota_summary(self, employee_email: str) -> QuotaSummary:
        if not employee_email:
            raise ValidationError("email is required")
        return self.quota.summarize(employee_email)
