import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from backoffice.models.leave_request import LeaveRequest, LeaveStatus
from backoffice.repositories.base import LeaveStore
from backoffice.schemas.leave import LeaveRecord

logger = logging.getLogger(__name__)


def _like_pattern(text: str) -> str:
    """Literal, case-insensitive substring pattern for ILIKE."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SqlLeaveStore(LeaveStore):
    def __init__(self, db: Session):
        self.db = db

    def _commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def add(self, record: LeaveRecord) -> LeaveRecord:
        row = LeaveRequest(**record.model_dump())
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        return LeaveRecord.model_validate(row)

    def get(self, leave_id: str) -> Optional[LeaveRecord]:
        row = self.db.get(LeaveRequest, leave_id)
        return LeaveRecord.model_validate(row) if row else None

    def set_status(self, leave_id: str, status: str) -> Optional[LeaveRecord]:
        row = self.db.get(LeaveRequest, leave_id)
        if row is None:
            return None
        row.status = status
        self._commit()
        self.db.refresh(row)
        return LeaveRecord.model_validate(row)

    def set_status_many(self, leave_ids: Iterable[str], status: str) -> Tuple[List[str], int]:
        wanted = list(dict.fromkeys(leave_ids))
        if not wanted:
            return [], 0
        found = [
            row_id for (row_id,) in
            self.db.query(LeaveRequest.id).filter(LeaveRequest.id.in_(wanted)).all()
        ]
        modified = self.db.query(LeaveRequest).filter(
            LeaveRequest.id.in_(wanted),
            LeaveRequest.status != status
        ).update({LeaveRequest.status: status}, synchronize_session=False)
        self._commit()
        # Bulk UPDATE bypasses the identity map
        self.db.expire_all()
        return found, modified

    def resolve_pending(self, status: str, employee_email: Optional[str] = None) -> Tuple[int, int]:
        query = self.db.query(LeaveRequest).filter(LeaveRequest.status == LeaveStatus.PENDING.value)
        if employee_email:
            query = query.filter(func.lower(LeaveRequest.employee_email) == employee_email.lower())

        matched = query.count()
        if not matched:
            return 0, 0
        modified = query.update({LeaveRequest.status: status}, synchronize_session=False)
        self._commit()
        # Bulk UPDATE bypasses the identity map
        self.db.expire_all()
        return matched, modified

    def search(
        self,
        employee_email: Optional[str] = None,
        status: Optional[str] = None,
        text: Optional[str] = None,
    ) -> List[LeaveRecord]:
        query = self.db.query(LeaveRequest)
        if employee_email:
            query = query.filter(func.lower(LeaveRequest.employee_email) == employee_email.lower())
        if status:
            query = query.filter(LeaveRequest.status == status)
        if text:
            pattern = _like_pattern(text)
            query = query.filter(or_(
                LeaveRequest.employee_name.ilike(pattern, escape="\\"),
                LeaveRequest.employee_email.ilike(pattern, escape="\\"),
            ))
        rows = query.order_by(LeaveRequest.created_at.desc()).all()
        return [LeaveRecord.model_validate(r) for r in rows]


class MemoryLeaveStore(LeaveStore):
    """
    Process-local store for degraded mode.
    Not shared between workers and lost on restart.
    """

    def __init__(self):
        self._records: Dict[str, LeaveRecord] = {}
        self._lock = threading.Lock()

    def add(self, record: LeaveRecord) -> LeaveRecord:
        with self._lock:
            self._records[record.id] = record.model_copy()
        return record.model_copy()

    def get(self, leave_id: str) -> Optional[LeaveRecord]:
        with self._lock:
            record = self._records.get(leave_id)
            return record.model_copy() if record else None

    def set_status(self, leave_id: str, status: str) -> Optional[LeaveRecord]:
        with self._lock:
            record = self._records.get(leave_id)
            if record is None:
                return None
            record.status = status
            return record.model_copy()

    def set_status_many(self, leave_ids: Iterable[str], status: str) -> Tuple[List[str], int]:
        found, modified = [], 0
        with self._lock:
            for leave_id in dict.fromkeys(leave_ids):
                record = self._records.get(leave_id)
                if record is None:
                    continue
                found.append(leave_id)
                if record.status != status:
                    record.status = status
                    modified += 1
        return found, modified

    def resolve_pending(self, status: str, employee_email: Optional[str] = None) -> Tuple[int, int]:
        email = employee_email.lower() if employee_email else None
        matched = 0
        with self._lock:
            for record in self._records.values():
                if record.status != LeaveStatus.PENDING.value:
                    continue
                if email and (record.employee_email or "").lower() != email:
                    continue
                record.status = status
                matched += 1
        return matched, matched

    def search(
        self,
        employee_email: Optional[str] = None,
        status: Optional[str] = None,
        text: Optional[str] = None,
    ) -> List[LeaveRecord]:
        email = employee_email.lower() if employee_email else None
        needle = text.lower() if text else None
        with self._lock:
            # Newest inserts first so equal timestamps keep that order after the stable sort
            records = list(reversed(list(self._records.values())))
        result = []
        for record in records:
            if email and (record.employee_email or "").lower() != email:
                continue
            if status and record.status != status:
                continue
            if needle and needle not in (record.employee_name or "").lower() \
                    and needle not in (record.employee_email or "").lower():
                continue
            result.append(record.model_copy())
        result.sort(key=lambda r: r.created_at, reverse=True)
        return result
