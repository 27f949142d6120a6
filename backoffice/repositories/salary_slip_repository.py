import threading
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from backoffice.models.salary_slip import SalarySlip
from backoffice.repositories.base import SalarySlipStore
from backoffice.schemas.salary_slip import SalarySlipRecord


class SqlSalarySlipStore(SalarySlipStore):
    def __init__(self, db: Session):
        self.db = db

    def _commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def add(self, record: SalarySlipRecord) -> SalarySlipRecord:
        row = SalarySlip(**record.model_dump())
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        return SalarySlipRecord.model_validate(row)

    def get(self, slip_id: str) -> Optional[SalarySlipRecord]:
        row = self.db.get(SalarySlip, slip_id)
        return SalarySlipRecord.model_validate(row) if row else None

    def list(self, email: Optional[str] = None) -> List[SalarySlipRecord]:
        query = self.db.query(SalarySlip)
        if email:
            query = query.filter(func.lower(SalarySlip.email) == email.lower())
        rows = query.order_by(SalarySlip.created_at.desc()).all()
        return [SalarySlipRecord.model_validate(r) for r in rows]

    def set_pdf_path(self, slip_id: str, pdf_path: str) -> Optional[SalarySlipRecord]:
        row = self.db.get(SalarySlip, slip_id)
        if row is None:
            return None
        row.pdf_path = pdf_path
        self._commit()
        self.db.refresh(row)
        return SalarySlipRecord.model_validate(row)


class MemorySalarySlipStore(SalarySlipStore):
    def __init__(self):
        self._records: Dict[str, SalarySlipRecord] = {}
        self._lock = threading.Lock()

    def add(self, record: SalarySlipRecord) -> SalarySlipRecord:
        with self._lock:
            self._records[record.id] = record.model_copy()
        return record.model_copy()

    def get(self, slip_id: str) -> Optional[SalarySlipRecord]:
        with self._lock:
            record = self._records.get(slip_id)
            return record.model_copy() if record else None

    def list(self, email: Optional[str] = None) -> List[SalarySlipRecord]:
        wanted = email.lower() if email else None
        with self._lock:
            records = [
                r.model_copy() for r in reversed(list(self._records.values()))
                if not wanted or (r.email or "").lower() == wanted
            ]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records

    def set_pdf_path(self, slip_id: str, pdf_path: str) -> Optional[SalarySlipRecord]:
        with self._lock:
            record = self._records.get(slip_id)
            if record is None:
                return None
            record.pdf_path = pdf_path
            return record.model_copy()
