import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Date
from backoffice.database import Base, UtcDateTime

class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"

class LeaveType(str, enum.Enum):
    # Advisory labels shown by the request form; the column accepts any text
    CASUAL = "Casual Leave"
    SICK = "Sick Leave"
    EMERGENCY = "Emergency Leave"
    PAID = "Paid Leave"

def _new_id() -> str:
    return uuid.uuid4().hex

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(String(32), primary_key=True, default=_new_id)
    employee_name = Column(String, nullable=True)
    employee_email = Column(String, index=True) # Identity reference only, no foreign key
    from_date = Column(Date)
    to_date = Column(Date)
    days = Column(Integer, default=0)
    type = Column(String, default=LeaveType.CASUAL.value)
    reason = Column(String, nullable=True)
    status = Column(String, default=LeaveStatus.PENDING.value, index=True) # Stored as plain string for SQLite
    monthly_quota = Column(Integer, nullable=True)
    leaves_taken_this_month = Column(Integer, nullable=True)
    created_at = Column(UtcDateTime, default=_utcnow, index=True)
