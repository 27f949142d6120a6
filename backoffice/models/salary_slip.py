import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float
from backoffice.database import Base, UtcDateTime

class SalarySlip(Base):
    __tablename__ = "salary_slips"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    employee_name = Column(String, nullable=True)
    emp_id = Column(String, nullable=True)
    email = Column(String, index=True, nullable=True)
    designation = Column(String, nullable=True)
    month = Column(String, nullable=True)
    year = Column(Integer, nullable=True)

    # Earnings
    basic = Column(Float, default=0.0)
    hra = Column(Float, default=0.0)
    allowances = Column(Float, default=0.0)

    # Deductions
    pf = Column(Float, default=0.0)
    tax = Column(Float, default=0.0)
    other_deductions = Column(Float, default=0.0)

    # Derived server-side
    total_earnings = Column(Float, default=0.0)
    total_deductions = Column(Float, default=0.0)
    net_pay = Column(Float, default=0.0)

    pdf_path = Column(String, nullable=True) # Set once a document has been rendered
    created_at = Column(UtcDateTime, default=lambda: datetime.now(timezone.utc), index=True)
