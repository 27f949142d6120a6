import sys
import os
import logging
from datetime import date, timedelta
from sqlalchemy.orm import Session

# Ensure we can import backoffice modules
sys.path.append(os.getcwd())

from backoffice.core.config import settings
from backoffice.database import SessionLocal, init_db
from backoffice.models.leave_request import LeaveRequest
from backoffice.repositories import SqlLeaveStore, SqlSalarySlipStore
from backoffice.schemas.leave import LeaveSubmission
from backoffice.schemas.salary_slip import SalarySlipSubmission
from backoffice.services.leave_service import LeaveWorkflowService
from backoffice.services.notification import LeaveNotifier
from backoffice.services.payroll_service import PayrollService
from backoffice.services.slip_document import SlipDocumentGenerator

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

EMPLOYEES = [
    ("Alice Kumar", "alice@example.com", "E001", "Developer", 20000),
    ("Bob Singh", "bob@example.com", "E002", "Designer", 18000),
]

def seed_demo_data():
    init_db()
    db: Session = SessionLocal()
    try:
        if db.query(LeaveRequest).count():
            logger.warning("Leave requests already present. Skipping.")
            return

        leaves = LeaveWorkflowService(SqlLeaveStore(db), LeaveNotifier(), settings.monthly_leave_quota)
        slip_store = SqlSalarySlipStore(db)
        payroll = PayrollService(slip_store, SlipDocumentGenerator(slip_store, settings.documents_dir, settings.currency_symbol))

        start = date.today() + timedelta(days=7)
        for name, email, emp_id, designation, basic in EMPLOYEES:
            record = leaves.submit(LeaveSubmission(
                employee_name=name,
                employee_email=email,
                from_date=start,
                to_date=start + timedelta(days=1),
                reason="Demo request",
            ))
            logger.info(f"Created leave {record.id} for {email}")

            slip = payroll.create_slip(SalarySlipSubmission(
                employee_name=name,
                emp_id=emp_id,
                email=email,
                designation=designation,
                month=start.strftime("%B"),
                year=start.year,
                basic=basic,
                hra=basic * 0.25,
                allowances=2000,
                pf=basic * 0.09,
                tax=1500,
            ))
            logger.info(f"Created salary slip {slip.id} for {email} (net {slip.net_pay:.2f})")
    except Exception as e:
        logger.error(f"Error seeding demo data: {e}")
        db.rollback()
    finally:
        db.close()

if __name__ == "__main__":
    seed_demo_data()
