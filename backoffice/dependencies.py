"""
Request-scoped wiring of stores and services.

The storage mode lives on app.state (decided once in the lifespan). Tests
swap pieces through app.dependency_overrides, e.g. get_db or
get_documents_dir.
"""
from pathlib import Path

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from backoffice.core.config import settings
from backoffice.database import get_db
from backoffice.repositories import (
    LeaveStore,
    SalarySlipStore,
    SqlLeaveStore,
    SqlSalarySlipStore,
    Storage,
)
from backoffice.services.leave_service import LeaveWorkflowService
from backoffice.services.notification import LeaveNotifier
from backoffice.services.payroll_service import PayrollService
from backoffice.services.slip_document import SlipDocumentGenerator


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_leave_store(storage: Storage = Depends(get_storage), db: Session = Depends(get_db)) -> LeaveStore:
    if storage.degraded:
        return storage.leaves
    return SqlLeaveStore(db)


def get_salary_slip_store(storage: Storage = Depends(get_storage), db: Session = Depends(get_db)) -> SalarySlipStore:
    if storage.degraded:
        return storage.salary_slips
    return SqlSalarySlipStore(db)


def get_leave_notifier(request: Request) -> LeaveNotifier:
    return request.app.state.leave_notifier


def get_documents_dir() -> Path:
    return Path(settings.documents_dir)


def get_leave_service(
    store: LeaveStore = Depends(get_leave_store),
    notifier: LeaveNotifier = Depends(get_leave_notifier),
) -> LeaveWorkflowService:
    return LeaveWorkflowService(store, notifier, monthly_quota=settings.monthly_leave_quota)


def get_slip_documents(
    store: SalarySlipStore = Depends(get_salary_slip_store),
    documents_dir: Path = Depends(get_documents_dir),
) -> SlipDocumentGenerator:
    return SlipDocumentGenerator(store, documents_dir, currency_symbol=settings.currency_symbol)


def get_payroll_service(
    store: SalarySlipStore = Depends(get_salary_slip_store),
    documents: SlipDocumentGenerator = Depends(get_slip_documents),
    storage: Storage = Depends(get_storage),
) -> PayrollService:
    return PayrollService(store, documents, generate_inline=storage.degraded)
