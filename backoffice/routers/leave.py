from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from backoffice.dependencies import get_leave_service
from backoffice.schemas.leave import (
    AutoApproveRequest,
    AutoApproveResult,
    BulkActionRequest,
    BulkResolveResult,
    LeaveRecord,
    LeaveSubmission,
    QuotaSummary,
)
from backoffice.services.leave_service import LeaveWorkflowService

router = APIRouter(
    prefix="/leaves",
    tags=["leaves"]
)


@router.post("", response_model=LeaveRecord, status_code=status.HTTP_201_CREATED)
def submit_leave_request(
    submission: LeaveSubmission,
    service: LeaveWorkflowService = Depends(get_leave_service)
):
    return service.submit(submission)


@router.get("", response_model=List[LeaveRecord])
def list_leave_requests(
    email: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    service: LeaveWorkflowService = Depends(get_leave_service)
):
    """Newest first. status=all (or empty) disables the status filter."""
    return service.list_leaves(employee_email=email, status=status, search=search)


@router.get("/quota", response_model=QuotaSummary)
def get_leave_quota(
    email: str = Query(..., min_length=1),
    service: LeaveWorkflowService = Depends(get_leave_service)
):
    """Monthly quota usage for one employee, used by the request form."""
    return service.quota_summary(email)


@router.post("/bulk-action", response_model=BulkResolveResult)
def bulk_action(
    request: BulkActionRequest,
    service: LeaveWorkflowService = Depends(get_leave_service)
):
    return service.bulk_resolve(request.ids, request.action)


@router.post("/auto-approve", response_model=AutoApproveResult)
def auto_approve(
    request: Optional[AutoApproveRequest] = Body(default=None),
    service: LeaveWorkflowService = Depends(get_leave_service)
):
    email = request.email if request else None
    return service.auto_approve_pending(employee_email=email)


@router.get("/{leave_id}", response_model=LeaveRecord)
def get_leave_request(
    leave_id: str,
    service: LeaveWorkflowService = Depends(get_leave_service)
):
    return service.get(leave_id)


@router.post("/{leave_id}/{action}", response_model=LeaveRecord)
def resolve_leave_request(
    leave_id: str,
    action: str,
    service: LeaveWorkflowService = Depends(get_leave_service)
):
    return service.resolve(leave_id, action)
