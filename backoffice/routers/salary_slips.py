"""
Salary Slip Router

HTTP endpoints for payroll submissions and their PDF documents.
Business logic lives in the payroll service and the document generator.
"""
import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import FileResponse
from pydantic import ValidationError as PydanticValidationError

from backoffice.core.exceptions import ValidationError
from backoffice.dependencies import get_payroll_service, get_slip_documents
from backoffice.schemas.salary_slip import (
    SalarySlipRecord,
    SalarySlipSubmission,
    SlipDocumentResponse,
)
from backoffice.services.payroll_service import PayrollService
from backoffice.services.slip_document import SlipDocumentGenerator

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/salary-slips",
    tags=["salary-slips"]
)


async def read_slip_submission(request: Request) -> SalarySlipSubmission:
    """
    The dashboard posts the payroll form as multipart/form-data; JSON and
    urlencoded bodies are accepted as well.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValidationError("Request body is not valid JSON")
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
    else:
        form = await request.form()
        data = {key: value for key, value in form.items() if isinstance(value, str)}

    try:
        return SalarySlipSubmission.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid salary slip payload",
            details={"errors": [err["msg"] for err in e.errors()]}
        )


@router.post("", response_model=SalarySlipRecord, status_code=status.HTTP_201_CREATED)
def create_salary_slip(
    submission: SalarySlipSubmission = Depends(read_slip_submission),
    service: PayrollService = Depends(get_payroll_service)
):
    return service.create_slip(submission)


@router.get("", response_model=List[SalarySlipRecord])
def list_salary_slips(
    email: Optional[str] = None,
    service: PayrollService = Depends(get_payroll_service)
):
    return service.list_slips(email=email)


@router.get("/{slip_id}", response_model=SalarySlipRecord)
def get_salary_slip(
    slip_id: str,
    service: PayrollService = Depends(get_payroll_service)
):
    return service.get_slip(slip_id)


@router.post("/{slip_id}/generate", response_model=SlipDocumentResponse)
def generate_salary_slip_document(
    slip_id: str,
    documents: SlipDocumentGenerator = Depends(get_slip_documents)
):
    """Render (or re-render) the slip PDF. Always overwrites slip-<id>.pdf."""
    return SlipDocumentResponse(pdf_path=documents.generate(slip_id))


@router.get("/{slip_id}/pdf")
def download_salary_slip_document(
    slip_id: str,
    documents: SlipDocumentGenerator = Depends(get_slip_documents)
):
    path = documents.open_document(slip_id)
    return FileResponse(
        path,
        media_type="application/pdf",
        filename=path.name,
        content_disposition_type="inline",
    )
