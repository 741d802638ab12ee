# relay/routers/enrollments.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from relay.core.config import settings
from relay.core.dependencies import get_enrollment_service
from relay.core.limiter import limiter
from relay.schemas.enrollment import (
    CertificateRequest,
    EnrollmentCreate,
    EnrollmentSubmitResponse,
    ProgressToggleRequest,
    SuccessResponse,
)
from relay.services.enrollment import EnrollmentService

router = APIRouter(
    prefix="/api/enrollments",
    tags=["Enrollments"],
    responses={404: {"description": "Not found"}},
)


@router.post("/submit", response_model=EnrollmentSubmitResponse)
@limiter.limit(settings.rate_limit)
async def submit_enrollment(
    request: Request,
    receipt: Optional[UploadFile] = File(None, description="Payment receipt"),
    course_id: str = Form(..., alias="courseId", min_length=1),
    user_id: str = Form(..., alias="userId", min_length=1),
    user_email: str = Form(..., alias="userEmail", min_length=3),
    amount: float = Form(..., ge=0),
    user_name: Optional[str] = Form(None, alias="userName"),
    course_title: Optional[str] = Form(None, alias="courseTitle"),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    """
    Submit a manual payment receipt.
    The receipt is stored and a pending enrollment is created for admin review.
    """
    enrollment_in = EnrollmentCreate(
        course_id=course_id,
        course_title=course_title,
        user_id=user_id,
        user_email=user_email,
        user_name=user_name,
        amount=amount,
    )
    enrollment_id = await service.submit_manual(enrollment_in, receipt)
    return {"success": True, "id": enrollment_id}


@router.post("/request-certificate", response_model=SuccessResponse)
async def request_certificate(
    certificate_in: CertificateRequest,
    service: EnrollmentService = Depends(get_enrollment_service),
):
    """Mark an enrollment's certificate as requested."""
    await service.request_certificate(certificate_in.enrollment_id)
    return {"success": True}


@router.post("/toggle-progress", response_model=SuccessResponse)
async def toggle_progress(
    progress_in: ProgressToggleRequest,
    service: EnrollmentService = Depends(get_enrollment_service),
):
    await service.toggle_progress(progress_in)
    return {"success": True}
