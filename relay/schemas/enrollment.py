# relay/schemas/enrollment.py
from typing import List, Optional

from pydantic import BaseModel, Field

STATUS_PENDING = "pending"

CERTIFICATE_NONE = "none"
CERTIFICATE_REQUESTED = "requested"

# ==================== Enrollment Schemas ====================


class EnrollmentCreate(BaseModel):
    """Enrollment document written on manual receipt submission"""

    course_id: str = Field(..., alias="courseId")
    course_title: Optional[str] = Field(None, alias="courseTitle")
    user_id: str = Field(..., alias="userId")
    user_email: str = Field(..., alias="userEmail")
    user_name: Optional[str] = Field(None, alias="userName")
    amount: float = Field(..., ge=0)
    receipt_url: Optional[str] = Field(None, alias="receiptUrl")
    receipt_path: Optional[str] = Field(None, alias="receiptPath")
    status: str = Field(default=STATUS_PENDING)
    completed_lessons: List[str] = Field(default_factory=list, alias="completedLessons")
    certificate_status: str = Field(
        default=CERTIFICATE_NONE, alias="certificateStatus"
    )

    model_config = {"populate_by_name": True}

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class CertificateRequest(BaseModel):
    enrollment_id: str = Field(..., alias="enrollmentId", min_length=1)

    model_config = {"populate_by_name": True}


class ProgressToggleRequest(BaseModel):
    enrollment_id: str = Field(..., alias="enrollmentId", min_length=1)
    lesson_id: str = Field(..., alias="lessonId", min_length=1)
    completed: bool = Field(
        default=True, description="True marks the lesson done, False clears it"
    )

    model_config = {"populate_by_name": True}


class SuccessResponse(BaseModel):
    success: bool = True


class EnrollmentSubmitResponse(SuccessResponse):
    id: str = Field(..., description="Generated enrollment id")
