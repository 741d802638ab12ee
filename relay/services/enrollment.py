# relay/services/enrollment.py
import logging
from html import escape
from typing import Optional

from fastapi import UploadFile

from relay.schemas.enrollment import EnrollmentCreate, ProgressToggleRequest
from relay.services.storage import ReceiptStorage
from relay.services.store import FirestoreStore
from relay.utils.file_upload import ReceiptUploadValidator
from relay.utils.mailer import ResendMailer

logger = logging.getLogger(__name__)


class EnrollmentService:
    def __init__(
        self,
        store: FirestoreStore,
        storage: ReceiptStorage,
        mailer: ResendMailer,
        validator: ReceiptUploadValidator,
    ):
        self.store = store
        self.storage = storage
        self.mailer = mailer
        self.validator = validator

    async def submit_manual(
        self, enrollment_in: EnrollmentCreate, receipt: Optional[UploadFile]
    ) -> str:
        """
        Record a manual bank-transfer enrollment.
        - Rejects the request before any write when the receipt is missing
        - Stores the receipt publicly and writes a pending enrollment
        - Notifies the admin, best effort
        """
        receipt = self.validator.validate(receipt)

        stored = await self.storage.upload_receipt(receipt, enrollment_in.user_id)
        enrollment_in = enrollment_in.model_copy(
            update={"receipt_url": stored.url, "receipt_path": stored.path}
        )
        enrollment_id = await self.store.create_enrollment(enrollment_in.to_document())
        logger.info(
            f"Pending enrollment {enrollment_id} for {enrollment_in.user_email} "
            f"in {enrollment_in.course_id}"
        )

        await self._notify_new_submission(enrollment_id, enrollment_in)
        return enrollment_id

    async def request_certificate(self, enrollment_id: str) -> None:
        await self.store.request_certificate(enrollment_id)
        logger.info(f"Certificate requested for enrollment {enrollment_id}")

        await self.mailer.notify_admin(
            "Certificate request",
            f"<p>A certificate was requested for enrollment "
            f"<strong>{escape(enrollment_id)}</strong>.</p>",
        )

    async def toggle_progress(self, progress_in: ProgressToggleRequest) -> None:
        await self.store.set_lesson_completed(
            progress_in.enrollment_id, progress_in.lesson_id, progress_in.completed
        )

    async def _notify_new_submission(
        self, enrollment_id: str, enrollment: EnrollmentCreate
    ) -> None:
        course = enrollment.course_title or enrollment.course_id
        html = (
            "<h2>New manual payment submitted</h2>"
            f"<p><strong>Student:</strong> {escape(enrollment.user_name or '')} "
            f"&lt;{escape(enrollment.user_email)}&gt;</p>"
            f"<p><strong>Course:</strong> {escape(course)}</p>"
            f"<p><strong>Amount:</strong> {enrollment.amount:,.2f}</p>"
            f"<p><strong>Enrollment:</strong> {escape(enrollment_id)}</p>"
            f'<p><a href="{escape(enrollment.receipt_url or "")}">View receipt</a></p>'
        )
        sent = await self.mailer.notify_admin(f"New enrollment: {course}", html)
        if not sent:
            logger.warning(f"Admin was not notified about enrollment {enrollment_id}")
