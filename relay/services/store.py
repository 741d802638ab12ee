# relay/services/store.py
import logging

from fastapi.concurrency import run_in_threadpool
from firebase_admin import firestore

from relay.core.exceptions import store_exception
from relay.schemas.enrollment import CERTIFICATE_REQUESTED

logger = logging.getLogger(__name__)


class FirestoreStore:
    """Course and enrollment documents in Cloud Firestore.

    The Firestore SDK is blocking, so every call runs in the threadpool.
    """

    def __init__(
        self,
        client,
        courses_collection: str = "basicCourses",
        enrollments_collection: str = "enrollments",
    ):
        self.client = client
        self.courses_collection = courses_collection
        self.enrollments_collection = enrollments_collection

    def _course(self, course_id: str):
        return self.client.collection(self.courses_collection).document(course_id)

    def _enrollment(self, enrollment_id: str):
        return self.client.collection(self.enrollments_collection).document(
            enrollment_id
        )

    # ==================== Courses ====================

    @store_exception("Course not found")
    async def add_course_student(self, course_id: str, email: str) -> None:
        """Union an email into the course's ``students`` set."""
        await run_in_threadpool(
            self._course(course_id).update,
            {"students": firestore.ArrayUnion([email])},
        )

    # ==================== Enrollments ====================

    @store_exception()
    async def create_enrollment(self, data: dict) -> str:
        document = {
            **data,
            "createdAt": firestore.SERVER_TIMESTAMP,
            "updatedAt": firestore.SERVER_TIMESTAMP,
        }
        _, ref = await run_in_threadpool(
            self.client.collection(self.enrollments_collection).add, document
        )
        return ref.id

    @store_exception("Enrollment not found")
    async def request_certificate(self, enrollment_id: str) -> None:
        await run_in_threadpool(
            self._enrollment(enrollment_id).update,
            {
                "certificateStatus": CERTIFICATE_REQUESTED,
                "certificateRequestedAt": firestore.SERVER_TIMESTAMP,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            },
        )

    @store_exception("Enrollment not found")
    async def set_lesson_completed(
        self, enrollment_id: str, lesson_id: str, completed: bool
    ) -> None:
        transform = firestore.ArrayUnion if completed else firestore.ArrayRemove
        await run_in_threadpool(
            self._enrollment(enrollment_id).update,
            {
                "completedLessons": transform([lesson_id]),
                "updatedAt": firestore.SERVER_TIMESTAMP,
            },
        )
