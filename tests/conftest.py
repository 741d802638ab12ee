import os

os.environ.setdefault("ENVIRONMENT", "production")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ["RATE_LIMIT"] = "20/minute"
os.environ.setdefault("CLIENT_ORIGIN", "https://app.higher.test")

import httpx
import pytest
from fastapi.testclient import TestClient

from main import create_app
from relay.core.config import Settings
from relay.core.exceptions import ServiceException
from relay.core.services import Services
from relay.services.gateway import FlutterwaveGateway
from relay.services.storage import StoredReceipt
from relay.utils.file_upload import ReceiptUploadValidator, receipt_object_path

WEBHOOK_SECRET = "test-secret-hash"
FLW_SECRET_KEY = "FLWSECK_TEST-abc123"


class FakeStore:
    """In-memory stand-in for FirestoreStore."""

    def __init__(self):
        self.courses = {}
        self.enrollments = {}
        self.fail = False
        self._next_id = 1

    def _check(self):
        if self.fail:
            raise ServiceException(
                "Storage service error: unavailable", 502, "database_error"
            )

    async def add_course_student(self, course_id, email):
        self._check()
        if course_id not in self.courses:
            raise ServiceException("Course not found", 404, "not_found")
        students = self.courses[course_id].setdefault("students", [])
        if email not in students:
            students.append(email)

    async def create_enrollment(self, data):
        self._check()
        enrollment_id = f"enr{self._next_id}"
        self._next_id += 1
        self.enrollments[enrollment_id] = dict(data)
        return enrollment_id

    async def request_certificate(self, enrollment_id):
        self._check()
        if enrollment_id not in self.enrollments:
            raise ServiceException("Enrollment not found", 404, "not_found")
        self.enrollments[enrollment_id]["certificateStatus"] = "requested"

    async def set_lesson_completed(self, enrollment_id, lesson_id, completed):
        self._check()
        if enrollment_id not in self.enrollments:
            raise ServiceException("Enrollment not found", 404, "not_found")
        lessons = self.enrollments[enrollment_id].setdefault("completedLessons", [])
        if completed and lesson_id not in lessons:
            lessons.append(lesson_id)
        elif not completed and lesson_id in lessons:
            lessons.remove(lesson_id)


class FakeStorage:
    def __init__(self):
        self.uploads = []

    async def upload_receipt(self, file, user_id):
        path = receipt_object_path(user_id, file.filename)
        self.uploads.append((path, await file.read()))
        return StoredReceipt(path, f"https://storage.googleapis.com/test-bucket/{path}")


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    async def notify_admin(self, subject, html):
        if self.fail:
            return False
        self.sent.append((subject, html))
        return True


class FakeFlutterwave:
    """httpx.MockTransport handler that records requests to the gateway."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = {
            "status": "success",
            "message": "Hosted Link",
            "data": {"link": "https://checkout.flutterwave.com/v3/hosted/pay/abc"},
        }
        self.error = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        environment="production",
        client_origin="https://app.higher.test",
        flw_secret_key=FLW_SECRET_KEY,
        flw_secret_hash=WEBHOOK_SECRET,
    )


@pytest.fixture
def store():
    fake = FakeStore()
    fake.courses["course123"] = {"students": []}
    return fake


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def flutterwave():
    return FakeFlutterwave()


@pytest.fixture
def services(settings, store, storage, mailer, flutterwave):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(flutterwave))
    return Services(
        settings=settings,
        store=store,
        storage=storage,
        gateway=FlutterwaveGateway(http_client, settings.flw_secret_key),
        mailer=mailer,
        receipt_validator=ReceiptUploadValidator(["jpg", "png", "pdf"], 1),
    )


@pytest.fixture
def client(services):
    app = create_app(services=services)
    with TestClient(app) as test_client:
        yield test_client
