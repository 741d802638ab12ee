import pytest

SUBMIT_URL = "/api/enrollments/submit"
CERTIFICATE_URL = "/api/enrollments/request-certificate"
PROGRESS_URL = "/api/enrollments/toggle-progress"

FORM = {
    "courseId": "course123",
    "courseTitle": "Forex Basics",
    "userId": "user_42",
    "userEmail": "ada@example.com",
    "userName": "Ada Lovelace",
    "amount": "25000",
}


def receipt(name="receipt.png", content=b"\x89PNG fake", content_type="image/png"):
    return {"receipt": (name, content, content_type)}


@pytest.fixture
def enrollment_id(store):
    store.enrollments["enr-existing"] = {
        "courseId": "course123",
        "status": "pending",
        "completedLessons": [],
        "certificateStatus": "none",
    }
    return "enr-existing"


class TestSubmit:
    def test_submit_stores_receipt_and_pending_record(self, client, store, storage):
        response = client.post(SUBMIT_URL, data=FORM, files=receipt())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True

        record = store.enrollments[body["id"]]
        assert record["courseId"] == "course123"
        assert record["userId"] == "user_42"
        assert record["userEmail"] == "ada@example.com"
        assert record["amount"] == 25000
        assert record["status"] == "pending"
        assert record["completedLessons"] == []
        assert record["certificateStatus"] == "none"

        path, content = storage.uploads[0]
        assert path.startswith("receipts/user_42/")
        assert path.endswith("_receipt.png")
        assert content == b"\x89PNG fake"
        assert record["receiptPath"] == path
        assert record["receiptUrl"].endswith(path)

    def test_submit_notifies_admin(self, client, mailer):
        client.post(SUBMIT_URL, data=FORM, files=receipt())

        assert len(mailer.sent) == 1
        subject, html = mailer.sent[0]
        assert subject == "New enrollment: Forex Basics"
        assert "ada@example.com" in html

    def test_notification_failure_does_not_fail_submission(self, client, store, mailer):
        mailer.fail = True

        response = client.post(SUBMIT_URL, data=FORM, files=receipt())

        assert response.status_code == 200
        assert len(store.enrollments) == 1

    def test_missing_file_is_client_error(self, client, store, storage):
        response = client.post(SUBMIT_URL, data=FORM)

        assert response.status_code == 400
        assert response.json() == {"error": "No receipt file uploaded"}
        assert store.enrollments == {}
        assert storage.uploads == []

    def test_unsupported_file_type_is_rejected(self, client, store):
        response = client.post(
            SUBMIT_URL,
            data=FORM,
            files=receipt("receipt.exe", b"MZ", "application/octet-stream"),
        )

        assert response.status_code == 400
        assert store.enrollments == {}

    def test_oversized_file_is_rejected(self, client, store):
        response = client.post(
            SUBMIT_URL, data=FORM, files=receipt(content=b"0" * (1024 * 1024 + 1))
        )

        assert response.status_code == 400
        assert store.enrollments == {}

    def test_missing_form_fields_are_rejected(self, client, store):
        response = client.post(
            SUBMIT_URL, data={"courseId": "course123"}, files=receipt()
        )

        assert response.status_code == 422
        assert store.enrollments == {}

    def test_store_failure_is_server_error(self, client, store):
        store.fail = True

        response = client.post(SUBMIT_URL, data=FORM, files=receipt())

        assert response.status_code == 502
        assert response.json()["type"] == "database_error"


class TestCertificate:
    def test_request_certificate_marks_enrollment(self, client, store, enrollment_id):
        response = client.post(CERTIFICATE_URL, json={"enrollmentId": enrollment_id})

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert store.enrollments[enrollment_id]["certificateStatus"] == "requested"

    def test_request_certificate_notifies_admin(self, client, mailer, enrollment_id):
        client.post(CERTIFICATE_URL, json={"enrollmentId": enrollment_id})

        assert mailer.sent[0][0] == "Certificate request"

    def test_unknown_enrollment_is_not_found(self, client):
        response = client.post(CERTIFICATE_URL, json={"enrollmentId": "nope"})

        assert response.status_code == 404
        assert response.json()["error"] == "Enrollment not found"


class TestProgress:
    def test_completing_a_lesson_adds_it_once(self, client, store, enrollment_id):
        for _ in range(2):
            response = client.post(
                PROGRESS_URL,
                json={
                    "enrollmentId": enrollment_id,
                    "lessonId": "l1",
                    "completed": True,
                },
            )
            assert response.status_code == 200

        assert store.enrollments[enrollment_id]["completedLessons"] == ["l1"]

    def test_uncompleting_a_lesson_removes_it(self, client, store, enrollment_id):
        store.enrollments[enrollment_id]["completedLessons"] = ["l1", "l2"]

        response = client.post(
            PROGRESS_URL,
            json={"enrollmentId": enrollment_id, "lessonId": "l1", "completed": False},
        )

        assert response.json() == {"success": True}
        assert store.enrollments[enrollment_id]["completedLessons"] == ["l2"]

    def test_unknown_enrollment_is_not_found(self, client):
        response = client.post(
            PROGRESS_URL, json={"enrollmentId": "nope", "lessonId": "l1"}
        )

        assert response.status_code == 404

    def test_missing_lesson_is_rejected(self, client, enrollment_id):
        response = client.post(PROGRESS_URL, json={"enrollmentId": enrollment_id})

        assert response.status_code == 422
