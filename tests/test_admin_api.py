import json

import pytest
from fastapi.testclient import TestClient

from healthbridge.core.config import settings
from healthbridge.core.exceptions import UploadError
from healthbridge.domain.appointments.service import AppointmentService
from healthbridge.domain.doctors.models import Doctor
from healthbridge.services import cloudinary_service

DOCTOR_FORM = {
    "name": "Dr. Sarah Patel",
    "email": "sarah@x.com",
    "password": "doctorpass123",
    "speciality": "Dermatologist",
    "degree": "MBBS",
    "experience": "1 Year",
    "about": "Skin care.",
    "fees": "30",
    "address": json.dumps({"line1": "37th Cross", "line2": "Richmond"}),
}


@pytest.mark.integration
class TestAdminApi:
    """Test the admin panel endpoints."""

    def test_login(self, client: TestClient) -> None:
        response = client.post(
            "/api/admin/login", json={"email": settings.ADMIN_EMAIL, "password": settings.ADMIN_PASSWORD}
        )

        assert response.status_code == 200
        token = response.json()["token"]
        assert client.get("/api/admin/all-doctors", headers={"atoken": token}).status_code == 200

    def test_login_wrong_credentials(self, client: TestClient) -> None:
        response = client.post("/api/admin/login", json={"email": settings.ADMIN_EMAIL, "password": "nope"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_requires_admin_token(self, client: TestClient, user_headers) -> None:
        assert client.get("/api/admin/dashboard").status_code == 401
        assert client.get("/api/admin/dashboard", headers={"atoken": user_headers["token"]}).status_code == 401

    def test_add_doctor(self, client: TestClient, admin_headers, uploads) -> None:
        """Test onboarding a doctor from a multipart form."""
        response = client.post(
            "/api/admin/add-doctor",
            data=DOCTOR_FORM,
            files={"image": ("sarah.png", b"png-bytes", "image/png")},
            headers=admin_headers,
        )

        assert response.json() == {"success": True, "message": "Doctor Added"}
        assert uploads == ["sarah.png"]

        doctors = client.get("/api/admin/all-doctors", headers=admin_headers).json()["doctors"]
        assert len(doctors) == 1
        assert doctors[0]["email"] == "sarah@x.com"
        assert doctors[0]["fees"] == 30
        assert doctors[0]["available"] is True

        login = client.post("/api/doctor/login", json={"email": "sarah@x.com", "password": "doctorpass123"})
        assert login.status_code == 200

    def test_add_doctor_missing_details(self, client: TestClient, admin_headers, uploads) -> None:
        form = {**DOCTOR_FORM, "degree": ""}

        response = client.post(
            "/api/admin/add-doctor",
            data=form,
            files={"image": ("sarah.png", b"png-bytes", "image/png")},
            headers=admin_headers,
        )

        assert response.status_code == 422
        assert response.json()["message"] == "Missing Details"
        assert uploads == []

    def test_add_doctor_omitted_fields(self, client: TestClient, admin_headers, uploads) -> None:
        """Test form fields left out entirely are reported as missing details."""
        form = {key: value for key, value in DOCTOR_FORM.items() if key not in ("degree", "about")}

        response = client.post(
            "/api/admin/add-doctor",
            data=form,
            files={"image": ("sarah.png", b"png-bytes", "image/png")},
            headers=admin_headers,
        )

        assert response.status_code == 422
        assert response.json()["success"] is False
        assert response.json()["message"] == "Missing Details"
        assert uploads == []

    def test_add_doctor_upload_failure(self, client: TestClient, admin_headers, db_session, monkeypatch) -> None:
        """Test a failed upload leaves no doctor behind."""
        def failing_upload(file_obj, filename, folder="healthbridge"):
            raise UploadError(details={"filename": filename})

        monkeypatch.setattr(cloudinary_service, "upload_file", failing_upload)

        response = client.post(
            "/api/admin/add-doctor",
            data=DOCTOR_FORM,
            files={"image": ("sarah.png", b"png-bytes", "image/png")},
            headers=admin_headers,
        )

        assert response.status_code == 503
        assert response.json()["error_code"] == "UPLOAD_ERROR"
        assert db_session.query(Doctor).count() == 0

    def test_appointments_cancel_and_dashboard(
        self, client: TestClient, admin_headers, db_session, test_doctor, test_user
    ) -> None:
        service = AppointmentService(db_session)
        paid = service.book_appointment(test_doctor.id, test_user.id, "2024-01-15", "10:00")
        other = service.book_appointment(test_doctor.id, test_user.id, "2024-01-15", "11:00")
        paid.payment_settled = True
        db_session.commit()

        appointments = client.get("/api/admin/appointments", headers=admin_headers).json()["appointments"]
        assert {a["id"] for a in appointments} == {paid.id, other.id}

        cancelled = client.post(
            "/api/admin/cancel-appointment", json={"appointmentId": other.id}, headers=admin_headers
        )
        assert cancelled.json()["success"] is True

        dash = client.get("/api/admin/dashboard", headers=admin_headers).json()["dashData"]
        assert dash["doctors"] == 1
        assert dash["users"] == 1
        assert dash["appointments"] == 2
        assert dash["cancelled"] == 1
        assert dash["earnings"] == test_doctor.fees
        assert len(dash["latestAppointments"]) == 2

        ledger = client.get("/api/doctor/list").json()["doctors"][0]["slotsBooked"]
        assert ledger == {"2024-01-15": ["10:00"]}

    def test_change_availability(self, client: TestClient, admin_headers, test_doctor) -> None:
        toggled = client.post(
            "/api/admin/change-availability", json={"docId": test_doctor.id}, headers=admin_headers
        )
        assert toggled.json() == {"success": True, "message": "Availability Changed"}
        assert client.get("/api/doctor/list").json()["doctors"][0]["available"] is False

        client.post(
            "/api/admin/change-availability", json={"docId": test_doctor.id, "available": True}, headers=admin_headers
        )
        assert client.get("/api/doctor/list").json()["doctors"][0]["available"] is True

    def test_change_availability_unknown_doctor(self, client: TestClient, admin_headers) -> None:
        response = client.post("/api/admin/change-availability", json={"docId": "missing"}, headers=admin_headers)

        assert response.status_code == 404


@pytest.mark.unit
class TestServiceEndpoints:
    def test_root_and_health(self, client: TestClient) -> None:
        assert client.get("/").json() == {"success": True, "message": "API Working"}
        assert client.get("/health").json() == {"status": "ok"}
