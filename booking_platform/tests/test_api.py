"""
HTTP surface tests through FastAPI's TestClient.

The database dependency is overridden with an in-memory SQLite engine;
the lifespan is not entered, so the configured DATABASE_URL is never
touched.
"""

import unittest
import uuid
from unittest import mock

from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.orm import sessionmaker

from booking_platform.config import JWT_ALGORITHM, SECRET_KEY
from booking_platform.database import Base, get_db
from booking_platform.errors import BookingLockTimeout
from booking_platform.main import app

from .helpers import Seeder, create_memory_engine


class TestBookingApi(unittest.TestCase):
    def setUp(self):
        self.engine = create_memory_engine()
        Base.metadata.create_all(bind=self.engine)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        def override_get_db():
            db = SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

        db = SessionLocal()
        try:
            seed = Seeder(db)
            tenant = seed.tenant()
            service = seed.service(tenant)
            staff = seed.staff(tenant)
            seed.link(tenant, staff, service)
            seed.hours(tenant, staff)
            other = seed.tenant(name="Other")

            self.tenant_id = tenant.id
            self.other_tenant_id = other.id
            self.service_id = service.id
            self.staff_id = staff.id
        finally:
            db.close()

        self.headers = {"X-Tenant-Id": self.tenant_id}

    def tearDown(self):
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=self.engine)
        self.engine.dispose()

    def book(self, start="2030-01-07T09:00:00Z", email="jane@example.com", headers=None):
        return self.client.post(
            "/appointments",
            json={
                "serviceId": self.service_id,
                "staffId": self.staff_id,
                "startTime": start,
                "email": email,
                "firstName": "Jane",
            },
            headers=self.headers if headers is None else headers,
        )

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "healthy"})

    def test_availability(self):
        response = self.client.get(
            f"/staff/{self.staff_id}/availability",
            params={"serviceId": self.service_id, "date": "2030-01-07"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200)
        slots = response.json()
        self.assertEqual(
            [s["startTime"] for s in slots],
            ["2030-01-07T09:00:00", "2030-01-07T10:00:00", "2030-01-07T11:00:00"],
        )
        self.assertTrue(all(s["isAvailable"] for s in slots))
        self.assertIsNone(slots[0]["spotsRemaining"])

    def test_book_then_conflict(self):
        response = self.book()
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["status"], "Pending")
        self.assertEqual(body["endTime"], "2030-01-07T10:00:00")

        conflict = self.book(start="2030-01-07T09:30:00Z", email="other@example.com")
        self.assertEqual(conflict.status_code, 409)
        self.assertEqual(conflict.json()["error"], "SlotUnavailable")

    def test_missing_tenant(self):
        response = self.book(headers={})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "TenantNotSpecified")

    def test_tenant_from_bearer_claim(self):
        token = jwt.encode({"tenantId": self.tenant_id}, SECRET_KEY, algorithm=JWT_ALGORITHM)
        response = self.client.get("/appointments", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 200)

    def test_missing_client_information(self):
        response = self.client.post(
            "/appointments",
            json={"serviceId": self.service_id, "staffId": self.staff_id, "startTime": "2030-01-07T09:00:00Z"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "ClientInformationRequired")

    def test_unknown_service(self):
        response = self.client.post(
            "/appointments",
            json={
                "serviceId": str(uuid.uuid4()),
                "staffId": self.staff_id,
                "startTime": "2030-01-07T09:00:00Z",
                "email": "jane@example.com",
            },
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "ServiceNotFound")

    def test_cross_tenant_read_is_not_found(self):
        appointment_id = self.book().json()["id"]
        response = self.client.get(
            f"/appointments/{appointment_id}", headers={"X-Tenant-Id": self.other_tenant_id}
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "AppointmentNotFound")

    def test_status_flow_and_cancel(self):
        appointment_id = self.book().json()["id"]

        confirmed = self.client.put(
            f"/appointments/{appointment_id}/status", json={"status": "Confirmed"}, headers=self.headers
        )
        self.assertEqual(confirmed.status_code, 200)
        self.assertEqual(confirmed.json()["version"], 2)

        invalid = self.client.put(
            f"/appointments/{appointment_id}/status", json={"status": "Pending"}, headers=self.headers
        )
        self.assertEqual(invalid.status_code, 409)
        self.assertEqual(invalid.json()["error"], "InvalidStatusTransition")

        cancelled = self.client.delete(f"/appointments/{appointment_id}", headers=self.headers)
        self.assertEqual(cancelled.status_code, 200)
        self.assertEqual(cancelled.json()["status"], "Cancelled")
        self.assertEqual(cancelled.json()["cancellationReason"], "Deleted by staff")

        # The slot is free again
        self.assertEqual(self.book(email="next@example.com").status_code, 201)

    def test_stale_version_is_conflict(self):
        appointment_id = self.book().json()["id"]
        response = self.client.put(
            f"/appointments/{appointment_id}",
            json={"startTime": "2030-01-07T11:00:00Z", "expectedVersion": 5},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"], "ConcurrencyConflict")

    def test_reschedule(self):
        appointment_id = self.book().json()["id"]
        response = self.client.put(
            f"/appointments/{appointment_id}",
            json={"startTime": "2030-01-07T11:00:00Z", "expectedVersion": 1},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["startTime"], "2030-01-07T11:00:00")

    def test_calendar_listing(self):
        self.book()
        self.book(start="2030-01-07T10:00:00Z", email="second@example.com")
        response = self.client.get(
            "/appointments",
            params={"start": "2030-01-07T09:30:00", "end": "2030-01-07T23:00:00"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual([a["startTime"] for a in response.json()], ["2030-01-07T10:00:00"])

        upcoming = self.client.get("/appointments/upcoming", headers=self.headers)
        self.assertEqual(len(upcoming.json()), 2)

    def test_lock_timeout_maps_to_503(self):
        with mock.patch(
            "booking_platform.domain.appointments.service.AppointmentService.create_appointment",
            side_effect=BookingLockTimeout(),
        ):
            response = self.book()
        self.assertEqual(response.status_code, 503)
        self.assertIn("Retry-After", response.headers)
        self.assertEqual(response.json()["error"], "BookingLockTimeout")

    def test_validation_error_shape(self):
        response = self.client.post("/appointments", json={"serviceId": "nope"}, headers=self.headers)
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["error"], "ValidationFailed")

    def test_join_waitlist_by_email_creates_client(self):
        body = {"serviceId": self.service_id, "preferredDate": "2030-01-07", "email": "Waiting@Example.com"}
        first = self.client.post("/waitlist", json=body, headers=self.headers)
        self.assertEqual(first.status_code, 201)
        second = self.client.post("/waitlist", json=body, headers=self.headers)
        self.assertEqual(second.status_code, 201)
        self.assertEqual(first.json()["clientId"], second.json()["clientId"])

        clients = self.client.get("/clients", params={"search": "waiting"}, headers=self.headers).json()
        self.assertEqual([c["id"] for c in clients], [first.json()["clientId"]])

        anonymous = self.client.post(
            "/waitlist", json={"serviceId": self.service_id, "preferredDate": "2030-01-07"}, headers=self.headers
        )
        self.assertEqual(anonymous.status_code, 400)
        self.assertEqual(anonymous.json()["error"], "ClientInformationRequired")

    def test_deactivated_tenant_stops_booking(self):
        response = self.client.delete("/tenants/current", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["isActive"])

        self.assertEqual(self.client.get("/tenants/current", headers=self.headers).status_code, 404)
        booking = self.book()
        self.assertEqual(booking.status_code, 404)
        self.assertEqual(booking.json()["error"], "TenantNotFound")
