"""
Tests for appointments/service.py: update_appointment_status and
cancel_appointment
"""

from booking_platform.domain.appointments.lifecycle import AppointmentStatus
from booking_platform.domain.tenants.context import for_tenant
from booking_platform.errors import AppointmentNotFound, ConcurrencyConflict, InvalidStatusTransition

from .helpers import FIXED_NOW, BookingTestCase, at

S = AppointmentStatus


class TestStatusUpdates(BookingTestCase):
    def setUp(self):
        super().setUp()
        self.appointment = self.book(at(9))

    def update(self, status, **kwargs):
        return self.appointments().update_appointment_status(self.context, self.appointment.id, status, **kwargs)

    def test_happy_path_to_completed(self):
        self.assertEqual(self.update(S.CONFIRMED).status, S.CONFIRMED)
        self.assertEqual(self.update(S.IN_PROGRESS).status, S.IN_PROGRESS)
        completed = self.update(S.COMPLETED)
        self.assertEqual(completed.status, S.COMPLETED)
        self.assertEqual(completed.version, 4)

    def test_illegal_transition_leaves_record_unchanged(self):
        with self.assertRaises(InvalidStatusTransition):
            self.update(S.COMPLETED)
        self.db.refresh(self.appointment)
        self.assertEqual(self.appointment.status, S.PENDING)
        self.assertEqual(self.appointment.version, 1)

    def test_terminal_status_is_final(self):
        self.update(S.NO_SHOW)
        for target in (S.PENDING, S.CONFIRMED, S.CANCELLED):
            with self.subTest(target=target):
                with self.assertRaises(InvalidStatusTransition):
                    self.update(target)

    def test_cancel_stamps_reason_and_time(self):
        cancelled = self.update(S.CANCELLED, reason="Client is sick")
        self.assertEqual(cancelled.status, S.CANCELLED)
        self.assertEqual(cancelled.cancellation_reason, "Client is sick")
        self.assertEqual(cancelled.cancelled_at_utc, FIXED_NOW)

    def test_cancel_appointment_default_reason(self):
        cancelled = self.appointments().cancel_appointment(self.context, self.appointment.id)
        self.assertEqual(cancelled.status, S.CANCELLED)
        self.assertEqual(cancelled.cancellation_reason, "Deleted by staff")

    def test_cancel_twice_fails(self):
        self.appointments().cancel_appointment(self.context, self.appointment.id)
        with self.assertRaises(InvalidStatusTransition):
            self.appointments().cancel_appointment(self.context, self.appointment.id)

    def test_expected_version_mismatch(self):
        self.update(S.CONFIRMED)
        with self.assertRaises(ConcurrencyConflict):
            self.update(S.COMPLETED, expected_version=1)
        self.assertEqual(self.update(S.COMPLETED, expected_version=2).status, S.COMPLETED)

    def test_other_tenant_cannot_update(self):
        other = self.seed.tenant(name="Other")
        with self.assertRaises(AppointmentNotFound):
            self.appointments().update_appointment_status(for_tenant(other.id), self.appointment.id, S.CONFIRMED)
