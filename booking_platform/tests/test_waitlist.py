"""
Tests for waitlist/service.py

Joining the wait list and flagging entries when a cancellation frees a
slot.
"""

from datetime import time

from booking_platform.domain.clients.schemas import ClientRef
from booking_platform.domain.tenants.context import for_tenant
from booking_platform.domain.waitlist.service import WaitListService
from booking_platform.errors import ClientNotFound, ServiceNotFound, StaffNotFound, ValidationFailed
from booking_platform.models import generate_id

from .helpers import FIXED_NOW, MONDAY, TUESDAY, BookingTestCase, at


class TestWaitList(BookingTestCase):
    def setUp(self):
        super().setUp()
        self.waitlist = WaitListService(self.db, clock=lambda: FIXED_NOW)

    def join(self, **kwargs):
        params = dict(client_id=self.client_row.id, service_id=self.service.id, preferred_date=MONDAY)
        params.update(kwargs)
        return self.waitlist.join_waitlist(self.context, **params)

    def cancel_booking_at(self, hour):
        appointment = self.book(at(hour))
        self.appointments().cancel_appointment(self.context, appointment.id)

    def refreshed(self, entry):
        self.db.refresh(entry)
        return entry

    def test_join_validates_references(self):
        with self.assertRaises(ClientNotFound):
            self.join(client_id=generate_id())
        with self.assertRaises(ServiceNotFound):
            self.join(service_id=generate_id())
        with self.assertRaises(StaffNotFound):
            self.join(staff_id=generate_id())
        with self.assertRaises(ValidationFailed):
            self.join(preferred_start_time=time(11), preferred_end_time=time(10))

    def test_join_and_list(self):
        entry = self.join(staff_id=self.staff.id)
        self.assertFalse(entry.is_notified)
        self.assertEqual([e.id for e in self.waitlist.list_waitlist(self.context)], [entry.id])
        self.assertEqual(self.waitlist.list_waitlist(self.context, preferred_date=TUESDAY), [])

    def test_cancellation_flags_matching_entries(self):
        any_staff = self.join()
        same_staff = self.join(staff_id=self.staff.id)
        in_window = self.join(preferred_start_time=time(9), preferred_end_time=time(11))

        self.cancel_booking_at(10)

        for entry in (any_staff, same_staff, in_window):
            entry = self.refreshed(entry)
            self.assertTrue(entry.is_notified)
            self.assertEqual(entry.notified_at_utc, FIXED_NOW)

    def test_cancellation_skips_non_matching_entries(self):
        sam = self.seed.staff(self.tenant, name="Sam")
        other_service = self.seed.service(self.tenant, name="Massage")
        other_staff = self.join(staff_id=sam.id)
        other_day = self.join(preferred_date=TUESDAY)
        wrong_service = self.join(service_id=other_service.id)
        too_early = self.join(preferred_start_time=time(11))
        too_late = self.join(preferred_end_time=time(10))

        self.cancel_booking_at(10)

        for entry in (other_staff, other_day, wrong_service, too_early, too_late):
            with self.subTest(entry=entry.id):
                self.assertFalse(self.refreshed(entry).is_notified)

    def test_entries_are_flagged_once(self):
        entry = self.join()
        self.cancel_booking_at(9)
        self.db.refresh(entry)
        first_notified_at = entry.notified_at_utc

        later = WaitListService(self.db, clock=lambda: at(8))
        appointment = self.book(at(11))
        cancelled = self.appointments().cancel_appointment(self.context, appointment.id)
        self.assertEqual(later.notify_for_cancellation(self.context, cancelled, "UTC"), [])
        self.assertEqual(self.refreshed(entry).notified_at_utc, first_notified_at)

    def test_local_date_is_used(self):
        tenant = self.seed.tenant(name="Tokyo Studio", timezone="Asia/Tokyo")
        service = self.seed.service(tenant)
        staff = self.seed.staff(tenant)
        client = self.seed.client(tenant, email="tokyo@example.com")
        self.seed.link(tenant, staff, service)

        context = for_tenant(tenant.id)
        waitlist = WaitListService(self.db, clock=lambda: FIXED_NOW)
        # 20:00 UTC Monday is 05:00 Tuesday in Tokyo
        entry = waitlist.join_waitlist(context, client.id, service.id, TUESDAY)
        appointment = self.book(
            at(20), service=service, staff=staff, client_ref=ClientRef(clientId=client.id), context=context
        )
        self.appointments().cancel_appointment(context, appointment.id)
        self.assertTrue(self.refreshed(entry).is_notified)
