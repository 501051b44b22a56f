"""
Tests for scheduling/overlap.py

Half-open conflict detection and group-class occupancy.
"""

import unittest
from datetime import datetime
from types import SimpleNamespace

from booking_platform.domain.appointments.lifecycle import AppointmentStatus
from booking_platform.domain.scheduling.overlap import check_overlap, intervals_overlap


def booked(start_hour, start_minute, end_hour, end_minute, service_id="svc", status="Pending", seat=0, **extra):
    data = dict(
        id=extra.pop("id", f"appt-{start_hour}-{start_minute}-{seat}"),
        service_id=service_id,
        start_time_utc=datetime(2030, 1, 7, start_hour, start_minute),
        end_time_utc=datetime(2030, 1, 7, end_hour, end_minute),
        status=AppointmentStatus(status),
        seat=seat,
        group_session_id=extra.pop("group_session_id", None),
    )
    return SimpleNamespace(**data)


def t(hour, minute=0):
    return datetime(2030, 1, 7, hour, minute)


class TestIntervalsOverlap(unittest.TestCase):
    def test_touching_is_not_overlap(self):
        self.assertFalse(intervals_overlap(t(9), t(10), t(10), t(11)))

    def test_one_minute_overlap(self):
        self.assertTrue(intervals_overlap(t(9), t(10), t(9, 59), t(10, 59)))

    def test_containment(self):
        self.assertTrue(intervals_overlap(t(9), t(12), t(10), t(11)))


class TestCheckOverlap(unittest.TestCase):
    def test_no_bookings_is_available(self):
        occupancy = check_overlap([], service_id="svc", start=t(9), end=t(10))
        self.assertTrue(occupancy.is_available)
        self.assertEqual(occupancy.capacity_remaining, 1)
        self.assertEqual(occupancy.free_seat(), 0)

    def test_private_overlap_conflicts(self):
        occupancy = check_overlap([booked(9, 0, 10, 0)], service_id="svc", start=t(9, 30), end=t(10, 30))
        self.assertTrue(occupancy.has_conflict)
        self.assertFalse(occupancy.is_available)
        self.assertEqual(occupancy.capacity_remaining, 0)

    def test_adjacent_booking_does_not_conflict(self):
        occupancy = check_overlap([booked(9, 0, 10, 0)], service_id="svc", start=t(10), end=t(11))
        self.assertTrue(occupancy.is_available)

    def test_cancelled_bookings_are_ignored(self):
        occupancy = check_overlap(
            [booked(9, 0, 10, 0, status="Cancelled")], service_id="svc", start=t(9), end=t(10)
        )
        self.assertTrue(occupancy.is_available)

    def test_excluded_appointment_is_ignored(self):
        existing = booked(9, 0, 10, 0, id="self")
        occupancy = check_overlap(
            [existing], service_id="svc", start=t(9, 30), end=t(10, 30), exclude_appointment="self"
        )
        self.assertTrue(occupancy.is_available)

    def test_group_same_start_counts_attendees(self):
        existing = [
            booked(9, 0, 10, 0, seat=0, group_session_id="g1"),
            booked(9, 0, 10, 0, seat=1, group_session_id="g1"),
        ]
        occupancy = check_overlap(existing, service_id="svc", start=t(9), end=t(10), capacity=3)
        self.assertFalse(occupancy.has_conflict)
        self.assertEqual(occupancy.attendee_count, 2)
        self.assertFalse(occupancy.is_full)
        self.assertEqual(occupancy.capacity_remaining, 1)
        self.assertEqual(occupancy.free_seat(), 2)
        self.assertEqual(occupancy.group_session_id(), "g1")

    def test_group_full(self):
        existing = [booked(9, 0, 10, 0, seat=i) for i in range(2)]
        occupancy = check_overlap(existing, service_id="svc", start=t(9), end=t(10), capacity=2)
        self.assertTrue(occupancy.is_full)
        self.assertFalse(occupancy.is_available)

    def test_group_free_seat_reuses_gap(self):
        existing = [booked(9, 0, 10, 0, seat=0), booked(9, 0, 10, 0, seat=2)]
        occupancy = check_overlap(existing, service_id="svc", start=t(9), end=t(10), capacity=4)
        self.assertEqual(occupancy.free_seat(), 1)

    def test_group_other_service_overlap_conflicts(self):
        occupancy = check_overlap(
            [booked(9, 0, 10, 0, service_id="other")], service_id="svc", start=t(9), end=t(10), capacity=5
        )
        self.assertTrue(occupancy.has_conflict)

    def test_group_same_service_different_start_conflicts(self):
        occupancy = check_overlap(
            [booked(9, 0, 10, 0)], service_id="svc", start=t(9, 30), end=t(10, 30), capacity=5
        )
        self.assertTrue(occupancy.has_conflict)
        self.assertEqual(occupancy.attendee_count, 0)
