"""
Overlap Detection Service

One conflict rule shared by slot generation and booking:

- Intervals are half-open: ``[start, end)``. A booking ending exactly when
  another starts is not a conflict.
- Cancelled appointments never conflict.
- For a group class, bookings of the same service starting at the same
  instant are co-attendees limited by capacity, not conflicts. Any other
  overlap is still a conflict.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Protocol

from ..appointments.lifecycle import AppointmentStatus


class BookedInterval(Protocol):
    id: str
    service_id: str
    start_time_utc: datetime
    end_time_utc: datetime
    status: AppointmentStatus
    seat: int
    group_session_id: Optional[str]


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open overlap test"""
    return a_start < b_end and b_start < a_end


def active_only(
    appointments: Iterable[BookedInterval], exclude_appointment: Optional[str] = None
) -> list[BookedInterval]:
    """Drop cancelled appointments and, for edits, the appointment being edited"""
    return [
        a
        for a in appointments
        if AppointmentStatus(a.status) != AppointmentStatus.CANCELLED and a.id != exclude_appointment
    ]


@dataclass
class SlotOccupancy:
    """How a candidate interval relates to the existing bookings of one staff member"""

    capacity: int
    is_group_class: bool
    conflicts: list = field(default_factory=list)  # Overlaps that block the slot outright
    attendees: list = field(default_factory=list)  # Same-class, same-start co-bookings

    @property
    def has_conflict(self) -> bool:
        return bool(self.conflicts)

    @property
    def attendee_count(self) -> int:
        return len(self.attendees)

    @property
    def is_full(self) -> bool:
        return self.is_group_class and self.attendee_count >= self.capacity

    @property
    def is_available(self) -> bool:
        return not self.has_conflict and not self.is_full

    @property
    def capacity_remaining(self) -> int:
        if self.has_conflict:
            return 0
        return max(0, self.capacity - self.attendee_count)

    def free_seat(self) -> int:
        """Lowest seat number not taken by an attendee"""
        taken = {a.seat for a in self.attendees}
        seat = 0
        while seat in taken:
            seat += 1
        return seat

    def group_session_id(self) -> Optional[str]:
        """Session id shared by the existing attendees, if any"""
        for attendee in self.attendees:
            if attendee.group_session_id:
                return attendee.group_session_id
        return None


def check_overlap(
    appointments: Iterable[BookedInterval],
    *,
    service_id: str,
    start: datetime,
    end: datetime,
    capacity: int = 1,
    exclude_appointment: Optional[str] = None,
) -> SlotOccupancy:
    """
    Classify existing bookings against the candidate ``[start, end)``.

    Args:
        appointments: bookings of the staff member (any status)
        service_id: service being booked
        start, end: candidate interval in naive UTC
        capacity: service capacity; > 1 means group class
        exclude_appointment: id to ignore (rescheduling an existing booking)
    """
    is_group_class = capacity > 1
    occupancy = SlotOccupancy(capacity=capacity, is_group_class=is_group_class)

    for appt in active_only(appointments, exclude_appointment):
        if not intervals_overlap(appt.start_time_utc, appt.end_time_utc, start, end):
            continue
        if is_group_class and appt.service_id == service_id and appt.start_time_utc == start:
            occupancy.attendees.append(appt)
        else:
            occupancy.conflicts.append(appt)

    return occupancy
