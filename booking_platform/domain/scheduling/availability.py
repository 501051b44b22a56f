"""
Availability Service

Computes the bookable slots of one staff member for one service on one
date:

1. Effective duration and buffer (staff override, else service default);
   stride = duration + buffer
2. Open intervals of the weekday (working hours minus breaks), localized
   to the tenant timezone and converted to UTC
3. Slots every stride from each interval's start, kept only while
   start + duration fits inside the interval
4. Each slot checked against the staff member's non-cancelled bookings
   (see overlap.check_overlap); slots starting at or before now are
   never available

Read-only: it never reserves anything and is safe to call concurrently.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...shared.timeutils import local_to_utc, utcnow
from ..appointments.repository import AppointmentRepository
from ..catalog.repository import CatalogRepository
from ..catalog.service import CatalogService, Offering
from ..tenants.context import TenantContext
from ..tenants.service import TenantService
from .overlap import check_overlap
from .schedule import Interval, open_intervals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeSlot:
    start: datetime  # naive UTC
    end: datetime
    is_available: bool
    current_attendees: Optional[int] = None  # Group classes only
    max_capacity: Optional[int] = None
    spots_remaining: Optional[int] = None


def generate_slots(
    intervals: list[Interval],
    offering: Offering,
    existing_appointments: list,
    now: datetime,
) -> list[TimeSlot]:
    """
    Walk each UTC interval in stride steps and classify every candidate.

    Pure: all inputs are already loaded.
    """
    duration = timedelta(minutes=offering.duration_minutes)
    stride = timedelta(minutes=offering.stride_minutes)
    capacity = offering.capacity

    slots = []
    for interval in intervals:
        current_start = interval.start
        while current_start + duration <= interval.end:
            current_end = current_start + duration
            occupancy = check_overlap(
                existing_appointments,
                service_id=offering.service.id,
                start=current_start,
                end=current_end,
                capacity=capacity,
            )
            slots.append(
                TimeSlot(
                    start=current_start,
                    end=current_end,
                    is_available=occupancy.is_available and current_start > now,
                    current_attendees=occupancy.attendee_count if offering.is_group_class else None,
                    max_capacity=capacity if offering.is_group_class else None,
                    spots_remaining=occupancy.capacity_remaining if offering.is_group_class else None,
                )
            )
            current_start += stride

    # Already chronological per interval; intervals are sorted and disjoint
    return slots


class AvailabilityService:
    """Service layer for slot availability"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.catalog = CatalogService(db)
        self.catalog_repo = CatalogRepository()
        self.appointment_repo = AppointmentRepository()
        self.tenants = TenantService(db)

    def get_open_intervals_utc(
        self, context: TenantContext, staff_id: str, target_date: date, tz_name: str
    ) -> list[Interval]:
        """The date's open intervals in naive UTC"""
        tenant_id = context.require()
        weekday = target_date.weekday()
        working_hours = self.catalog_repo.get_working_hours(self.db, staff_id, weekday, tenant_id=tenant_id)
        breaks = self.catalog_repo.get_breaks(self.db, staff_id, weekday, tenant_id=tenant_id)

        intervals = []
        for local in open_intervals(working_hours, breaks):
            start = local_to_utc(target_date, local.start, tz_name)
            end = local_to_utc(target_date, local.end, tz_name)
            # A DST jump can collapse a short interval
            if start < end:
                intervals.append(Interval(start, end))
        return intervals

    def get_available_slots(
        self, context: TenantContext, staff_id: str, service_id: str, target_date: date
    ) -> list[TimeSlot]:
        """
        Slots for ``staff_id`` providing ``service_id`` on ``target_date``.

        Raises:
            TenantNotSpecified, TenantNotFound, ServiceNotFound, StaffNotFound,
            StaffDoesNotProvideService
        """
        tenant = self.tenants.get_active_tenant(context)
        offering = self.catalog.resolve_offering(context, service_id, staff_id)

        intervals = self.get_open_intervals_utc(context, offering.staff.id, target_date, tenant.timezone)
        if not intervals:
            return []

        existing = self.appointment_repo.get_active_in_window(
            self.db,
            offering.staff.id,
            intervals[0].start,
            intervals[-1].end,
            tenant_id=tenant.id,
        )

        slots = generate_slots(intervals, offering, existing, self.clock())
        logger.debug(
            f"Availability for staff {staff_id} on {target_date}: "
            f"{sum(1 for s in slots if s.is_available)}/{len(slots)} slots open"
        )
        return slots
