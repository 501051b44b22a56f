"""
Appointment service - Booking, lifecycle and calendar queries

Every booking write for a staff member runs inside that staff member's
critical section:

1. per-staff lock (in-process or Redis, bounded wait)
2. ``SELECT ... FOR UPDATE`` on the staff row (bounded wait as well)
3. re-read of the staff member's active appointments, conflict check,
   insert, commit

The partial unique index on (staff, start, seat) backs all of this up; a
violation is reported as the same conflict the check would have raised.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ...config import BOOKING_LOCK_TIMEOUT_SECONDS, UPCOMING_DEFAULT_LIMIT
from ...errors import (
    AppointmentNotFound,
    BookingError,
    BookingLockTimeout,
    ClassFull,
    ConcurrencyConflict,
    InvalidStatusTransition,
    ServiceNotFound,
    SlotUnavailable,
    StaffNotFound,
)
from ...models import Appointment, generate_id
from ...shared.timeutils import to_utc_naive, utcnow
from ..catalog.repository import CatalogRepository
from ..catalog.service import CatalogService, Offering
from ..clients.schemas import ClientRef
from ..clients.service import ClientService
from ..scheduling.overlap import SlotOccupancy, check_overlap
from ..tenants.context import TenantContext
from ..tenants.service import TenantService
from ..waitlist.service import WaitListService
from .lifecycle import INITIAL_STATUS, AppointmentStatus, ensure_transition, is_terminal
from .locks import get_staff_locks
from .repository import AppointmentRepository

logger = logging.getLogger(__name__)

DEFAULT_CANCELLATION_REASON = "Deleted by staff"

# Driver messages of a lock wait that ran out (SQLite busy timeout, PostgreSQL lock_timeout)
LOCK_CONTENTION_MARKERS = ("database is locked", "lock timeout", "could not obtain lock", "lock not available")


def ensure_bookable(offering: Offering, occupancy: SlotOccupancy) -> None:
    """Raise the conflict that blocks ``occupancy``, if any"""
    if occupancy.has_conflict:
        raise SlotUnavailable()
    if occupancy.is_full:
        raise ClassFull(f"Class is at full capacity ({offering.capacity} attendees)")


def conflict_from_integrity_error(error: IntegrityError, offering: Offering) -> BookingError:
    """Map a unique-constraint violation raised at commit to a domain error"""
    detail = str(getattr(error, "orig", error))
    if "uq_appointments_active_seat" in detail or "appointments." in detail:
        return ClassFull() if offering.is_group_class else SlotUnavailable()
    # Another request created the same client concurrently
    return ConcurrencyConflict()


def is_lock_contention(error: OperationalError) -> bool:
    """Whether ``error`` is a bounded database lock wait that ran out"""
    orig = getattr(error, "orig", None)
    if getattr(orig, "pgcode", None) == "55P03":
        return True
    detail = str(orig if orig is not None else error).lower()
    return any(marker in detail for marker in LOCK_CONTENTION_MARKERS)


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = utcnow,
        locks=None,
        lock_timeout: float = BOOKING_LOCK_TIMEOUT_SECONDS,
    ):
        self.db = db
        self.clock = clock
        self.lock_timeout = lock_timeout
        self.locks = locks if locks is not None else get_staff_locks()
        self.repo = AppointmentRepository()
        self.catalog = CatalogService(db)
        self.catalog_repo = CatalogRepository()
        self.clients = ClientService(db)
        self.tenants = TenantService(db)
        self.waitlist = WaitListService(db, clock)

    # ===== QUERIES =====

    def get_appointment(self, context: TenantContext, appointment_id: str) -> Appointment:
        """Get a specific appointment; other tenants' appointments do not exist"""
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id, tenant_id=context.require())
        if not appointment:
            raise AppointmentNotFound()
        return appointment

    def list_appointments(
        self,
        context: TenantContext,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        staff_id: Optional[str] = None,
        client_id: Optional[str] = None,
        status: Optional[AppointmentStatus] = None,
    ) -> list[Appointment]:
        return self.repo.search_appointments(
            self.db,
            tenant_id=context.require(),
            start=to_utc_naive(start) if start else None,
            end=to_utc_naive(end) if end else None,
            staff_id=staff_id,
            client_id=client_id,
            status=AppointmentStatus(status) if status else None,
        )

    def list_upcoming(self, context: TenantContext, limit: int = UPCOMING_DEFAULT_LIMIT) -> list[Appointment]:
        return self.repo.get_upcoming(self.db, self.clock(), limit, tenant_id=context.require())

    # ===== BOOKING =====

    def create_appointment(
        self,
        context: TenantContext,
        service_id: str,
        staff_id: str,
        client_ref: Optional[ClientRef],
        start_time: datetime,
        notes: Optional[str] = None,
    ) -> Appointment:
        """
        Book ``start_time`` with ``staff_id`` for ``service_id``.

        Raises:
            TenantNotSpecified, TenantNotFound, ServiceNotFound, StaffNotFound,
            StaffDoesNotProvideService, ClientNotFound, ClientInformationRequired,
            SlotUnavailable, ClassFull, BookingLockTimeout
        """
        tenant = self.tenants.get_active_tenant(context)
        offering = self.catalog.resolve_offering(context, service_id, staff_id)
        start = to_utc_naive(start_time)
        end = start + timedelta(minutes=offering.duration_minutes)

        with self.locks.hold(tenant.id, offering.staff.id, timeout=self.lock_timeout):
            try:
                self._lock_staff_row(context, offering.staff.id)
                client = self.clients.resolve_for_booking(context, client_ref)
                occupancy = self._occupancy(context, offering, start, end)
                ensure_bookable(offering, occupancy)

                appointment = self.repo.stage_appointment(
                    self.db,
                    tenant_id=tenant.id,
                    service_id=offering.service.id,
                    staff_member_id=offering.staff.id,
                    client_id=client.id,
                    group_session_id=self._session_id_for(offering, occupancy),
                    start_time_utc=start,
                    end_time_utc=end,
                    status=INITIAL_STATUS,
                    price=offering.price,
                    duration_minutes=offering.duration_minutes,
                    seat=occupancy.free_seat(),
                    customer_notes=notes,
                )
                self.db.commit()
            except BookingError as e:
                self.db.rollback()
                logger.info(f"🚫 Booking rejected for staff {offering.staff.id} at {start}: {e.kind.value}")
                raise
            except IntegrityError as e:
                self.db.rollback()
                logger.warning(f"⚠️ Unique index rejected booking for staff {offering.staff.id} at {start}")
                raise conflict_from_integrity_error(e, offering) from e
            except OperationalError as e:
                self.db.rollback()
                if not is_lock_contention(e):
                    raise
                logger.warning(f"⏳ Database lock wait ran out for staff {offering.staff.id}: {e.orig}")
                raise BookingLockTimeout() from e
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(appointment)
        logger.info(
            f"📅 Appointment booked: {appointment.id} (staff={offering.staff.id}, "
            f"start={start.isoformat()}, seat={appointment.seat})"
        )
        return appointment

    # ===== LIFECYCLE =====

    def update_appointment_status(
        self,
        context: TenantContext,
        appointment_id: str,
        new_status: AppointmentStatus,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Appointment:
        """
        Move an appointment along the lifecycle.

        Cancelling stamps the reason and time, frees the slot and flags
        matching wait list entries.
        """
        appointment = self.get_appointment(context, appointment_id)
        self._check_version(appointment, expected_version)
        previous = AppointmentStatus(appointment.status)
        target = ensure_transition(previous, new_status)

        try:
            appointment.status = target
            if target == AppointmentStatus.CANCELLED:
                appointment.cancellation_reason = reason
                appointment.cancelled_at_utc = self.clock()
                tenant = self.tenants.get_tenant(context.require())
                self.waitlist.notify_for_cancellation(context, appointment, tenant.timezone)
            self._commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(appointment)
        logger.info(f"🔄 Appointment {appointment.id} status: {previous.value} -> {target.value}")
        return appointment

    def cancel_appointment(
        self,
        context: TenantContext,
        appointment_id: str,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Appointment:
        """Soft delete: the record stays, its slot is released"""
        return self.update_appointment_status(
            context,
            appointment_id,
            AppointmentStatus.CANCELLED,
            reason=reason or DEFAULT_CANCELLATION_REASON,
            expected_version=expected_version,
        )

    def reschedule_appointment(
        self,
        context: TenantContext,
        appointment_id: str,
        new_start_time: Optional[datetime] = None,
        new_staff_id: Optional[str] = None,
        internal_notes: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> Appointment:
        """
        Move an appointment to another time and/or staff member.

        The same record is updated. The target staff member must provide
        the service, and the new interval is checked against their
        bookings (this appointment excluded) inside their critical
        section.
        """
        tenant_id = context.require()
        appointment = self.get_appointment(context, appointment_id)
        self._check_version(appointment, expected_version)

        if is_terminal(appointment.status):
            raise InvalidStatusTransition(
                f"Cannot reschedule an appointment that is {AppointmentStatus(appointment.status).value}"
            )

        if new_start_time is None and new_staff_id is None:
            if internal_notes is not None:
                appointment.internal_notes = internal_notes
                self._commit()
                self.db.refresh(appointment)
            return appointment

        service = self.catalog_repo.get_service(self.db, appointment.service_id, tenant_id=tenant_id)
        if not service:
            raise ServiceNotFound()
        target_staff_id = new_staff_id or appointment.staff_member_id
        offering = self.catalog.resolve_offering(context, service.id, target_staff_id, service=service)

        start = to_utc_naive(new_start_time) if new_start_time else appointment.start_time_utc
        end = start + timedelta(minutes=offering.duration_minutes)
        staff_changed = offering.staff.id != appointment.staff_member_id

        with self.locks.hold(tenant_id, offering.staff.id, timeout=self.lock_timeout):
            try:
                self._lock_staff_row(context, offering.staff.id)
                occupancy = self._occupancy(context, offering, start, end, exclude_appointment=appointment.id)
                ensure_bookable(offering, occupancy)

                appointment.staff_member_id = offering.staff.id
                appointment.start_time_utc = start
                appointment.end_time_utc = end
                appointment.duration_minutes = offering.duration_minutes
                appointment.seat = occupancy.free_seat()
                appointment.group_session_id = self._session_id_for(offering, occupancy)
                if staff_changed:
                    appointment.price = offering.price
                if internal_notes is not None:
                    appointment.internal_notes = internal_notes
                self._commit()
            except BookingError:
                self.db.rollback()
                raise
            except IntegrityError as e:
                self.db.rollback()
                raise conflict_from_integrity_error(e, offering) from e
            except OperationalError as e:
                self.db.rollback()
                if not is_lock_contention(e):
                    raise
                logger.warning(f"⏳ Database lock wait ran out for staff {offering.staff.id}: {e.orig}")
                raise BookingLockTimeout() from e
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(appointment)
        logger.info(
            f"📆 Appointment {appointment.id} rescheduled to {start.isoformat()} with staff {offering.staff.id}"
        )
        return appointment

    # ===== HELPERS =====

    def _lock_staff_row(self, context: TenantContext, staff_id: str) -> None:
        staff = self.catalog_repo.lock_staff_member(
            self.db, staff_id, tenant_id=context.require(), lock_timeout_seconds=self.lock_timeout
        )
        if staff is None:
            raise StaffNotFound()

    def _occupancy(
        self,
        context: TenantContext,
        offering: Offering,
        start: datetime,
        end: datetime,
        exclude_appointment: Optional[str] = None,
    ) -> SlotOccupancy:
        existing = self.repo.get_active_in_window(
            self.db, offering.staff.id, start, end, tenant_id=context.require()
        )
        return check_overlap(
            existing,
            service_id=offering.service.id,
            start=start,
            end=end,
            capacity=offering.capacity,
            exclude_appointment=exclude_appointment,
        )

    @staticmethod
    def _session_id_for(offering: Offering, occupancy: SlotOccupancy) -> Optional[str]:
        if not offering.is_group_class:
            return None
        return occupancy.group_session_id() or generate_id()

    @staticmethod
    def _check_version(appointment: Appointment, expected_version: Optional[int]) -> None:
        if expected_version is not None and appointment.version != expected_version:
            raise ConcurrencyConflict()

    def _commit(self) -> None:
        """Commit; a concurrent version bump is a ConcurrencyConflict, an exhausted lock wait a BookingLockTimeout"""
        try:
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Concurrent appointment update detected: {e}")
            raise ConcurrencyConflict() from e
        except OperationalError as e:
            self.db.rollback()
            if not is_lock_contention(e):
                raise
            logger.warning(f"⏳ Database lock wait ran out on appointment update: {e.orig}")
            raise BookingLockTimeout() from e
