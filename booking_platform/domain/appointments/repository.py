"""Appointment repository - Database operations for appointments"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import AppointmentNotFound
from ...models import Appointment
from ..tenants.scoping import TenantScopedRepository
from .lifecycle import AppointmentStatus


class AppointmentRepository(TenantScopedRepository):
    """Repository for appointment database operations"""

    @classmethod
    def get_appointment_by_id(cls, db: Session, appointment_id: str, *, tenant_id: str) -> Optional[Appointment]:
        """Get a specific appointment by ID"""
        return cls.get_scoped(db, Appointment, appointment_id, tenant_id=tenant_id)

    @classmethod
    def get_active_in_window(
        cls,
        db: Session,
        staff_id: str,
        window_start: datetime,
        window_end: datetime,
        *,
        tenant_id: str,
    ) -> list[Appointment]:
        """Non-cancelled appointments of a staff member intersecting ``[window_start, window_end)``"""
        return (
            cls.scoped(db, Appointment, tenant_id=tenant_id)
            .filter(
                Appointment.staff_member_id == staff_id,
                Appointment.status != AppointmentStatus.CANCELLED,
                Appointment.start_time_utc < window_end,
                Appointment.end_time_utc > window_start,
            )
            .order_by(Appointment.start_time_utc, Appointment.seat)
            .populate_existing()
            .all()
        )

    @classmethod
    def search_appointments(
        cls,
        db: Session,
        *,
        tenant_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        staff_id: Optional[str] = None,
        client_id: Optional[str] = None,
        status: Optional[AppointmentStatus] = None,
    ) -> list[Appointment]:
        """Calendar query; ``start``/``end`` bound the start time inclusively"""
        query = cls.scoped(db, Appointment, tenant_id=tenant_id)

        if start:
            query = query.filter(Appointment.start_time_utc >= start)
        if end:
            query = query.filter(Appointment.start_time_utc <= end)
        if staff_id:
            query = query.filter(Appointment.staff_member_id == staff_id)
        if client_id:
            query = query.filter(Appointment.client_id == client_id)
        if status:
            query = query.filter(Appointment.status == status)

        return query.order_by(Appointment.start_time_utc, Appointment.seat).all()

    @classmethod
    def get_upcoming(cls, db: Session, now: datetime, limit: int, *, tenant_id: str) -> list[Appointment]:
        """Next non-cancelled appointments starting at or after ``now``"""
        return (
            cls.scoped(db, Appointment, tenant_id=tenant_id)
            .filter(
                Appointment.start_time_utc >= now,
                Appointment.status != AppointmentStatus.CANCELLED,
            )
            .order_by(Appointment.start_time_utc)
            .limit(limit)
            .all()
        )

    @classmethod
    def stage_appointment(cls, db: Session, *, tenant_id: str, **appointment_data) -> Appointment:
        """Add an appointment to the current transaction and flush it"""
        appointment = Appointment(**appointment_data)
        cls.add(db, appointment, tenant_id=tenant_id, not_found=AppointmentNotFound)
        db.flush()
        return appointment
