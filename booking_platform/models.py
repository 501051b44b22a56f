import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
    text,
)
from sqlalchemy.sql import func

from .database import Base
from .domain.appointments.lifecycle import AppointmentStatus


def generate_id():
    """Generate an opaque unique identifier"""
    return str(uuid.uuid4())


class Tenant(Base):
    """A business account; the root of isolation (not tenant-scoped itself)"""

    __tablename__ = "tenants"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, index=True, nullable=False)
    timezone = Column(String(64), nullable=False, default="UTC")  # IANA name
    currency = Column(String(3), nullable=False, default="USD")
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class TenantScopedMixin:
    """Columns shared by every tenant-scoped table"""

    id = Column(String(36), primary_key=True, default=generate_id)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), index=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ServiceDefinition(TenantScopedMixin, Base):
    __tablename__ = "services"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    base_duration_minutes = Column(Integer, nullable=False)
    base_price = Column(Numeric(10, 2), nullable=False, default=0)
    capacity = Column(Integer, nullable=False, default=1)  # 1 = private, >1 = group class
    buffer_minutes = Column(Integer, nullable=False, default=0)  # Idle gap after each booking
    color = Column(String(7), nullable=True)  # Hex color for calendar display
    is_active = Column(Boolean, default=True, nullable=False)

    @property
    def is_group_class(self) -> bool:
        return (self.capacity or 1) > 1


class StaffMember(TenantScopedMixin, Base):
    __tablename__ = "staff_members"

    user_id = Column(String(36), nullable=True, index=True)  # Linked login identity
    display_name = Column(String(255), nullable=False)
    title = Column(String(255), nullable=True)  # e.g., "Senior Stylist", "Yoga Instructor"
    accepts_bookings = Column(Boolean, default=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class StaffServiceLink(TenantScopedMixin, Base):
    """Which services a staff member provides, with optional overrides"""

    __tablename__ = "staff_service_links"
    __table_args__ = (UniqueConstraint("staff_member_id", "service_id", name="uq_staff_service"),)

    staff_member_id = Column(String(36), ForeignKey("staff_members.id"), nullable=False, index=True)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False, index=True)
    price_override = Column(Numeric(10, 2), nullable=True)  # Null = service default
    duration_override = Column(Integer, nullable=True)  # Null = service default
    buffer_override = Column(Integer, nullable=True)  # Null = service default
    is_active = Column(Boolean, default=True, nullable=False)


class WorkingHours(TenantScopedMixin, Base):
    __tablename__ = "working_hours"

    staff_member_id = Column(String(36), ForeignKey("staff_members.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0 = Monday ... 6 = Sunday
    start_time = Column(Time, nullable=False)  # Local wall-clock in tenant timezone
    end_time = Column(Time, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class StaffBreak(TenantScopedMixin, Base):
    """Recurring weekly blackout, e.g. a lunch break"""

    __tablename__ = "staff_breaks"

    staff_member_id = Column(String(36), ForeignKey("staff_members.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    description = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)


class Client(TenantScopedMixin, Base):
    __tablename__ = "clients"
    __table_args__ = (UniqueConstraint("tenant_id", "email", name="uq_client_tenant_email"),)

    user_id = Column(String(36), nullable=True)  # Optional link to a registered user
    first_name = Column(String(255), nullable=False, default="Guest")
    last_name = Column(String(255), nullable=False, default="")
    email = Column(String(255), nullable=False, index=True)
    phone_number = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Appointment(TenantScopedMixin, Base):
    """
    The core booking record. Never deleted; cancellation is a status.

    Group-class bookings that share a start time share ``group_session_id``
    and occupy distinct ``seat`` numbers.
    """

    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_staff_window", "staff_member_id", "start_time_utc", "end_time_utc"),
        Index("ix_appointments_tenant_start", "tenant_id", "start_time_utc"),
        # Last-resort guard against double booking when every other layer fails
        Index(
            "uq_appointments_active_seat",
            "staff_member_id",
            "start_time_utc",
            "seat",
            unique=True,
            sqlite_where=text("status != 'Cancelled'"),
            postgresql_where=text("status != 'Cancelled'"),
        ),
    )

    service_id = Column(String(36), ForeignKey("services.id", ondelete="RESTRICT"), nullable=False)
    staff_member_id = Column(
        String(36), ForeignKey("staff_members.id", ondelete="RESTRICT"), nullable=False
    )
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False)
    group_session_id = Column(String(36), nullable=True, index=True)
    start_time_utc = Column(DateTime, nullable=False)
    end_time_utc = Column(DateTime, nullable=False)
    status = Column(
        Enum(
            AppointmentStatus,
            name="appointment_status",
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=AppointmentStatus.PENDING,
    )
    price = Column(Numeric(10, 2), nullable=False, default=0)
    duration_minutes = Column(Integer, nullable=False)
    seat = Column(Integer, nullable=False, default=0)
    customer_notes = Column(Text, nullable=True)
    internal_notes = Column(Text, nullable=True)  # Visible to staff only
    cancellation_reason = Column(String(500), nullable=True)
    cancelled_at_utc = Column(DateTime, nullable=True)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}


class WaitListEntry(TenantScopedMixin, Base):
    """A client waiting for a fully booked service on a given date"""

    __tablename__ = "wait_list_entries"

    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False, index=True)
    staff_member_id = Column(String(36), ForeignKey("staff_members.id"), nullable=True)  # Null = any staff
    preferred_date = Column(Date, nullable=False, index=True)
    preferred_start_time = Column(Time, nullable=True)
    preferred_end_time = Column(Time, nullable=True)
    is_notified = Column(Boolean, default=False, nullable=False)
    notified_at_utc = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)


# Every model that carries tenant_id and must be read through a scoped query
TENANT_SCOPED_MODELS = (
    ServiceDefinition,
    StaffMember,
    StaffServiceLink,
    WorkingHours,
    StaffBreak,
    Client,
    Appointment,
    WaitListEntry,
)
