"""Shared fixtures for the booking tests: SQLite engines and seed data"""

import unittest
from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from booking_platform import models  # noqa: F401
from booking_platform.database import Base, build_engine
from booking_platform.domain.appointments.locks import MemoryStaffLocks
from booking_platform.domain.appointments.service import AppointmentService
from booking_platform.domain.clients.schemas import ClientRef
from booking_platform.domain.scheduling.availability import AvailabilityService
from booking_platform.domain.tenants.context import for_tenant
from booking_platform.models import (
    Client,
    ServiceDefinition,
    StaffBreak,
    StaffMember,
    StaffServiceLink,
    Tenant,
    WorkingHours,
    generate_id,
)

# 2030-01-07 is a Monday (day_of_week 0)
MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)
FIXED_NOW = datetime(2030, 1, 1, 0, 0)


def at(hour: int, minute: int = 0, day: date = MONDAY) -> datetime:
    """Naive UTC datetime on ``day``"""
    return datetime.combine(day, time(hour, minute))


def create_memory_engine():
    """One shared in-memory connection, visible to every session"""
    return build_engine("sqlite://", poolclass=StaticPool)


def create_file_engine(path: str, timeout: float = 30):
    return build_engine(f"sqlite:///{path}", connect_args={"check_same_thread": False, "timeout": timeout})


class Seeder:
    """Inserts catalog rows directly; services under test read them back"""

    def __init__(self, db):
        self.db = db

    def _save(self, entity):
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def tenant(self, name: str = "Acme Studio", timezone: str = "UTC", is_active: bool = True) -> Tenant:
        return self._save(
            Tenant(
                name=name,
                slug=f"acme-{generate_id()[:8]}",
                timezone=timezone,
                currency="USD",
                is_active=is_active,
            )
        )

    def service(
        self,
        tenant: Tenant,
        name: str = "Haircut",
        duration: int = 60,
        capacity: int = 1,
        buffer: int = 0,
        price: str = "50.00",
        is_active: bool = True,
    ) -> ServiceDefinition:
        return self._save(
            ServiceDefinition(
                tenant_id=tenant.id,
                name=name,
                base_duration_minutes=duration,
                base_price=Decimal(price),
                capacity=capacity,
                buffer_minutes=buffer,
                is_active=is_active,
            )
        )

    def staff(self, tenant: Tenant, name: str = "Alex", accepts_bookings: bool = True) -> StaffMember:
        return self._save(
            StaffMember(tenant_id=tenant.id, display_name=name, accepts_bookings=accepts_bookings)
        )

    def link(self, tenant: Tenant, staff: StaffMember, service: ServiceDefinition, **overrides) -> StaffServiceLink:
        return self._save(
            StaffServiceLink(
                tenant_id=tenant.id,
                staff_member_id=staff.id,
                service_id=service.id,
                **overrides,
            )
        )

    def hours(
        self,
        tenant: Tenant,
        staff: StaffMember,
        day_of_week: int = 0,
        start: time = time(9, 0),
        end: time = time(12, 0),
    ) -> WorkingHours:
        return self._save(
            WorkingHours(
                tenant_id=tenant.id,
                staff_member_id=staff.id,
                day_of_week=day_of_week,
                start_time=start,
                end_time=end,
            )
        )

    def break_(self, tenant: Tenant, staff: StaffMember, start: time, end: time, day_of_week: int = 0) -> StaffBreak:
        return self._save(
            StaffBreak(
                tenant_id=tenant.id,
                staff_member_id=staff.id,
                day_of_week=day_of_week,
                start_time=start,
                end_time=end,
            )
        )

    def client(self, tenant: Tenant, email: str = "jane@example.com") -> Client:
        return self._save(Client(tenant_id=tenant.id, email=email, first_name="Jane", last_name="Doe"))


class BookingTestCase(unittest.TestCase):
    """
    Fresh in-memory database per test with one tenant, one private
    service, one staff member working Monday 09:00-12:00.
    """

    def setUp(self):
        self.engine = create_memory_engine()
        Base.metadata.create_all(bind=self.engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.db = self.SessionLocal()
        self.seed = Seeder(self.db)
        self.locks = MemoryStaffLocks()

        self.tenant = self.seed.tenant()
        self.context = for_tenant(self.tenant.id)
        self.service = self.seed.service(self.tenant)
        self.staff = self.seed.staff(self.tenant)
        self.seed.link(self.tenant, self.staff, self.service)
        self.seed.hours(self.tenant, self.staff)
        self.client_row = self.seed.client(self.tenant)

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(bind=self.engine)
        self.engine.dispose()

    def appointments(self, db=None, clock=lambda: FIXED_NOW) -> AppointmentService:
        return AppointmentService(db or self.db, clock=clock, locks=self.locks)

    def availability(self, clock=lambda: FIXED_NOW) -> AvailabilityService:
        return AvailabilityService(self.db, clock=clock)

    def book(self, start: datetime, service=None, staff=None, client_ref=None, context=None):
        return self.appointments().create_appointment(
            context or self.context,
            (service or self.service).id,
            (staff or self.staff).id,
            client_ref or ClientRef(clientId=self.client_row.id),
            start,
        )
