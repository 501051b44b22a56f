"""Catalog service - Business logic for services, staff and their schedules"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import ServiceNotFound, StaffDoesNotProvideService, StaffNotFound
from ...models import ServiceDefinition, StaffBreak, StaffMember, StaffServiceLink, WorkingHours
from ..tenants.context import TenantContext
from .repository import CatalogRepository
from .schemas import (
    BreakCreate,
    ServiceCreate,
    ServiceUpdate,
    StaffCreate,
    StaffServiceLinkCreate,
    TimeWindow,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Offering:
    """A service as delivered by one staff member, overrides applied"""

    service: ServiceDefinition
    staff: StaffMember
    link: StaffServiceLink
    duration_minutes: int
    buffer_minutes: int
    price: Decimal

    @property
    def capacity(self) -> int:
        return self.service.capacity or 1

    @property
    def is_group_class(self) -> bool:
        return self.service.is_group_class

    @property
    def stride_minutes(self) -> int:
        return self.duration_minutes + self.buffer_minutes


def build_offering(service: ServiceDefinition, staff: StaffMember, link: StaffServiceLink) -> Offering:
    """Apply the staff-level overrides of ``link`` to ``service``"""
    return Offering(
        service=service,
        staff=staff,
        link=link,
        duration_minutes=link.duration_override or service.base_duration_minutes,
        buffer_minutes=(
            link.buffer_override if link.buffer_override is not None else service.buffer_minutes or 0
        ),
        price=link.price_override if link.price_override is not None else service.base_price,
    )


class CatalogService:
    """Service layer for the tenant's catalog"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CatalogRepository()

    # ===== BOOKABILITY CHECKS =====

    def get_bookable_service(self, context: TenantContext, service_id: str) -> ServiceDefinition:
        service = self.repo.get_service(self.db, service_id, tenant_id=context.require())
        if not service or not service.is_active:
            raise ServiceNotFound()
        return service

    def get_bookable_staff(self, context: TenantContext, staff_id: str) -> StaffMember:
        staff = self.repo.get_staff_member(self.db, staff_id, tenant_id=context.require())
        if not staff or not staff.is_active or not staff.accepts_bookings:
            raise StaffNotFound()
        return staff

    def resolve_offering(
        self,
        context: TenantContext,
        service_id: str,
        staff_id: str,
        service: Optional[ServiceDefinition] = None,
    ) -> Offering:
        """
        Load service, staff member and their link.

        Raises, in this order: ServiceNotFound, StaffNotFound,
        StaffDoesNotProvideService.
        """
        tenant_id = context.require()
        if service is None:
            service = self.get_bookable_service(context, service_id)
        staff = self.get_bookable_staff(context, staff_id)
        link = self.repo.get_link(self.db, staff.id, service.id, tenant_id=tenant_id)
        if not link or not link.is_active:
            raise StaffDoesNotProvideService()
        return build_offering(service, staff, link)

    # ===== SERVICES =====

    def list_services(self, context: TenantContext) -> list[ServiceDefinition]:
        return self.repo.list_services(self.db, tenant_id=context.require())

    def create_service(self, context: TenantContext, data: ServiceCreate) -> ServiceDefinition:
        """Create a new service definition"""
        service = self.repo.create_service(
            self.db,
            tenant_id=context.require(),
            name=data.name.strip(),
            description=data.description,
            base_duration_minutes=data.durationMinutes,
            base_price=data.price,
            capacity=data.capacity,
            buffer_minutes=data.bufferMinutes,
            color=data.color,
        )
        logger.info(f"🧾 Service created: {service.id} ({service.name}, capacity={service.capacity})")
        return service

    def update_service(
        self, context: TenantContext, service_id: str, data: ServiceUpdate
    ) -> ServiceDefinition:
        service = self.repo.get_service(self.db, service_id, tenant_id=context.require())
        if not service:
            raise ServiceNotFound()

        updates = {}
        if data.name is not None:
            updates["name"] = data.name.strip()
        if data.description is not None:
            updates["description"] = data.description
        if data.durationMinutes is not None:
            updates["base_duration_minutes"] = data.durationMinutes
        if data.price is not None:
            updates["base_price"] = data.price
        if data.capacity is not None:
            updates["capacity"] = data.capacity
        if data.bufferMinutes is not None:
            updates["buffer_minutes"] = data.bufferMinutes
        if data.color is not None:
            updates["color"] = data.color

        return self.repo.update_service(self.db, service, **updates)

    def deactivate_service(self, context: TenantContext, service_id: str) -> ServiceDefinition:
        """Deactivate instead of deleting; appointments keep referencing it"""
        service = self.repo.get_service(self.db, service_id, tenant_id=context.require())
        if not service:
            raise ServiceNotFound()
        return self.repo.update_service(self.db, service, is_active=False)

    # ===== STAFF =====

    def list_staff(self, context: TenantContext, service_id: Optional[str] = None) -> list[StaffMember]:
        return self.repo.list_staff(self.db, tenant_id=context.require(), service_id=service_id)

    def create_staff_member(self, context: TenantContext, data: StaffCreate) -> StaffMember:
        staff = self.repo.create_staff_member(
            self.db,
            tenant_id=context.require(),
            display_name=data.displayName.strip(),
            user_id=data.userId,
            title=data.title,
            accepts_bookings=data.acceptsBookings,
        )
        logger.info(f"👤 Staff member created: {staff.id} ({staff.display_name})")
        return staff

    def link_service(
        self, context: TenantContext, staff_id: str, data: StaffServiceLinkCreate
    ) -> StaffServiceLink:
        """Link a staff member to a service, or refresh the overrides of an existing link"""
        tenant_id = context.require()
        staff = self.repo.get_staff_member(self.db, staff_id, tenant_id=tenant_id)
        if not staff:
            raise StaffNotFound()
        service = self.repo.get_service(self.db, data.serviceId, tenant_id=tenant_id)
        if not service:
            raise ServiceNotFound()

        link = self.repo.get_link(self.db, staff.id, service.id, tenant_id=tenant_id)
        if link is None:
            link = StaffServiceLink(staff_member_id=staff.id, service_id=service.id)
        link.price_override = data.priceOverride
        link.duration_override = data.durationOverride
        link.buffer_override = data.bufferOverride
        link.is_active = True
        return self.repo.save_link(self.db, link, tenant_id=tenant_id)

    # ===== WORKING HOURS & BREAKS =====

    def set_working_hours(
        self, context: TenantContext, staff_id: str, day_of_week: int, windows: list[TimeWindow]
    ) -> list[WorkingHours]:
        """Replace one weekday's working hours; an empty list means not working"""
        tenant_id = context.require()
        staff = self.repo.get_staff_member(self.db, staff_id, tenant_id=tenant_id)
        if not staff:
            raise StaffNotFound()

        rows = [
            WorkingHours(
                staff_member_id=staff.id,
                day_of_week=day_of_week,
                start_time=window.startTime,
                end_time=window.endTime,
            )
            for window in windows
            if window.dayOfWeek == day_of_week
        ]
        return self.repo.replace_working_hours(self.db, staff.id, day_of_week, rows, tenant_id=tenant_id)

    def list_working_hours(self, context: TenantContext, staff_id: str) -> list[WorkingHours]:
        return self.repo.list_working_hours(self.db, staff_id, tenant_id=context.require())

    def add_break(self, context: TenantContext, staff_id: str, data: BreakCreate) -> StaffBreak:
        tenant_id = context.require()
        staff = self.repo.get_staff_member(self.db, staff_id, tenant_id=tenant_id)
        if not staff:
            raise StaffNotFound()
        return self.repo.create_break(
            self.db,
            tenant_id=tenant_id,
            staff_member_id=staff.id,
            day_of_week=data.dayOfWeek,
            start_time=data.startTime,
            end_time=data.endTime,
            description=data.description,
        )
