"""Catalog repository - Database operations for services, staff and schedules"""

from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from ...errors import ServiceNotFound, StaffNotFound
from ...models import ServiceDefinition, StaffBreak, StaffMember, StaffServiceLink, WorkingHours
from ..tenants.scoping import TenantScopedRepository


class CatalogRepository(TenantScopedRepository):
    """Repository for service definitions, staff members and their schedules"""

    # Services
    @classmethod
    def get_service(cls, db: Session, service_id: str, *, tenant_id: str) -> Optional[ServiceDefinition]:
        """Get a service by ID within the tenant"""
        return cls.get_scoped(db, ServiceDefinition, service_id, tenant_id=tenant_id)

    @classmethod
    def list_services(
        cls, db: Session, *, tenant_id: str, include_inactive: bool = False
    ) -> list[ServiceDefinition]:
        """Get all services for a tenant"""
        query = cls.scoped(db, ServiceDefinition, tenant_id=tenant_id)
        if not include_inactive:
            query = query.filter(ServiceDefinition.is_active.is_(True))
        return query.order_by(ServiceDefinition.name).all()

    @classmethod
    def create_service(cls, db: Session, *, tenant_id: str, **service_data) -> ServiceDefinition:
        """Create a new service"""
        service = ServiceDefinition(**service_data)
        cls.add(db, service, tenant_id=tenant_id, not_found=ServiceNotFound)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service: ServiceDefinition, **updates) -> ServiceDefinition:
        """Update a service with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(service, key):
                setattr(service, key, value)

        db.commit()
        db.refresh(service)
        return service

    # Staff
    @classmethod
    def get_staff_member(cls, db: Session, staff_id: str, *, tenant_id: str) -> Optional[StaffMember]:
        """Get a staff member by ID within the tenant"""
        return cls.get_scoped(db, StaffMember, staff_id, tenant_id=tenant_id)

    @classmethod
    def lock_staff_member(
        cls, db: Session, staff_id: str, *, tenant_id: str, lock_timeout_seconds: Optional[float] = None
    ) -> Optional[StaffMember]:
        """
        Get a staff member with a row lock held until the transaction ends.

        On PostgreSQL the wait for the row is bounded by ``lock_timeout_seconds``;
        running out raises OperationalError (SQLSTATE 55P03).
        """
        if lock_timeout_seconds is not None and db.get_bind().dialect.name == "postgresql":
            # SET takes no bind parameters; the value is an int we computed
            db.execute(text(f"SET LOCAL lock_timeout = '{int(lock_timeout_seconds * 1000)}ms'"))
        return (
            cls.scoped(db, StaffMember, tenant_id=tenant_id)
            .filter(StaffMember.id == staff_id)
            .with_for_update()
            .first()
        )

    @classmethod
    def list_staff(
        cls, db: Session, *, tenant_id: str, service_id: Optional[str] = None
    ) -> list[StaffMember]:
        """Get active staff, optionally only those providing ``service_id``"""
        query = cls.scoped(db, StaffMember, tenant_id=tenant_id).filter(StaffMember.is_active.is_(True))
        if service_id:
            linked_ids = (
                cls.scoped(db, StaffServiceLink, tenant_id=tenant_id)
                .filter(
                    StaffServiceLink.service_id == service_id,
                    StaffServiceLink.is_active.is_(True),
                )
                .with_entities(StaffServiceLink.staff_member_id)
            )
            query = query.filter(StaffMember.id.in_([row.staff_member_id for row in linked_ids.all()]))
        return query.order_by(StaffMember.display_name).all()

    @classmethod
    def create_staff_member(cls, db: Session, *, tenant_id: str, **staff_data) -> StaffMember:
        """Create a new staff member"""
        staff = StaffMember(**staff_data)
        cls.add(db, staff, tenant_id=tenant_id, not_found=StaffNotFound)
        db.commit()
        db.refresh(staff)
        return staff

    # Staff-service links
    @classmethod
    def get_link(
        cls, db: Session, staff_id: str, service_id: str, *, tenant_id: str
    ) -> Optional[StaffServiceLink]:
        """Get the link between a staff member and a service, active or not"""
        return (
            cls.scoped(db, StaffServiceLink, tenant_id=tenant_id)
            .filter(
                StaffServiceLink.staff_member_id == staff_id,
                StaffServiceLink.service_id == service_id,
            )
            .first()
        )

    @classmethod
    def save_link(cls, db: Session, link: StaffServiceLink, *, tenant_id: str) -> StaffServiceLink:
        """Insert or update a staff-service link"""
        if link.id is None:
            cls.add(db, link, tenant_id=tenant_id, not_found=ServiceNotFound)
        db.commit()
        db.refresh(link)
        return link

    # Working hours and breaks
    @classmethod
    def get_working_hours(
        cls, db: Session, staff_id: str, day_of_week: int, *, tenant_id: str
    ) -> list[WorkingHours]:
        """Active working-hour rows of one weekday"""
        return (
            cls.scoped(db, WorkingHours, tenant_id=tenant_id)
            .filter(
                WorkingHours.staff_member_id == staff_id,
                WorkingHours.day_of_week == day_of_week,
                WorkingHours.is_active.is_(True),
            )
            .order_by(WorkingHours.start_time)
            .all()
        )

    @classmethod
    def list_working_hours(cls, db: Session, staff_id: str, *, tenant_id: str) -> list[WorkingHours]:
        """All active working-hour rows of a staff member"""
        return (
            cls.scoped(db, WorkingHours, tenant_id=tenant_id)
            .filter(WorkingHours.staff_member_id == staff_id, WorkingHours.is_active.is_(True))
            .order_by(WorkingHours.day_of_week, WorkingHours.start_time)
            .all()
        )

    @classmethod
    def replace_working_hours(
        cls, db: Session, staff_id: str, day_of_week: int, rows: list[WorkingHours], *, tenant_id: str
    ) -> list[WorkingHours]:
        """Replace one weekday's working hours in a single commit"""
        cls.scoped(db, WorkingHours, tenant_id=tenant_id).filter(
            WorkingHours.staff_member_id == staff_id,
            WorkingHours.day_of_week == day_of_week,
        ).delete(synchronize_session=False)
        for row in rows:
            cls.add(db, row, tenant_id=tenant_id, not_found=StaffNotFound)
        db.commit()
        for row in rows:
            db.refresh(row)
        return rows

    @classmethod
    def get_breaks(cls, db: Session, staff_id: str, day_of_week: int, *, tenant_id: str) -> list[StaffBreak]:
        """Active breaks of one weekday"""
        return (
            cls.scoped(db, StaffBreak, tenant_id=tenant_id)
            .filter(
                StaffBreak.staff_member_id == staff_id,
                StaffBreak.day_of_week == day_of_week,
                StaffBreak.is_active.is_(True),
            )
            .order_by(StaffBreak.start_time)
            .all()
        )

    @classmethod
    def create_break(cls, db: Session, *, tenant_id: str, **break_data) -> StaffBreak:
        """Create a recurring break"""
        staff_break = StaffBreak(**break_data)
        cls.add(db, staff_break, tenant_id=tenant_id, not_found=StaffNotFound)
        db.commit()
        db.refresh(staff_break)
        return staff_break
