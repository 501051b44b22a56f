"""Wait list repository - Database operations for wait list entries"""

from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...errors import ClientNotFound
from ...models import WaitListEntry
from ..tenants.scoping import TenantScopedRepository


class WaitListRepository(TenantScopedRepository):
    """Repository for wait list database operations"""

    @classmethod
    def get_entries(
        cls,
        db: Session,
        *,
        tenant_id: str,
        service_id: Optional[str] = None,
        preferred_date: Optional[date] = None,
    ) -> list[WaitListEntry]:
        """Active entries, oldest first"""
        query = cls.scoped(db, WaitListEntry, tenant_id=tenant_id).filter(WaitListEntry.is_active.is_(True))
        if service_id:
            query = query.filter(WaitListEntry.service_id == service_id)
        if preferred_date:
            query = query.filter(WaitListEntry.preferred_date == preferred_date)
        return query.order_by(WaitListEntry.created_at, WaitListEntry.id).all()

    @classmethod
    def get_pending_for_slot(
        cls,
        db: Session,
        service_id: str,
        preferred_date: date,
        staff_id: str,
        *,
        tenant_id: str,
    ) -> list[WaitListEntry]:
        """Active, not yet notified entries for a service on a date, for this staff member or any"""
        return (
            cls.scoped(db, WaitListEntry, tenant_id=tenant_id)
            .filter(
                WaitListEntry.service_id == service_id,
                WaitListEntry.preferred_date == preferred_date,
                WaitListEntry.is_active.is_(True),
                WaitListEntry.is_notified.is_(False),
                or_(WaitListEntry.staff_member_id.is_(None), WaitListEntry.staff_member_id == staff_id),
            )
            .order_by(WaitListEntry.created_at, WaitListEntry.id)
            .all()
        )

    @classmethod
    def create_entry(cls, db: Session, *, tenant_id: str, **entry_data) -> WaitListEntry:
        """Create a new wait list entry"""
        entry = WaitListEntry(**entry_data)
        cls.add(db, entry, tenant_id=tenant_id, not_found=ClientNotFound)
        db.commit()
        db.refresh(entry)
        return entry
