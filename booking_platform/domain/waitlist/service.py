"""Wait list service - Clients waiting for a fully booked service"""

import logging
from datetime import date, datetime, time
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...errors import ClientNotFound, ServiceNotFound, StaffNotFound, ValidationFailed
from ...models import Appointment, WaitListEntry
from ...shared.timeutils import utc_to_local, utcnow
from ..catalog.repository import CatalogRepository
from ..clients.repository import ClientRepository
from ..tenants.context import TenantContext
from .repository import WaitListRepository

logger = logging.getLogger(__name__)


def window_accepts(entry: WaitListEntry, local_start: time) -> bool:
    """Whether a freed slot starting at ``local_start`` falls in the entry's preferred window"""
    if entry.preferred_start_time is not None and local_start < entry.preferred_start_time:
        return False
    if entry.preferred_end_time is not None and local_start >= entry.preferred_end_time:
        return False
    return True


class WaitListService:
    """Service layer for the wait list"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.repo = WaitListRepository()
        self.catalog_repo = CatalogRepository()
        self.client_repo = ClientRepository()

    def join_waitlist(
        self,
        context: TenantContext,
        client_id: str,
        service_id: str,
        preferred_date: date,
        staff_id: Optional[str] = None,
        preferred_start_time: Optional[time] = None,
        preferred_end_time: Optional[time] = None,
    ) -> WaitListEntry:
        tenant_id = context.require()
        if not self.client_repo.get_client_by_id(self.db, client_id, tenant_id=tenant_id):
            raise ClientNotFound()
        if not self.catalog_repo.get_service(self.db, service_id, tenant_id=tenant_id):
            raise ServiceNotFound()
        if staff_id and not self.catalog_repo.get_staff_member(self.db, staff_id, tenant_id=tenant_id):
            raise StaffNotFound()
        if preferred_start_time and preferred_end_time and preferred_start_time >= preferred_end_time:
            raise ValidationFailed("Preferred start time must be before preferred end time")

        entry = self.repo.create_entry(
            self.db,
            tenant_id=tenant_id,
            client_id=client_id,
            service_id=service_id,
            staff_member_id=staff_id,
            preferred_date=preferred_date,
            preferred_start_time=preferred_start_time,
            preferred_end_time=preferred_end_time,
        )
        logger.info(f"📝 Client {client_id} joined wait list for service {service_id} on {preferred_date}")
        return entry

    def list_waitlist(
        self,
        context: TenantContext,
        service_id: Optional[str] = None,
        preferred_date: Optional[date] = None,
    ) -> list[WaitListEntry]:
        return self.repo.get_entries(
            self.db, tenant_id=context.require(), service_id=service_id, preferred_date=preferred_date
        )

    def notify_for_cancellation(
        self, context: TenantContext, appointment: Appointment, tz_name: str
    ) -> list[WaitListEntry]:
        """
        Flag the entries a cancelled appointment can satisfy.

        Matching is by service, the local date of the freed slot, staff
        (same or any), and the preferred window. Entries are flagged and
        flushed but not committed; the caller commits them with the
        cancellation. Delivery of the notification is left to the caller.
        """
        local_start = utc_to_local(appointment.start_time_utc, tz_name)
        candidates = self.repo.get_pending_for_slot(
            self.db,
            appointment.service_id,
            local_start.date(),
            appointment.staff_member_id,
            tenant_id=context.require(),
        )

        now = self.clock()
        notified = []
        for entry in candidates:
            if not window_accepts(entry, local_start.time().replace(tzinfo=None)):
                continue
            entry.is_notified = True
            entry.notified_at_utc = now
            notified.append(entry)

        if notified:
            self.db.flush()
            logger.info(
                f"🔔 {len(notified)} wait list entr{'y' if len(notified) == 1 else 'ies'} "
                f"flagged for freed slot of appointment {appointment.id}"
            )
        return notified
