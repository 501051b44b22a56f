"""Wait list router - FastAPI endpoints for the wait list"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ..clients.service import ClientService
from ..tenants.context import TenantContext, get_tenant_context
from .schemas import WaitListEntryResponse, WaitListJoin
from .service import WaitListService

router = APIRouter(prefix="/waitlist", tags=["Wait list"])


def get_waitlist_service(db: Session = Depends(get_db)) -> WaitListService:
    """Dependency injection for WaitListService"""
    return WaitListService(db)


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


def _entry_response(entry) -> WaitListEntryResponse:
    return WaitListEntryResponse(
        id=entry.id,
        clientId=entry.client_id,
        serviceId=entry.service_id,
        staffId=entry.staff_member_id,
        preferredDate=entry.preferred_date,
        preferredStartTime=entry.preferred_start_time,
        preferredEndTime=entry.preferred_end_time,
        isNotified=entry.is_notified,
        notifiedAt=entry.notified_at_utc,
    )


@router.get("", response_model=list[WaitListEntryResponse])
def list_waitlist(
    serviceId: Optional[str] = Query(None),
    preferredDate: Optional[date] = Query(None),
    context: TenantContext = Depends(get_tenant_context),
    service: WaitListService = Depends(get_waitlist_service),
):
    entries = service.list_waitlist(context, service_id=serviceId, preferred_date=preferredDate)
    return [_entry_response(e) for e in entries]


@router.post("", response_model=WaitListEntryResponse, status_code=201)
def join_waitlist(
    data: WaitListJoin,
    context: TenantContext = Depends(get_tenant_context),
    service: WaitListService = Depends(get_waitlist_service),
    clients: ClientService = Depends(get_client_service),
):
    """Wait for a slot of a fully booked service"""
    client_id = data.clientId or clients.get_or_create_by_email(context, data.client_ref()).id
    entry = service.join_waitlist(
        context,
        client_id=client_id,
        service_id=data.serviceId,
        preferred_date=data.preferredDate,
        staff_id=data.staffId,
        preferred_start_time=data.preferredStartTime,
        preferred_end_time=data.preferredEndTime,
    )
    return _entry_response(entry)
