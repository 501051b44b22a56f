"""Catalog router - FastAPI endpoints for services, staff and schedules"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ..tenants.context import TenantContext, get_tenant_context
from .schemas import (
    BreakCreate,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
    StaffCreate,
    StaffResponse,
    StaffServiceLinkCreate,
    TimeWindow,
    TimeWindowResponse,
)
from .service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Catalog"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


def _staff_response(staff) -> StaffResponse:
    return StaffResponse(
        id=staff.id,
        displayName=staff.display_name,
        title=staff.title,
        acceptsBookings=staff.accepts_bookings,
    )


def _window_response(row) -> TimeWindowResponse:
    return TimeWindowResponse(
        id=row.id, dayOfWeek=row.day_of_week, startTime=row.start_time, endTime=row.end_time
    )


# ============================================================================
# SERVICES
# ============================================================================


@router.get("/services", response_model=list[ServiceResponse])
def list_services(
    context: TenantContext = Depends(get_tenant_context),
    service: CatalogService = Depends(get_catalog_service),
):
    """Active services of the tenant"""
    return [ServiceResponse.from_model(s) for s in service.list_services(context)]


@router.post("/services", response_model=ServiceResponse, status_code=201)
def create_service(
    data: ServiceCreate,
    context: TenantContext = Depends(get_tenant_context),
    service: CatalogService = Depends(get_catalog_service),
):
    return ServiceResponse.from_model(service.create_service(context, data))


@router.patch("/services/{service_id}", response_model=ServiceResponse)
def update_service(
    service_id: str,
    data: ServiceUpdate,
    context: TenantContext = Depends(get_tenant_context),
    service: CatalogService = Depends(get_catalog_service),
):
    return ServiceResponse.from_model(service.update_service(context, service_id, data))


@router.delete("/services/{service_id}", response_model=ServiceResponse)
def deactivate_service(
    service_id: str,
    context: TenantContext = Depends(get_tenant_context),
    service: CatalogService = Depends(get_catalog_service),
):
    """Services are deactivated, never deleted"""
    return ServiceResponse.from_model(service.deactivate_service(context, service_id))


# ============================================================================
# STAFF
# ============================================================================


@router.get("/staff", response_model=list[StaffResponse])
def list_staff(
    serviceId: Optional[str] = Query(None),
    context: TenantContext = Depends(get_tenant_context),
    service: CatalogService = Depends(get_catalog_service),
):
    """Active staff, optionally only those providing ``serviceId``"""
    return [_staff_response(s) for s in service.list_staff(context, service_id=serviceId)]


@router.post("/staff", response_model=StaffResponse, status_code=201)
def create_staff_member(
    data: StaffCreate,
    context: TenantContext = Depends(get_tenant_context),
    service: CatalogService = Depends(get_catalog_service),
):
    return _staff_response(service.create_staff_member(context, data))


@router.post("/staff/{staff_id}/services", status_code=201)
def link_service(
    staff_id: str,
    data: StaffServiceLinkCreate,
    context: TenantContext = Depends(get_tenant_context),
    service: CatalogService = Depends(get_catalog_service),
):
    link = service.link_service(context, staff_id, data)
    return {"id": link.id, "staffId": link.staff_member_id, "serviceId": link.service_id}


@router.get("/staff/{staff_id}/working-hours", response_model=list[TimeWindowResponse])
def list_working_hours(
    staff_id: str,
    context: TenantContext = Depends(get_tenant_context),
    service: CatalogService = Depends(get_catalog_service),
):
    return [_window_response(row) for row in service.list_working_hours(context, staff_id)]


@router.put("/staff/{staff_id}/working-hours/{day_of_week}", response_model=list[TimeWindowResponse])
def set_working_hours(
    staff_id: str,
    windows: list[TimeWindow],
    day_of_week: int = Path(..., ge=0, le=6),
    context: TenantContext = Depends(get_tenant_context),
    service: CatalogService = Depends(get_catalog_service),
):
    """Replace one weekday's working hours; an empty list marks the day off"""
    rows = service.set_working_hours(context, staff_id, day_of_week, windows)
    return [_window_response(row) for row in rows]


@router.post("/staff/{staff_id}/breaks", response_model=TimeWindowResponse, status_code=201)
def add_break(
    staff_id: str,
    data: BreakCreate,
    context: TenantContext = Depends(get_tenant_context),
    service: CatalogService = Depends(get_catalog_service),
):
    return _window_response(service.add_break(context, staff_id, data))
