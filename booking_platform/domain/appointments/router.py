"""Appointment router - FastAPI endpoints for booking and the calendar"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...config import UPCOMING_DEFAULT_LIMIT
from ...database import get_db
from ..tenants.context import TenantContext, get_tenant_context
from .lifecycle import AppointmentStatus
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentUpdate,
    CancelRequest,
    StatusUpdate,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


# Handlers are sync so FastAPI runs them in its threadpool; booking blocks on a per-staff lock


@router.get("", response_model=list[AppointmentResponse])
def list_appointments(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    staffId: Optional[str] = Query(None),
    clientId: Optional[str] = Query(None),
    status: Optional[AppointmentStatus] = Query(None),
    context: TenantContext = Depends(get_tenant_context),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Calendar view, ordered by start time"""
    appointments = service.list_appointments(
        context, start=start, end=end, staff_id=staffId, client_id=clientId, status=status
    )
    return [AppointmentResponse.from_model(a) for a in appointments]


@router.get("/upcoming", response_model=list[AppointmentResponse])
def list_upcoming(
    limit: int = Query(UPCOMING_DEFAULT_LIMIT, ge=1, le=100),
    context: TenantContext = Depends(get_tenant_context),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointments = service.list_upcoming(context, limit=limit)
    return [AppointmentResponse.from_model(a) for a in appointments]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: str,
    context: TenantContext = Depends(get_tenant_context),
    service: AppointmentService = Depends(get_appointment_service),
):
    return AppointmentResponse.from_model(service.get_appointment(context, appointment_id))


@router.post("", response_model=AppointmentResponse, status_code=201)
def create_appointment(
    data: AppointmentCreate,
    context: TenantContext = Depends(get_tenant_context),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book an appointment; conflicts are reported as 409"""
    appointment = service.create_appointment(
        context,
        service_id=data.serviceId,
        staff_id=data.staffId,
        client_ref=data.client_ref(),
        start_time=data.startTime,
        notes=data.notes,
    )
    return AppointmentResponse.from_model(appointment)


@router.put("/{appointment_id}/status", response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: str,
    data: StatusUpdate,
    context: TenantContext = Depends(get_tenant_context),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.update_appointment_status(
        context,
        appointment_id,
        data.status,
        reason=data.reason,
        expected_version=data.expectedVersion,
    )
    return AppointmentResponse.from_model(appointment)


@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    context: TenantContext = Depends(get_tenant_context),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Reschedule, reassign, or edit internal notes"""
    appointment = service.reschedule_appointment(
        context,
        appointment_id,
        new_start_time=data.startTime,
        new_staff_id=data.staffId,
        internal_notes=data.internalNotes,
        expected_version=data.expectedVersion,
    )
    return AppointmentResponse.from_model(appointment)


@router.delete("/{appointment_id}", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: str,
    data: Optional[CancelRequest] = None,
    context: TenantContext = Depends(get_tenant_context),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Soft delete: the appointment is cancelled, not removed"""
    appointment = service.cancel_appointment(
        context,
        appointment_id,
        reason=data.reason if data else None,
        expected_version=data.expectedVersion if data else None,
    )
    return AppointmentResponse.from_model(appointment)
