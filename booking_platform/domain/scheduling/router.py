"""Scheduling router - Slot availability of a staff member"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ..tenants.context import TenantContext, get_tenant_context
from .availability import AvailabilityService
from .schemas import TimeSlotResponse

router = APIRouter(prefix="/staff", tags=["Scheduling"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


@router.get("/{staff_id}/availability", response_model=list[TimeSlotResponse])
def get_availability(
    staff_id: str,
    serviceId: str = Query(...),
    target_date: date = Query(..., alias="date"),
    context: TenantContext = Depends(get_tenant_context),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Every candidate slot of the day, with availability and group occupancy"""
    slots = service.get_available_slots(context, staff_id, serviceId, target_date)
    return [TimeSlotResponse.from_slot(slot) for slot in slots]
