"""Appointment domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email, validate_uuid
from ..clients.schemas import ClientRef
from .lifecycle import AppointmentStatus


class AppointmentCreate(BaseModel):
    """
    Schema for booking an appointment.

    The client is named by ``clientId`` or by contact details; an unknown
    email creates the client together with the booking.
    """

    serviceId: str
    staffId: str
    startTime: datetime  # Aware, or naive UTC
    clientId: Optional[str] = None
    email: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("serviceId", "staffId")
    @classmethod
    def validate_ids(cls, v):
        if not validate_uuid(v):
            raise ValueError("Must be a UUID")
        return v

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)

    def client_ref(self) -> ClientRef:
        return ClientRef(
            clientId=self.clientId,
            email=self.email,
            firstName=self.firstName,
            lastName=self.lastName,
            phone=self.phone,
        )


class StatusUpdate(BaseModel):
    """Schema for moving an appointment through its lifecycle"""

    status: AppointmentStatus
    reason: Optional[str] = Field(default=None, max_length=500)
    expectedVersion: Optional[int] = None


class AppointmentUpdate(BaseModel):
    """Schema for rescheduling or reassigning an appointment"""

    startTime: Optional[datetime] = None
    staffId: Optional[str] = None
    internalNotes: Optional[str] = None
    expectedVersion: Optional[int] = None


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)
    expectedVersion: Optional[int] = None


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: str
    serviceId: str
    staffId: str
    clientId: str
    groupSessionId: Optional[str] = None
    startTime: datetime
    endTime: datetime
    status: AppointmentStatus
    price: Decimal
    durationMinutes: int
    customerNotes: Optional[str] = None
    internalNotes: Optional[str] = None
    cancellationReason: Optional[str] = None
    cancelledAt: Optional[datetime] = None
    version: int

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            serviceId=appointment.service_id,
            staffId=appointment.staff_member_id,
            clientId=appointment.client_id,
            groupSessionId=appointment.group_session_id,
            startTime=appointment.start_time_utc,
            endTime=appointment.end_time_utc,
            status=appointment.status,
            price=appointment.price,
            durationMinutes=appointment.duration_minutes,
            customerNotes=appointment.customer_notes,
            internalNotes=appointment.internal_notes,
            cancellationReason=appointment.cancellation_reason,
            cancelledAt=appointment.cancelled_at_utc,
            version=appointment.version,
        )
