"""Wait list domain schemas - Pydantic models for validation"""

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import validate_email
from ..clients.schemas import ClientRef


class WaitListJoin(BaseModel):
    """
    Schema for joining the wait list of a fully booked service.

    The client is named by ``clientId`` or by contact details; an unknown
    email creates the client.
    """

    clientId: Optional[str] = None
    email: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phone: Optional[str] = None
    serviceId: str
    preferredDate: date
    staffId: Optional[str] = None  # None = any staff member
    preferredStartTime: Optional[time] = None
    preferredEndTime: Optional[time] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)

    @model_validator(mode="after")
    def validate_window(self):
        if (
            self.preferredStartTime is not None
            and self.preferredEndTime is not None
            and self.preferredStartTime >= self.preferredEndTime
        ):
            raise ValueError("preferredStartTime must be before preferredEndTime")
        return self

    def client_ref(self) -> ClientRef:
        return ClientRef(email=self.email, firstName=self.firstName, lastName=self.lastName, phone=self.phone)


class WaitListEntryResponse(BaseModel):
    id: str
    clientId: str
    serviceId: str
    staffId: Optional[str] = None
    preferredDate: date
    preferredStartTime: Optional[time] = None
    preferredEndTime: Optional[time] = None
    isNotified: bool
    notifiedAt: Optional[datetime] = None

    class Config:
        from_attributes = True
