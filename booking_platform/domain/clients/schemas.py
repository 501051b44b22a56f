"""Client domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import validate_email, validate_uuid


class ClientRef(BaseModel):
    """
    How a booking names its client: an existing id, or contact details
    used to find or create the client by email.
    """

    clientId: Optional[str] = None
    email: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)

    @field_validator("clientId")
    @classmethod
    def validate_client_id(cls, v):
        if v is not None and not validate_uuid(v):
            raise ValueError("clientId must be a UUID")
        return v


class ClientCreate(BaseModel):
    """Schema for creating a new client"""

    email: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    userId: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)

    @model_validator(mode="after")
    def require_email(self):
        if not self.email:
            raise ValueError("email is required")
        return self


class ClientResponse(BaseModel):
    """Schema for client response"""

    id: str
    email: str
    firstName: str
    lastName: str
    phone: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, client) -> "ClientResponse":
        return cls(
            id=client.id,
            email=client.email,
            firstName=client.first_name,
            lastName=client.last_name,
            phone=client.phone_number,
            notes=client.notes,
        )
