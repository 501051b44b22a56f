"""Catalog domain schemas - Pydantic models for validation"""

from datetime import time
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ServiceCreate(BaseModel):
    """Schema for creating a service"""

    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    durationMinutes: int = Field(gt=0)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    capacity: int = Field(default=1, ge=1)
    bufferMinutes: int = Field(default=0, ge=0)
    color: Optional[str] = None

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        if v and (len(v) != 7 or not v.startswith("#")):
            raise ValueError("Color must be a hex code like #RRGGBB")
        return v


class ServiceUpdate(BaseModel):
    """Schema for updating a service"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    durationMinutes: Optional[int] = Field(default=None, gt=0)
    price: Optional[Decimal] = Field(default=None, ge=0)
    capacity: Optional[int] = Field(default=None, ge=1)
    bufferMinutes: Optional[int] = Field(default=None, ge=0)
    color: Optional[str] = None


class StaffCreate(BaseModel):
    """Schema for creating a staff member"""

    displayName: str = Field(min_length=1, max_length=255)
    userId: Optional[str] = None
    title: Optional[str] = None
    acceptsBookings: bool = True


class StaffServiceLinkCreate(BaseModel):
    """Schema for linking a staff member to a service"""

    serviceId: str
    priceOverride: Optional[Decimal] = Field(default=None, ge=0)
    durationOverride: Optional[int] = Field(default=None, gt=0)
    bufferOverride: Optional[int] = Field(default=None, ge=0)


class TimeWindow(BaseModel):
    """A wall-clock window on one weekday (0 = Monday)"""

    dayOfWeek: int = Field(ge=0, le=6)
    startTime: time
    endTime: time

    @model_validator(mode="after")
    def validate_window(self):
        if self.startTime >= self.endTime:
            raise ValueError("startTime must be before endTime")
        return self


class BreakCreate(TimeWindow):
    """Schema for a recurring weekly break"""

    description: Optional[str] = None


class ServiceResponse(BaseModel):
    """Schema for service response"""

    id: str
    name: str
    description: Optional[str] = None
    durationMinutes: int
    price: Decimal
    capacity: int
    bufferMinutes: int
    isGroupClass: bool
    color: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, service) -> "ServiceResponse":
        return cls(
            id=service.id,
            name=service.name,
            description=service.description,
            durationMinutes=service.base_duration_minutes,
            price=service.base_price,
            capacity=service.capacity,
            bufferMinutes=service.buffer_minutes,
            isGroupClass=service.is_group_class,
            color=service.color,
        )


class StaffResponse(BaseModel):
    id: str
    displayName: str
    title: Optional[str] = None
    acceptsBookings: bool

    class Config:
        from_attributes = True


class TimeWindowResponse(BaseModel):
    id: str
    dayOfWeek: int
    startTime: time
    endTime: time

    class Config:
        from_attributes = True
