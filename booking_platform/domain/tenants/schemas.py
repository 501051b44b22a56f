"""Tenant schemas - Pydantic models for tenant accounts"""

from typing import Optional

from pydantic import BaseModel, Field


class TenantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = None
    timezone: Optional[str] = None  # IANA name, defaults to UTC
    currency: Optional[str] = None


class TenantResponse(BaseModel):
    id: str
    name: str
    slug: str
    timezone: str
    currency: str
    isActive: bool

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, tenant) -> "TenantResponse":
        return cls(
            id=tenant.id,
            name=tenant.name,
            slug=tenant.slug,
            timezone=tenant.timezone,
            currency=tenant.currency,
            isActive=tenant.is_active,
        )
