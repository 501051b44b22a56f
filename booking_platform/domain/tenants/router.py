"""Tenant router - Signup and lookup of the acting tenant"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from .context import TenantContext, get_tenant_context
from .schemas import TenantCreate, TenantResponse
from .service import TenantService

router = APIRouter(prefix="/tenants", tags=["Tenants"])


def get_tenant_service(db: Session = Depends(get_db)) -> TenantService:
    """Dependency injection for TenantService"""
    return TenantService(db)


@router.post("", response_model=TenantResponse, status_code=201)
def create_tenant(data: TenantCreate, service: TenantService = Depends(get_tenant_service)):
    tenant = service.create_tenant(data.name, slug=data.slug, timezone=data.timezone, currency=data.currency)
    return TenantResponse.from_model(tenant)


@router.get("/current", response_model=TenantResponse)
def get_current_tenant(
    context: TenantContext = Depends(get_tenant_context),
    service: TenantService = Depends(get_tenant_service),
):
    """The tenant resolved from the request"""
    return TenantResponse.from_model(service.get_active_tenant(context))


@router.delete("/current", response_model=TenantResponse)
def deactivate_current_tenant(
    context: TenantContext = Depends(get_tenant_context),
    service: TenantService = Depends(get_tenant_service),
):
    """Deactivate the acting tenant; its data is retained but it takes no more bookings"""
    tenant = service.get_active_tenant(context)
    return TenantResponse.from_model(service.deactivate_tenant(tenant.id))
