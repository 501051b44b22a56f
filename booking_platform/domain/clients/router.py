"""Client router - FastAPI endpoints for client operations"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ..tenants.context import TenantContext, get_tenant_context
from .schemas import ClientCreate, ClientResponse
from .service import ClientService

router = APIRouter(prefix="/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


@router.get("", response_model=list[ClientResponse])
def list_clients(
    search: Optional[str] = Query(None),
    context: TenantContext = Depends(get_tenant_context),
    service: ClientService = Depends(get_client_service),
):
    """Get all active clients, optionally filtered by name or email"""
    return [ClientResponse.from_model(c) for c in service.list_clients(context, search=search)]


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: str,
    context: TenantContext = Depends(get_tenant_context),
    service: ClientService = Depends(get_client_service),
):
    return ClientResponse.from_model(service.get_client(context, client_id))


@router.post("", response_model=ClientResponse, status_code=201)
def create_client(
    data: ClientCreate,
    context: TenantContext = Depends(get_tenant_context),
    service: ClientService = Depends(get_client_service),
):
    """Create a new client"""
    return ClientResponse.from_model(service.create_client(context, data))
