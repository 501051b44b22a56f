"""Client service - Business logic for client operations"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import ClientInformationRequired, ClientNotFound, ValidationFailed
from ...models import Client
from ..tenants.context import TenantContext
from .repository import ClientRepository
from .schemas import ClientCreate, ClientRef

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_client(self, context: TenantContext, client_id: str) -> Client:
        """Get a specific client"""
        client = self.repo.get_client_by_id(self.db, client_id, tenant_id=context.require())
        if not client:
            raise ClientNotFound()
        return client

    def list_clients(self, context: TenantContext, search: Optional[str] = None) -> list[Client]:
        return self.repo.get_clients(self.db, tenant_id=context.require(), search=search)

    def find_by_email(self, context: TenantContext, email: str) -> Optional[Client]:
        return self.repo.get_client_by_email(self.db, email.strip().lower(), tenant_id=context.require())

    def get_or_create_by_email(self, context: TenantContext, ref: ClientRef) -> Client:
        """Find a client by email, creating and committing one if absent"""
        if not ref.email:
            raise ClientInformationRequired()
        client = self.find_by_email(context, ref.email)
        if client:
            return client
        client = self.resolve_for_booking(context, ref.model_copy(update={"clientId": None}))
        self.db.commit()
        self.db.refresh(client)
        logger.info(f"📥 Client created: {client.id}")
        return client

    def create_client(self, context: TenantContext, data: ClientCreate) -> Client:
        """Create a new client; the email must be unused within the tenant"""
        if self.find_by_email(context, data.email):
            raise ValidationFailed("A client with this email already exists")

        client = self.repo.create_client(
            self.db,
            tenant_id=context.require(),
            email=data.email,
            first_name=data.firstName or "Guest",
            last_name=data.lastName or "",
            phone_number=data.phone,
            notes=data.notes,
            user_id=data.userId,
        )
        logger.info(f"📥 Client created: {client.id}")
        return client

    def resolve_for_booking(self, context: TenantContext, ref: Optional[ClientRef]) -> Client:
        """
        Resolve the client of a booking without committing.

        By id if given (must exist), else by email within the tenant
        (staged as a new client if absent), else ClientInformationRequired.
        A newly staged client is committed together with the appointment.
        """
        tenant_id = context.require()
        if ref is not None and ref.clientId:
            return self.get_client(context, ref.clientId)

        if ref is not None and ref.email:
            client = self.find_by_email(context, ref.email)
            if client:
                return client
            client = self.repo.stage_client(
                self.db,
                tenant_id=tenant_id,
                email=ref.email,
                first_name=ref.firstName or "Guest",
                last_name=ref.lastName or "",
                phone_number=ref.phone,
            )
            logger.info(f"📥 New client staged for booking: {client.id}")
            return client

        raise ClientInformationRequired()
