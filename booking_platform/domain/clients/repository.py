"""Client repository - Database operations for clients"""

from typing import Optional

from sqlalchemy.orm import Session

from ...errors import ClientNotFound
from ...models import Client
from ..tenants.scoping import TenantScopedRepository


class ClientRepository(TenantScopedRepository):
    """Repository for client database operations"""

    @classmethod
    def get_client_by_id(cls, db: Session, client_id: str, *, tenant_id: str) -> Optional[Client]:
        """Get a specific client by ID"""
        return cls.get_scoped(db, Client, client_id, tenant_id=tenant_id)

    @classmethod
    def get_client_by_email(cls, db: Session, email: str, *, tenant_id: str) -> Optional[Client]:
        """Get a client by email (emails are stored lowercase)"""
        return cls.scoped(db, Client, tenant_id=tenant_id).filter(Client.email == email).first()

    @classmethod
    def get_clients(cls, db: Session, *, tenant_id: str, search: Optional[str] = None) -> list[Client]:
        """Get active clients, optionally filtered by name or email"""
        query = cls.scoped(db, Client, tenant_id=tenant_id).filter(Client.is_active.is_(True))

        if search:
            search_term = f"%{search.lower()}%"
            query = query.filter(
                (Client.first_name.ilike(search_term))
                | (Client.last_name.ilike(search_term))
                | (Client.email.ilike(search_term))
            )

        return query.order_by(Client.last_name, Client.first_name).all()

    @classmethod
    def stage_client(cls, db: Session, *, tenant_id: str, **client_data) -> Client:
        """Add a client to the session without committing"""
        client = Client(**client_data)
        cls.add(db, client, tenant_id=tenant_id, not_found=ClientNotFound)
        db.flush()
        return client

    @classmethod
    def create_client(cls, db: Session, *, tenant_id: str, **client_data) -> Client:
        """Create a new client"""
        client = cls.stage_client(db, tenant_id=tenant_id, **client_data)
        db.commit()
        db.refresh(client)
        return client
