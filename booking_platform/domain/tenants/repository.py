"""Tenant repository - Database operations for tenants (not tenant-scoped)"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Tenant


class TenantRepository:
    """Repository for tenant database operations"""

    @staticmethod
    def get_tenant_by_id(db: Session, tenant_id: str) -> Optional[Tenant]:
        """Get a tenant by ID"""
        return db.query(Tenant).filter(Tenant.id == tenant_id).first()

    @staticmethod
    def get_tenant_by_slug(db: Session, slug: str) -> Optional[Tenant]:
        """Get a tenant by slug"""
        return db.query(Tenant).filter(Tenant.slug == slug).first()

    @staticmethod
    def create_tenant(db: Session, **tenant_data) -> Tenant:
        """Create a new tenant"""
        tenant = Tenant(**tenant_data)
        db.add(tenant)
        db.commit()
        db.refresh(tenant)
        return tenant

    @staticmethod
    def update_tenant(db: Session, tenant: Tenant, **updates) -> Tenant:
        """Update a tenant with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(tenant, key):
                setattr(tenant, key, value)

        db.commit()
        db.refresh(tenant)
        return tenant
