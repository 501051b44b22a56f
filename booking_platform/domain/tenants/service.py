"""Tenant service - Signup, lookup and deactivation of tenants"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import TenantNotFound, ValidationFailed
from ...models import Tenant
from ...shared.validators import normalize_slug, validate_currency, validate_timezone
from .context import TenantContext
from .repository import TenantRepository

logger = logging.getLogger(__name__)


class TenantService:
    """Service layer for tenant accounts"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TenantRepository()

    def create_tenant(
        self,
        name: str,
        slug: Optional[str] = None,
        timezone: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> Tenant:
        """Create a tenant; slug defaults to the normalized name"""
        if not name or not name.strip():
            raise ValidationFailed("Tenant name is required")

        try:
            slug = normalize_slug(slug or name)
            timezone = validate_timezone(timezone)
            currency = validate_currency(currency)
        except ValueError as e:
            raise ValidationFailed(str(e)) from e

        if self.repo.get_tenant_by_slug(self.db, slug):
            raise ValidationFailed(f"Slug '{slug}' is already taken")

        tenant = self.repo.create_tenant(
            self.db, name=name.strip(), slug=slug, timezone=timezone, currency=currency
        )
        logger.info(f"🏢 Tenant created: {tenant.id} ({tenant.slug})")
        return tenant

    def get_tenant(self, tenant_id: str) -> Tenant:
        tenant = self.repo.get_tenant_by_id(self.db, tenant_id)
        if not tenant:
            raise TenantNotFound()
        return tenant

    def get_active_tenant(self, context: TenantContext) -> Tenant:
        """The acting tenant; deactivated tenants cannot take bookings"""
        tenant = self.repo.get_tenant_by_id(self.db, context.require())
        if not tenant or not tenant.is_active:
            raise TenantNotFound()
        return tenant

    def deactivate_tenant(self, tenant_id: str) -> Tenant:
        """Deactivate a tenant. Its data is retained."""
        tenant = self.get_tenant(tenant_id)
        tenant = self.repo.update_tenant(self.db, tenant, is_active=False)
        logger.info(f"🏢 Tenant deactivated: {tenant.id}")
        return tenant
