"""
Tenant isolation guard.

Every read of a tenant-scoped model goes through ``scoped`` and names the
tenant explicitly; every insert goes through ``add`` which stamps it.
A record owned by another tenant is reported exactly like a missing one.
"""

from typing import Optional, TypeVar

from sqlalchemy.orm import Query, Session

from ...errors import NotFoundError, TenantNotSpecified
from ...models import TENANT_SCOPED_MODELS

ModelT = TypeVar("ModelT")


def _require_tenant_id(tenant_id: Optional[str]) -> str:
    if not tenant_id:
        raise TenantNotSpecified()
    return tenant_id


def _require_scoped_model(model) -> None:
    if model not in TENANT_SCOPED_MODELS:
        raise TypeError(f"{model.__name__} is not a tenant-scoped model")


class TenantScopedRepository:
    """Base for repositories of tenant-scoped models"""

    @staticmethod
    def scoped(db: Session, model: type[ModelT], *, tenant_id: str) -> Query:
        """Query ``model`` filtered to ``tenant_id``"""
        _require_scoped_model(model)
        return db.query(model).filter(model.tenant_id == _require_tenant_id(tenant_id))

    @classmethod
    def get_scoped(
        cls, db: Session, model: type[ModelT], entity_id: Optional[str], *, tenant_id: str
    ) -> Optional[ModelT]:
        """Fetch one record by id inside the tenant, or None"""
        query = cls.scoped(db, model, tenant_id=tenant_id)
        if not entity_id:
            return None
        return query.filter(model.id == str(entity_id)).first()

    @classmethod
    def add(cls, db: Session, entity: ModelT, *, tenant_id: str, not_found: type[NotFoundError]) -> ModelT:
        """
        Stage a new tenant-scoped record.

        An unset tenant id is stamped; one pointing at another tenant is
        rejected with ``not_found`` so nothing about the other tenant leaks.
        """
        _require_scoped_model(type(entity))
        tenant_id = _require_tenant_id(tenant_id)
        if entity.tenant_id is None:
            entity.tenant_id = tenant_id
        db.add(cls.ensure_owned(entity, tenant_id=tenant_id, not_found=not_found))
        return entity

    @staticmethod
    def ensure_owned(entity: Optional[ModelT], *, tenant_id: str, not_found: type[NotFoundError]) -> ModelT:
        """Return ``entity`` if it belongs to the tenant, else raise ``not_found``"""
        tenant_id = _require_tenant_id(tenant_id)
        if entity is None or entity.tenant_id != tenant_id:
            raise not_found()
        return entity
