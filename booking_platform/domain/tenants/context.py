"""Tenant context - resolves the acting tenant for one request"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from fastapi import Request
from jose import JWTError
from jose import jwt as jose_jwt

from ...config import JWT_ALGORITHM, SECRET_KEY, TENANT_CLAIM, TENANT_HEADER
from ...errors import TenantNotSpecified
from ...shared.validators import validate_uuid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantContext:
    """
    The resolved tenant for one operation.

    Frozen so a request can never switch tenants halfway through; pass it
    explicitly to every core call.
    """

    tenant_id: Optional[str] = None
    source: Optional[str] = None  # "header" or "claim"

    @property
    def is_resolved(self) -> bool:
        return self.tenant_id is not None

    def require(self) -> str:
        """Return the tenant id or fail with TenantNotSpecified"""
        if self.tenant_id is None:
            raise TenantNotSpecified()
        return self.tenant_id


EMPTY_CONTEXT = TenantContext()


def for_tenant(tenant_id: str) -> TenantContext:
    """Context for code paths that already know the tenant (jobs, tests)"""
    return TenantContext(tenant_id=str(tenant_id), source="explicit")


def resolve_tenant(
    header_value: Optional[str],
    claims: Optional[Mapping[str, Any]] = None,
) -> TenantContext:
    """
    Resolve the acting tenant.

    The explicit header wins over the token claim. Values that are not
    UUIDs are skipped so the next source can still apply.
    """
    if header_value is not None:
        candidate = header_value.strip()
        if validate_uuid(candidate):
            return TenantContext(tenant_id=candidate.lower(), source="header")
        logger.warning(f"Ignoring malformed {TENANT_HEADER} header value")

    if claims:
        claim_value = claims.get(TENANT_CLAIM)
        if claim_value is not None and validate_uuid(str(claim_value)):
            return TenantContext(tenant_id=str(claim_value).lower(), source="claim")

    return EMPTY_CONTEXT


def decode_bearer_claims(authorization: Optional[str]) -> Optional[dict[str, Any]]:
    """
    Decode the claims of an ``Authorization: Bearer`` header.

    Returns None for missing or invalid tokens; the resolver then simply
    has no claim to use.
    """
    if not authorization or not authorization.startswith("Bearer "):
        return None

    token = authorization.removeprefix("Bearer ").strip()
    if not token:
        return None

    try:
        return jose_jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


def get_tenant_context(request: Request) -> TenantContext:
    """FastAPI dependency for the request's tenant context"""
    claims = decode_bearer_claims(request.headers.get("authorization"))
    return resolve_tenant(request.headers.get(TENANT_HEADER), claims)
