import unittest
import uuid

from jose import jwt

from booking_platform.config import JWT_ALGORITHM, SECRET_KEY
from booking_platform.domain.tenants.context import (
    EMPTY_CONTEXT,
    TenantContext,
    decode_bearer_claims,
    for_tenant,
    resolve_tenant,
)
from booking_platform.errors import TenantNotSpecified


class TestResolveTenant(unittest.TestCase):
    def setUp(self):
        self.header_tenant = str(uuid.uuid4())
        self.claim_tenant = str(uuid.uuid4())

    def test_header_wins_over_claim(self):
        context = resolve_tenant(self.header_tenant, {"tenantId": self.claim_tenant})
        self.assertEqual(context.tenant_id, self.header_tenant)
        self.assertEqual(context.source, "header")

    def test_claim_used_without_header(self):
        context = resolve_tenant(None, {"tenantId": self.claim_tenant})
        self.assertEqual(context.tenant_id, self.claim_tenant)
        self.assertEqual(context.source, "claim")

    def test_malformed_header_falls_back_to_claim(self):
        context = resolve_tenant("not-a-uuid", {"tenantId": self.claim_tenant})
        self.assertEqual(context.tenant_id, self.claim_tenant)

    def test_malformed_claim_is_ignored(self):
        self.assertEqual(resolve_tenant(None, {"tenantId": "acme"}), EMPTY_CONTEXT)

    def test_nothing_resolves_to_empty_context(self):
        context = resolve_tenant(None, None)
        self.assertFalse(context.is_resolved)
        with self.assertRaises(TenantNotSpecified):
            context.require()

    def test_header_is_normalized(self):
        context = resolve_tenant(f"  {self.header_tenant.upper()} ", None)
        self.assertEqual(context.tenant_id, self.header_tenant)

    def test_context_is_immutable(self):
        context = for_tenant(self.header_tenant)
        with self.assertRaises(AttributeError):
            context.tenant_id = self.claim_tenant  # type: ignore[misc]
        self.assertIsInstance(context, TenantContext)
        self.assertEqual(context.require(), self.header_tenant)


class TestDecodeBearerClaims(unittest.TestCase):
    def test_valid_token(self):
        tenant_id = str(uuid.uuid4())
        token = jwt.encode({"sub": "user-1", "tenantId": tenant_id}, SECRET_KEY, algorithm=JWT_ALGORITHM)
        claims = decode_bearer_claims(f"Bearer {token}")
        self.assertEqual(claims["tenantId"], tenant_id)

    def test_invalid_token_returns_none(self):
        token = jwt.encode({"tenantId": str(uuid.uuid4())}, "some-other-key", algorithm=JWT_ALGORITHM)
        self.assertIsNone(decode_bearer_claims(f"Bearer {token}"))

    def test_missing_or_non_bearer_header(self):
        self.assertIsNone(decode_bearer_claims(None))
        self.assertIsNone(decode_bearer_claims("Basic abc"))
        self.assertIsNone(decode_bearer_claims("Bearer "))
