# clinic_core/tenants/resolver.py
"""
Per-request tenant resolution.

Signals are tried in a fixed order and the first match wins:

  1. Host subdomain       (silent fall-through on miss)
  2. X-Tenant-ID / X-Tenant-Subdomain header (unresolvable -> BadRequest)
  3. tenant_id claim of a verified bearer access token (silent fall-through)
  4. ?tenant= query parameter, only when allowed (unresolvable -> BadRequest)

Inactive tenants are returned as-is; TenantRequiredGuard rejects them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import DisallowedHost

from clinic_core.common.api.exceptions import BadRequest
from clinic_core.iam.auth import read_access_token
from clinic_core.tenants.models import Tenant
from clinic_core.tenants.selectors import get_tenant_by_reference, get_tenant_by_subdomain, get_tenant_or_none

logger = logging.getLogger(__name__)

TENANT_ID_HEADER = "X-Tenant-ID"
TENANT_SUBDOMAIN_HEADER = "X-Tenant-Subdomain"
TENANT_QUERY_PARAM = "tenant"


@dataclass(frozen=True)
class TenantContext:
    id: UUID
    name: str
    subdomain: str
    slug: str
    is_active: bool
    settings: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_tenant(cls, tenant: Tenant) -> "TenantContext":
        return cls(
            id=tenant.id,
            name=tenant.name,
            subdomain=tenant.subdomain,
            slug=tenant.slug,
            is_active=tenant.is_active,
            settings=dict(tenant.settings or {}),
        )


def _host_subdomain(request) -> Optional[str]:
    try:
        host = request.get_host()
    except DisallowedHost:
        host = request.META.get("HTTP_HOST", "")
    host = (host or "").split(":", 1)[0].strip().lower()
    labels = [p for p in host.split(".") if p]
    if len(labels) < 2:
        return None
    if all(p.isdigit() for p in labels):
        return None
    label = labels[0]
    if label in getattr(settings, "TENANT_RESERVED_SUBDOMAINS", ("www", "api", "admin", "app")):
        return None
    return label


def _from_reference(value: str, *, source: str) -> TenantContext:
    tenant = get_tenant_by_reference(reference=value)
    if tenant is None:
        logger.info("Unresolvable tenant reference %r from %s", value, source)
        raise BadRequest(f"Unknown tenant '{value}' in {source}.")
    return TenantContext.from_tenant(tenant)


def resolve_tenant(request, *, allow_query_param: bool = False) -> Optional[TenantContext]:
    # 1) subdomain of the Host header
    subdomain = _host_subdomain(request)
    if subdomain:
        tenant = get_tenant_by_subdomain(subdomain=subdomain)
        if tenant is not None:
            return TenantContext.from_tenant(tenant)

    # 2) explicit header
    header_value = request.headers.get(TENANT_ID_HEADER) or request.headers.get(TENANT_SUBDOMAIN_HEADER)
    if header_value and header_value.strip():
        return _from_reference(header_value, source="tenant header")

    # 3) verified session claim
    token = read_access_token(request)
    claim = token.get("tenant_id") if token is not None else None
    if claim:
        tenant = get_tenant_or_none(tenant_id=claim)
        if tenant is not None:
            return TenantContext.from_tenant(tenant)

    # 4) query parameter (development only)
    if allow_query_param:
        query_value = request.GET.get(TENANT_QUERY_PARAM)
        if query_value and query_value.strip():
            return _from_reference(query_value, source="query parameter")

    return None
