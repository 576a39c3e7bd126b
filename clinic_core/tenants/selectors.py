# clinic_core/tenants/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from clinic_core.common.utils import parse_uuid
from clinic_core.tenants.models import Tenant


def get_tenant_by_slug(*, slug: str) -> Optional[Tenant]:
    value = (slug or "").strip().lower()
    if not value:
        return None
    return Tenant.objects.filter(slug=value).first()


def list_tenants(*, include_inactive: bool = False) -> QuerySet[Tenant]:
    qs = Tenant.objects.all()
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs.order_by("-created_at")


def get_tenant(*, tenant_id: UUID) -> Tenant:
    tenant = get_tenant_or_none(tenant_id=tenant_id)
    if tenant is None:
        raise NotFound(f"Tenant {tenant_id} not found.")
    return tenant


def get_tenant_or_none(*, tenant_id) -> Optional[Tenant]:
    tid = parse_uuid(tenant_id)
    if tid is None:
        return None
    return Tenant.objects.filter(id=tid).first()


def get_tenant_by_subdomain(*, subdomain: str) -> Optional[Tenant]:
    value = (subdomain or "").strip().lower()
    if not value:
        return None
    return Tenant.objects.filter(subdomain=value).first()


def get_tenant_by_reference(*, reference: str) -> Optional[Tenant]:
    """
    A reference is either a tenant UUID or a subdomain.
    UUID-shaped values are only ever looked up by id.
    """
    value = (str(reference) if reference is not None else "").strip()
    if not value:
        return None
    tid = parse_uuid(value)
    if tid is not None:
        return Tenant.objects.filter(id=tid).first()
    return get_tenant_by_subdomain(subdomain=value)
