# clinic_core/common/openapi.py
from __future__ import annotations

from drf_spectacular.openapi import AutoSchema
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter

from clinic_core.common import routing


class ClinicAutoSchema(AutoSchema):
    """
    Adds the tenant headers to every endpoint whose view is tenant_required.

    Either header is enough; the Host subdomain or the session's tenant claim
    also resolve the tenant, so neither is marked required.
    """

    TENANT_HEADERS = [
        OpenApiParameter(
            name="X-Tenant-ID",
            type=OpenApiTypes.STR,
            location=OpenApiParameter.HEADER,
            required=False,
            description="Tenant UUID or subdomain.",
        ),
        OpenApiParameter(
            name="X-Tenant-Subdomain",
            type=OpenApiTypes.STR,
            location=OpenApiParameter.HEADER,
            required=False,
            description="Tenant subdomain (used when X-Tenant-ID is absent).",
        ),
    ]

    def _is_tenant_endpoint(self) -> bool:
        view = getattr(self, "view", None)
        if view is None:
            return False

        action = getattr(view, "action", None)
        handler = getattr(view, action, None) if action else None
        if handler is None:
            handler = getattr(view, (self.method or "").lower(), None)

        value = getattr(handler, routing.TENANT_REQUIRED_ATTR, None) if handler is not None else None
        if value is None:
            value = getattr(view, routing.TENANT_REQUIRED_ATTR, False)
        return bool(value)

    def get_override_parameters(self):
        params = list(super().get_override_parameters() or [])

        if self._is_tenant_endpoint():
            existing = {p.name.lower() for p in params}
            for p in self.TENANT_HEADERS:
                if p.name.lower() not in existing:
                    params.append(p)

        return params
