from __future__ import annotations

from django.conf import settings
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from clinic_core.common.api.exceptions import BadRequest, build_error_envelope
from clinic_core.tenants.resolver import TENANT_ID_HEADER, TENANT_SUBDOMAIN_HEADER, resolve_tenant


class TenantContextMiddleware(MiddlewareMixin):
    """
    Resolves the tenant for every API request.

    Behavior:
      - Runs for both /api/v1/* and /api/* (alias); other paths are left alone.
      - Health, login, register, tenant administration, docs and schema
        are bypassed (no resolution at all).
      - Unresolvable explicit signal (header, query param) -> 400 envelope.
      - No signal at all -> request.tenant is None; routes that need a tenant
        are rejected later by TenantRequiredGuard.
      - On success -> attaches request.tenant (TenantContext) and request.tenant_id,
        and echoes X-Tenant-ID / X-Tenant-Subdomain on the response.
    """

    API_PREFIXES = ("/api/v1/", "/api/")

    BYPASS_SUFFIXES = (
        "health/",
        "auth/login/",
        "auth/register/",
        "auth/refresh/",
        "tenants/",
        "schema/",
        "docs/",
    )

    def _is_api_path(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.API_PREFIXES)

    def _is_bypassed(self, path: str) -> bool:
        if not self._is_api_path(path):
            return True
        for prefix in self.API_PREFIXES:
            if path.startswith(prefix):
                rest = path[len(prefix):]
                return any(rest.startswith(s) for s in self.BYPASS_SUFFIXES)
        return False

    def _json_error(self, request, *, status_code: int, code: str, message: str, details=None) -> JsonResponse:
        return JsonResponse(
            build_error_envelope(
                request=request,
                code=code,
                message=message,
                details=details,
            ),
            status=status_code,
        )

    def process_request(self, request):
        request.tenant = None
        request.tenant_id = None

        path = getattr(request, "path", "") or ""
        if self._is_bypassed(path):
            return None

        try:
            tenant = resolve_tenant(
                request,
                allow_query_param=getattr(settings, "TENANT_QUERY_PARAM_ENABLED", False),
            )
        except BadRequest as exc:
            return self._json_error(
                request,
                status_code=exc.status_code,
                code=exc.default_code,
                message=str(exc.detail),
            )

        if tenant is not None:
            request.tenant = tenant
            request.tenant_id = tenant.id
        return None

    def process_response(self, request, response):
        tenant = getattr(request, "tenant", None)
        if tenant is not None:
            response[TENANT_ID_HEADER] = str(tenant.id)
            response[TENANT_SUBDOMAIN_HEADER] = tenant.subdomain
        return response
