# clinic_core/common/permissions.py
"""
Guard chain for every API request.

Installed as REST_FRAMEWORK["DEFAULT_PERMISSION_CLASSES"] in this order:

  1. AuthenticatedUnlessPublic  - subject verified by BearerSessionAuthentication
  2. TenantRequiredGuard        - resolved tenant present, active, and the subject's own
  3. HasRequiredPermissions     - every declared permission held
  4. HasRequiredFeatureFlags    - every declared feature flag enabled

DRF evaluates permission classes in order and stops at the first failure, so each
guard only runs when the previous ones passed. Metadata comes from
clinic_core.common.routing.
"""
from __future__ import annotations

import logging

from rest_framework.exceptions import APIException, NotAuthenticated, PermissionDenied
from rest_framework.permissions import BasePermission

from clinic_core.common import routing
from clinic_core.common.api.exceptions import TenantInactive, TenantRequired
from clinic_core.feature_flags.services import FeatureFlagService
from clinic_core.iam.services.permissions import PermissionService

logger = logging.getLogger(__name__)


def _is_authenticated(request) -> bool:
    user = getattr(request, "user", None)
    return bool(user and getattr(user, "is_authenticated", False))


def get_effective_permissions(request) -> set[str]:
    """
    Effective permission names of the request subject, computed once per request.
    Views use it for ownership (":own") filtering after the guard passed.
    """
    cached = getattr(request, "_effective_permissions", None)
    if cached is not None:
        return cached
    if not _is_authenticated(request):
        effective: set[str] = set()
    else:
        effective = PermissionService.get_effective_permissions(request.user.id)
    setattr(request, "_effective_permissions", effective)
    return effective


class GuardPermission(BasePermission):
    """
    Base for the guard chain.

    Subclasses implement check(). Expected denials are raised as APIExceptions and
    propagate untouched; anything else is logged and turned into a denial so a
    broken guard never surfaces as a 500.
    """

    def check(self, request, view) -> bool:  # pragma: no cover - abstract
        raise NotImplementedError

    def has_permission(self, request, view) -> bool:
        try:
            return self.check(request, view)
        except APIException:
            raise
        except Exception:
            logger.exception("Guard %s failed on %s %s", self.__class__.__name__, request.method, request.path)
            if not _is_authenticated(request):
                raise NotAuthenticated()
            raise PermissionDenied()


class AuthenticatedUnlessPublic(GuardPermission):
    message = "Authentication credentials were not provided."

    def check(self, request, view) -> bool:
        if routing.is_public(request, view):
            return True
        return _is_authenticated(request)


class TenantRequiredGuard(GuardPermission):
    def check(self, request, view) -> bool:
        if not routing.is_tenant_required(request, view):
            return True

        tenant = getattr(request, "tenant", None)
        if tenant is None:
            raise TenantRequired()
        if not tenant.is_active:
            raise TenantInactive()

        # Platform accounts (no tenant) may act inside any tenant.
        user = request.user
        if _is_authenticated(request):
            user_tenant_id = getattr(user, "tenant_id", None)
            if user_tenant_id is not None and str(user_tenant_id) != str(tenant.id):
                raise PermissionDenied("You do not have access to this tenant.")
        return True


class HasRequiredPermissions(GuardPermission):
    def check(self, request, view) -> bool:
        required = routing.required_permissions(request, view)
        if not required:
            return True
        if not _is_authenticated(request):
            raise NotAuthenticated()

        effective = get_effective_permissions(request)
        for name in required:
            if not PermissionService.permits(effective, name):
                raise PermissionDenied(f"Missing required permission: {name}")
        return True


class HasRequiredFeatureFlags(GuardPermission):
    def check(self, request, view) -> bool:
        required = routing.required_feature_flags(request, view)
        if not required:
            return True
        if not _is_authenticated(request):
            raise NotAuthenticated()

        enabled = set(FeatureFlagService.get_user_feature_flags(request.user.id))
        for key in required:
            if key not in enabled:
                raise PermissionDenied(f"Feature flag '{key}' is not enabled.")
        return True


def holds_permission(request, name: str) -> bool:
    """
    True when the subject holds `name` itself (not merely its ":own" form).
    Views call this to decide between tenant-wide and owner-only results.
    """
    return PermissionService.permits(get_effective_permissions(request), name)


def owner_scope(request, name: str):
    """
    None when the subject holds the unscoped `name` (tenant-wide access),
    otherwise the subject's id: ":own" holders only reach records they own.
    """
    if holds_permission(request, name):
        return None
    return request.user.id


class IsPlatformAccount(GuardPermission):
    """
    Appended after the guard chain on the global registries (tenants, roles and
    permissions, feature flags). A tenant-bound account never passes, whatever
    its role holds.
    """

    def check(self, request, view) -> bool:
        if not _is_authenticated(request):
            raise NotAuthenticated()
        if getattr(request.user, "tenant_id", None) is not None:
            raise PermissionDenied("Only platform accounts can manage this resource.")
        return True
