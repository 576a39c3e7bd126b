# clinic_core/common/routing.py
"""
Route metadata read by the guard chain in clinic_core.common.permissions.

Views declare metadata as class attributes:

    class PatientViewSet(viewsets.ModelViewSet):
        tenant_required = True
        required_permissions = ["patients.read:own"]

Individual handlers (ViewSet actions or APIView method handlers) can override
the class with the decorators below. Handler-level metadata wins.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable

PUBLIC_ATTR = "public"
TENANT_REQUIRED_ATTR = "tenant_required"
PERMISSIONS_ATTR = "required_permissions"
FEATURE_FLAGS_ATTR = "required_feature_flags"

_MISSING = object()


def public(func: Callable) -> Callable:
    setattr(func, PUBLIC_ATTR, True)
    return func


def tenant_required(required: bool = True):
    def decorator(func: Callable) -> Callable:
        setattr(func, TENANT_REQUIRED_ATTR, bool(required))
        return func
    return decorator


def requires_permissions(*names: str):
    def decorator(func: Callable) -> Callable:
        setattr(func, PERMISSIONS_ATTR, list(names))
        return func
    return decorator


def requires_feature_flags(*keys: str):
    def decorator(func: Callable) -> Callable:
        setattr(func, FEATURE_FLAGS_ATTR, list(keys))
        return func
    return decorator


def _handler_for(request, view) -> Callable | None:
    # ViewSets expose the routed action name, APIViews dispatch on the HTTP method.
    action = getattr(view, "action", None)
    if action:
        handler = getattr(view, action, None)
        if handler is not None:
            return handler
    method = (getattr(request, "method", "") or "").lower()
    if method:
        return getattr(view, method, None)
    return None


def route_metadata(request, view, attr: str, default: Any = None) -> Any:
    handler = _handler_for(request, view)
    if handler is not None:
        value = getattr(handler, attr, _MISSING)
        if value is not _MISSING:
            return value
    return getattr(view, attr, default)


def is_public(request, view) -> bool:
    return bool(route_metadata(request, view, PUBLIC_ATTR, False))


def is_tenant_required(request, view) -> bool:
    return bool(route_metadata(request, view, TENANT_REQUIRED_ATTR, False))


def required_permissions(request, view) -> list[str]:
    return _as_list(route_metadata(request, view, PERMISSIONS_ATTR, None))


def required_feature_flags(request, view) -> list[str]:
    return _as_list(route_metadata(request, view, FEATURE_FLAGS_ATTR, None))


def _as_list(value: Iterable[str] | str | None) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [v for v in value if v]
