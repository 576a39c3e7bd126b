# clinic_core/iam/services/permissions.py
from __future__ import annotations

from typing import Iterable
from uuid import UUID

from clinic_core.iam.models import OWN_SUFFIX, SYSTEM_ADMIN, Permission, RolePermission, User


class PermissionService:
    """
    Permission evaluation.

    Rules:
      - a user holds the active permissions assigned to their (active) role
      - "system.admin" expands to every active permission in the catalog
      - "resource.action" also satisfies "resource.action:own"; never the reverse
    """

    @staticmethod
    def get_effective_permissions(user_id: UUID) -> set[str]:
        user = User.objects.select_related("role").filter(id=user_id).first()
        if user is None or user.role is None or not user.role.is_active:
            return set()

        names = set(
            RolePermission.objects.filter(role_id=user.role_id, permission__is_active=True)
            .values_list("permission__name", flat=True)
        )

        if SYSTEM_ADMIN in names:
            names = set(Permission.objects.filter(is_active=True).values_list("name", flat=True))
            names.add(SYSTEM_ADMIN)
        return names

    @staticmethod
    def permits(effective: Iterable[str], required: str) -> bool:
        held = effective if isinstance(effective, (set, frozenset)) else set(effective)
        if SYSTEM_ADMIN in held or required in held:
            return True
        if required.endswith(OWN_SUFFIX):
            return required[: -len(OWN_SUFFIX)] in held
        return False

    @staticmethod
    def has_permission(user_id: UUID, required: str) -> bool:
        return PermissionService.permits(PermissionService.get_effective_permissions(user_id), required)
