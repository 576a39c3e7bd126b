# clinic_core/iam/services/catalog.py
from __future__ import annotations

import logging
import re
from typing import Iterable, Optional
from uuid import UUID

from django.db import transaction
from django.utils.text import slugify
from rest_framework.exceptions import NotFound, ValidationError

from clinic_core.common.api.exceptions import ConflictError
from clinic_core.iam.models import Permission, Role, RolePermission, User
from clinic_core.common.utils import parse_uuid

logger = logging.getLogger(__name__)

PERMISSION_NAME_RE = re.compile(r"^[a-z][a-z0-9_]*\.[a-z][a-z0-9_]*(:own)?$")


def _get_role(role_id: str) -> Role:
    role = Role.objects.filter(id=role_id).first()
    if role is None:
        raise NotFound(f"Role '{role_id}' not found.")
    return role


def _get_permission(permission_id: UUID) -> Permission:
    pid = parse_uuid(permission_id)
    permission = Permission.objects.filter(id=pid).first() if pid is not None else None
    if permission is None:
        raise NotFound(f"Permission {permission_id} not found.")
    return permission


def _active_permissions(permission_ids: Iterable[UUID]) -> list[Permission]:
    ids = list(dict.fromkeys(permission_ids))
    found = list(Permission.objects.filter(id__in=ids, is_active=True))
    missing = sorted({str(i) for i in ids} - {str(p.id) for p in found})
    if missing:
        raise ValidationError({"permission_ids": f"Unknown or inactive permissions: {', '.join(missing)}"})
    return found


class CatalogService:
    """
    Write boundary for the permission catalog and roles.
    """

    @staticmethod
    @transaction.atomic
    def create_permission(*, name: str, description: str = "") -> Permission:
        name = (name or "").strip()
        if not PERMISSION_NAME_RE.match(name):
            raise ValidationError({"name": "Expected 'resource.action' or 'resource.action:own' (lowercase)."})
        if Permission.objects.filter(name=name).exists():
            raise ConflictError(f"Permission '{name}' already exists.")
        return Permission.objects.create(name=name, description=description or "")

    @staticmethod
    def deactivate_permission(*, permission_id: UUID) -> Permission:
        permission = _get_permission(permission_id)
        if permission.is_active:
            permission.is_active = False
            permission.save(update_fields=["is_active", "updated_at"])
            logger.info("Permission deactivated name=%s", permission.name)
        return permission

    @staticmethod
    @transaction.atomic
    def create_role(
        *,
        role_id: str,
        name: str,
        description: str = "",
        permission_ids: Optional[Iterable[UUID]] = None,
    ) -> Role:
        role_id = slugify(role_id or "")
        if not role_id:
            raise ValidationError({"id": "This field is required."})
        if Role.objects.filter(id=role_id).exists():
            raise ConflictError(f"Role '{role_id}' already exists.")

        permissions = _active_permissions(permission_ids or [])
        role = Role.objects.create(id=role_id, name=(name or role_id).strip(), description=description or "")
        RolePermission.objects.bulk_create([RolePermission(role=role, permission=p) for p in permissions])
        return role

    @staticmethod
    @transaction.atomic
    def assign_permissions(*, role_id: str, permission_ids: Iterable[UUID]) -> Role:
        """Replace the role's permission set."""
        role = _get_role(role_id)
        permissions = _active_permissions(permission_ids)

        RolePermission.objects.filter(role=role).delete()
        RolePermission.objects.bulk_create([RolePermission(role=role, permission=p) for p in permissions])
        logger.info("Role %s permissions replaced (%d)", role.id, len(permissions))
        return role

    @staticmethod
    def remove_permission(*, role_id: str, permission_id: UUID) -> None:
        role = _get_role(role_id)
        deleted, _ = RolePermission.objects.filter(role=role, permission_id=permission_id).delete()
        if not deleted:
            raise NotFound("Permission is not assigned to this role.")

    @staticmethod
    def deactivate_role(*, role_id: str) -> Role:
        role = _get_role(role_id)
        users = User.objects.filter(role=role).count()
        if users:
            raise ConflictError(f"Role '{role.id}' is assigned to {users} user(s).")
        if role.is_active:
            role.is_active = False
            role.save(update_fields=["is_active", "updated_at"])
        return role
