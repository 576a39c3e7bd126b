# clinic_core/feature_flags/services.py
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound, ValidationError

from clinic_core.common.api.exceptions import ConflictError
from clinic_core.common.utils import parse_uuid
from clinic_core.feature_flags.models import FeatureFlag, FeatureFlagCategory, RoleFeatureFlag
from clinic_core.feature_flags.selectors import get_feature_flag, get_feature_flag_by_key, role_assignments_qs
from clinic_core.iam.models import Role, User

logger = logging.getLogger(__name__)


def _get_role(role_id: str) -> Role:
    role = Role.objects.filter(id=role_id).first()
    if role is None:
        raise NotFound(f"Role '{role_id}' not found.")
    return role


def _get_category(category_id) -> Optional[FeatureFlagCategory]:
    if category_id is None:
        return None
    cid = parse_uuid(category_id)
    category = FeatureFlagCategory.objects.filter(id=cid).first() if cid is not None else None
    if category is None:
        raise NotFound(f"Feature flag category {category_id} not found.")
    return category


class FeatureFlagService:
    """
    Two-tier feature gate: a flag is on for a user when it is active and either
    global, or enabled for the user's role. There is no per-tenant override.
    """

    # ---- evaluation ----

    @staticmethod
    def get_user_feature_flags(user_id: UUID) -> list[str]:
        user = User.objects.select_related("role").filter(id=user_id).first()
        if user is None:
            raise NotFound("User not found.")

        keys = list(FeatureFlag.objects.filter(is_active=True, is_global=True).values_list("key", flat=True))

        if user.role is not None and user.role.is_active:
            keys.extend(
                RoleFeatureFlag.objects.filter(
                    role_id=user.role_id,
                    is_enabled=True,
                    feature_flag__is_active=True,
                ).values_list("feature_flag__key", flat=True)
            )

        return list(dict.fromkeys(keys))

    @staticmethod
    def has_feature_flag(user_id: UUID, key: str) -> bool:
        return key in FeatureFlagService.get_user_feature_flags(user_id)

    @staticmethod
    def is_feature_flag_enabled(key: str, role_id: Optional[str] = None) -> bool:
        flag = get_feature_flag_by_key(key=key)
        if flag is None or not flag.is_active:
            return False
        if flag.is_global:
            return True
        if not role_id:
            return False
        return RoleFeatureFlag.objects.filter(role_id=role_id, feature_flag=flag, is_enabled=True).exists()

    # ---- administration ----

    @staticmethod
    def create_category(*, name: str, description: str = "") -> FeatureFlagCategory:
        name = (name or "").strip()
        if not name:
            raise ValidationError({"name": "This field is required."})
        if FeatureFlagCategory.objects.filter(name=name).exists():
            raise ConflictError(f"Category '{name}' already exists.")
        return FeatureFlagCategory.objects.create(name=name, description=description or "")

    @staticmethod
    @transaction.atomic
    def create(
        *,
        key: str,
        name: str,
        description: str = "",
        is_active: bool = True,
        is_global: bool = False,
        category_id: Optional[UUID] = None,
    ) -> FeatureFlag:
        key = (key or "").strip()
        if not key:
            raise ValidationError({"key": "This field is required."})
        if FeatureFlag.objects.filter(key=key).exists():
            raise ConflictError(f"Feature flag with key '{key}' already exists.")

        flag = FeatureFlag.objects.create(
            key=key,
            name=(name or key).strip(),
            description=description or "",
            is_active=is_active,
            is_global=is_global,
            category=_get_category(category_id),
        )
        logger.info("Feature flag created key=%s global=%s", flag.key, flag.is_global)
        return flag

    @staticmethod
    @transaction.atomic
    def update(*, flag_id: UUID, data: dict[str, Any]) -> FeatureFlag:
        flag = get_feature_flag(flag_id=flag_id)

        if "key" in data and data["key"] != flag.key:
            key = (data["key"] or "").strip()
            if not key:
                raise ValidationError({"key": "This field may not be blank."})
            if FeatureFlag.objects.filter(key=key).exclude(id=flag.id).exists():
                raise ConflictError(f"Feature flag with key '{key}' already exists.")
            flag.key = key

        for field in ("name", "description", "is_active", "is_global"):
            if field in data:
                setattr(flag, field, data[field])

        if "category_id" in data:
            flag.category = _get_category(data["category_id"])

        flag.save()
        return flag

    @staticmethod
    def delete(*, flag_id: UUID) -> None:
        flag = get_feature_flag(flag_id=flag_id)
        flag.delete()
        logger.info("Feature flag deleted key=%s", flag.key)

    @staticmethod
    def assign_to_role(*, role_id: str, flag_id: UUID, is_enabled: bool = True) -> RoleFeatureFlag:
        role = _get_role(role_id)
        flag = get_feature_flag(flag_id=flag_id)

        assignment, _ = RoleFeatureFlag.objects.update_or_create(
            role=role,
            feature_flag=flag,
            defaults={"is_enabled": is_enabled},
        )
        return assignment

    @staticmethod
    @transaction.atomic
    def bulk_assign_to_role(
        *,
        role_id: str,
        flag_ids: Iterable[UUID],
        is_enabled: bool = True,
    ) -> list[RoleFeatureFlag]:
        role = _get_role(role_id)

        requested = list(dict.fromkeys(str(i) for i in flag_ids))
        parsed = [parse_uuid(i) for i in requested]
        flags = list(FeatureFlag.objects.filter(id__in=[p for p in parsed if p is not None]))
        found = {f.id for f in flags}
        missing = [raw for raw, fid in zip(requested, parsed) if fid is None or fid not in found]
        if missing:
            raise NotFound(f"Feature flags not found: {', '.join(missing)}")

        assignments = []
        for flag in flags:
            assignment, _ = RoleFeatureFlag.objects.update_or_create(
                role=role,
                feature_flag=flag,
                defaults={"is_enabled": is_enabled},
            )
            assignments.append(assignment)
        logger.info("Role %s: %d feature flags set is_enabled=%s", role.id, len(assignments), is_enabled)
        return assignments

    @staticmethod
    def remove_from_role(*, role_id: str, flag_id: UUID) -> None:
        fid = parse_uuid(flag_id)
        deleted = 0
        if fid is not None:
            deleted, _ = RoleFeatureFlag.objects.filter(role_id=role_id, feature_flag_id=fid).delete()
        if not deleted:
            raise NotFound("Feature flag is not assigned to this role.")

    @staticmethod
    def get_role_feature_flags(*, role_id: str) -> QuerySet[RoleFeatureFlag]:
        _get_role(role_id)
        return role_assignments_qs(role_id=role_id)
