# clinic_core/feature_flags/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from clinic_core.common.utils import parse_uuid
from clinic_core.feature_flags.models import FeatureFlag, RoleFeatureFlag


def feature_flag_qs() -> QuerySet[FeatureFlag]:
    return FeatureFlag.objects.select_related("category").order_by("key")


def get_feature_flag(*, flag_id: UUID) -> FeatureFlag:
    fid = parse_uuid(flag_id)
    flag = feature_flag_qs().filter(id=fid).first() if fid is not None else None
    if flag is None:
        raise NotFound(f"Feature flag {flag_id} not found.")
    return flag


def get_feature_flag_by_key(*, key: str) -> FeatureFlag | None:
    return FeatureFlag.objects.filter(key=key).first()


def role_assignments_qs(*, role_id: str) -> QuerySet[RoleFeatureFlag]:
    return (
        RoleFeatureFlag.objects.select_related("feature_flag", "feature_flag__category")
        .filter(role_id=role_id)
        .order_by("feature_flag__key")
    )
