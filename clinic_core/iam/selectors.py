# clinic_core/iam/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from clinic_core.iam.models import Permission, Role


def permission_qs(*, include_inactive: bool = True) -> QuerySet[Permission]:
    qs = Permission.objects.all()
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs.order_by("name")


def role_qs() -> QuerySet[Role]:
    return Role.objects.prefetch_related("permissions").order_by("id")

