# clinic_core/tenants/services.py
from __future__ import annotations

import logging
import re
from typing import Any, Optional
from uuid import UUID

from django.conf import settings as django_settings
from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify
from rest_framework.exceptions import ValidationError

from clinic_core.appointments.lifecycle import AppointmentStatus
from clinic_core.appointments.models import Appointment
from clinic_core.common.api.exceptions import ConflictError
from clinic_core.iam.models import User
from clinic_core.patients.models import Patient
from clinic_core.tenants.models import Tenant
from clinic_core.tenants.selectors import get_tenant, get_tenant_by_slug

logger = logging.getLogger(__name__)

SUBDOMAIN_RE = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")


def _clean_subdomain(value: str) -> str:
    subdomain = (value or "").strip()
    if not subdomain:
        raise ValidationError({"subdomain": "This field is required."})
    if not SUBDOMAIN_RE.match(subdomain):
        raise ValidationError({"subdomain": "Must be a lowercase DNS label (a-z, 0-9 and '-')."})
    if subdomain in getattr(django_settings, "TENANT_RESERVED_SUBDOMAINS", ()):
        raise ValidationError({"subdomain": f"'{subdomain}' is reserved."})
    return subdomain


def _clean_slug(value: str) -> str:
    slug = slugify(value or "")
    if not slug:
        raise ValidationError({"slug": "This field is required."})
    return slug


class TenantService:
    """
    All Tenant mutations live here (write-model boundary).
    """

    @staticmethod
    @transaction.atomic
    def create(
        *,
        name: str,
        subdomain: str,
        slug: Optional[str] = None,
        settings: Optional[dict] = None,
        is_active: bool = True,
    ) -> Tenant:
        name = (name or "").strip()
        if not name:
            raise ValidationError({"name": "This field is required."})

        subdomain = _clean_subdomain(subdomain)
        slug = _clean_slug(slug or subdomain)

        if Tenant.objects.filter(subdomain=subdomain).exists():
            raise ConflictError(f"Tenant with subdomain '{subdomain}' already exists.")
        if get_tenant_by_slug(slug=slug) is not None:
            raise ConflictError(f"Tenant with slug '{slug}' already exists.")

        tenant = Tenant.objects.create(
            name=name,
            subdomain=subdomain,
            slug=slug,
            is_active=is_active,
            settings=settings or {},
        )
        logger.info("Tenant created id=%s subdomain=%s", tenant.id, tenant.subdomain)
        return tenant

    @staticmethod
    @transaction.atomic
    def update(*, tenant_id: UUID, data: dict[str, Any]) -> Tenant:
        tenant = get_tenant(tenant_id=tenant_id)
        tenant = Tenant.objects.select_for_update().get(id=tenant.id)
        fields: list[str] = []

        if "name" in data:
            name = (data.get("name") or "").strip()
            if not name:
                raise ValidationError({"name": "This field may not be blank."})
            tenant.name = name
            fields.append("name")

        if "subdomain" in data and data["subdomain"] != tenant.subdomain:
            subdomain = _clean_subdomain(data["subdomain"])
            if Tenant.objects.filter(subdomain=subdomain).exclude(id=tenant.id).exists():
                raise ConflictError(f"Tenant with subdomain '{subdomain}' already exists.")
            tenant.subdomain = subdomain
            fields.append("subdomain")

        if "slug" in data and data["slug"] != tenant.slug:
            slug = _clean_slug(data["slug"])
            if Tenant.objects.filter(slug=slug).exclude(id=tenant.id).exists():
                raise ConflictError(f"Tenant with slug '{slug}' already exists.")
            tenant.slug = slug
            fields.append("slug")

        if "settings" in data:
            value = data.get("settings")
            if value is None or not isinstance(value, dict):
                raise ValidationError({"settings": "Must be a JSON object."})
            tenant.settings = value
            fields.append("settings")

        if "is_active" in data:
            tenant.is_active = bool(data["is_active"])
            fields.append("is_active")

        if fields:
            tenant.save(update_fields=[*fields, "updated_at"])
        return tenant

    @staticmethod
    @transaction.atomic
    def set_active(*, tenant_id: UUID, is_active: bool) -> Tenant:
        get_tenant(tenant_id=tenant_id)
        tenant = Tenant.objects.select_for_update().get(id=tenant_id)

        # idempotent no-op
        if tenant.is_active == is_active:
            return tenant

        tenant.is_active = is_active
        tenant.save(update_fields=["is_active", "updated_at"])
        logger.info("Tenant %s id=%s", "activated" if is_active else "deactivated", tenant.id)
        return tenant

    @staticmethod
    def activate(*, tenant_id: UUID) -> Tenant:
        return TenantService.set_active(tenant_id=tenant_id, is_active=True)

    @staticmethod
    def deactivate(*, tenant_id: UUID) -> Tenant:
        return TenantService.set_active(tenant_id=tenant_id, is_active=False)

    @staticmethod
    @transaction.atomic
    def delete(*, tenant_id: UUID) -> None:
        tenant = get_tenant(tenant_id=tenant_id)

        users = User.objects.filter(tenant_id=tenant.id).count()
        patients = Patient.objects.filter(tenant_id=tenant.id).count()
        appointments = Appointment.objects.filter(tenant_id=tenant.id).count()
        if users or patients or appointments:
            raise ConflictError(
                "Cannot delete tenant with existing data. Deactivate it instead. "
                f"(users={users}, patients={patients}, appointments={appointments})"
            )

        tenant.delete()
        logger.info("Tenant deleted id=%s", tenant_id)

    @staticmethod
    def get_stats(*, tenant_id: UUID) -> dict[str, Any]:
        tenant = get_tenant(tenant_id=tenant_id)
        now = timezone.now()
        upcoming = Appointment.objects.filter(
            tenant_id=tenant.id,
            scheduled_at__gte=now,
            status__in=[AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED],
        )
        return {
            "tenant_id": tenant.id,
            "active_users": User.objects.filter(tenant_id=tenant.id, is_active=True).count(),
            "active_patients": Patient.objects.filter(tenant_id=tenant.id, is_active=True).count(),
            "total_appointments": Appointment.objects.filter(tenant_id=tenant.id).count(),
            "upcoming_appointments": upcoming.count(),
        }
