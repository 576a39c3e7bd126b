# clinic_core/patients/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.db.models import Q, QuerySet
from rest_framework.exceptions import NotFound

from clinic_core.common.utils import parse_uuid
from clinic_core.patients.models import Patient


def search_patients(
    *,
    tenant_id: UUID,
    q: str | None = None,
    owner_id: Optional[UUID] = None,
    include_inactive: bool = False,
) -> QuerySet[Patient]:
    qs = Patient.objects.select_related("owner").filter(tenant_id=tenant_id)

    if owner_id is not None:
        qs = qs.filter(owner_id=owner_id)
    if not include_inactive:
        qs = qs.filter(is_active=True)

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(Q(name__icontains=qv) | Q(species__icontains=qv) | Q(breed__icontains=qv))

    return qs.order_by("-created_at")


def get_patient(*, tenant_id: UUID, patient_id, owner_id: Optional[UUID] = None) -> Patient:
    """
    Tenant-scoped lookup. With owner_id the patient must also belong to that owner;
    a patient outside the caller's reach is reported as missing, never as forbidden.
    """
    pid = parse_uuid(patient_id)
    qs = Patient.objects.select_related("owner").filter(tenant_id=tenant_id, id=pid) if pid else Patient.objects.none()
    if owner_id is not None:
        qs = qs.filter(owner_id=owner_id)
    patient = qs.first()
    if patient is None:
        raise NotFound("Patient not found.")
    return patient
