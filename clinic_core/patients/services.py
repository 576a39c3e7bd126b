# clinic_core/patients/services.py
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from rest_framework.exceptions import ValidationError

from clinic_core.iam.models import User
from clinic_core.patients.models import Patient
from clinic_core.patients.selectors import get_patient

logger = logging.getLogger(__name__)


def _owner_in_tenant(*, tenant_id: UUID, owner_id: Optional[UUID]) -> Optional[User]:
    if owner_id is None:
        return None
    owner = User.objects.filter(id=owner_id, tenant_id=tenant_id).first()
    if owner is None:
        raise ValidationError({"owner_id": "Owner must be a user of this clinic."})
    return owner


class PatientService:
    @staticmethod
    @transaction.atomic
    def create_patient(
        *,
        tenant_id: UUID,
        name: str,
        species: str,
        owner_id: Optional[UUID] = None,
        breed: str = "",
        date_of_birth=None,
    ) -> Patient:
        patient = Patient.objects.create(
            tenant_id=tenant_id,
            owner=_owner_in_tenant(tenant_id=tenant_id, owner_id=owner_id),
            name=name,
            species=species,
            breed=breed or "",
            date_of_birth=date_of_birth,
        )
        logger.info("Patient created id=%s tenant=%s", patient.id, tenant_id)
        return patient

    @staticmethod
    @transaction.atomic
    def update_patient(
        *,
        tenant_id: UUID,
        patient_id: UUID,
        data: dict,
        owner_scope: Optional[UUID] = None,
    ) -> Patient:
        patient = get_patient(tenant_id=tenant_id, patient_id=patient_id, owner_id=owner_scope)

        allowed = {"name", "species", "breed", "date_of_birth"}
        updates = {k: v for k, v in (data or {}).items() if k in allowed}

        if "owner_id" in (data or {}):
            if owner_scope is not None:
                raise ValidationError({"owner_id": "You cannot reassign the owner of this patient."})
            patient.owner = _owner_in_tenant(tenant_id=tenant_id, owner_id=data["owner_id"])

        for k, v in updates.items():
            setattr(patient, k, v)

        patient.save()
        return patient

    @staticmethod
    def deactivate_patient(*, tenant_id: UUID, patient_id: UUID) -> Patient:
        patient = get_patient(tenant_id=tenant_id, patient_id=patient_id)
        if patient.is_active:
            patient.is_active = False
            patient.save(update_fields=["is_active", "updated_at"])
            logger.info("Patient deactivated id=%s tenant=%s", patient.id, tenant_id)
        return patient
