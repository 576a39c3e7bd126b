# clinic_core/appointments/services.py
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from clinic_core.appointments.lifecycle import AppointmentStatus, check_cancellation, check_transition
from clinic_core.appointments.models import Appointment
from clinic_core.appointments.selectors import get_appointment
from clinic_core.common.api.exceptions import BadRequest
from clinic_core.iam.models import User
from clinic_core.patients.models import Patient

logger = logging.getLogger(__name__)


def _validate_schedule(*, scheduled_at: datetime, duration_minutes: int) -> None:
    if duration_minutes is None or duration_minutes <= 0:
        raise BadRequest("Duration must be positive.")
    if scheduled_at < timezone.now():
        raise BadRequest("Scheduled date cannot be in the past.")


def _patient_in_tenant(*, tenant_id: UUID, patient_id: UUID, owner_id: Optional[UUID]) -> Patient:
    qs = Patient.objects.filter(tenant_id=tenant_id, id=patient_id, is_active=True)
    if owner_id is not None:
        qs = qs.filter(owner_id=owner_id)
    patient = qs.first()
    if patient is None:
        raise ValidationError({"patient_id": "Unknown patient."})
    return patient


def _veterinarian_in_tenant(*, tenant_id: UUID, veterinarian_id: UUID) -> User:
    vet = User.objects.filter(tenant_id=tenant_id, id=veterinarian_id, is_active=True).first()
    if vet is None:
        raise ValidationError({"veterinarian_id": "Unknown veterinarian."})
    return vet


class AppointmentService:
    """
    All Appointment mutations. Status changes are checked against lifecycle.py.
    """

    @staticmethod
    @transaction.atomic
    def create(
        *,
        tenant_id: UUID,
        patient_id: UUID,
        veterinarian_id: UUID,
        scheduled_at: datetime,
        duration_minutes: int = 30,
        reason: str = "",
        notes: str = "",
        estimated_cost: Optional[Decimal] = None,
        patient_owner_id: Optional[UUID] = None,
    ) -> Appointment:
        _validate_schedule(scheduled_at=scheduled_at, duration_minutes=duration_minutes)

        appointment = Appointment.objects.create(
            tenant_id=tenant_id,
            patient=_patient_in_tenant(tenant_id=tenant_id, patient_id=patient_id, owner_id=patient_owner_id),
            veterinarian=_veterinarian_in_tenant(tenant_id=tenant_id, veterinarian_id=veterinarian_id),
            scheduled_at=scheduled_at,
            duration_minutes=duration_minutes,
            reason=reason or "",
            notes=notes or "",
            estimated_cost=estimated_cost,
            status=AppointmentStatus.SCHEDULED,
        )
        logger.info("Appointment created id=%s tenant=%s", appointment.id, tenant_id)
        return appointment

    @staticmethod
    @transaction.atomic
    def update(
        *,
        tenant_id: UUID,
        appointment_id: UUID,
        data: dict,
        owner_scope: Optional[UUID] = None,
    ) -> Appointment:
        appointment = get_appointment(tenant_id=tenant_id, appointment_id=appointment_id, owner_id=owner_scope)

        if appointment.status == AppointmentStatus.COMPLETED:
            raise BadRequest("Cannot update completed appointment.")

        allowed = {"scheduled_at", "duration_minutes", "reason", "notes", "estimated_cost"}
        updates = {k: v for k, v in (data or {}).items() if k in allowed}

        if "scheduled_at" in updates and updates["scheduled_at"] < timezone.now():
            raise BadRequest("Scheduled date cannot be in the past.")
        if "duration_minutes" in updates and updates["duration_minutes"] <= 0:
            raise BadRequest("Duration must be positive.")

        if "veterinarian_id" in (data or {}):
            appointment.veterinarian = _veterinarian_in_tenant(
                tenant_id=tenant_id,
                veterinarian_id=data["veterinarian_id"],
            )

        for k, v in updates.items():
            setattr(appointment, k, v)

        appointment.save()
        return appointment

    @staticmethod
    @transaction.atomic
    def change_status(
        *,
        tenant_id: UUID,
        appointment_id: UUID,
        status: str,
        owner_scope: Optional[UUID] = None,
    ) -> Appointment:
        if status not in AppointmentStatus.values:
            raise ValidationError({"status": f"Invalid status. Allowed: {list(AppointmentStatus.values)}"})

        appointment = get_appointment(tenant_id=tenant_id, appointment_id=appointment_id, owner_id=owner_scope)
        appointment = Appointment.objects.select_for_update().get(id=appointment.id)

        check_transition(appointment.status, status)
        if status == AppointmentStatus.CANCELLED:
            check_cancellation(appointment.status)

        # idempotent no-op
        if appointment.status == status:
            return appointment

        previous = appointment.status
        appointment.status = status
        appointment.save(update_fields=["status", "updated_at"])
        logger.info("Appointment %s status %s -> %s", appointment.id, previous, status)
        return appointment

    @staticmethod
    @transaction.atomic
    def cancel(*, tenant_id: UUID, appointment_id: UUID, owner_scope: Optional[UUID] = None) -> Appointment:
        appointment = get_appointment(tenant_id=tenant_id, appointment_id=appointment_id, owner_id=owner_scope)
        appointment = Appointment.objects.select_for_update().get(id=appointment.id)

        check_cancellation(appointment.status)

        appointment.status = AppointmentStatus.CANCELLED
        appointment.save(update_fields=["status", "updated_at"])
        logger.info("Appointment %s cancelled", appointment.id)
        return appointment
