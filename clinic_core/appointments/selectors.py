# clinic_core/appointments/selectors.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from django.db.models import Q, QuerySet
from rest_framework.exceptions import NotFound, ValidationError

from clinic_core.appointments.models import Appointment
from clinic_core.common.utils import parse_uuid


def _owned_by(user_id: UUID) -> Q:
    # the treating veterinarian, or the customer who owns the animal
    return Q(veterinarian_id=user_id) | Q(patient__owner_id=user_id)


def search_appointments(
    *,
    tenant_id: UUID,
    owner_id: Optional[UUID] = None,
    status: Optional[str] = None,
    patient_id: Optional[UUID] = None,
    veterinarian_id: Optional[UUID] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> QuerySet[Appointment]:
    if date_from and date_to and date_from > date_to:
        raise ValidationError({"date_from": "Start date cannot be after end date."})

    qs = Appointment.objects.select_related("patient", "veterinarian").filter(tenant_id=tenant_id)

    if owner_id is not None:
        qs = qs.filter(_owned_by(owner_id))
    if status:
        qs = qs.filter(status=status)
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    if veterinarian_id:
        qs = qs.filter(veterinarian_id=veterinarian_id)
    if date_from:
        qs = qs.filter(scheduled_at__gte=date_from)
    if date_to:
        qs = qs.filter(scheduled_at__lte=date_to)

    return qs.order_by("scheduled_at")


def get_appointment(*, tenant_id: UUID, appointment_id, owner_id: Optional[UUID] = None) -> Appointment:
    aid = parse_uuid(appointment_id)
    if aid is None:
        raise NotFound("Appointment not found.")

    qs = Appointment.objects.select_related("patient", "veterinarian").filter(tenant_id=tenant_id, id=aid)
    if owner_id is not None:
        qs = qs.filter(_owned_by(owner_id))

    appointment = qs.first()
    if appointment is None:
        raise NotFound("Appointment not found.")
    return appointment
