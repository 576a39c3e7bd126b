# clinic_core/appointments/models.py
from django.core.validators import MinValueValidator
from django.db import models

from clinic_core.appointments.lifecycle import AppointmentStatus
from clinic_core.common.models import TenantScopedModel


class Appointment(TenantScopedModel):
    """
    A visit of one patient with one veterinarian.
    status changes go through AppointmentService (see lifecycle.py).
    """
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="appointments")
    veterinarian = models.ForeignKey("iam.User", on_delete=models.PROTECT, related_name="appointments")

    scheduled_at = models.DateTimeField(db_index=True)
    duration_minutes = models.PositiveIntegerField(default=30, validators=[MinValueValidator(1)])

    reason = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    estimated_cost = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    status = models.CharField(
        max_length=16,
        choices=AppointmentStatus.choices,
        default=AppointmentStatus.SCHEDULED,
        db_index=True,
    )

    class Meta:
        db_table = "appointments_appointment"
        constraints = [
            models.CheckConstraint(condition=models.Q(duration_minutes__gt=0), name="ck_appointment_duration_positive"),
        ]
        indexes = [
            models.Index(fields=["tenant", "scheduled_at"]),
            models.Index(fields=["tenant", "status"]),
            models.Index(fields=["tenant", "veterinarian"]),
        ]

    def __str__(self) -> str:
        return f"{self.patient_id} @ {self.scheduled_at:%Y-%m-%d %H:%M} ({self.status})"
