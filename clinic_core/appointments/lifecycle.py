# clinic_core/appointments/lifecycle.py
"""
Appointment lifecycle rules.

  scheduled -> confirmed -> in_progress -> completed
  scheduled | confirmed -> cancelled
  any open state -> no_show

Only one rule is hard-wired for general status changes: once an appointment is
terminal (completed, cancelled, no_show) it can never be reopened. Cancellation
has its own, stricter rule.
"""
from __future__ import annotations

from django.db import models
from rest_framework import status
from rest_framework.exceptions import APIException


class AppointmentStatus(models.TextChoices):
    SCHEDULED = "scheduled", "Scheduled"
    CONFIRMED = "confirmed", "Confirmed"
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
    NO_SHOW = "no_show", "No show"


TERMINAL_STATES = frozenset(s.value for s in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW))
OPEN_STATES = frozenset(s.value for s in (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED, AppointmentStatus.IN_PROGRESS))
CANCELLABLE_STATES = frozenset(s.value for s in (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED))


class InvalidStatusTransition(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Invalid status transition."
    default_code = "invalid_transition"

    def __init__(self, from_status: str, to_status: str):
        self.from_status = str(from_status)
        self.to_status = str(to_status)
        super().__init__(
            detail=f"Cannot change appointment status from '{self.from_status}' to '{self.to_status}'.",
            code=self.default_code,
        )


def check_transition(current: str, target: str) -> None:
    """Raise InvalidStatusTransition when `target` would reopen a terminal appointment."""
    current, target = str(current), str(target)
    if current in TERMINAL_STATES and target in OPEN_STATES:
        raise InvalidStatusTransition(current, target)


def check_cancellation(current: str) -> None:
    current = str(current)
    if current not in CANCELLABLE_STATES:
        raise InvalidStatusTransition(current, AppointmentStatus.CANCELLED.value)
