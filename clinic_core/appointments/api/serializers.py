# clinic_core/appointments/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from clinic_core.appointments.lifecycle import AppointmentStatus
from clinic_core.appointments.models import Appointment


class AppointmentSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source="patient.name", read_only=True)
    veterinarian_name = serializers.CharField(source="veterinarian.name", read_only=True)

    class Meta:
        model = Appointment
        fields = [
            "id",
            "tenant_id",
            "patient_id",
            "patient_name",
            "veterinarian_id",
            "veterinarian_name",
            "scheduled_at",
            "duration_minutes",
            "reason",
            "notes",
            "estimated_cost",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AppointmentCreateSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    veterinarian_id = serializers.UUIDField()
    scheduled_at = serializers.DateTimeField()
    duration_minutes = serializers.IntegerField(required=False, default=30)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    estimated_cost = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)


class AppointmentUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH). Status is changed through /status/ and /cancel/.
    """
    veterinarian_id = serializers.UUIDField(required=False)
    scheduled_at = serializers.DateTimeField(required=False)
    duration_minutes = serializers.IntegerField(required=False)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    estimated_cost = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.CharField()

    def validate_status(self, value: str) -> str:
        # clients historically send "in-progress" / "no-show"
        normalized = (value or "").strip().lower().replace("-", "_")
        if normalized not in AppointmentStatus.values:
            raise serializers.ValidationError(f"Invalid status. Allowed: {list(AppointmentStatus.values)}")
        return normalized


class AppointmentFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=AppointmentStatus.choices, required=False)
    patient_id = serializers.UUIDField(required=False)
    veterinarian_id = serializers.UUIDField(required=False)
    date_from = serializers.DateTimeField(required=False)
    date_to = serializers.DateTimeField(required=False)
