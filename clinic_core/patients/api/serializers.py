# clinic_core/patients/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from clinic_core.patients.models import Patient


class PatientCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    species = serializers.CharField(max_length=64)
    breed = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    owner_id = serializers.UUIDField(required=False, allow_null=True)


class PatientUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH).
    """
    name = serializers.CharField(max_length=255, required=False)
    species = serializers.CharField(max_length=64, required=False)
    breed = serializers.CharField(max_length=128, required=False, allow_blank=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    owner_id = serializers.UUIDField(required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class PatientSerializer(serializers.ModelSerializer):
    class Meta:
        model = Patient
        fields = [
            "id",
            "tenant_id",
            "owner_id",
            "name",
            "species",
            "breed",
            "date_of_birth",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
