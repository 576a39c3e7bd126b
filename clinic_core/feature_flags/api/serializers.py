# clinic_core/feature_flags/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from clinic_core.feature_flags.models import FeatureFlag, RoleFeatureFlag


class FeatureFlagSerializer(serializers.ModelSerializer):
    category = serializers.CharField(source="category.name", read_only=True, default=None)

    class Meta:
        model = FeatureFlag
        fields = [
            "id",
            "key",
            "name",
            "description",
            "is_active",
            "is_global",
            "category",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class FeatureFlagWriteSerializer(serializers.Serializer):
    key = serializers.RegexField(r"^[a-z][a-z0-9_]*$", max_length=128)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    is_active = serializers.BooleanField(required=False, default=True)
    is_global = serializers.BooleanField(required=False, default=False)
    category_id = serializers.UUIDField(required=False, allow_null=True, default=None)


class FeatureFlagUpdateSerializer(serializers.Serializer):
    key = serializers.RegexField(r"^[a-z][a-z0-9_]*$", max_length=128, required=False)
    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)
    is_global = serializers.BooleanField(required=False)
    category_id = serializers.UUIDField(required=False, allow_null=True)


class RoleAssignmentSerializer(serializers.Serializer):
    role_id = serializers.CharField(max_length=64)
    is_enabled = serializers.BooleanField(required=False, default=True)


class RoleUnassignSerializer(serializers.Serializer):
    role_id = serializers.CharField(max_length=64)


class BulkAssignSerializer(serializers.Serializer):
    role_id = serializers.CharField(max_length=64)
    flag_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    is_enabled = serializers.BooleanField(required=False, default=True)


class RoleFeatureFlagSerializer(serializers.ModelSerializer):
    key = serializers.CharField(source="feature_flag.key", read_only=True)
    feature_flag_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = RoleFeatureFlag
        fields = ["id", "role_id", "feature_flag_id", "key", "is_enabled", "updated_at"]
        read_only_fields = fields
