# clinic_core/tenants/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from clinic_core.tenants.models import Tenant


class TenantSerializer(serializers.ModelSerializer):
    class Meta:
        model = Tenant
        fields = [
            "id",
            "name",
            "subdomain",
            "slug",
            "is_active",
            "settings",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TenantCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    subdomain = serializers.CharField(max_length=63)
    slug = serializers.SlugField(max_length=64, required=False)
    is_active = serializers.BooleanField(required=False, default=True)
    settings = serializers.JSONField(required=False, default=dict)


class TenantUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    subdomain = serializers.CharField(max_length=63, required=False)
    slug = serializers.SlugField(max_length=64, required=False)
    is_active = serializers.BooleanField(required=False)
    settings = serializers.JSONField(required=False)


class TenantStatsSerializer(serializers.Serializer):
    tenant_id = serializers.UUIDField()
    active_users = serializers.IntegerField()
    active_patients = serializers.IntegerField()
    total_appointments = serializers.IntegerField()
    upcoming_appointments = serializers.IntegerField()
