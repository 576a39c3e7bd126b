# clinic_core/iam/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from clinic_core.iam.models import Permission, Role, User


class RegisterRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True, trim_whitespace=False)
    name = serializers.CharField(required=False, allow_blank=True, default="")
    role_id = serializers.CharField(max_length=64)
    tenant_id = serializers.UUIDField()


class LoginRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    # tenant UUID or subdomain; needed when the email exists in several tenants
    tenant = serializers.CharField(required=False, allow_blank=True)


class RefreshRequestSerializer(serializers.Serializer):
    refresh_token = serializers.CharField()


class TenantMiniSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    subdomain = serializers.CharField()


class RoleMiniSerializer(serializers.ModelSerializer):
    class Meta:
        model = Role
        fields = ["id", "name"]


class UserSerializer(serializers.ModelSerializer):
    role = RoleMiniSerializer(read_only=True)
    tenant = TenantMiniSerializer(read_only=True, allow_null=True)

    class Meta:
        model = User
        fields = ["id", "email", "name", "is_active", "role", "tenant", "last_login_at", "created_at"]
        read_only_fields = fields


class SessionResponseSerializer(serializers.Serializer):
    access_token = serializers.CharField()
    refresh_token = serializers.CharField()
    token_type = serializers.CharField()
    expires_in = serializers.IntegerField()
    user = UserSerializer()


class LogoutResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class TenantContextSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    subdomain = serializers.CharField()
    slug = serializers.CharField()
    is_active = serializers.BooleanField()


class MeResponseSerializer(serializers.Serializer):
    user = UserSerializer()
    tenant = TenantContextSerializer(allow_null=True, required=False)
    permissions = serializers.ListField(child=serializers.CharField())
    feature_flags = serializers.ListField(child=serializers.CharField())


class PermissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Permission
        fields = ["id", "name", "description", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "is_active", "created_at", "updated_at"]


class RoleSerializer(serializers.ModelSerializer):
    permissions = serializers.SlugRelatedField(many=True, read_only=True, slug_field="name")

    class Meta:
        model = Role
        fields = ["id", "name", "description", "is_active", "permissions", "created_at", "updated_at"]
        read_only_fields = fields


class RoleCreateSerializer(serializers.Serializer):
    id = serializers.SlugField(max_length=64)
    name = serializers.CharField(max_length=128)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    permission_ids = serializers.ListField(child=serializers.UUIDField(), required=False, default=list)


class RolePermissionsSerializer(serializers.Serializer):
    permission_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=True)


class RemovePermissionSerializer(serializers.Serializer):
    permission_id = serializers.UUIDField()
