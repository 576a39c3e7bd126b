# clinic_core/iam/api/catalog.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.settings import api_settings

from clinic_core.common.api.pagination import paginate
from clinic_core.common.permissions import IsPlatformAccount
from clinic_core.common.routing import requires_permissions
from clinic_core.iam.api.serializers import (
    PermissionSerializer,
    RemovePermissionSerializer,
    RoleCreateSerializer,
    RolePermissionsSerializer,
    RoleSerializer,
)
from clinic_core.iam.models import SYSTEM_ADMIN, Permission, Role
from clinic_core.iam.selectors import permission_qs, role_qs
from clinic_core.iam.services.catalog import CatalogService
from clinic_core.common.utils import parse_uuid


@extend_schema_view(
    list=extend_schema(tags=["IAM"], operation_id="v1_permissions_list", responses={200: PermissionSerializer(many=True)}),
    retrieve=extend_schema(tags=["IAM"], operation_id="v1_permissions_retrieve", responses={200: PermissionSerializer}),
    create=extend_schema(tags=["IAM"], operation_id="v1_permissions_create", request=PermissionSerializer, responses={201: PermissionSerializer}),
    deactivate=extend_schema(tags=["IAM"], operation_id="v1_permissions_deactivate", request=None, responses={200: PermissionSerializer}),
)
class PermissionViewSet(viewsets.ViewSet):
    """
    Platform permission catalog, platform accounts only. Reading needs
    permissions.read; changing the catalog itself is reserved to system.admin.
    """

    permission_classes = [*api_settings.DEFAULT_PERMISSION_CLASSES, IsPlatformAccount]
    serializer_class = PermissionSerializer
    queryset = Permission.objects.none()
    lookup_value_regex = r"[0-9a-fA-F-]{36}"

    @requires_permissions("permissions.read")
    def list(self, request):
        return paginate(request, permission_qs(), PermissionSerializer)

    @requires_permissions("permissions.read")
    def retrieve(self, request, pk=None):
        pid = parse_uuid(pk)
        obj = permission_qs().filter(id=pid).first() if pid is not None else None
        if obj is None:
            raise NotFound("Permission not found.")
        return Response(PermissionSerializer(obj).data, status=status.HTTP_200_OK)

    @requires_permissions(SYSTEM_ADMIN)
    def create(self, request):
        ser = PermissionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        obj = CatalogService.create_permission(
            name=ser.validated_data["name"],
            description=ser.validated_data.get("description", ""),
        )
        return Response(PermissionSerializer(obj).data, status=status.HTTP_201_CREATED)

    @requires_permissions(SYSTEM_ADMIN)
    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        obj = CatalogService.deactivate_permission(permission_id=pk)
        return Response(PermissionSerializer(obj).data, status=status.HTTP_200_OK)


@extend_schema_view(
    list=extend_schema(tags=["IAM"], operation_id="v1_roles_list", responses={200: RoleSerializer(many=True)}),
    retrieve=extend_schema(tags=["IAM"], operation_id="v1_roles_retrieve", responses={200: RoleSerializer}),
    create=extend_schema(tags=["IAM"], operation_id="v1_roles_create", request=RoleCreateSerializer, responses={201: RoleSerializer}),
    set_permissions=extend_schema(tags=["IAM"], operation_id="v1_roles_set_permissions", request=RolePermissionsSerializer, responses={200: RoleSerializer}),
    remove_permission=extend_schema(tags=["IAM"], operation_id="v1_roles_remove_permission", request=RemovePermissionSerializer, responses={200: RoleSerializer}),
    deactivate=extend_schema(tags=["IAM"], operation_id="v1_roles_deactivate", request=None, responses={200: RoleSerializer}),
)
class RoleViewSet(viewsets.ViewSet):
    permission_classes = [*api_settings.DEFAULT_PERMISSION_CLASSES, IsPlatformAccount]
    serializer_class = RoleSerializer
    queryset = Role.objects.none()
    lookup_value_regex = r"[-a-zA-Z0-9_]+"

    def _get(self, pk) -> Role:
        obj = role_qs().filter(id=pk).first()
        if obj is None:
            raise NotFound("Role not found.")
        return obj

    @requires_permissions("roles.read")
    def list(self, request):
        return paginate(request, role_qs(), RoleSerializer)

    @requires_permissions("roles.read")
    def retrieve(self, request, pk=None):
        return Response(RoleSerializer(self._get(pk)).data, status=status.HTTP_200_OK)

    @requires_permissions("roles.create")
    def create(self, request):
        ser = RoleCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        role = CatalogService.create_role(
            role_id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            permission_ids=data.get("permission_ids") or [],
        )
        return Response(RoleSerializer(self._get(role.id)).data, status=status.HTTP_201_CREATED)

    @requires_permissions("permissions.assign")
    @action(detail=True, methods=["post"], url_path="permissions")
    def set_permissions(self, request, pk=None):
        ser = RolePermissionsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        CatalogService.assign_permissions(role_id=pk, permission_ids=ser.validated_data["permission_ids"])
        return Response(RoleSerializer(self._get(pk)).data, status=status.HTTP_200_OK)

    @requires_permissions("permissions.assign")
    @action(detail=True, methods=["post"], url_path="remove-permission")
    def remove_permission(self, request, pk=None):
        ser = RemovePermissionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        CatalogService.remove_permission(role_id=pk, permission_id=ser.validated_data["permission_id"])
        return Response(RoleSerializer(self._get(pk)).data, status=status.HTTP_200_OK)

    @requires_permissions("roles.delete")
    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        CatalogService.deactivate_role(role_id=pk)
        return Response(RoleSerializer(self._get(pk)).data, status=status.HTTP_200_OK)
