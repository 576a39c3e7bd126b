# clinic_core/tenants/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.settings import api_settings

from clinic_core.common.api.pagination import paginate
from clinic_core.common.permissions import IsPlatformAccount
from clinic_core.common.routing import requires_feature_flags
from clinic_core.iam.models import SYSTEM_ADMIN
from clinic_core.tenants.api.serializers import (
    TenantCreateSerializer,
    TenantSerializer,
    TenantStatsSerializer,
    TenantUpdateSerializer,
)
from clinic_core.tenants.models import Tenant
from clinic_core.tenants.selectors import get_tenant, list_tenants
from clinic_core.tenants.services import TenantService

ADVANCED_REPORTING = "advanced_reporting"


@extend_schema_view(
    list=extend_schema(
        tags=["Tenants"],
        operation_id="v1_tenants_list",
        parameters=[OpenApiParameter("include_inactive", OpenApiTypes.BOOL, OpenApiParameter.QUERY)],
        responses={200: TenantSerializer(many=True)},
    ),
    retrieve=extend_schema(tags=["Tenants"], operation_id="v1_tenants_retrieve", responses={200: TenantSerializer}),
    create=extend_schema(tags=["Tenants"], operation_id="v1_tenants_create", request=TenantCreateSerializer, responses={201: TenantSerializer}),
    partial_update=extend_schema(tags=["Tenants"], operation_id="v1_tenants_partial_update", request=TenantUpdateSerializer, responses={200: TenantSerializer}),
    destroy=extend_schema(tags=["Tenants"], operation_id="v1_tenants_destroy", responses={204: None}),
    activate=extend_schema(tags=["Tenants"], operation_id="v1_tenants_activate", request=None, responses={200: TenantSerializer}),
    deactivate=extend_schema(tags=["Tenants"], operation_id="v1_tenants_deactivate", request=None, responses={200: TenantSerializer}),
    stats=extend_schema(tags=["Tenants"], operation_id="v1_tenants_stats", responses={200: TenantStatsSerializer}),
)
class TenantViewSet(viewsets.ViewSet):
    """
    Platform tenant administration: platform accounts holding system.admin.
    Routing is centralized in clinic_core/api/urls.py.
    """

    required_permissions = [SYSTEM_ADMIN]
    permission_classes = [*api_settings.DEFAULT_PERMISSION_CLASSES, IsPlatformAccount]

    serializer_class = TenantSerializer
    queryset = Tenant.objects.none()

    def list(self, request):
        include_inactive = (request.query_params.get("include_inactive") or "").lower() in ("1", "true", "yes")
        return paginate(request, list_tenants(include_inactive=include_inactive), TenantSerializer)

    def retrieve(self, request, pk=None):
        return Response(TenantSerializer(get_tenant(tenant_id=pk)).data, status=status.HTTP_200_OK)

    def create(self, request):
        ser = TenantCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        t = TenantService.create(
            name=data["name"],
            subdomain=data["subdomain"],
            slug=data.get("slug"),
            is_active=data.get("is_active", True),
            settings=data.get("settings") or {},
        )
        return Response(TenantSerializer(t).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        ser = TenantUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        t = TenantService.update(tenant_id=pk, data=dict(ser.validated_data))
        return Response(TenantSerializer(t).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        TenantService.delete(tenant_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):
        t = TenantService.activate(tenant_id=pk)
        return Response(TenantSerializer(t).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        t = TenantService.deactivate(tenant_id=pk)
        return Response(TenantSerializer(t).data, status=status.HTTP_200_OK)

    @requires_feature_flags(ADVANCED_REPORTING)
    @action(detail=True, methods=["get"])
    def stats(self, request, pk=None):
        return Response(TenantStatsSerializer(TenantService.get_stats(tenant_id=pk)).data, status=status.HTTP_200_OK)
