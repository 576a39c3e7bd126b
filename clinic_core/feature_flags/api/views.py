# clinic_core/feature_flags/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.settings import api_settings

from clinic_core.common.api.pagination import paginate
from clinic_core.common.permissions import IsPlatformAccount
from clinic_core.feature_flags.api.serializers import (
    BulkAssignSerializer,
    FeatureFlagSerializer,
    FeatureFlagUpdateSerializer,
    FeatureFlagWriteSerializer,
    RoleAssignmentSerializer,
    RoleFeatureFlagSerializer,
    RoleUnassignSerializer,
)
from clinic_core.feature_flags.models import FeatureFlag
from clinic_core.feature_flags.selectors import feature_flag_qs, get_feature_flag
from clinic_core.feature_flags.services import FeatureFlagService
from clinic_core.iam.models import SYSTEM_ADMIN


@extend_schema_view(
    list=extend_schema(tags=["Feature flags"], operation_id="v1_feature_flags_list", responses={200: FeatureFlagSerializer(many=True)}),
    retrieve=extend_schema(tags=["Feature flags"], operation_id="v1_feature_flags_retrieve", responses={200: FeatureFlagSerializer}),
    create=extend_schema(tags=["Feature flags"], operation_id="v1_feature_flags_create", request=FeatureFlagWriteSerializer, responses={201: FeatureFlagSerializer}),
    partial_update=extend_schema(tags=["Feature flags"], operation_id="v1_feature_flags_partial_update", request=FeatureFlagUpdateSerializer, responses={200: FeatureFlagSerializer}),
    destroy=extend_schema(tags=["Feature flags"], operation_id="v1_feature_flags_destroy", responses={204: None}),
    assign=extend_schema(tags=["Feature flags"], operation_id="v1_feature_flags_assign", request=RoleAssignmentSerializer, responses={200: RoleFeatureFlagSerializer}),
    unassign=extend_schema(tags=["Feature flags"], operation_id="v1_feature_flags_unassign", request=RoleUnassignSerializer, responses={204: None}),
    bulk_assign=extend_schema(tags=["Feature flags"], operation_id="v1_feature_flags_bulk_assign", request=BulkAssignSerializer, responses={200: RoleFeatureFlagSerializer(many=True)}),
    role_flags=extend_schema(
        tags=["Feature flags"],
        operation_id="v1_feature_flags_role_flags",
        parameters=[OpenApiParameter("role_id", OpenApiTypes.STR, OpenApiParameter.QUERY, required=True)],
        responses={200: RoleFeatureFlagSerializer(many=True)},
    ),
)
class FeatureFlagViewSet(viewsets.ViewSet):
    """
    Feature flag registry administration: platform accounts holding system.admin.
    """

    required_permissions = [SYSTEM_ADMIN]
    permission_classes = [*api_settings.DEFAULT_PERMISSION_CLASSES, IsPlatformAccount]

    serializer_class = FeatureFlagSerializer
    queryset = FeatureFlag.objects.none()

    def list(self, request):
        return paginate(request, feature_flag_qs(), FeatureFlagSerializer)

    def retrieve(self, request, pk=None):
        return Response(FeatureFlagSerializer(get_feature_flag(flag_id=pk)).data, status=status.HTTP_200_OK)

    def create(self, request):
        ser = FeatureFlagWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        flag = FeatureFlagService.create(**ser.validated_data)
        return Response(FeatureFlagSerializer(flag).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        ser = FeatureFlagUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        flag = FeatureFlagService.update(flag_id=pk, data=dict(ser.validated_data))
        return Response(FeatureFlagSerializer(flag).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        FeatureFlagService.delete(flag_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def assign(self, request, pk=None):
        ser = RoleAssignmentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        assignment = FeatureFlagService.assign_to_role(
            role_id=ser.validated_data["role_id"],
            flag_id=pk,
            is_enabled=ser.validated_data["is_enabled"],
        )
        return Response(RoleFeatureFlagSerializer(assignment).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def unassign(self, request, pk=None):
        ser = RoleUnassignSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        FeatureFlagService.remove_from_role(role_id=ser.validated_data["role_id"], flag_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"], url_path="bulk-assign")
    def bulk_assign(self, request):
        ser = BulkAssignSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        assignments = FeatureFlagService.bulk_assign_to_role(**ser.validated_data)
        return Response(RoleFeatureFlagSerializer(assignments, many=True).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"], url_path="role-flags")
    def role_flags(self, request):
        role_id = request.query_params.get("role_id")
        if not role_id:
            raise ValidationError({"role_id": "This query parameter is required."})
        qs = FeatureFlagService.get_role_feature_flags(role_id=role_id)
        return Response(RoleFeatureFlagSerializer(qs, many=True).data, status=status.HTTP_200_OK)
