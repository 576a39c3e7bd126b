# clinic_core/iam/api/me.py

from __future__ import annotations

from dataclasses import asdict

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from clinic_core.common.permissions import get_effective_permissions
from clinic_core.feature_flags.services import FeatureFlagService
from clinic_core.iam.api.serializers import MeResponseSerializer, UserSerializer


class MeView(APIView):
    @extend_schema(responses={200: MeResponseSerializer}, tags=["Auth"], operation_id="v1_me")
    def get(self, request):
        """
        Current subject, the tenant resolved for this request (if any), and the
        capabilities the UI can gate on.
        """
        tenant = getattr(request, "tenant", None)
        tenant_data = None
        if tenant is not None:
            tenant_data = {k: v for k, v in asdict(tenant).items() if k != "settings"}

        return Response(
            {
                "user": UserSerializer(request.user).data,
                "tenant": tenant_data,
                "permissions": sorted(get_effective_permissions(request)),
                "feature_flags": sorted(FeatureFlagService.get_user_feature_flags(request.user.id)),
            },
            status=status.HTTP_200_OK,
        )
