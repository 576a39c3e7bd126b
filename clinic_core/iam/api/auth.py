# clinic_core/iam/api/auth.py

from __future__ import annotations

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from clinic_core.iam.api.serializers import (
    LoginRequestSerializer,
    LogoutResponseSerializer,
    RefreshRequestSerializer,
    RegisterRequestSerializer,
    SessionResponseSerializer,
    UserSerializer,
)
from clinic_core.iam.services.sessions import Session, SessionService
from clinic_core.tenants.resolver import TENANT_ID_HEADER, TENANT_SUBDOMAIN_HEADER


def _session_payload(session: Session) -> dict:
    lifetime = settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"]
    return {
        "access_token": session.tokens.access,
        "refresh_token": session.tokens.refresh,
        "token_type": "Bearer",
        "expires_in": int(lifetime.total_seconds()),
        "user": UserSerializer(session.user).data,
    }


class RegisterView(APIView):
    public = True

    @extend_schema(
        request=RegisterRequestSerializer,
        responses={201: SessionResponseSerializer},
        tags=["Auth"],
        operation_id="v1_auth_register",
    )
    def post(self, request):
        ser = RegisterRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        session = SessionService.register(
            email=data["email"],
            password=data["password"],
            role_id=data["role_id"],
            tenant_id=data["tenant_id"],
            name=data.get("name") or "",
        )
        return Response(_session_payload(session), status=status.HTTP_201_CREATED)


class LoginView(APIView):
    public = True

    @extend_schema(
        request=LoginRequestSerializer,
        responses={200: SessionResponseSerializer},
        tags=["Auth"],
        operation_id="v1_auth_login",
    )
    def post(self, request):
        ser = LoginRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        # body wins, the tenant headers are accepted as a hint too
        hint = (
            data.get("tenant")
            or request.headers.get(TENANT_ID_HEADER)
            or request.headers.get(TENANT_SUBDOMAIN_HEADER)
        )

        session = SessionService.login(email=data["email"], password=data["password"], tenant_hint=hint or None)
        return Response(_session_payload(session), status=status.HTTP_200_OK)


class RefreshView(APIView):
    public = True

    @extend_schema(
        request=RefreshRequestSerializer,
        responses={200: SessionResponseSerializer},
        tags=["Auth"],
        operation_id="v1_auth_refresh",
    )
    def post(self, request):
        ser = RefreshRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        session = SessionService.refresh(refresh_token=ser.validated_data["refresh_token"])
        return Response(_session_payload(session), status=status.HTTP_200_OK)


class LogoutView(APIView):
    @extend_schema(
        request=None,
        responses={200: LogoutResponseSerializer},
        tags=["Auth"],
        operation_id="v1_auth_logout",
    )
    def post(self, request):
        SessionService.logout(user_id=request.user.id)
        return Response({"detail": "logged out"}, status=status.HTTP_200_OK)
