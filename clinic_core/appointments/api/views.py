# clinic_core/appointments/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from clinic_core.appointments.api.serializers import (
    AppointmentCreateSerializer,
    AppointmentFilterSerializer,
    AppointmentSerializer,
    AppointmentStatusSerializer,
    AppointmentUpdateSerializer,
)
from clinic_core.appointments.models import Appointment
from clinic_core.appointments.selectors import get_appointment, search_appointments
from clinic_core.appointments.services import AppointmentService
from clinic_core.common.api.pagination import paginate
from clinic_core.common.permissions import owner_scope
from clinic_core.common.routing import requires_permissions


@extend_schema_view(
    list=extend_schema(
        tags=["Appointments"],
        operation_id="v1_appointments_list",
        parameters=[AppointmentFilterSerializer],
        responses={200: AppointmentSerializer(many=True)},
    ),
    retrieve=extend_schema(tags=["Appointments"], operation_id="v1_appointments_retrieve", responses={200: AppointmentSerializer}),
    create=extend_schema(tags=["Appointments"], operation_id="v1_appointments_create", request=AppointmentCreateSerializer, responses={201: AppointmentSerializer}),
    partial_update=extend_schema(tags=["Appointments"], operation_id="v1_appointments_partial_update", request=AppointmentUpdateSerializer, responses={200: AppointmentSerializer}),
    destroy=extend_schema(tags=["Appointments"], operation_id="v1_appointments_destroy", responses={204: None}),
    set_status=extend_schema(tags=["Appointments"], operation_id="v1_appointments_set_status", request=AppointmentStatusSerializer, responses={200: AppointmentSerializer}),
    cancel=extend_schema(tags=["Appointments"], operation_id="v1_appointments_cancel", request=None, responses={200: AppointmentSerializer}),
)
class AppointmentViewSet(viewsets.ViewSet):
    """
    Appointments of the resolved tenant.

    ":own" holders only reach appointments where they are the veterinarian or
    own the patient.
    """

    tenant_required = True

    serializer_class = AppointmentSerializer
    queryset = Appointment.objects.none()

    @requires_permissions("appointments.read:own")
    def list(self, request):
        filters = AppointmentFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        qs = search_appointments(
            tenant_id=request.tenant_id,
            owner_id=owner_scope(request, "appointments.read"),
            **filters.validated_data,
        )
        return paginate(request, qs, AppointmentSerializer)

    @requires_permissions("appointments.read:own")
    def retrieve(self, request, pk=None):
        appointment = get_appointment(
            tenant_id=request.tenant_id,
            appointment_id=pk,
            owner_id=owner_scope(request, "appointments.read"),
        )
        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_200_OK)

    @requires_permissions("appointments.create")
    def create(self, request):
        ser = AppointmentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        appointment = AppointmentService.create(
            tenant_id=request.tenant_id,
            patient_owner_id=owner_scope(request, "patients.read"),
            **ser.validated_data,
        )
        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_201_CREATED)

    @requires_permissions("appointments.update:own")
    def partial_update(self, request, pk=None):
        ser = AppointmentUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        appointment = AppointmentService.update(
            tenant_id=request.tenant_id,
            appointment_id=pk,
            data=dict(ser.validated_data),
            owner_scope=owner_scope(request, "appointments.update"),
        )
        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_200_OK)

    @requires_permissions("appointments.delete")
    def destroy(self, request, pk=None):
        appointment = get_appointment(tenant_id=request.tenant_id, appointment_id=pk)
        appointment.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @requires_permissions("appointments.update:own")
    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        ser = AppointmentStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        appointment = AppointmentService.change_status(
            tenant_id=request.tenant_id,
            appointment_id=pk,
            status=ser.validated_data["status"],
            owner_scope=owner_scope(request, "appointments.update"),
        )
        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_200_OK)

    @requires_permissions("appointments.update:own")
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        appointment = AppointmentService.cancel(
            tenant_id=request.tenant_id,
            appointment_id=pk,
            owner_scope=owner_scope(request, "appointments.update"),
        )
        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_200_OK)
