# clinic_core/patients/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.response import Response

from clinic_core.common.api.pagination import paginate
from clinic_core.common.permissions import owner_scope
from clinic_core.common.routing import requires_permissions
from clinic_core.patients.api.serializers import PatientCreateSerializer, PatientSerializer, PatientUpdateSerializer
from clinic_core.patients.models import Patient
from clinic_core.patients.selectors import get_patient, search_patients
from clinic_core.patients.services import PatientService


@extend_schema_view(
    list=extend_schema(
        tags=["Patients"],
        operation_id="v1_patients_list",
        parameters=[OpenApiParameter("q", OpenApiTypes.STR, OpenApiParameter.QUERY)],
        responses={200: PatientSerializer(many=True)},
    ),
    retrieve=extend_schema(tags=["Patients"], operation_id="v1_patients_retrieve", responses={200: PatientSerializer}),
    create=extend_schema(tags=["Patients"], operation_id="v1_patients_create", request=PatientCreateSerializer, responses={201: PatientSerializer}),
    partial_update=extend_schema(tags=["Patients"], operation_id="v1_patients_partial_update", request=PatientUpdateSerializer, responses={200: PatientSerializer}),
    destroy=extend_schema(tags=["Patients"], operation_id="v1_patients_destroy", responses={204: None}),
)
class PatientViewSet(viewsets.ViewSet):
    tenant_required = True

    serializer_class = PatientSerializer
    queryset = Patient.objects.none()

    @requires_permissions("patients.read:own")
    def list(self, request):
        qs = search_patients(
            tenant_id=request.tenant_id,
            q=request.query_params.get("q", ""),
            owner_id=owner_scope(request, "patients.read"),
        )
        return paginate(request, qs, PatientSerializer)

    @requires_permissions("patients.read:own")
    def retrieve(self, request, pk=None):
        patient = get_patient(
            tenant_id=request.tenant_id,
            patient_id=pk,
            owner_id=owner_scope(request, "patients.read"),
        )
        return Response(PatientSerializer(patient).data, status=status.HTTP_200_OK)

    @requires_permissions("patients.create")
    def create(self, request):
        ser = PatientCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        patient = PatientService.create_patient(tenant_id=request.tenant_id, **ser.validated_data)
        return Response(PatientSerializer(patient).data, status=status.HTTP_201_CREATED)

    @requires_permissions("patients.update:own")
    def partial_update(self, request, pk=None):
        ser = PatientUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        patient = PatientService.update_patient(
            tenant_id=request.tenant_id,
            patient_id=pk,
            data=dict(ser.validated_data),
            owner_scope=owner_scope(request, "patients.update"),
        )
        return Response(PatientSerializer(patient).data, status=status.HTTP_200_OK)

    @requires_permissions("patients.delete")
    def destroy(self, request, pk=None):
        PatientService.deactivate_patient(tenant_id=request.tenant_id, patient_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
