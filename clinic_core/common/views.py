# clinic_core/common/views.py
from django.db import connection
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView


class HealthView(APIView):
    public = True
    authentication_classes: list = []

    @extend_schema(tags=["Health"], operation_id="v1_health", responses={200: dict})
    def get(self, request):
        connection.ensure_connection()
        return Response({"status": "ok"}, status=status.HTTP_200_OK)
