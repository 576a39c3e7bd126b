# clinic_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from clinic_core.appointments.api.views import AppointmentViewSet
from clinic_core.common.views import HealthView
from clinic_core.feature_flags.api.views import FeatureFlagViewSet
from clinic_core.iam.api.auth import LoginView, LogoutView, RefreshView, RegisterView
from clinic_core.iam.api.catalog import PermissionViewSet, RoleViewSet
from clinic_core.iam.api.me import MeView
from clinic_core.patients.api.views import PatientViewSet
from clinic_core.tenants.api.views import TenantViewSet

router = DefaultRouter()

# Platform administration
router.register(r"tenants", TenantViewSet, basename="tenants")
router.register(r"permissions", PermissionViewSet, basename="permissions")
router.register(r"roles", RoleViewSet, basename="roles")
router.register(r"feature-flags", FeatureFlagViewSet, basename="feature-flags")

# Tenant-scoped business data
router.register(r"patients", PatientViewSet, basename="patients")
router.register(r"appointments", AppointmentViewSet, basename="appointments")

urlpatterns = [
    path("health/", HealthView.as_view(), name="health"),

    # Auth + /me
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
