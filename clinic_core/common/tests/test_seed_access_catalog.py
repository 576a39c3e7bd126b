import pytest
from django.core.management import call_command

from clinic_core.feature_flags.models import FeatureFlag, RoleFeatureFlag
from clinic_core.iam.models import Permission, Role, RolePermission

pytestmark = pytest.mark.django_db


def _counts():
    return (
        Role.objects.count(),
        Permission.objects.count(),
        RolePermission.objects.count(),
        FeatureFlag.objects.count(),
        RoleFeatureFlag.objects.count(),
    )


def test_seed_is_idempotent():
    call_command("seed_access_catalog", verbosity=0)
    first = _counts()
    call_command("seed_access_catalog", verbosity=0)
    assert _counts() == first


def test_seeded_matrix():
    call_command("seed_access_catalog", verbosity=0)

    assert set(Role.objects.values_list("id", flat=True)) == {
        "admin",
        "veterinarian",
        "receptionist",
        "assistant",
        "customer",
    }
    assert list(Role.objects.get(id="admin").permissions.values_list("name", flat=True)) == ["system.admin"]
    assert not Role.objects.get(id="assistant").permissions.exists()

    globals_ = set(FeatureFlag.objects.filter(is_global=True).values_list("key", flat=True))
    assert globals_ == {"basic_appointments", "patient_records"}

    admin_flags = set(
        RoleFeatureFlag.objects.filter(role_id="admin").values_list("feature_flag__key", flat=True)
    )
    assert "advanced_reporting" in admin_flags
    assert not admin_flags & globals_
