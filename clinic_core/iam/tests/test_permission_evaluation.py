import pytest

from clinic_core.iam.models import Permission, Role, RolePermission
from clinic_core.iam.services.permissions import PermissionService

pytestmark = pytest.mark.django_db


def _grant(role_id: str, *names: str) -> Role:
    role, _ = Role.objects.get_or_create(id=role_id, defaults={"name": role_id})
    for name in names:
        perm, _ = Permission.objects.get_or_create(name=name)
        RolePermission.objects.get_or_create(role=role, permission=perm)
    return role


@pytest.fixture
def vet_user(make_user, tenant):
    _grant("veterinarian", "appointments.read", "appointments.update")
    Permission.objects.get_or_create(name="appointments.delete")
    return make_user("vet@example.com", "veterinarian", tenant)


def test_unscoped_permission_implies_own(vet_user):
    assert PermissionService.has_permission(vet_user.id, "appointments.read")
    assert PermissionService.has_permission(vet_user.id, "appointments.read:own")
    assert not PermissionService.has_permission(vet_user.id, "appointments.delete")


def test_own_permission_does_not_imply_unscoped(make_user, tenant):
    _grant("customer", "patients.read:own")
    user = make_user("owner@example.com", "customer", tenant)

    assert PermissionService.has_permission(user.id, "patients.read:own")
    assert not PermissionService.has_permission(user.id, "patients.read")


def test_system_admin_expands_to_active_catalog(catalog, platform_admin):
    Permission.objects.filter(name="users.delete").update(is_active=False)

    effective = PermissionService.get_effective_permissions(platform_admin.id)

    assert "system.admin" in effective
    assert "patients.create" in effective
    assert "users.delete" not in effective
    # system.admin still passes any check
    assert PermissionService.has_permission(platform_admin.id, "users.delete")


def test_inactive_permission_is_not_granted(vet_user):
    Permission.objects.filter(name="appointments.update").update(is_active=False)
    assert not PermissionService.has_permission(vet_user.id, "appointments.update")
    assert not PermissionService.has_permission(vet_user.id, "appointments.update:own")


def test_inactive_role_grants_nothing(vet_user):
    Role.objects.filter(id="veterinarian").update(is_active=False)
    assert PermissionService.get_effective_permissions(vet_user.id) == set()


def test_unknown_user_has_no_permissions(db):
    assert PermissionService.get_effective_permissions("00000000-0000-0000-0000-000000000000") == set()


@pytest.mark.parametrize(
    "held, required, expected",
    [
        ({"patients.read"}, "patients.read", True),
        ({"patients.read"}, "patients.read:own", True),
        ({"patients.read:own"}, "patients.read", False),
        ({"patients.read"}, "patients.update:own", False),
        ({"system.admin"}, "anything.at:own", True),
        (set(), "patients.read", False),
    ],
)
def test_permits(held, required, expected):
    assert PermissionService.permits(held, required) is expected
