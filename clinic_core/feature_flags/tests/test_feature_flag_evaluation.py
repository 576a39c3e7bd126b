import pytest
from rest_framework.exceptions import NotFound

from clinic_core.feature_flags.models import FeatureFlag, RoleFeatureFlag
from clinic_core.feature_flags.services import FeatureFlagService
from clinic_core.iam.models import Role

pytestmark = pytest.mark.django_db


@pytest.fixture
def roles(db):
    for role_id in ("admin", "customer", "veterinarian"):
        Role.objects.get_or_create(id=role_id, defaults={"name": role_id})


@pytest.fixture
def advanced_reporting(roles):
    flag = FeatureFlag.objects.create(key="advanced_reporting", name="Advanced Reporting")
    RoleFeatureFlag.objects.create(role_id="admin", feature_flag=flag, is_enabled=True)
    return flag


def test_role_flag_enabled_only_for_assigned_role(advanced_reporting):
    assert FeatureFlagService.is_feature_flag_enabled("advanced_reporting", "admin") is True
    assert FeatureFlagService.is_feature_flag_enabled("advanced_reporting", "customer") is False
    assert FeatureFlagService.is_feature_flag_enabled("advanced_reporting") is False


def test_global_flag_is_enabled_for_everyone(roles):
    FeatureFlag.objects.create(key="basic_appointments", name="Basic", is_global=True)
    assert FeatureFlagService.is_feature_flag_enabled("basic_appointments") is True
    assert FeatureFlagService.is_feature_flag_enabled("basic_appointments", "customer") is True


def test_inactive_or_unknown_flag_is_disabled(advanced_reporting):
    advanced_reporting.is_active = False
    advanced_reporting.save()
    assert FeatureFlagService.is_feature_flag_enabled("advanced_reporting", "admin") is False
    assert FeatureFlagService.is_feature_flag_enabled("no_such_flag", "admin") is False


def test_disabled_assignment_does_not_count(advanced_reporting):
    RoleFeatureFlag.objects.filter(role_id="admin").update(is_enabled=False)
    assert FeatureFlagService.is_feature_flag_enabled("advanced_reporting", "admin") is False


def test_user_flags_merge_global_and_role_without_duplicates(advanced_reporting, make_user, tenant):
    glob = FeatureFlag.objects.create(key="patient_records", name="Records", is_global=True)
    # a global flag that is also assigned must appear once
    RoleFeatureFlag.objects.create(role_id="admin", feature_flag=glob, is_enabled=True)
    FeatureFlag.objects.create(key="retired", name="Retired", is_global=True, is_active=False)

    admin = make_user("a@example.com", "admin")
    customer = make_user("c@example.com", "customer", tenant)

    assert sorted(FeatureFlagService.get_user_feature_flags(admin.id)) == ["advanced_reporting", "patient_records"]
    assert FeatureFlagService.get_user_feature_flags(customer.id) == ["patient_records"]
    assert FeatureFlagService.has_feature_flag(admin.id, "advanced_reporting")
    assert not FeatureFlagService.has_feature_flag(customer.id, "advanced_reporting")


def test_inactive_role_loses_role_flags(advanced_reporting, make_user):
    admin = make_user("a@example.com", "admin")
    Role.objects.filter(id="admin").update(is_active=False)
    assert FeatureFlagService.get_user_feature_flags(admin.id) == []


def test_unknown_user_is_not_found(db):
    with pytest.raises(NotFound):
        FeatureFlagService.get_user_feature_flags("00000000-0000-0000-0000-000000000000")
