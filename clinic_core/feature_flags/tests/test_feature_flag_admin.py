import uuid

import pytest
from rest_framework.exceptions import NotFound

from clinic_core.common.api.exceptions import ConflictError
from clinic_core.feature_flags.models import FeatureFlag, FeatureFlagCategory, RoleFeatureFlag
from clinic_core.feature_flags.services import FeatureFlagService

pytestmark = pytest.mark.django_db

BASE = "/api/v1/feature-flags/"


def test_service_create_rejects_duplicate_key(catalog):
    with pytest.raises(ConflictError):
        FeatureFlagService.create(key="advanced_reporting", name="Again")


def test_service_category_and_update(catalog):
    category = FeatureFlagService.create_category(name="labs", description="Lab tooling")
    flag = FeatureFlagService.create(key="lab_results", name="Lab results", category_id=category.id)
    assert flag.category_id == category.id

    flag = FeatureFlagService.update(flag_id=flag.id, data={"is_global": True, "category_id": None})
    assert flag.is_global is True
    assert flag.category is None

    with pytest.raises(ConflictError):
        FeatureFlagService.update(flag_id=flag.id, data={"key": "api_access"})
    with pytest.raises(ConflictError):
        FeatureFlagService.create_category(name="labs")


def test_bulk_assign_reports_missing_ids_and_changes_nothing(catalog):
    existing = FeatureFlag.objects.get(key="white_labeling")
    missing = uuid.uuid4()

    with pytest.raises(NotFound) as exc:
        FeatureFlagService.bulk_assign_to_role(role_id="customer", flag_ids=[existing.id, missing])
    assert str(missing) in str(exc.value.detail)
    assert not RoleFeatureFlag.objects.filter(role_id="customer").exists()


def test_bulk_assign_upserts(catalog):
    keys = ["white_labeling", "api_access"]
    ids = list(FeatureFlag.objects.filter(key__in=keys).values_list("id", flat=True))

    FeatureFlagService.bulk_assign_to_role(role_id="customer", flag_ids=ids)
    FeatureFlagService.bulk_assign_to_role(role_id="customer", flag_ids=ids, is_enabled=False)

    rows = RoleFeatureFlag.objects.filter(role_id="customer")
    assert rows.count() == 2
    assert not rows.filter(is_enabled=True).exists()


def test_remove_unassigned_flag_is_not_found(catalog):
    flag = FeatureFlag.objects.get(key="white_labeling")
    with pytest.raises(NotFound):
        FeatureFlagService.remove_from_role(role_id="customer", flag_id=flag.id)


def test_admin_api_assign_unassign_and_role_listing(api_client, platform_admin, customer, auth):
    flag = FeatureFlag.objects.get(key="api_access")

    resp = api_client.post(f"{BASE}{flag.id}/assign/", {"role_id": "customer"}, format="json", **auth(platform_admin))
    assert resp.status_code == 200
    assert resp.json()["key"] == "api_access"

    resp = api_client.get("/api/v1/me/", **auth(customer))
    assert "api_access" in resp.json()["feature_flags"]

    resp = api_client.get(f"{BASE}role-flags/", {"role_id": "customer"}, **auth(platform_admin))
    assert [row["key"] for row in resp.json()] == ["api_access"]

    resp = api_client.post(f"{BASE}{flag.id}/unassign/", {"role_id": "customer"}, format="json", **auth(platform_admin))
    assert resp.status_code == 204
    assert not RoleFeatureFlag.objects.filter(role_id="customer").exists()


def test_admin_api_crud(api_client, platform_admin, auth):
    category = FeatureFlagCategory.objects.get(name="premium")
    resp = api_client.post(
        BASE,
        {"key": "dark_mode", "name": "Dark mode", "category_id": str(category.id)},
        format="json",
        **auth(platform_admin),
    )
    assert resp.status_code == 201, resp.content
    flag_id = resp.json()["id"]
    assert resp.json()["category"] == "premium"

    resp = api_client.patch(f"{BASE}{flag_id}/", {"is_active": False}, format="json", **auth(platform_admin))
    assert resp.json()["is_active"] is False

    resp = api_client.post(BASE, {"key": "Bad Key", "name": "x"}, format="json", **auth(platform_admin))
    assert resp.status_code == 400

    resp = api_client.delete(f"{BASE}{flag_id}/", **auth(platform_admin))
    assert resp.status_code == 204
    assert not FeatureFlag.objects.filter(key="dark_mode").exists()


def test_bulk_assign_api_missing_flag_is_404(api_client, platform_admin, auth):
    resp = api_client.post(
        f"{BASE}bulk-assign/",
        {"role_id": "assistant", "flag_ids": [str(uuid.uuid4())]},
        format="json",
        **auth(platform_admin),
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["message"].startswith("Feature flags not found:")


def test_non_admin_is_denied(api_client, vet, auth):
    resp = api_client.get(BASE, **auth(vet))
    assert resp.status_code == 403
