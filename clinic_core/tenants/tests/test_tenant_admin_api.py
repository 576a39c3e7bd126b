import pytest

from clinic_core.feature_flags.models import FeatureFlag, RoleFeatureFlag
from clinic_core.tenants.models import Tenant

pytestmark = pytest.mark.django_db

BASE = "/api/v1/tenants/"


def test_admin_creates_and_lists_tenants(api_client, platform_admin, tenant, inactive_tenant, auth):
    resp = api_client.post(
        BASE,
        {"name": "North Clinic", "subdomain": "north"},
        format="json",
        **auth(platform_admin),
    )
    assert resp.status_code == 201, resp.content
    assert resp.json()["slug"] == "north"

    resp = api_client.get(BASE, **auth(platform_admin))
    assert resp.status_code == 200
    subdomains = {t["subdomain"] for t in resp.json()["results"]}
    assert subdomains == {"happypaws", "north"}

    resp = api_client.get(BASE, {"include_inactive": "true"}, **auth(platform_admin))
    subdomains = {t["subdomain"] for t in resp.json()["results"]}
    assert "closed" in subdomains


def test_duplicate_subdomain_is_a_conflict(api_client, platform_admin, tenant, auth):
    resp = api_client.post(
        BASE,
        {"name": "Copy", "subdomain": "happypaws", "slug": "copy"},
        format="json",
        **auth(platform_admin),
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "conflict"


def test_reserved_subdomain_is_rejected(api_client, platform_admin, auth):
    resp = api_client.post(BASE, {"name": "W", "subdomain": "www"}, format="json", **auth(platform_admin))
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"


def test_non_admin_cannot_manage_tenants(api_client, receptionist, auth):
    resp = api_client.get(BASE, **auth(receptionist))
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Missing required permission: system.admin"


def test_deactivate_and_activate_are_idempotent(api_client, platform_admin, tenant, auth):
    url = f"{BASE}{tenant.id}/deactivate/"
    for _ in range(2):
        resp = api_client.post(url, **auth(platform_admin))
        assert resp.status_code == 200
        assert resp.json()["is_active"] is False

    resp = api_client.post(f"{BASE}{tenant.id}/activate/", **auth(platform_admin))
    assert resp.json()["is_active"] is True


def test_delete_blocked_while_tenant_has_users(api_client, platform_admin, tenant, vet, auth):
    resp = api_client.delete(f"{BASE}{tenant.id}/", **auth(platform_admin))
    assert resp.status_code == 409
    assert Tenant.objects.filter(id=tenant.id).exists()


def test_delete_empty_tenant(api_client, platform_admin, other_tenant, auth):
    resp = api_client.delete(f"{BASE}{other_tenant.id}/", **auth(platform_admin))
    assert resp.status_code == 204
    assert not Tenant.objects.filter(id=other_tenant.id).exists()


def test_unknown_tenant_is_404(api_client, platform_admin, auth):
    resp = api_client.get(f"{BASE}00000000-0000-0000-0000-000000000000/", **auth(platform_admin))
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "not_found"


def test_stats_requires_advanced_reporting_flag(api_client, platform_admin, tenant, vet, auth):
    url = f"{BASE}{tenant.id}/stats/"

    resp = api_client.get(url, **auth(platform_admin))
    assert resp.status_code == 200
    assert resp.json()["active_users"] == 1

    flag = FeatureFlag.objects.get(key="advanced_reporting")
    RoleFeatureFlag.objects.filter(role_id="admin", feature_flag=flag).update(is_enabled=False)

    resp = api_client.get(url, **auth(platform_admin))
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Feature flag 'advanced_reporting' is not enabled."
