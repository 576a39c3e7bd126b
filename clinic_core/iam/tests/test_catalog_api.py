import pytest

from clinic_core.iam.models import Permission, Role

pytestmark = pytest.mark.django_db


def _perm_id(name: str) -> str:
    return str(Permission.objects.get(name=name).id)


def test_permission_catalog_listing_needs_permissions_read(api_client, platform_admin, receptionist, auth):
    resp = api_client.get("/api/v1/permissions/", {"page_size": 100}, **auth(platform_admin))
    assert resp.status_code == 200
    names = {p["name"] for p in resp.json()["results"]}
    assert {"system.admin", "patients.read:own"} <= names

    resp = api_client.get("/api/v1/permissions/", **auth(receptionist))
    assert resp.status_code == 403


def test_create_permission_validates_name_and_uniqueness(api_client, platform_admin, auth):
    resp = api_client.post(
        "/api/v1/permissions/", {"name": "invoices.read:own"}, format="json", **auth(platform_admin)
    )
    assert resp.status_code == 201

    resp = api_client.post(
        "/api/v1/permissions/", {"name": "invoices.read:own"}, format="json", **auth(platform_admin)
    )
    assert resp.status_code == 400

    resp = api_client.post("/api/v1/permissions/", {"name": "Not Valid"}, format="json", **auth(platform_admin))
    assert resp.status_code == 400


def test_role_lifecycle(api_client, platform_admin, auth):
    resp = api_client.post(
        "/api/v1/roles/",
        {"id": "groomer", "name": "Groomer", "permission_ids": [_perm_id("patients.read")]},
        format="json",
        **auth(platform_admin),
    )
    assert resp.status_code == 201, resp.content
    assert resp.json()["permissions"] == ["patients.read"]

    resp = api_client.post(
        "/api/v1/roles/groomer/permissions/",
        {"permission_ids": [_perm_id("patients.read:own"), _perm_id("appointments.read:own")]},
        format="json",
        **auth(platform_admin),
    )
    assert resp.status_code == 200
    assert sorted(resp.json()["permissions"]) == ["appointments.read:own", "patients.read:own"]

    resp = api_client.post(
        "/api/v1/roles/groomer/remove-permission/",
        {"permission_id": _perm_id("patients.read:own")},
        format="json",
        **auth(platform_admin),
    )
    assert resp.status_code == 200
    assert resp.json()["permissions"] == ["appointments.read:own"]

    resp = api_client.post("/api/v1/roles/groomer/deactivate/", **auth(platform_admin))
    assert resp.status_code == 200
    assert Role.objects.get(id="groomer").is_active is False


def test_assigning_inactive_permission_is_rejected(api_client, platform_admin, auth):
    Permission.objects.filter(name="users.read").update(is_active=False)
    resp = api_client.post(
        "/api/v1/roles/customer/permissions/",
        {"permission_ids": [_perm_id("users.read")]},
        format="json",
        **auth(platform_admin),
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"


def test_role_in_use_cannot_be_deactivated(api_client, platform_admin, customer, auth):
    resp = api_client.post("/api/v1/roles/customer/deactivate/", **auth(platform_admin))
    assert resp.status_code == 409
    assert Role.objects.get(id="customer").is_active is True
