import pytest

from clinic_core.feature_flags.models import FeatureFlag

pytestmark = pytest.mark.django_db

PASSWORD = "Corr3ct-Horse-Battery"


def test_register_then_login_then_me(api_client, catalog, tenant):
    resp = api_client.post(
        "/api/v1/auth/register/",
        {"email": "new@example.com", "password": PASSWORD, "role_id": "customer", "tenant_id": str(tenant.id)},
        format="json",
    )
    assert resp.status_code == 201, resp.content
    body = resp.json()
    assert body["token_type"] == "Bearer"
    assert body["expires_in"] == 15 * 60
    assert body["user"]["tenant"]["subdomain"] == "happypaws"

    resp = api_client.post(
        "/api/v1/auth/login/",
        {"email": "new@example.com", "password": PASSWORD},
        format="json",
    )
    assert resp.status_code == 200
    access = resp.json()["access_token"]

    resp = api_client.get("/api/v1/me/", HTTP_AUTHORIZATION=f"Bearer {access}")
    assert resp.status_code == 200
    me = resp.json()
    assert me["user"]["email"] == "new@example.com"
    assert me["tenant"]["subdomain"] == "happypaws"
    assert "appointments.read:own" in me["permissions"]
    assert "patients.delete" not in me["permissions"]
    assert "basic_appointments" in me["feature_flags"]


def test_login_failure_envelope(api_client, customer):
    resp = api_client.post(
        "/api/v1/auth/login/",
        {"email": customer.email, "password": "nope-nope"},
        format="json",
    )
    assert resp.status_code == 401
    error = resp.json()["error"]
    assert error["code"] == "authentication_failed"
    assert error["message"] == "Invalid credentials"
    assert resp["WWW-Authenticate"] == 'Bearer realm="api"'


def test_login_accepts_tenant_header_hint(api_client, make_user, catalog, tenant, other_tenant):
    make_user("jo@example.com", "customer", tenant)
    theirs = make_user("jo@example.com", "customer", other_tenant)

    resp = api_client.post(
        "/api/v1/auth/login/",
        {"email": "jo@example.com", "password": PASSWORD},
        format="json",
        HTTP_X_TENANT_SUBDOMAIN="sunnyvet",
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == str(theirs.id)


def test_refresh_endpoint_rotates(api_client, customer):
    login = api_client.post(
        "/api/v1/auth/login/", {"email": customer.email, "password": PASSWORD}, format="json"
    ).json()

    resp = api_client.post("/api/v1/auth/refresh/", {"refresh_token": login["refresh_token"]}, format="json")
    assert resp.status_code == 200
    assert resp.json()["refresh_token"] != login["refresh_token"]

    resp = api_client.post("/api/v1/auth/refresh/", {"refresh_token": login["refresh_token"]}, format="json")
    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "Invalid refresh token"


def test_logout_requires_authentication_and_clears_refresh(api_client, customer, auth):
    resp = api_client.post("/api/v1/auth/logout/")
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "not_authenticated"

    login = api_client.post(
        "/api/v1/auth/login/", {"email": customer.email, "password": PASSWORD}, format="json"
    ).json()

    resp = api_client.post("/api/v1/auth/logout/", **auth(customer))
    assert resp.status_code == 200

    resp = api_client.post("/api/v1/auth/refresh/", {"refresh_token": login["refresh_token"]}, format="json")
    assert resp.status_code == 401


def test_public_route_ignores_bad_token(api_client, customer):
    resp = api_client.post(
        "/api/v1/auth/login/",
        {"email": customer.email, "password": PASSWORD},
        format="json",
        HTTP_AUTHORIZATION="Bearer broken",
    )
    assert resp.status_code == 200


def test_me_rejects_bad_token(api_client, db):
    resp = api_client.get("/api/v1/me/", HTTP_AUTHORIZATION="Bearer broken")
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "authentication_failed"


def test_me_for_platform_admin_lists_whole_catalog(api_client, platform_admin, auth):
    resp = api_client.get("/api/v1/me/", **auth(platform_admin))
    body = resp.json()
    assert "system.admin" in body["permissions"]
    assert "patients.delete" in body["permissions"]
    assert set(FeatureFlag.objects.values_list("key", flat=True)) == set(body["feature_flags"])


def test_me_rejects_refresh_token_as_bearer(api_client, customer):
    login = api_client.post(
        "/api/v1/auth/login/", {"email": customer.email, "password": PASSWORD}, format="json"
    ).json()

    resp = api_client.get("/api/v1/me/", HTTP_AUTHORIZATION=f"Bearer {login['refresh_token']}")
    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "Invalid or expired token."


def test_refresh_ignores_stale_tenant_header(api_client, customer):
    login = api_client.post(
        "/api/v1/auth/login/", {"email": customer.email, "password": PASSWORD}, format="json"
    ).json()

    resp = api_client.post(
        "/api/v1/auth/refresh/",
        {"refresh_token": login["refresh_token"]},
        format="json",
        HTTP_X_TENANT_ID="closed-long-ago",
    )
    assert resp.status_code == 200


# ----------------------------
# Self-service sign-up stays inside one tenant
# ----------------------------
def test_register_requires_tenant(api_client, catalog):
    resp = api_client.post(
        "/api/v1/auth/register/",
        {"email": "boss@example.com", "password": PASSWORD, "role_id": "admin"},
        format="json",
    )
    assert resp.status_code == 400
    assert "tenant_id" in resp.json()["error"]["details"]


def test_registered_admin_cannot_leave_own_tenant(api_client, catalog, tenant, other_tenant):
    resp = api_client.post(
        "/api/v1/auth/register/",
        {"email": "boss@example.com", "password": PASSWORD, "role_id": "admin", "tenant_id": str(tenant.id)},
        format="json",
    )
    assert resp.status_code == 201, resp.content
    assert resp.json()["user"]["tenant"]["id"] == str(tenant.id)
    headers = {"HTTP_AUTHORIZATION": f"Bearer {resp.json()['access_token']}"}

    resp = api_client.get("/api/v1/patients/", HTTP_X_TENANT_ID=str(other_tenant.id), **headers)
    assert resp.status_code == 403

    for url in ("/api/v1/tenants/", "/api/v1/feature-flags/", "/api/v1/roles/", "/api/v1/permissions/"):
        resp = api_client.get(url, **headers)
        assert resp.status_code == 403, url
        assert resp.json()["error"]["message"] == "Only platform accounts can manage this resource."

    resp = api_client.post(f"/api/v1/tenants/{other_tenant.id}/deactivate/", **headers)
    assert resp.status_code == 403
    other_tenant.refresh_from_db()
    assert other_tenant.is_active is True
