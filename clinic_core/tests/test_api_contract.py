import pytest
from django.urls import reverse

pytestmark = pytest.mark.django_db


def test_health_is_public_and_served_on_both_prefixes(api_client):
    for url in ("/api/v1/health/", "/api/health/"):
        resp = api_client.get(url)
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


def test_not_found_uses_error_envelope(api_client, vet, auth):
    resp = api_client.get("/api/v1/patients/not-a-uuid/", **auth(vet))
    assert resp.status_code == 404
    error = resp.json()["error"]
    assert error["code"] == "not_found"
    assert error["message"] == "Patient not found."
    assert error["details"] is None
    assert len(error["request_id"]) == 32


def test_validation_error_carries_field_details(api_client, catalog):
    resp = api_client.post("/api/v1/auth/register/", {"email": "nope"}, format="json")
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "validation_error"
    assert error["message"] == "Request failed."
    assert {"email", "password", "role_id"} <= set(error["details"])


def test_schema_lists_versioned_paths_only(api_client, db):
    resp = api_client.get(reverse("schema"), {"format": "json"})
    assert resp.status_code == 200
    paths = resp.json()["paths"]
    assert "/api/v1/patients/" in paths
    assert not any(p.startswith("/api/patients") for p in paths)

    params = {p["name"] for p in paths["/api/v1/patients/"]["get"].get("parameters", [])}
    assert {"X-Tenant-ID", "X-Tenant-Subdomain"} <= params
    assert "/api/v1/tenants/" in paths
    assert "X-Tenant-ID" not in {p["name"] for p in paths["/api/v1/tenants/"]["get"].get("parameters", [])}


def test_schema_documents_bearer_scheme(api_client, db):
    schema = api_client.get(reverse("schema"), {"format": "json"}).json()
    assert set(schema["components"]["securitySchemes"]) == {"BearerJWT"}
    assert schema["components"]["securitySchemes"]["BearerJWT"]["scheme"] == "bearer"
