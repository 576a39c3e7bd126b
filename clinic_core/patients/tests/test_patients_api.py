import pytest

from clinic_core.patients.models import Patient

pytestmark = pytest.mark.django_db

BASE = "/api/v1/patients/"


@pytest.fixture
def pets(tenant, other_tenant, customer, other_customer):
    return {
        "rex": Patient.objects.create(tenant=tenant, owner=customer, name="Rex", species="dog"),
        "tom": Patient.objects.create(tenant=tenant, owner=other_customer, name="Tom", species="cat"),
        "abroad": Patient.objects.create(tenant=other_tenant, name="Kiwi", species="bird"),
    }


def _names(resp):
    return sorted(p["name"] for p in resp.json()["results"])


def test_customer_only_sees_owned_patients(api_client, customer, pets, auth):
    resp = api_client.get(BASE, **auth(customer))
    assert resp.status_code == 200
    assert _names(resp) == ["Rex"]

    resp = api_client.get(f"{BASE}{pets['tom'].id}/", **auth(customer))
    assert resp.status_code == 404


def test_veterinarian_sees_whole_tenant_but_not_other_tenants(api_client, vet, pets, auth):
    resp = api_client.get(BASE, **auth(vet))
    assert _names(resp) == ["Rex", "Tom"]

    resp = api_client.get(f"{BASE}{pets['abroad'].id}/", **auth(vet))
    assert resp.status_code == 404


def test_search(api_client, vet, pets, auth):
    resp = api_client.get(BASE, {"q": "cat"}, **auth(vet))
    assert _names(resp) == ["Tom"]


def test_receptionist_registers_patient_for_owner(api_client, receptionist, customer, auth):
    resp = api_client.post(
        BASE,
        {"name": "Bella", "species": "dog", "owner_id": str(customer.id)},
        format="json",
        **auth(receptionist),
    )
    assert resp.status_code == 201, resp.content
    assert Patient.objects.get(name="Bella").owner_id == customer.id


def test_owner_must_belong_to_tenant(api_client, receptionist, make_user, other_tenant, auth):
    outsider = make_user("x@sunnyvet.test", "customer", other_tenant)
    resp = api_client.post(
        BASE,
        {"name": "Bella", "species": "dog", "owner_id": str(outsider.id)},
        format="json",
        **auth(receptionist),
    )
    assert resp.status_code == 400
    assert "owner_id" in resp.json()["error"]["details"]


def test_customer_cannot_create_patients(api_client, customer, auth):
    resp = api_client.post(BASE, {"name": "Bella", "species": "dog"}, format="json", **auth(customer))
    assert resp.status_code == 403


def test_customer_updates_own_patient_only(api_client, customer, other_customer, pets, auth):
    resp = api_client.patch(f"{BASE}{pets['rex'].id}/", {"breed": "Beagle"}, format="json", **auth(customer))
    assert resp.status_code == 200
    assert resp.json()["breed"] == "Beagle"

    resp = api_client.patch(f"{BASE}{pets['tom'].id}/", {"breed": "Siamese"}, format="json", **auth(customer))
    assert resp.status_code == 404

    resp = api_client.patch(
        f"{BASE}{pets['rex'].id}/",
        {"owner_id": str(other_customer.id)},
        format="json",
        **auth(customer),
    )
    assert resp.status_code == 400


def test_delete_deactivates(api_client, platform_admin, tenant, pets, auth):
    resp = api_client.delete(f"{BASE}{pets['rex'].id}/", **auth(platform_admin, tenant=tenant))
    assert resp.status_code == 204

    pets["rex"].refresh_from_db()
    assert pets["rex"].is_active is False

    resp = api_client.get(BASE, **auth(platform_admin, tenant=tenant))
    assert _names(resp) == ["Tom"]
