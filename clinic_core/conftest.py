# clinic_core/conftest.py
import pytest
from django.contrib.auth.hashers import make_password
from django.core.management import call_command
from rest_framework.test import APIClient

from clinic_core.iam.models import Role, User
from clinic_core.iam.tokens import issue_token_pair
from clinic_core.tenants.models import Tenant

PASSWORD = "Corr3ct-Horse-Battery"


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def catalog(db):
    """Default roles, permissions and feature flags, as seeded in every environment."""
    call_command("seed_access_catalog", verbosity=0)


@pytest.fixture
def tenant(db):
    return Tenant.objects.create(name="Happy Paws", subdomain="happypaws", slug="happypaws")


@pytest.fixture
def other_tenant(db):
    return Tenant.objects.create(name="Sunny Vet", subdomain="sunnyvet", slug="sunnyvet")


@pytest.fixture
def inactive_tenant(db):
    return Tenant.objects.create(name="Closed Clinic", subdomain="closed", slug="closed", is_active=False)


@pytest.fixture
def make_user(db):
    def _make(email: str, role_id: str, tenant=None, **extra) -> User:
        role, _ = Role.objects.get_or_create(id=role_id, defaults={"name": role_id.title()})
        return User.objects.create(
            email=email,
            name=extra.pop("name", email.split("@")[0]),
            password=make_password(extra.pop("password", PASSWORD)),
            role=role,
            tenant=tenant,
            **extra,
        )
    return _make


@pytest.fixture
def platform_admin(catalog, make_user):
    return make_user("root@platform.test", "admin")


@pytest.fixture
def vet(catalog, make_user, tenant):
    return make_user("vet@happypaws.test", "veterinarian", tenant)


@pytest.fixture
def receptionist(catalog, make_user, tenant):
    return make_user("desk@happypaws.test", "receptionist", tenant)


@pytest.fixture
def customer(catalog, make_user, tenant):
    return make_user("owner@happypaws.test", "customer", tenant)


@pytest.fixture
def other_customer(catalog, make_user, tenant):
    return make_user("neighbour@happypaws.test", "customer", tenant)


@pytest.fixture
def auth():
    """
    Build request headers for `user`, optionally pinning the tenant with
    X-Tenant-ID. Usage: api_client.get(url, **auth(user, tenant=t)).
    """
    def _headers(user, tenant=None) -> dict:
        headers = {"HTTP_AUTHORIZATION": f"Bearer {issue_token_pair(user).access}"}
        if tenant is not None:
            headers["HTTP_X_TENANT_ID"] = str(tenant.id)
        return headers
    return _headers
