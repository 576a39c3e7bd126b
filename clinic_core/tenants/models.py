# clinic_core/tenants/models.py
import uuid

from django.db import models


class Tenant(models.Model):
    """
    A clinic organisation. Root of all scoping in the system.
    NOT a TenantScopedModel (it *is* the tenant).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    subdomain = models.CharField(max_length=63, unique=True)  # DNS label, e.g. "happypaws"
    slug = models.SlugField(max_length=64, unique=True)

    is_active = models.BooleanField(default=True, db_index=True)

    # branding, timezone, onboarding notes, ...
    settings = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "tenants_tenant"
        ordering = ("name",)

    def __str__(self) -> str:
        return f"{self.name} ({self.subdomain})"
