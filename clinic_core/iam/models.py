# clinic_core/iam/models.py
import uuid

from django.db import models
from django.db.models import Q

from clinic_core.tenants.models import Tenant

# Grants every active permission in the catalog.
SYSTEM_ADMIN = "system.admin"
OWN_SUFFIX = ":own"


class Permission(models.Model):
    """
    Atomic capability: "resource.action" or "resource.action:own",
    e.g. "patients.create", "appointments.read:own".
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=128, unique=True)
    description = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_permission"
        ordering = ("name",)

    def __str__(self) -> str:
        return self.name


class Role(models.Model):
    """
    Platform-wide role. The primary key is a readable slug ("admin", "veterinarian")
    so tokens and seed data can refer to roles directly.
    """
    id = models.SlugField(primary_key=True, max_length=64)

    name = models.CharField(max_length=128)
    description = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)

    permissions = models.ManyToManyField(Permission, through="RolePermission", related_name="roles")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_role"
        ordering = ("id",)

    def __str__(self) -> str:
        return self.id


class RolePermission(models.Model):
    """
    Many-to-many Role <-> Permission.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name="role_permissions")
    permission = models.ForeignKey(Permission, on_delete=models.CASCADE, related_name="permission_roles")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "iam_role_permission"
        constraints = [
            models.UniqueConstraint(fields=["role", "permission"], name="uq_role_permission"),
        ]


class User(models.Model):
    """
    Clinic account. Tenant-scoped: the same email may exist once per tenant.
    tenant=None marks a platform account (unique among platform accounts).

    Not Django's AUTH_USER_MODEL; that one stays for /admin/ staff only.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(Tenant, on_delete=models.PROTECT, null=True, blank=True, related_name="users")
    role = models.ForeignKey(Role, on_delete=models.PROTECT, related_name="users")

    email = models.EmailField(max_length=254)
    name = models.CharField(max_length=255, blank=True)
    password = models.CharField(max_length=128)  # Django password hash

    is_active = models.BooleanField(default=True)

    # Single server-tracked refresh token, overwritten on every issue.
    refresh_token = models.TextField(null=True, blank=True)
    refresh_token_expires_at = models.DateTimeField(null=True, blank=True)

    last_login_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_user"
        constraints = [
            models.UniqueConstraint(fields=["tenant", "email"], name="uq_user_tenant_email"),
            models.UniqueConstraint(
                fields=["email"],
                condition=Q(tenant__isnull=True),
                name="uq_user_platform_email",
            ),
        ]
        indexes = [
            models.Index(fields=["email"]),
            models.Index(fields=["tenant", "is_active"]),
        ]

    def __str__(self) -> str:
        return self.email

    # DRF treats request.user as a principal; these mirror django.contrib.auth.
    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_anonymous(self) -> bool:
        return False
