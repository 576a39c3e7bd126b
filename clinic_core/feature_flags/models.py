# clinic_core/feature_flags/models.py
import uuid

from django.db import models


class FeatureFlagCategory(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=128, unique=True)
    description = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "feature_flags_category"
        ordering = ("name",)
        verbose_name_plural = "feature flag categories"

    def __str__(self) -> str:
        return self.name


class FeatureFlag(models.Model):
    """
    A gated capability identified by a stable key ("advanced_reporting").

    is_global=True enables it for everyone; otherwise a role needs an enabled
    RoleFeatureFlag. is_active=False switches it off everywhere.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    key = models.CharField(max_length=128, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    is_active = models.BooleanField(default=True)
    is_global = models.BooleanField(default=False)

    category = models.ForeignKey(
        FeatureFlagCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="feature_flags",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "feature_flags_flag"
        ordering = ("key",)
        indexes = [
            models.Index(fields=["is_active", "is_global"]),
        ]

    def __str__(self) -> str:
        return self.key


class RoleFeatureFlag(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    role = models.ForeignKey("iam.Role", on_delete=models.CASCADE, related_name="feature_flags")
    feature_flag = models.ForeignKey(FeatureFlag, on_delete=models.CASCADE, related_name="role_assignments")
    is_enabled = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "feature_flags_role_flag"
        constraints = [
            models.UniqueConstraint(fields=["role", "feature_flag"], name="uq_role_feature_flag"),
        ]

    def __str__(self) -> str:
        return f"{self.role_id}:{self.feature_flag_id}"
