# clinic_core/patients/models.py
from django.db import models

from clinic_core.common.models import TenantScopedModel


class Patient(TenantScopedModel):
    """
    An animal under care at one clinic (tenant).
    owner is the customer account that may see it through ":own" permissions.
    """
    owner = models.ForeignKey(
        "iam.User",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="owned_patients",
    )

    name = models.CharField(max_length=255)
    species = models.CharField(max_length=64)
    breed = models.CharField(max_length=128, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "patients_patient"
        indexes = [
            models.Index(fields=["tenant", "name"]),
            models.Index(fields=["tenant", "owner"]),
            models.Index(fields=["tenant", "is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.species})"
