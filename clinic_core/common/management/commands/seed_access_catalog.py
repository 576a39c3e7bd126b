# clinic_core/common/management/commands/seed_access_catalog.py

from django.core.management.base import BaseCommand
from django.db import transaction

from clinic_core.feature_flags.models import FeatureFlag, FeatureFlagCategory, RoleFeatureFlag
from clinic_core.iam.models import SYSTEM_ADMIN, Permission, Role, RolePermission


ROLES = [
    ("admin", "Administrator", "System administrator"),
    ("veterinarian", "Veterinarian", "Veterinarian"),
    ("receptionist", "Receptionist", "Front desk receptionist"),
    ("assistant", "Assistant", "Veterinary assistant"),
    ("customer", "Customer", "Pet owner/customer"),
]

PERMISSIONS = [
    "patients.create",
    "patients.read",
    "patients.read:own",
    "patients.update",
    "patients.update:own",
    "patients.delete",
    "appointments.create",
    "appointments.read",
    "appointments.read:own",
    "appointments.update",
    "appointments.update:own",
    "appointments.delete",
    "users.create",
    "users.read",
    "users.update",
    "users.delete",
    "roles.create",
    "roles.read",
    "roles.update",
    "roles.delete",
    "permissions.read",
    "permissions.assign",
    SYSTEM_ADMIN,
]

ROLE_PERMISSIONS = {
    "admin": [SYSTEM_ADMIN],
    "veterinarian": [
        "patients.read",
        "patients.update",
        "appointments.create",
        "appointments.read",
        "appointments.update",
    ],
    "receptionist": [
        "patients.create",
        "patients.read",
        "patients.update",
        "appointments.create",
        "appointments.read",
        "appointments.update",
    ],
    "customer": [
        "patients.read:own",
        "patients.update:own",
        "appointments.create",
        "appointments.read:own",
        "appointments.update:own",
    ],
}

CATEGORIES = [
    ("reporting", "Reporting and analytics"),
    ("clinic_management", "Clinic operations"),
    ("billing", "Billing and payments"),
    ("integrations", "External integrations"),
    ("premium", "Premium add-ons"),
]

# key, name, category, is_global
FEATURE_FLAGS = [
    ("advanced_reporting", "Advanced Reporting", "reporting", False),
    ("custom_reports", "Custom Reports", "reporting", False),
    ("export_reports", "Export Reports", "reporting", False),
    ("multi_clinic_support", "Multi-Clinic Support", "clinic_management", False),
    ("staff_scheduling", "Staff Scheduling", "clinic_management", False),
    ("inventory_management", "Inventory Management", "clinic_management", False),
    ("automated_billing", "Automated Billing", "billing", False),
    ("payment_plans", "Payment Plans", "billing", False),
    ("insurance_integration", "Insurance Integration", "billing", False),
    ("api_access", "API Access", "integrations", False),
    ("third_party_integrations", "Third-Party Integrations", "integrations", False),
    ("webhook_support", "Webhook Support", "integrations", False),
    ("priority_support", "Priority Support", "premium", False),
    ("white_labeling", "White Labeling", "premium", False),
    ("advanced_security", "Advanced Security", "premium", False),
    ("basic_appointments", "Basic Appointments", None, True),
    ("patient_records", "Patient Records", None, True),
]

# admin is handled separately: every non-global flag
ROLE_FEATURE_FLAGS = {
    "veterinarian": [
        "advanced_reporting",
        "custom_reports",
        "export_reports",
        "inventory_management",
        "api_access",
    ],
    "receptionist": ["staff_scheduling", "automated_billing", "payment_plans"],
    "assistant": ["inventory_management"],
}


class Command(BaseCommand):
    help = "Ensure default roles, permissions and feature flags exist (idempotent)."

    @transaction.atomic
    def handle(self, *args, **options):
        created = 0

        for role_id, name, description in ROLES:
            _, was_created = Role.objects.get_or_create(
                id=role_id, defaults={"name": name, "description": description}
            )
            created += 1 if was_created else 0

        permissions = {}
        for name in PERMISSIONS:
            permissions[name], was_created = Permission.objects.get_or_create(name=name)
            created += 1 if was_created else 0

        for role_id, names in ROLE_PERMISSIONS.items():
            for name in names:
                _, was_created = RolePermission.objects.get_or_create(
                    role_id=role_id, permission=permissions[name]
                )
                created += 1 if was_created else 0

        categories = {}
        for name, description in CATEGORIES:
            categories[name], was_created = FeatureFlagCategory.objects.get_or_create(
                name=name, defaults={"description": description}
            )
            created += 1 if was_created else 0

        flags = {}
        for key, name, category, is_global in FEATURE_FLAGS:
            flags[key], was_created = FeatureFlag.objects.get_or_create(
                key=key,
                defaults={
                    "name": name,
                    "is_global": is_global,
                    "category": categories.get(category),
                },
            )
            created += 1 if was_created else 0

        assignments = dict(ROLE_FEATURE_FLAGS)
        assignments["admin"] = [key for key, _, _, is_global in FEATURE_FLAGS if not is_global]
        for role_id, keys in assignments.items():
            for key in keys:
                _, was_created = RoleFeatureFlag.objects.get_or_create(
                    role_id=role_id, feature_flag=flags[key], defaults={"is_enabled": True}
                )
                created += 1 if was_created else 0

        self.stdout.write(self.style.SUCCESS(f"Access catalog ensured. Newly created: {created}"))
