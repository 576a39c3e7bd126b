from django.contrib import admin

from clinic_core.patients.models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ("name", "species", "breed", "owner", "tenant", "is_active", "created_at")
    list_filter = ("tenant", "species", "is_active")
    search_fields = ("name", "breed", "owner__email")
    autocomplete_fields = ("tenant", "owner")
    ordering = ("-created_at",)
