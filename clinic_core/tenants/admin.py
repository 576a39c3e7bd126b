# clinic_core/tenants/admin.py
from django.contrib import admin

from clinic_core.tenants.models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("name", "subdomain", "slug", "is_active", "created_at", "updated_at")
    list_filter = ("is_active", "created_at")
    search_fields = ("name", "subdomain", "slug")
    ordering = ("-created_at",)
    readonly_fields = ("id", "created_at", "updated_at")

    fieldsets = (
        (None, {"fields": ("id", "name", "subdomain", "slug", "is_active")}),
        ("Settings", {"fields": ("settings",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )
