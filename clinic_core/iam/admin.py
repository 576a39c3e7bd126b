# clinic_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from clinic_core.iam.models import Permission, Role, RolePermission, User


@admin.register(Permission)
class PermissionAdmin(admin.ModelAdmin):
    list_display = ("name", "description", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "description")
    ordering = ("name",)


class RolePermissionInline(admin.TabularInline):
    model = RolePermission
    extra = 0
    autocomplete_fields = ("permission",)


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "is_active")
    list_filter = ("is_active",)
    search_fields = ("id", "name")
    inlines = [RolePermissionInline]
    ordering = ("id",)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("email", "name", "tenant", "role", "is_active", "last_login_at", "created_at")
    list_filter = ("tenant", "role", "is_active")
    search_fields = ("email", "name")
    autocomplete_fields = ("tenant", "role")
    ordering = ("-created_at",)
    # hashes and tokens are never edited by hand
    exclude = ("password", "refresh_token")
    readonly_fields = ("id", "refresh_token_expires_at", "last_login_at", "created_at", "updated_at")
