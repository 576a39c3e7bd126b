# clinic_core/feature_flags/admin.py
from __future__ import annotations

from django.contrib import admin

from clinic_core.feature_flags.models import FeatureFlag, FeatureFlagCategory, RoleFeatureFlag


@admin.register(FeatureFlagCategory)
class FeatureFlagCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "description")
    search_fields = ("name",)


class RoleFeatureFlagInline(admin.TabularInline):
    model = RoleFeatureFlag
    extra = 0
    autocomplete_fields = ("role",)


@admin.register(FeatureFlag)
class FeatureFlagAdmin(admin.ModelAdmin):
    list_display = ("key", "name", "category", "is_active", "is_global", "updated_at")
    list_filter = ("is_active", "is_global", "category")
    search_fields = ("key", "name")
    inlines = [RoleFeatureFlagInline]
    ordering = ("key",)
