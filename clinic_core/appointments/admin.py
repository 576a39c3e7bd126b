from django.contrib import admin

from clinic_core.appointments.models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("scheduled_at", "patient", "veterinarian", "status", "tenant", "duration_minutes")
    list_filter = ("tenant", "status")
    search_fields = ("patient__name", "veterinarian__email", "reason")
    autocomplete_fields = ("tenant", "patient", "veterinarian")
    ordering = ("-scheduled_at",)
