from __future__ import annotations

from django.contrib import admin

from apps.access.models import Account, Person


@admin.register(Person)
class PersonAdmin(admin.ModelAdmin):
    """
    Directorio de personal.
    Estado y sistemas los mantiene el flujo (aprobaciones); acá solo se consultan.
    """

    list_display = (
        "full_name",
        "document",
        "job_title",
        "area",
        "status",
        "systems_count",
        "updated_at",
    )
    list_filter = ("status", "area")
    search_fields = ("full_name", "document", "email")
    ordering = ("full_name",)
    autocomplete_fields = ("area",)
    filter_horizontal = ("systems",)
    readonly_fields = ("status", "created_at", "updated_at")

    @admin.display(description="Sistemas")
    def systems_count(self, obj: Person) -> int:
        return obj.systems.count()


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "person", "area", "is_active", "created_at")
    list_filter = ("role", "is_active", "area")
    search_fields = ("user__username", "user__email", "person__full_name")
    autocomplete_fields = ("person", "area")
    raw_id_fields = ("user",)
