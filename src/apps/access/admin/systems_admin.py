from __future__ import annotations

from django.contrib import admin

from apps.access.models import System


@admin.register(System)
class SystemAdmin(admin.ModelAdmin):
    """
    Catálogo de sistemas.
    No se habilita el borrado: un sistema se deshabilita (is_active=False).
    """

    list_display = (
        "name",
        "code",
        "applies_alta",
        "applies_baja",
        "requires_detail",
        "is_active",
        "updated_at",
    )
    list_filter = ("is_active", "applies_alta", "applies_baja", "requires_detail")
    search_fields = ("name", "code")
    ordering = ("name",)
    list_editable = ("is_active",)
    readonly_fields = ("created_at", "updated_at")

    def has_delete_permission(self, request, obj=None):
        return False
