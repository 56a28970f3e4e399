from __future__ import annotations

from django.contrib import admin

from apps.access.models import AccessRequest, AccessRequestEvent, AccessRequestItem
from apps.access.workflow import completion_percentage
from apps.access.services.repository import to_aggregate


class AccessRequestItemInline(admin.TabularInline):
    model = AccessRequestItem
    extra = 0
    can_delete = False
    fields = ("order", "system", "system_name", "detail", "status", "observation", "updated_at")
    readonly_fields = fields


class AccessRequestEventInline(admin.TabularInline):
    model = AccessRequestEvent
    extra = 0
    can_delete = False
    fields = ("created_at", "action", "from_status", "to_status", "actor", "actor_role", "reason")
    readonly_fields = fields


@admin.register(AccessRequest)
class AccessRequestAdmin(admin.ModelAdmin):
    """
    Admin de solicitudes.

    Rol del admin:
    - Visualizar solicitudes y su trazabilidad
    - Auditar datos cargados
    El estado NO se cambia desde acá: solo por el servicio de workflow.
    """

    list_display = (
        "id",
        "kind",
        "status",
        "target_full_name",
        "target_document",
        "owner",
        "progress",
        "created_at",
    )
    list_filter = ("kind", "status", "target_area")
    search_fields = (
        "target_full_name",
        "target_document",
        "owner__username",
    )
    ordering = ("-created_at",)
    readonly_fields = (
        "kind",
        "status",
        "version",
        "reason",
        "target_full_name",
        "target_document",
        "target_job_title",
        "target_area",
        "target_area_name",
        "person",
        "owner",
        "created_at",
        "updated_at",
    )

    fieldsets = (
        ("Solicitud", {"fields": ("kind", "status", "version", "reason", "attachment")}),
        (
            "Persona (snapshot)",
            {
                "fields": (
                    "target_full_name",
                    "target_document",
                    "target_job_title",
                    "target_area",
                    "target_area_name",
                    "person",
                ),
            },
        ),
        ("Trazabilidad", {"fields": ("owner", "created_at", "updated_at")}),
    )

    inlines = (AccessRequestItemInline, AccessRequestEventInline)

    def has_add_permission(self, request):
        return False

    @admin.display(description="Avance")
    def progress(self, obj: AccessRequest) -> str:
        return f"{completion_percentage(to_aggregate(obj)):.0f}%"
