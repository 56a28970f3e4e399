# src/apps/access/models/requests.py
from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from apps.access.workflow.states import (
    Action,
    ItemStatus,
    RequestKind,
    RequestStatus,
    Role,
    kind_of,
)

from .area import Area
from .person import Person
from .systems import System


EVENT_CREATE = "create"
EVENT_EDIT = "edit"
EVENT_ACTIONS = [
    (EVENT_CREATE, "Crear"),
    (EVENT_EDIT, "Editar"),
    *Action.choices,
]


class AccessRequest(models.Model):
    """
    Solicitud de ALTA / BAJA / MODIFICACION de accesos.

    Guarda:
    - Snapshot de la persona objetivo (nombre, documento, cargo, área) al crearla
    - Las líneas (un sistema del catálogo por línea) vía AccessRequestItem
    - Estado del flujo (strings canónicos, ver workflow/states.py)

    El estado NO se edita a mano: lo cambia el servicio de workflow, que usa
    `version` para detectar escrituras concurrentes.
    """

    kind = models.CharField(max_length=16, choices=RequestKind.choices)
    status = models.CharField(max_length=32, choices=RequestStatus.choices)
    version = models.PositiveIntegerField(default=0)

    # Snapshot de la persona objetivo
    target_full_name = models.CharField("Nombre", max_length=200)
    target_document = models.CharField("Documento", max_length=32)
    target_job_title = models.CharField("Cargo", max_length=160, blank=True, default="")
    target_area = models.ForeignKey(
        Area,
        on_delete=models.PROTECT,
        related_name="requests",
        null=True,
        blank=True,
    )
    target_area_name = models.CharField("Área", max_length=160, blank=True, default="")

    # Registro del directorio: existe de antemano en BAJA/MODIFICACION,
    # en ALTA se enlaza al aprobar.
    person = models.ForeignKey(
        Person,
        on_delete=models.PROTECT,
        related_name="requests",
        null=True,
        blank=True,
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="access_requests",
    )

    reason = models.TextField("Motivo de observación", blank=True, default="")
    attachment = models.FileField(
        "Sustento", upload_to="sustentos/%Y/%m/", blank=True, default="")

    created_at = models.DateTimeField("Creado", auto_now_add=True)
    updated_at = models.DateTimeField("Actualizado", auto_now=True)

    class Meta:
        verbose_name = "Solicitud"
        verbose_name_plural = "Solicitudes"
        ordering = ("-created_at",)
        indexes = [
            models.Index(fields=["status", "created_at"], name="access_req_status_idx"),
            models.Index(fields=["kind", "created_at"], name="access_req_kind_idx"),
            models.Index(fields=["owner", "created_at"], name="access_req_owner_idx"),
            models.Index(fields=["target_document"], name="access_req_document_idx"),
        ]

    def clean(self):
        super().clean()
        status_kind = kind_of(self.status) if self.status else None
        if status_kind and status_kind != self.kind:
            raise ValidationError(
                {"status": f"El estado {self.status} no corresponde a una solicitud de {self.kind}."})
        if self.status == RequestStatus.OBSERVADO and not (self.reason or "").strip():
            raise ValidationError(
                {"reason": "Una solicitud observada debe tener motivo."})

    def __str__(self) -> str:
        return f"#{self.pk} {self.get_kind_display()} — {self.target_full_name} — {self.status}"


class AccessRequestItem(models.Model):
    """
    Línea de solicitud: un sistema del catálogo dentro de una AccessRequest.

    system_name y requires_detail son copias del catálogo al momento de crearla.
    """

    request = models.ForeignKey(
        AccessRequest, on_delete=models.CASCADE, related_name="items"
    )
    system = models.ForeignKey(
        System, on_delete=models.PROTECT, related_name="request_items"
    )
    system_name = models.CharField(max_length=160)
    requires_detail = models.BooleanField(default=False)
    detail = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=12, choices=ItemStatus.choices, default=ItemStatus.PENDIENTE
    )
    observation = models.TextField("Observación técnica", blank=True, default="")

    order = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Ítem de solicitud"
        verbose_name_plural = "Ítems de solicitud"
        ordering = ("order", "id")
        constraints = [
            models.UniqueConstraint(
                fields=["request", "system"], name="uniq_request_system"
            ),
        ]

    def __str__(self) -> str:
        return f"Solicitud #{self.request_id} — {self.system_name} ({self.status})"


class AccessRequestEvent(models.Model):
    """Trazabilidad: una fila por transición aceptada."""

    request = models.ForeignKey(
        AccessRequest, on_delete=models.CASCADE, related_name="events"
    )
    action = models.CharField(max_length=24, choices=EVENT_ACTIONS)
    from_status = models.CharField(max_length=32, blank=True, default="")
    to_status = models.CharField(max_length=32)

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="access_request_events",
        null=True,
        blank=True,
    )
    actor_role = models.CharField(max_length=16, choices=Role.choices)
    reason = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Evento de solicitud"
        verbose_name_plural = "Eventos de solicitud"
        ordering = ("created_at", "id")

    def __str__(self) -> str:
        return f"#{self.request_id} {self.action}: {self.from_status or '-'} → {self.to_status}"
