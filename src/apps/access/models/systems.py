# src/apps/access/models/systems.py
from __future__ import annotations

from django.db import models


class System(models.Model):
    """
    Sistema / recurso del catálogo (ej: correo, carpeta compartida, SIGA).

    - No se borra: se deshabilita (is_active=False).
    - Las líneas de solicitud guardan una copia del nombre, así un renombre
      no altera solicitudes ya creadas.
    """

    name = models.CharField("Nombre", max_length=160)
    code = models.SlugField(
        "Código",
        max_length=40,
        unique=True,
        allow_unicode=False,
        help_text="Identificador textual único, ej: CORREO, SIGEIN.",
    )

    applies_alta = models.BooleanField("Aplica a altas", default=True)
    applies_baja = models.BooleanField("Aplica a bajas", default=True)
    requires_detail = models.BooleanField(
        "Requiere detalle",
        default=False,
        help_text="Si está marcado, la solicitud debe indicar un detalle (ej: ruta de la carpeta).",
    )
    is_active = models.BooleanField("Habilitado", default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Sistema"
        verbose_name_plural = "Sistemas"
        ordering = ("name",)
        indexes = [
            models.Index(fields=["is_active", "applies_alta"], name="access_sys_alta_idx"),
            models.Index(fields=["is_active", "applies_baja"], name="access_sys_baja_idx"),
        ]

    def save(self, *args, **kwargs):
        self.name = " ".join(str(self.name or "").strip().split())
        self.code = str(self.code or "").strip().upper()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"
