# src/apps/access/models/area.py
from __future__ import annotations

from django.db import models


def _norm_name(value: str) -> str:
    return " ".join(str(value or "").strip().split())


class Area(models.Model):
    """Oficina / área. Agrupación plana, sin jerarquía."""
    name = models.CharField("Nombre", max_length=160, unique=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Área"
        verbose_name_plural = "Áreas"
        ordering = ("name",)

    def save(self, *args, **kwargs):
        self.name = _norm_name(self.name)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.name
