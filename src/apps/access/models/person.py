# src/apps/access/models/person.py
from __future__ import annotations

from django.conf import settings
from django.db import models

from apps.access.workflow.states import PersonStatus, Role

from .area import Area
from .systems import System


class Person(models.Model):
    """
    Persona del directorio de personal (registro vivo, no snapshot).

    La crea o activa una ALTA completada, la desactiva una BAJA completada y
    una MODIFICACION completada le suma sistemas. Fuera de eso no se edita
    desde el flujo.
    """

    full_name = models.CharField("Nombre completo", max_length=200)
    document = models.CharField("Documento", max_length=32, unique=True)
    job_title = models.CharField("Cargo", max_length=160, blank=True, default="")
    email = models.EmailField("Email", blank=True, default="")

    area = models.ForeignKey(
        Area,
        on_delete=models.PROTECT,
        related_name="people",
        null=True,
        blank=True,
    )
    status = models.CharField(
        max_length=8, choices=PersonStatus.choices, default=PersonStatus.ACTIVO
    )
    systems = models.ManyToManyField(System, related_name="holders", blank=True)

    created_at = models.DateTimeField("Creado", auto_now_add=True)
    updated_at = models.DateTimeField("Actualizado", auto_now=True)

    class Meta:
        verbose_name = "Persona"
        verbose_name_plural = "Personas"
        ordering = ("full_name",)
        indexes = [
            models.Index(fields=["status", "full_name"], name="access_person_status_idx"),
        ]

    @property
    def is_active(self) -> bool:
        return self.status == PersonStatus.ACTIVO

    def __str__(self) -> str:
        return f"{self.full_name} ({self.document})"


class Account(models.Model):
    """
    Cuenta del portal: usuario de Django + rol en el flujo.
    El rol decide qué acciones puede ejecutar y qué bandejas ve.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="access_account",
    )
    role = models.CharField(max_length=16, choices=Role.choices)
    person = models.ForeignKey(
        Person,
        on_delete=models.SET_NULL,
        related_name="accounts",
        null=True,
        blank=True,
    )
    area = models.ForeignKey(
        Area,
        on_delete=models.SET_NULL,
        related_name="accounts",
        null=True,
        blank=True,
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Cuenta"
        verbose_name_plural = "Cuentas"
        ordering = ("user__username",)

    def __str__(self) -> str:
        return f"{self.user} — {self.get_role_display()}"
