# src/apps/access/workflow/effects.py
"""
Efectos de una aprobación sobre el directorio de personal.

- ALTA:          activa (o crea) la persona con los sistemas solicitados.
- BAJA:          desactiva la persona y limpia sus accesos.
- MODIFICACION:  suma los sistemas nuevos a los que ya tenía.

El motor solo describe el efecto; el servicio lo aplica dentro de la misma
transacción que el cambio de estado.
"""
from __future__ import annotations

from dataclasses import dataclass, replace

from django.db import models

from .aggregate import RequestAggregate, TargetSnapshot
from .errors import NotFound, PreconditionFailed
from .states import PersonStatus, RequestKind


class EffectKind(models.TextChoices):
    ACTIVATE = "ACTIVATE", "Activar"
    DEACTIVATE = "DEACTIVATE", "Desactivar"
    MERGE = "MERGE", "Agregar accesos"


_EFFECT_BY_KIND = {
    RequestKind.ALTA: EffectKind.ACTIVATE,
    RequestKind.BAJA: EffectKind.DEACTIVATE,
    RequestKind.MODIFICACION: EffectKind.MERGE,
}


@dataclass(frozen=True)
class PersonRecord:
    full_name: str
    document: str
    job_title: str = ""
    area_id: int | None = None
    status: PersonStatus = PersonStatus.ACTIVO
    systems: frozenset[int] = frozenset()
    id: int | None = None

    @property
    def is_active(self) -> bool:
        return self.status == PersonStatus.ACTIVO


@dataclass(frozen=True)
class PersonEffect:
    kind: EffectKind
    target: TargetSnapshot
    systems: frozenset[int]
    person_id: int | None = None
    request_id: int | None = None


def effect_for(request: RequestAggregate) -> PersonEffect:
    return PersonEffect(
        kind=_EFFECT_BY_KIND[request.kind],
        target=request.target,
        systems=request.system_ids,
        person_id=request.person_id,
        request_id=request.id,
    )


def apply_person_effect(person: PersonRecord | None, effect: PersonEffect) -> PersonRecord:
    """Estado final de la persona luego del efecto. No muta `person`."""
    if effect.kind == EffectKind.ACTIVATE:
        target = effect.target
        if person is None:
            return PersonRecord(
                full_name=target.full_name,
                document=target.document,
                job_title=target.job_title,
                area_id=target.area_id,
                status=PersonStatus.ACTIVO,
                systems=effect.systems,
            )
        if person.is_active:
            # Persona activa: los accesos se suman por modificación.
            raise PreconditionFailed(
                f"{person.full_name} ya está activa; corresponde una modificación, no un alta.")
        # Reingreso: los datos del alta pisan a los anteriores.
        return replace(
            person,
            full_name=target.full_name or person.full_name,
            job_title=target.job_title or person.job_title,
            area_id=target.area_id if target.area_id is not None else person.area_id,
            status=PersonStatus.ACTIVO,
            systems=effect.systems,
        )

    if person is None:
        raise NotFound(
            f"No existe en el directorio la persona con documento {effect.target.document}.")

    if effect.kind == EffectKind.DEACTIVATE:
        return replace(person, status=PersonStatus.INACTIVO, systems=frozenset())

    if not person.is_active:
        raise PreconditionFailed(
            f"{person.full_name} está inactiva; corresponde un alta, no una modificación.")
    return replace(person, systems=person.systems | effect.systems)
