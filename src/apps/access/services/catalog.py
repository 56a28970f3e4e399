# src/apps/access/services/catalog.py
"""
Catálogo de sistemas (ABM).

Un sistema nunca se borra: se deshabilita. Renombrar no toca las líneas de
solicitudes existentes, que guardan su propia copia del nombre.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from apps.access.models import System
from apps.access.workflow import (
    NotFound,
    PreconditionFailed,
    RequestKind,
    Selection,
    SystemEntry,
)
from apps.access.workflow.states import coerce_kind

logger = logging.getLogger("apps.access")

EDITABLE_FIELDS = ("name", "code", "applies_alta", "applies_baja", "requires_detail", "is_active")
HELD_DETAIL = "Baja total"


def to_entry(system: System) -> SystemEntry:
    return SystemEntry(
        id=system.pk,
        name=system.name,
        code=system.code,
        applies_alta=system.applies_alta,
        applies_baja=system.applies_baja,
        requires_detail=system.requires_detail,
        enabled=system.is_active,
    )


def system_payload(system: System) -> dict:
    return {
        "id": system.pk,
        "name": system.name,
        "code": system.code,
        "applies_alta": system.applies_alta,
        "applies_baja": system.applies_baja,
        "requires_detail": system.requires_detail,
        "is_active": system.is_active,
    }


def list_systems(
    *,
    applies_to: RequestKind | str | None = None,
    enabled_only: bool = True,
) -> QuerySet[System]:
    qs = System.objects.all()
    if enabled_only:
        qs = qs.filter(is_active=True)
    if applies_to:
        kind = coerce_kind(applies_to)
        if kind == RequestKind.BAJA:
            qs = qs.filter(applies_baja=True)
        else:
            qs = qs.filter(applies_alta=True)
    return qs.order_by("name")


def get_system(system_id: int) -> System:
    try:
        return System.objects.get(pk=system_id)
    except (System.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"No existe el sistema {system_id}.") from None


def _clean_name(value) -> str:
    name = " ".join(str(value or "").strip().split())
    if not name:
        raise PreconditionFailed("El nombre del sistema es obligatorio.")
    return name


def _clean_code(value, *, exclude_pk: int | None = None) -> str:
    code = str(value or "").strip().upper()
    if not code:
        raise PreconditionFailed("El código del sistema es obligatorio.")
    clash = System.objects.filter(code=code)
    if exclude_pk is not None:
        clash = clash.exclude(pk=exclude_pk)
    if clash.exists():
        raise PreconditionFailed(f"Ya existe un sistema con código {code}.")
    return code


@transaction.atomic
def create_system(
    *,
    name: str,
    code: str,
    applies_alta: bool = True,
    applies_baja: bool = True,
    requires_detail: bool = False,
    is_active: bool = True,
) -> System:
    system = System(
        name=_clean_name(name),
        code=_clean_code(code),
        applies_alta=bool(applies_alta),
        applies_baja=bool(applies_baja),
        requires_detail=bool(requires_detail),
        is_active=bool(is_active),
    )
    try:
        system.save()
    except IntegrityError:
        raise PreconditionFailed(f"Ya existe un sistema con código {system.code}.") from None
    logger.info("[CATALOG] Sistema creado: %s", system)
    return system


@transaction.atomic
def update_system(system_id: int, **changes) -> System:
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise PreconditionFailed(f"Campos no editables: {', '.join(sorted(unknown))}.")

    system = get_system(system_id)
    if "name" in changes:
        system.name = _clean_name(changes["name"])
    if "code" in changes:
        system.code = _clean_code(changes["code"], exclude_pk=system.pk)
    for flag in ("applies_alta", "applies_baja", "requires_detail", "is_active"):
        if flag in changes:
            setattr(system, flag, bool(changes[flag]))
    system.save()
    logger.info("[CATALOG] Sistema actualizado: %s (%s)", system, ", ".join(sorted(changes)))
    return system


def set_system_enabled(system_id: int, enabled: bool) -> System:
    return update_system(system_id, is_active=enabled)


@transaction.atomic
def toggle_system(system_id: int) -> System:
    system = get_system(system_id)
    return update_system(system.pk, is_active=not system.is_active)


def selections_for(rows: Sequence[tuple[int, str]]) -> list[Selection]:
    """
    [(system_id, detail), ...] -> [Selection, ...] en el mismo orden.
    Los repetidos se conservan: los rechaza la validación del agregado.
    """
    ids = {int(system_id) for system_id, _ in rows}
    by_id = {s.pk: s for s in System.objects.filter(pk__in=ids)}
    missing = sorted(ids - set(by_id))
    if missing:
        raise NotFound(f"No existen los sistemas: {', '.join(map(str, missing))}.")
    return [
        Selection(system=to_entry(by_id[int(system_id)]), detail=detail or "")
        for system_id, detail in rows
    ]


def held_selections(system_ids: Iterable[int], kind: RequestKind) -> list[Selection]:
    """
    Todos los sistemas que la persona tiene y que admiten el tipo (BAJA vacía).
    Los que exigen detalle lo reciben fijo: HELD_DETAIL.
    """
    qs = System.objects.filter(pk__in=list(system_ids), is_active=True)
    return [
        Selection(system=entry, detail=HELD_DETAIL if entry.requires_detail else "")
        for entry in (to_entry(s) for s in qs.order_by("name"))
        if entry.applies_to(kind)
    ]
