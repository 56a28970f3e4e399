# src/apps/access/workflow/aggregate.py
"""
Agregado Solicitud: la solicitud + sus líneas (un sistema por línea).

Todo acá es puro: recibe dataclasses inmutables y devuelve dataclasses nuevas.
No toca la base; el servicio persiste el resultado.

Las líneas se identifican por el id del sistema del catálogo (único dentro de
una solicitud), así las rutas hablan de /requests/<id> + system_id.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, Sequence

from .config import DEFAULT_CONFIG, WorkflowConfig
from .errors import InvalidTransition, NotFound, PreconditionFailed, Unauthorized
from .states import (
    ItemStatus,
    Phase,
    RequestKind,
    RequestStatus,
    Role,
    is_terminal,
    phase_of,
    status_for,
)


def _clean_text(value) -> str:
    return " ".join(str(value or "").strip().split())


@dataclass(frozen=True)
class SystemEntry:
    """Entrada del catálogo tal como la ve el flujo."""

    id: int
    name: str
    code: str = ""
    applies_alta: bool = True
    applies_baja: bool = True
    requires_detail: bool = False
    enabled: bool = True

    def applies_to(self, kind: RequestKind) -> bool:
        if kind == RequestKind.BAJA:
            return self.applies_baja
        # MODIFICACION agrega accesos: usa la misma elegibilidad que ALTA.
        return self.applies_alta


@dataclass(frozen=True)
class Selection:
    system: SystemEntry
    detail: str = ""


@dataclass(frozen=True)
class TargetSnapshot:
    """
    Datos de la persona objetivo TAL COMO estaban al crear la solicitud.
    No es una referencia: si la persona cambia después, la solicitud conserva esto.
    """

    full_name: str
    document: str
    job_title: str = ""
    area_id: int | None = None
    area_name: str = ""

    def cleaned(self) -> "TargetSnapshot":
        return TargetSnapshot(
            full_name=_clean_text(self.full_name),
            document=_clean_text(self.document),
            job_title=_clean_text(self.job_title),
            area_id=self.area_id,
            area_name=_clean_text(self.area_name),
        )


@dataclass(frozen=True)
class LineItem:
    system_id: int
    system_name: str
    requires_detail: bool = False
    detail: str = ""
    status: ItemStatus = ItemStatus.PENDIENTE
    observation: str = ""
    pk: int | None = None

    @property
    def completed(self) -> bool:
        return self.status == ItemStatus.COMPLETADO


@dataclass(frozen=True)
class RequestAggregate:
    kind: RequestKind
    status: RequestStatus
    target: TargetSnapshot
    requester_id: int | None
    line_items: tuple[LineItem, ...] = ()
    reason: str = ""
    attachment: str = ""
    person_id: int | None = None
    id: int | None = None
    created_at: datetime | None = None
    version: int = 0

    @property
    def phase(self) -> Phase | None:
        return phase_of(self.status)

    @property
    def system_ids(self) -> frozenset[int]:
        return frozenset(item.system_id for item in self.line_items)

    def line_item(self, system_id: int) -> LineItem:
        for item in self.line_items:
            if item.system_id == system_id:
                return item
        raise NotFound(
            f"El sistema {system_id} no forma parte de la solicitud {self.id or ''}".strip())


# -------------------------------------------------
# Vistas derivadas
# -------------------------------------------------
def completion_percentage(request: RequestAggregate) -> float:
    """Porcentaje de líneas COMPLETADO. Sin líneas es 0 (nunca 100 por vacuidad)."""
    total = len(request.line_items)
    if not total:
        return 0.0
    done = sum(1 for item in request.line_items if item.completed)
    return done * 100.0 / total


def is_complete(request: RequestAggregate) -> bool:
    return bool(request.line_items) and all(item.completed for item in request.line_items)


def is_editable_by(request: RequestAggregate, actor_role: Role) -> bool:
    if actor_role != Role.SOLICITANTE:
        return False
    return request.status == RequestStatus.OBSERVADO or request.phase == Phase.PENDIENTE


def is_frozen(request: RequestAggregate) -> bool:
    """Líneas congeladas: solicitud completada o anulada."""
    return is_terminal(request.status)


def apply_line_item_update(
    request: RequestAggregate,
    system_id: int,
    completed: bool,
    *,
    observation: str | None = None,
) -> RequestAggregate:
    """Devuelve un agregado nuevo con la línea actualizada; el original no cambia."""
    if is_frozen(request):
        raise InvalidTransition(
            "La solicitud está cerrada: sus sistemas ya no se pueden modificar.",
            status=request.status,
        )

    current = request.line_item(system_id)
    changes = {"status": ItemStatus.COMPLETADO if completed else ItemStatus.PENDIENTE}
    if observation is not None:
        changes["observation"] = observation.strip()
    updated = replace(current, **changes)

    items = tuple(updated if it.system_id == system_id else it for it in request.line_items)
    return replace(request, line_items=items)


# -------------------------------------------------
# Construcción
# -------------------------------------------------
def build_line_items(
    kind: RequestKind,
    selections: Sequence[Selection],
    *,
    current_systems: Iterable[int] | None = None,
    config: WorkflowConfig = DEFAULT_CONFIG,
) -> tuple[LineItem, ...]:
    """
    Copia 1 a 1 los sistemas seleccionados, en el orden recibido.

    Reglas:
    - al menos un sistema (salvo BAJA vacía habilitada por configuración)
    - sin repetidos
    - sistema habilitado y aplicable al tipo
    - detalle obligatorio si el sistema lo requiere
    - si se conocen los accesos actuales: ALTA/MODIFICACION solo lo que no tiene,
      BAJA solo lo que tiene
    """
    kind = RequestKind(kind)
    if not selections:
        if kind == RequestKind.BAJA and config.allow_empty_baja:
            return ()
        raise PreconditionFailed("La solicitud debe incluir al menos un sistema.")

    held = frozenset(current_systems) if current_systems is not None else None
    seen: set[int] = set()
    items: list[LineItem] = []

    for sel in selections:
        system = sel.system
        if system.id in seen:
            raise PreconditionFailed(f"El sistema {system.name} está repetido.")
        seen.add(system.id)

        if not system.enabled:
            raise PreconditionFailed(f"El sistema {system.name} está deshabilitado.")
        if not system.applies_to(kind):
            raise PreconditionFailed(
                f"El sistema {system.name} no aplica para {kind.label.lower()}.")

        detail = (sel.detail or "").strip()
        if system.requires_detail and not detail:
            raise PreconditionFailed(f"El sistema {system.name} requiere detalle.")

        if held is not None:
            if kind == RequestKind.BAJA and system.id not in held:
                raise PreconditionFailed(
                    f"La persona no tiene acceso a {system.name}; no se puede dar de baja.")
            if kind != RequestKind.BAJA and system.id in held:
                raise PreconditionFailed(f"La persona ya tiene acceso a {system.name}.")

        items.append(
            LineItem(
                system_id=system.id,
                system_name=system.name,
                requires_detail=system.requires_detail,
                detail=detail,
            )
        )

    return tuple(items)


def _validate_target(target: TargetSnapshot) -> TargetSnapshot:
    target = target.cleaned()
    missing = [
        label
        for label, value in (("nombre", target.full_name), ("documento", target.document))
        if not value
    ]
    if missing:
        raise PreconditionFailed(
            f"Faltan datos de la persona: {', '.join(missing)}.")
    return target


def create_request(
    kind: RequestKind,
    target: TargetSnapshot,
    creator_id: int | None,
    selections: Sequence[Selection],
    *,
    current_systems: Iterable[int] | None = None,
    person_id: int | None = None,
    attachment: str = "",
    created_at: datetime | None = None,
    config: WorkflowConfig = DEFAULT_CONFIG,
) -> RequestAggregate:
    kind = RequestKind(kind)
    return RequestAggregate(
        kind=kind,
        status=status_for(Phase.PENDIENTE, kind),
        target=_validate_target(target),
        requester_id=creator_id,
        line_items=build_line_items(
            kind, selections, current_systems=current_systems, config=config),
        attachment=attachment or "",
        person_id=person_id,
        created_at=created_at,
    )


def revise_request(
    request: RequestAggregate,
    actor_role: Role,
    *,
    target: TargetSnapshot | None = None,
    selections: Sequence[Selection] | None = None,
    attachment: str | None = None,
    current_systems: Iterable[int] | None = None,
    config: WorkflowConfig = DEFAULT_CONFIG,
) -> RequestAggregate:
    """
    Edición del solicitante (solo PENDIENTE_* u OBSERVADO).
    El tipo nunca cambia; el estado tampoco (para salir de OBSERVADO se reenvía).
    """
    if not is_editable_by(request, actor_role):
        if actor_role != Role.SOLICITANTE:
            raise Unauthorized("Solo el solicitante puede editar la solicitud.")
        raise InvalidTransition(
            "La solicitud ya no se puede editar.", status=request.status)

    changes: dict = {}
    if target is not None:
        changes["target"] = _validate_target(target)
    if selections is not None:
        items = build_line_items(
            request.kind, selections, current_systems=current_systems, config=config)
        # Una línea que sobrevive a la edición conserva su id de persistencia.
        previous = {it.system_id: it for it in request.line_items}
        changes["line_items"] = tuple(
            replace(it, pk=previous[it.system_id].pk) if it.system_id in previous else it
            for it in items
        )
    if attachment is not None:
        changes["attachment"] = attachment

    return replace(request, **changes) if changes else request
