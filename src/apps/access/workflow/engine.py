# src/apps/access/workflow/engine.py
"""
Máquina de estados de las solicitudes (una sola para ALTA, BAJA y MODIFICACION).

    PENDIENTE -> EN_PROCESO -> [TECNICO] -> PARA_VALIDAR -> COMPLETADO
    (no terminal) --observe--> OBSERVADO --resubmit--> PENDIENTE
    PENDIENTE / OBSERVADO --annul--> ANULADO

transition() es una función pura: recibe la solicitud tal como está
persistida y devuelve la solicitud nueva + los efectos sobre el directorio.
Orden de validación:
    1. InvalidTransition   la acción no existe desde el estado actual
    2. Unauthorized        el rol no está habilitado para esa arista
    3. PreconditionFailed  falta un dato o no se cumple una condición
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Mapping, Union

from .aggregate import (
    RequestAggregate,
    apply_line_item_update,
    completion_percentage,
    is_complete,
)
from .config import DEFAULT_CONFIG, WorkflowConfig
from .effects import PersonEffect, effect_for
from .errors import InvalidTransition, PreconditionFailed, Unauthorized
from .states import (
    Action,
    Phase,
    RequestKind,
    RequestStatus,
    Role,
    stage_of,
    status_for,
)

Stage = Union[Phase, RequestStatus]

_TRUE_VALUES = {"1", "true", "yes", "si", "sí", "on", "completado"}


@dataclass(frozen=True)
class Edge:
    # None: la acción no cambia el estado (toggle de líneas).
    target: Stage | None
    roles: frozenset[Role]


@dataclass(frozen=True)
class TransitionResult:
    request: RequestAggregate
    action: Action
    from_status: RequestStatus
    effects: tuple[PersonEffect, ...] = ()

    @property
    def changed_status(self) -> bool:
        return self.request.status != self.from_status


def _roles(*roles: Role) -> frozenset[Role]:
    return frozenset(roles)


@lru_cache(maxsize=None)
def transition_table(config: WorkflowConfig = DEFAULT_CONFIG) -> dict[Action, dict[Stage, Edge]]:
    """Aristas válidas por acción y posición de origen, para una variante del flujo."""
    processing = [Phase.EN_PROCESO]
    if config.technical_stage:
        processing.append(Phase.TECNICO)

    observers = _roles(Role.COORDINADOR, Role.TECNICO, Role.APROBADOR)

    table: dict[Action, dict[Stage, Edge]] = {
        Action.START: {
            Phase.PENDIENTE: Edge(Phase.EN_PROCESO, _roles(Role.COORDINADOR)),
        },
        Action.SEND_TO_TECHNICAL: {},
        Action.TOGGLE_LINE_ITEM: {
            Phase.EN_PROCESO: Edge(None, _roles(Role.COORDINADOR, Role.TECNICO)),
        },
        Action.SEND_TO_VALIDATE: {
            stage: Edge(Phase.PARA_VALIDAR, _roles(config.validator_role))
            for stage in processing
        },
        Action.APPROVE: {
            Phase.PARA_VALIDAR: Edge(Phase.COMPLETADO, _roles(Role.APROBADOR)),
        },
        Action.OBSERVE: {
            Phase.PENDIENTE: Edge(
                RequestStatus.OBSERVADO, _roles(Role.COORDINADOR, Role.APROBADOR)),
            Phase.EN_PROCESO: Edge(RequestStatus.OBSERVADO, observers),
            Phase.PARA_VALIDAR: Edge(RequestStatus.OBSERVADO, _roles(Role.APROBADOR)),
        },
        Action.RESUBMIT: {
            RequestStatus.OBSERVADO: Edge(Phase.PENDIENTE, _roles(Role.SOLICITANTE)),
        },
        Action.ANNUL: {
            Phase.PENDIENTE: Edge(RequestStatus.ANULADO, _roles(Role.SOLICITANTE)),
            RequestStatus.OBSERVADO: Edge(RequestStatus.ANULADO, _roles(Role.SOLICITANTE)),
        },
    }

    if config.technical_stage:
        table[Action.SEND_TO_TECHNICAL][Phase.EN_PROCESO] = Edge(
            Phase.TECNICO, _roles(Role.TECNICO))
        table[Action.TOGGLE_LINE_ITEM][Phase.TECNICO] = Edge(None, _roles(Role.TECNICO))
        table[Action.OBSERVE][Phase.TECNICO] = Edge(RequestStatus.OBSERVADO, observers)

    return table


def _resolve(target: Stage, kind: RequestKind) -> RequestStatus:
    if isinstance(target, RequestStatus):
        return target
    return status_for(target, kind)


def _edge_for(request: RequestAggregate, action: Action, config: WorkflowConfig) -> Edge:
    edge = transition_table(config)[action].get(stage_of(request.status))
    if edge is None:
        raise InvalidTransition(
            f"No se puede '{action.label.lower()}' una solicitud en estado {request.status}.",
            action=action,
            status=request.status,
        )
    return edge


def allowed_actions(
    request: RequestAggregate,
    actor_role: Role,
    *,
    config: WorkflowConfig = DEFAULT_CONFIG,
) -> list[Action]:
    """Acciones que el rol puede intentar desde el estado actual (para armar botones)."""
    stage = stage_of(request.status)
    return [
        action
        for action, edges in transition_table(config).items()
        if stage in edges and actor_role in edges[stage].roles
    ]


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


def _item_id(payload: Mapping[str, Any]) -> int:
    raw = payload.get("item_id", payload.get("system_id"))
    if raw in (None, ""):
        raise PreconditionFailed("Indicá el sistema a marcar (item_id).")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise PreconditionFailed(f"item_id inválido: {raw!r}.") from None


def transition(
    request: RequestAggregate,
    actor_role: Union[Role, str],
    action: Union[Action, str],
    payload: Mapping[str, Any] | None = None,
    *,
    config: WorkflowConfig = DEFAULT_CONFIG,
) -> TransitionResult:
    try:
        action = Action(action)
    except ValueError:
        raise InvalidTransition(f"Acción desconocida: {action!r}.", status=request.status) from None
    try:
        actor_role = Role(actor_role)
    except ValueError:
        raise Unauthorized(f"Rol desconocido: {actor_role!r}.", action=action) from None

    payload = payload or {}
    edge = _edge_for(request, action, config)

    if actor_role not in edge.roles:
        raise Unauthorized(
            f"El rol {actor_role.label} no puede '{action.label.lower()}' "
            f"una solicitud en estado {request.status}.",
            action=action,
            status=request.status,
        )

    updated = request
    effects: tuple[PersonEffect, ...] = ()

    if action == Action.TOGGLE_LINE_ITEM:
        system_id = _item_id(payload)
        current = request.line_item(system_id)
        completed = payload.get("completed")
        completed = (not current.completed) if completed in (None, "") else _as_bool(completed)
        observation = payload.get("observation")
        updated = apply_line_item_update(
            request,
            system_id,
            completed,
            observation=str(observation) if observation is not None else None,
        )

    elif action == Action.SEND_TO_VALIDATE:
        empty_baja = (
            not request.line_items
            and request.kind == RequestKind.BAJA
            and config.allow_empty_baja
        )
        if not (is_complete(request) or empty_baja):
            raise PreconditionFailed(
                "Todos los sistemas deben estar completados para enviar a validar "
                f"(avance actual: {completion_percentage(request):.0f}%).",
                action=action,
                status=request.status,
            )

    elif action == Action.OBSERVE:
        reason = " ".join(str(payload.get("reason") or "").split())
        if not reason:
            raise PreconditionFailed(
                "El motivo de la observación es obligatorio.",
                action=action,
                status=request.status,
            )
        updated = replace(request, reason=reason)

    elif action == Action.APPROVE:
        effects = (effect_for(request),)

    if edge.target is not None:
        new_status = _resolve(edge.target, request.kind)
        changes: dict[str, Any] = {"status": new_status}
        if new_status != RequestStatus.OBSERVADO:
            changes["reason"] = ""
        updated = replace(updated, **changes)

    return TransitionResult(
        request=updated,
        action=action,
        from_status=request.status,
        effects=effects,
    )
