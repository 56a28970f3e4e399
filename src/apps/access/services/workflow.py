# src/apps/access/services/workflow.py
"""
Borde del flujo: usuario Django -> rol -> motor puro -> persistencia.

Cada operación corre en una sola transacción: estado, líneas, efecto sobre
el directorio y evento de auditoría se graban juntos o no se graba nada.
El correo sale después del commit (schedule_notification).
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping, Sequence

from django.conf import settings
from django.db import transaction

from apps.access.models import AccessRequest, AccessRequestEvent, Area
from apps.access.models.requests import EVENT_CREATE, EVENT_EDIT
from apps.access.workflow import (
    NotFound,
    PreconditionFailed,
    RequestAggregate,
    RequestKind,
    Role,
    StaleRequest,
    TargetSnapshot,
    TransitionResult,
    Unauthorized,
    WorkflowConfig,
    WorkflowError,
    create_request,
    revise_request,
    statuses_visible_to,
    transition,
)
from apps.access.workflow.projections import views_for
from apps.access.workflow.states import coerce_kind

from . import catalog, directory, notifications, repository

logger = logging.getLogger("apps.access")


def get_workflow_config() -> WorkflowConfig:
    raw = getattr(settings, "ACCESS_WORKFLOW", {}) or {}
    return WorkflowConfig(
        technical_stage=bool(raw.get("TECHNICAL_STAGE", True)),
        validator_role=Role(raw.get("VALIDATOR_ROLE", Role.TECNICO)),
        allow_empty_baja=bool(raw.get("ALLOW_EMPTY_BAJA", False)),
    )


def record_event(
    request_id: int,
    action: str,
    from_status: str,
    to_status: str,
    *,
    actor,
    actor_role: Role,
    reason: str = "",
) -> AccessRequestEvent:
    return AccessRequestEvent.objects.create(
        request_id=request_id,
        action=str(action),
        from_status=from_status or "",
        to_status=to_status,
        actor=actor if getattr(actor, "pk", None) else None,
        actor_role=actor_role,
        reason=reason or "",
    )


# -------------------------------------------------
# Helpers
# -------------------------------------------------
def _kind(value) -> RequestKind:
    try:
        return coerce_kind(value)
    except ValueError:
        raise PreconditionFailed(f"Tipo de solicitud desconocido: {value!r}.") from None


def _with_area_name(target: TargetSnapshot) -> TargetSnapshot:
    if target.area_id is None:
        return replace(target, area_name="")
    area = Area.objects.filter(pk=target.area_id).first()
    if area is None:
        raise NotFound(f"No existe el área {target.area_id}.")
    return replace(target, area_name=area.name)


def _ensure_owner(request: RequestAggregate, user, role: Role) -> None:
    if role == Role.SOLICITANTE and request.requester_id != user.pk:
        raise Unauthorized("La solicitud pertenece a otro solicitante.")


def _check_version(current: RequestAggregate, expected_version) -> int:
    if expected_version is None:
        return current.version
    try:
        expected = int(expected_version)
    except (TypeError, ValueError):
        raise PreconditionFailed(f"Versión inválida: {expected_version!r}.") from None
    if expected != current.version:
        raise StaleRequest(
            f"La solicitud #{current.id} fue modificada por otro usuario. "
            "Recargá y volvé a intentar.",
            status=current.status,
        )
    return expected


def _resolve_person(kind: RequestKind, document: str):
    """
    ALTA: la persona no debe estar activa (si existe inactiva, es un reingreso).
    BAJA / MODIFICACION: la persona debe existir y estar activa.
    """
    person = directory.find_by_document(document)
    if kind == RequestKind.ALTA:
        if person is not None and person.is_active:
            raise PreconditionFailed(
                f"{person.full_name} ya está activa; corresponde una modificación.")
        return person

    if person is None:
        raise NotFound(f"No existe en el directorio la persona con documento {document}.")
    if not person.is_active:
        raise PreconditionFailed(f"{person.full_name} está inactiva.")
    return person


def _selections(kind: RequestKind, systems, person, config: WorkflowConfig):
    selections = catalog.selections_for(list(systems or ()))
    if not selections and kind == RequestKind.BAJA and config.allow_empty_baja:
        # BAJA sin selección: todo lo que la persona tiene.
        selections = catalog.held_selections(directory.current_systems(person), kind)
    return selections


# -------------------------------------------------
# Alta de solicitud
# -------------------------------------------------
def submit_request(
    user,
    *,
    kind: RequestKind | str,
    target: TargetSnapshot,
    systems: Sequence[tuple[int, str]] = (),
    attachment=None,
    config: WorkflowConfig | None = None,
) -> RequestAggregate:
    role = directory.role_for(user)
    if role != Role.SOLICITANTE:
        raise Unauthorized("Solo el solicitante puede crear solicitudes.")

    config = config or get_workflow_config()
    kind = _kind(kind)

    person = _resolve_person(kind, target.document)
    if kind == RequestKind.ALTA:
        target = _with_area_name(target.cleaned())
    else:
        target = directory.snapshot_of(person)

    aggregate = create_request(
        kind,
        target,
        user.pk,
        _selections(kind, systems, person, config),
        current_systems=directory.current_systems(person),
        person_id=person.pk if person is not None else None,
        config=config,
    )

    with transaction.atomic():
        saved = repository.insert(aggregate, owner=user, attachment_file=attachment)
        record_event(
            saved.id, EVENT_CREATE, "", saved.status, actor=user, actor_role=role)
        notifications.schedule_notification(saved.id, EVENT_CREATE)

    logger.info(
        "[WORKFLOW] Solicitud #%s creada por %s: %s %s (%d sistema(s))",
        saved.id, user, saved.kind, saved.target.document, len(saved.line_items),
    )
    return saved


# -------------------------------------------------
# Edición del solicitante
# -------------------------------------------------
def revise(
    user,
    request_id: int,
    *,
    target: TargetSnapshot | None = None,
    systems: Sequence[tuple[int, str]] | None = None,
    attachment=None,
    expected_version: int | None = None,
    config: WorkflowConfig | None = None,
) -> RequestAggregate:
    role = directory.role_for(user)
    config = config or get_workflow_config()

    with transaction.atomic():
        current = repository.load(request_id)
        _ensure_owner(current, user, role)
        version = _check_version(current, expected_version)

        person = (
            directory.get_person(current.person_id)
            if current.person_id
            else directory.find_by_document(current.target.document)
        )

        if target is not None:
            if current.kind != RequestKind.ALTA:
                # En BAJA / MODIFICACION la persona sale del directorio.
                target = None
            else:
                target = _with_area_name(target.cleaned())
                if target.document != current.target.document:
                    person = _resolve_person(current.kind, target.document)

        selections = None
        if systems is not None:
            selections = _selections(current.kind, systems, person, config)

        revised = revise_request(
            current,
            role,
            target=target,
            selections=selections,
            current_systems=directory.current_systems(person),
            config=config,
        )
        if current.kind == RequestKind.ALTA:
            revised = replace(revised, person_id=person.pk if person is not None else None)

        saved = repository.save(
            revised, expected_version=version, attachment_file=attachment)
        record_event(
            saved.id, EVENT_EDIT, current.status, saved.status, actor=user, actor_role=role)

    logger.info("[WORKFLOW] Solicitud #%s editada por %s", saved.id, user)
    return saved


# -------------------------------------------------
# Transiciones
# -------------------------------------------------
def perform(
    user,
    request_id: int,
    action: str,
    payload: Mapping[str, Any] | None = None,
    *,
    expected_version: int | None = None,
    config: WorkflowConfig | None = None,
) -> TransitionResult:
    role = directory.role_for(user)
    config = config or get_workflow_config()
    payload = payload or {}

    try:
        with transaction.atomic():
            current = repository.load(request_id)
            _ensure_owner(current, user, role)
            version = _check_version(current, expected_version)

            result = transition(current, role, action, payload, config=config)
            saved = repository.save(result.request, expected_version=version)

            for effect in result.effects:
                person = directory.apply_effect(replace(effect, request_id=saved.id))
                if saved.person_id != person.pk:
                    repository.link_person(saved.id, person.pk)
                    saved = replace(saved, person_id=person.pk)

            record_event(
                saved.id,
                result.action,
                current.status,
                saved.status,
                actor=user,
                actor_role=role,
                reason=saved.reason,
            )
            if result.changed_status:
                notifications.schedule_notification(saved.id, result.action)
    except WorkflowError as e:
        logger.warning(
            "[WORKFLOW] %s rechazada en #%s (%s): %s",
            action, request_id, role, e,
        )
        raise

    logger.info(
        "[WORKFLOW] #%s %s por %s (%s): %s -> %s",
        saved.id, result.action, user, role, current.status, saved.status,
    )
    return replace(result, request=saved)


# -------------------------------------------------
# Lecturas
# -------------------------------------------------
def list_requests(user, view: str | None = None) -> list[RequestAggregate]:
    role = directory.role_for(user)
    statuses = statuses_visible_to(role, view)

    qs = AccessRequest.objects.filter(status__in=statuses).prefetch_related("items")
    if role == Role.SOLICITANTE:
        qs = qs.filter(owner_id=user.pk)
    return [
        repository.to_aggregate(obj, items=obj.items.all())
        for obj in qs.order_by("-created_at", "-id")
    ]


def get_request(user, request_id: int) -> RequestAggregate:
    role = directory.role_for(user)
    request = repository.load(request_id)
    if role == Role.SOLICITANTE and request.requester_id != user.pk:
        # Para un solicitante, lo ajeno no existe.
        raise NotFound(f"No existe la solicitud {request_id}.")
    return request


def dashboard_counts(user) -> dict[str, int]:
    role = directory.role_for(user)
    out: dict[str, int] = {}
    for view in views_for(role):
        qs = AccessRequest.objects.filter(status__in=statuses_visible_to(role, view))
        if role == Role.SOLICITANTE:
            qs = qs.filter(owner_id=user.pk)
        out[view.value] = qs.count()
    return out


def events_for(request_id: int) -> list[dict]:
    return [
        {
            "action": ev.action,
            "from_status": ev.from_status or None,
            "to_status": ev.to_status,
            "actor": ev.actor.get_username() if ev.actor_id else None,
            "actor_role": ev.actor_role,
            "reason": ev.reason or None,
            "created_at": ev.created_at.isoformat(),
        }
        for ev in AccessRequestEvent.objects.filter(request_id=request_id).select_related("actor")
    ]


