# src/apps/access/workflow/projections.py
"""
Lo que ve cada rol: bandejas (qué estados entran en cada listado) y la
etiqueta de estado que se le muestra.
"""
from __future__ import annotations

from django.db import models

from .aggregate import RequestAggregate, completion_percentage, is_editable_by
from .config import DEFAULT_CONFIG, WorkflowConfig
from .engine import allowed_actions
from .errors import Unauthorized
from .states import Phase, RequestStatus, Role, stage_of, statuses_for_stages


class InboxView(models.TextChoices):
    MIAS = "mias", "Mis solicitudes"
    PENDIENTES = "pendientes", "Pendientes"
    SEGUIMIENTO = "seguimiento", "Seguimiento"
    ENVIADAS = "enviadas", "Enviadas a validar"
    VALIDADAS = "validadas", "Validadas"


_ALL_STAGES = (*Phase, RequestStatus.OBSERVADO, RequestStatus.ANULADO)

_INBOXES: dict[Role, dict[InboxView, tuple]] = {
    Role.SOLICITANTE: {
        InboxView.MIAS: _ALL_STAGES,
    },
    Role.COORDINADOR: {
        InboxView.PENDIENTES: (Phase.PENDIENTE,),
        InboxView.SEGUIMIENTO: (
            Phase.EN_PROCESO,
            Phase.TECNICO,
            Phase.PARA_VALIDAR,
            Phase.COMPLETADO,
            RequestStatus.OBSERVADO,
        ),
    },
    Role.TECNICO: {
        InboxView.PENDIENTES: (Phase.EN_PROCESO, Phase.TECNICO),
        InboxView.ENVIADAS: (Phase.PARA_VALIDAR, Phase.COMPLETADO),
    },
    Role.APROBADOR: {
        InboxView.PENDIENTES: (Phase.PARA_VALIDAR,),
        InboxView.VALIDADAS: (Phase.COMPLETADO,),
    },
}

DEFAULT_VIEW: dict[Role, InboxView] = {
    Role.SOLICITANTE: InboxView.MIAS,
    Role.COORDINADOR: InboxView.PENDIENTES,
    Role.TECNICO: InboxView.PENDIENTES,
    Role.APROBADOR: InboxView.PENDIENTES,
}

# Etiqueta por rol y posición. Lo que no figura cae en la etiqueta genérica.
_LABELS: dict[Role, dict] = {
    Role.SOLICITANTE: {
        Phase.PENDIENTE: "Pendiente",
        Phase.EN_PROCESO: "En trámite",
        Phase.TECNICO: "En trámite",
        Phase.PARA_VALIDAR: "En trámite",
        Phase.COMPLETADO: "Completada",
        RequestStatus.OBSERVADO: "Observada: requiere corrección",
    },
    Role.COORDINADOR: {
        Phase.PENDIENTE: "Por iniciar",
        Phase.EN_PROCESO: "En proceso",
        Phase.TECNICO: "En atención técnica",
        Phase.PARA_VALIDAR: "En validación",
    },
    Role.TECNICO: {
        Phase.EN_PROCESO: "Por atender",
        Phase.TECNICO: "En atención",
        Phase.PARA_VALIDAR: "Enviada a validar",
        Phase.COMPLETADO: "Validada",
    },
    Role.APROBADOR: {
        Phase.PENDIENTE: "En trámite",
        Phase.EN_PROCESO: "En trámite",
        Phase.TECNICO: "En trámite",
        Phase.PARA_VALIDAR: "Por validar",
        Phase.COMPLETADO: "Validada",
    },
}

_GENERIC_LABELS = {
    Phase.PENDIENTE: "Pendiente",
    Phase.EN_PROCESO: "En proceso",
    Phase.TECNICO: "En atención técnica",
    Phase.PARA_VALIDAR: "Para validar",
    Phase.COMPLETADO: "Completada",
    RequestStatus.OBSERVADO: "Observada",
    RequestStatus.ANULADO: "Anulada",
}


def views_for(role: Role) -> list[InboxView]:
    return list(_INBOXES[Role(role)])


def statuses_visible_to(role: Role, view: InboxView | str | None = None) -> frozenset[RequestStatus]:
    """Estados concretos que entran en la bandeja `view` del rol (o su bandeja por defecto)."""
    role = Role(role)
    try:
        view = InboxView(view) if view else DEFAULT_VIEW[role]
        stages = _INBOXES[role][view]
    except (KeyError, ValueError):
        raise Unauthorized(f"El rol {role.label} no tiene la bandeja '{view}'.") from None
    return statuses_for_stages(stages)


def is_visible_to(request: RequestAggregate, role: Role, view: InboxView | str | None = None) -> bool:
    return request.status in statuses_visible_to(role, view)


def visible_status_label(request: RequestAggregate, role: Role) -> str:
    """Ej.: 'Por validar (Alta)' para la jefatura, 'En trámite (Alta)' para OGA."""
    stage = stage_of(request.status)
    label = _LABELS[Role(role)].get(stage) or _GENERIC_LABELS[stage]
    return f"{label} ({request.kind.label})"


def project(request: RequestAggregate, role: Role, *, config: WorkflowConfig = DEFAULT_CONFIG) -> dict:
    """Vista de solo lectura para un rol (lo que devuelve la capa de transporte)."""
    role = Role(role)
    return {
        "id": request.id,
        "kind": request.kind.value,
        "status": request.status.value,
        "status_label": visible_status_label(request, role),
        "reason": request.reason or None,
        "target": {
            "full_name": request.target.full_name,
            "document": request.target.document,
            "job_title": request.target.job_title,
            "area_id": request.target.area_id,
            "area_name": request.target.area_name,
        },
        "requester_id": request.requester_id,
        "person_id": request.person_id,
        "attachment": request.attachment or None,
        "created_at": request.created_at.isoformat() if request.created_at else None,
        "version": request.version,
        "progress": round(completion_percentage(request), 2),
        "editable": is_editable_by(request, role),
        "actions": [a.value for a in allowed_actions(request, role, config=config)],
        "items": [
            {
                "id": item.pk,
                "system_id": item.system_id,
                "system_name": item.system_name,
                "requires_detail": item.requires_detail,
                "detail": item.detail,
                "status": item.status.value,
                "observation": item.observation,
            }
            for item in request.line_items
        ],
    }
