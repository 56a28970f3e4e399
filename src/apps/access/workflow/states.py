# src/apps/access/workflow/states.py
"""
Vocabulario del flujo de solicitudes (ALTA / BAJA / MODIFICACION).

Los valores de RequestStatus son canónicos: se guardan tal cual en la base y
los consumen los front-ends existentes. Un estado "con fase" es un par
(Phase, RequestKind); OBSERVADO y ANULADO son estados laterales que no
llevan sufijo de tipo.

Códigos numéricos heredados (columna id_estado_solicitud del sistema anterior):
    1 PENDIENTE | 2 EN_PROCESO | 3 PARA_VALIDAR | 4 COMPLETADO
    5 OBSERVADO | 6 ANULADO    | 7 TECNICO
"""
from __future__ import annotations

from typing import Union

from django.db import models


class RequestKind(models.TextChoices):
    ALTA = "ALTA", "Alta"
    BAJA = "BAJA", "Baja"
    MODIFICACION = "MODIFICACION", "Modificación"


class Phase(models.TextChoices):
    PENDIENTE = "PENDIENTE", "Pendiente"
    EN_PROCESO = "EN_PROCESO", "En proceso"
    TECNICO = "TECNICO", "Atención técnica"
    PARA_VALIDAR = "PARA_VALIDAR", "Para validar"
    COMPLETADO = "COMPLETADO", "Completado"


class RequestStatus(models.TextChoices):
    PENDIENTE_ALTA = "PENDIENTE_ALTA", "Pendiente (alta)"
    EN_PROCESO_ALTA = "EN_PROCESO_ALTA", "En proceso (alta)"
    TECNICO_ALTA = "TECNICO_ALTA", "Atención técnica (alta)"
    PARA_VALIDAR_ALTA = "PARA_VALIDAR_ALTA", "Para validar (alta)"
    COMPLETADO_ALTA = "COMPLETADO_ALTA", "Completado (alta)"

    PENDIENTE_BAJA = "PENDIENTE_BAJA", "Pendiente (baja)"
    EN_PROCESO_BAJA = "EN_PROCESO_BAJA", "En proceso (baja)"
    TECNICO_BAJA = "TECNICO_BAJA", "Atención técnica (baja)"
    PARA_VALIDAR_BAJA = "PARA_VALIDAR_BAJA", "Para validar (baja)"
    COMPLETADO_BAJA = "COMPLETADO_BAJA", "Completado (baja)"

    PENDIENTE_MODIFICACION = "PENDIENTE_MODIFICACION", "Pendiente (modificación)"
    EN_PROCESO_MODIFICACION = "EN_PROCESO_MODIFICACION", "En proceso (modificación)"
    TECNICO_MODIFICACION = "TECNICO_MODIFICACION", "Atención técnica (modificación)"
    PARA_VALIDAR_MODIFICACION = "PARA_VALIDAR_MODIFICACION", "Para validar (modificación)"
    COMPLETADO_MODIFICACION = "COMPLETADO_MODIFICACION", "Completado (modificación)"

    OBSERVADO = "OBSERVADO", "Observado"
    ANULADO = "ANULADO", "Anulado"


class Role(models.TextChoices):
    SOLICITANTE = "SOLICITANTE", "Solicitante (OGA)"
    COORDINADOR = "COORDINADOR", "Coordinación (USEI)"
    TECNICO = "TECNICO", "Técnico (ETIC)"
    APROBADOR = "APROBADOR", "Jefatura (Jefe ETIC)"


class Action(models.TextChoices):
    START = "start", "Iniciar"
    SEND_TO_TECHNICAL = "send_to_technical", "Pasar a atención técnica"
    TOGGLE_LINE_ITEM = "toggle_line_item", "Marcar sistema"
    SEND_TO_VALIDATE = "send_to_validate", "Enviar a validar"
    APPROVE = "approve", "Aprobar"
    OBSERVE = "observe", "Observar"
    RESUBMIT = "resubmit", "Reenviar"
    ANNUL = "annul", "Anular"


class ItemStatus(models.TextChoices):
    PENDIENTE = "PENDIENTE", "Pendiente"
    COMPLETADO = "COMPLETADO", "Completado"


class PersonStatus(models.TextChoices):
    ACTIVO = "ACTIVO", "Activo"
    INACTIVO = "INACTIVO", "Inactivo"


# Construido una sola vez: RequestStatus(...) falla si falta algún par.
_STATUS_BY_PAIR: dict[tuple[Phase, RequestKind], RequestStatus] = {
    (phase, kind): RequestStatus(f"{phase.value}_{kind.value}")
    for phase in Phase
    for kind in RequestKind
}
_PAIR_BY_STATUS: dict[RequestStatus, tuple[Phase, RequestKind]] = {
    status: pair for pair, status in _STATUS_BY_PAIR.items()
}

LEGACY_CODES: dict[Union[Phase, RequestStatus], int] = {
    Phase.PENDIENTE: 1,
    Phase.EN_PROCESO: 2,
    Phase.PARA_VALIDAR: 3,
    Phase.COMPLETADO: 4,
    RequestStatus.OBSERVADO: 5,
    RequestStatus.ANULADO: 6,
    Phase.TECNICO: 7,
}
_BY_LEGACY_CODE = {code: stage for stage, code in LEGACY_CODES.items()}


def coerce_status(value: Union[str, RequestStatus]) -> RequestStatus:
    """Convierte cadenas en RequestStatus; lanza ValueError si es inválido."""
    if isinstance(value, RequestStatus):
        return value
    return RequestStatus(str(value))


def coerce_kind(value: Union[str, RequestKind]) -> RequestKind:
    if isinstance(value, RequestKind):
        return value
    return RequestKind(str(value).strip().upper())


def status_for(phase: Phase, kind: RequestKind) -> RequestStatus:
    return _STATUS_BY_PAIR[(Phase(phase), RequestKind(kind))]


def phase_of(status: Union[str, RequestStatus]) -> Phase | None:
    """Fase del estado; None para OBSERVADO / ANULADO."""
    pair = _PAIR_BY_STATUS.get(coerce_status(status))
    return pair[0] if pair else None


def kind_of(status: Union[str, RequestStatus]) -> RequestKind | None:
    pair = _PAIR_BY_STATUS.get(coerce_status(status))
    return pair[1] if pair else None


def stage_of(status: Union[str, RequestStatus]) -> Union[Phase, RequestStatus]:
    """
    Posición del estado en el flujo, independiente del tipo:
    la fase para estados con sufijo, el propio estado para los laterales.
    """
    status = coerce_status(status)
    return phase_of(status) or status


def is_terminal(status: Union[str, RequestStatus]) -> bool:
    status = coerce_status(status)
    return status == RequestStatus.ANULADO or phase_of(status) == Phase.COMPLETADO


def statuses_for_stages(stages, kinds=None) -> frozenset[RequestStatus]:
    """Expande fases (para todos los tipos) y estados laterales a estados concretos."""
    kinds = tuple(kinds or RequestKind)
    out: set[RequestStatus] = set()
    for stage in stages:
        if isinstance(stage, RequestStatus):
            out.add(stage)
            continue
        for kind in kinds:
            out.add(status_for(stage, kind))
    return frozenset(out)


def legacy_code(status: Union[str, RequestStatus]) -> int:
    return LEGACY_CODES[stage_of(status)]


def status_from_legacy_code(code: int, kind: Union[str, RequestKind]) -> RequestStatus:
    try:
        stage = _BY_LEGACY_CODE[int(code)]
    except (KeyError, TypeError, ValueError):
        raise ValueError(f"Código de estado desconocido: {code!r}") from None
    if isinstance(stage, RequestStatus):
        return stage
    return status_for(stage, coerce_kind(kind))
