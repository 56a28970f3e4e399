"""Bandejas y etiquetas de estado por rol."""
from dataclasses import replace

import pytest

from apps.access.workflow import (
    InboxView,
    RequestStatus,
    Role,
    Unauthorized,
    is_visible_to,
    statuses_visible_to,
    visible_status_label,
)
from apps.access.workflow.projections import DEFAULT_VIEW, project, views_for
from apps.access.workflow.states import Phase, phase_of

pytestmark = pytest.mark.unit


def _phases(statuses):
    return {phase_of(s) or s for s in statuses}


def test_coordinator_inbox_is_only_pending():
    statuses = statuses_visible_to(Role.COORDINADOR, InboxView.PENDIENTES)
    assert statuses == {
        RequestStatus.PENDIENTE_ALTA,
        RequestStatus.PENDIENTE_BAJA,
        RequestStatus.PENDIENTE_MODIFICACION,
    }


def test_coordinator_follow_up_covers_everything_in_process():
    statuses = statuses_visible_to(Role.COORDINADOR, "seguimiento")
    assert _phases(statuses) == {
        Phase.EN_PROCESO,
        Phase.TECNICO,
        Phase.PARA_VALIDAR,
        Phase.COMPLETADO,
        RequestStatus.OBSERVADO,
    }


def test_technician_never_sees_pending():
    for view in views_for(Role.TECNICO):
        assert not any(phase_of(s) == Phase.PENDIENTE for s in statuses_visible_to(Role.TECNICO, view))

    assert _phases(statuses_visible_to(Role.TECNICO, "pendientes")) == {Phase.EN_PROCESO, Phase.TECNICO}
    assert _phases(statuses_visible_to(Role.TECNICO, "enviadas")) == {Phase.PARA_VALIDAR, Phase.COMPLETADO}


def test_approver_inboxes():
    assert _phases(statuses_visible_to(Role.APROBADOR)) == {Phase.PARA_VALIDAR}
    assert _phases(statuses_visible_to(Role.APROBADOR, "validadas")) == {Phase.COMPLETADO}


def test_requester_sees_every_status():
    assert statuses_visible_to(Role.SOLICITANTE) == frozenset(RequestStatus)


def test_default_view_is_the_first_inbox():
    for role in Role:
        assert DEFAULT_VIEW[role] == views_for(role)[0]


@pytest.mark.parametrize(
    "role, view",
    [
        (Role.SOLICITANTE, "pendientes"),
        (Role.TECNICO, "validadas"),
        (Role.APROBADOR, "mias"),
        (Role.COORDINADOR, "no-existe"),
    ],
)
def test_foreign_inbox_is_unauthorized(role, view):
    with pytest.raises(Unauthorized):
        statuses_visible_to(role, view)


def test_is_visible_to(make_request):
    request = make_request()
    assert is_visible_to(request, Role.COORDINADOR, "pendientes")
    assert not is_visible_to(request, Role.TECNICO, "pendientes")
    assert is_visible_to(replace(request, status=RequestStatus.EN_PROCESO_ALTA), Role.TECNICO)


@pytest.mark.parametrize(
    "status, role, label",
    [
        (RequestStatus.PARA_VALIDAR_ALTA, Role.APROBADOR, "Por validar (Alta)"),
        (RequestStatus.PARA_VALIDAR_ALTA, Role.SOLICITANTE, "En trámite (Alta)"),
        (RequestStatus.EN_PROCESO_ALTA, Role.TECNICO, "Por atender (Alta)"),
        (RequestStatus.PENDIENTE_ALTA, Role.COORDINADOR, "Por iniciar (Alta)"),
        (RequestStatus.OBSERVADO, Role.SOLICITANTE, "Observada: requiere corrección (Alta)"),
        (RequestStatus.OBSERVADO, Role.TECNICO, "Observada (Alta)"),
        (RequestStatus.ANULADO, Role.APROBADOR, "Anulada (Alta)"),
    ],
)
def test_visible_status_label(make_request, status, role, label):
    assert visible_status_label(replace(make_request(), status=status), role) == label


def test_every_status_has_a_label_for_every_role(make_request):
    request = make_request()
    for status in RequestStatus:
        for role in Role:
            assert visible_status_label(replace(request, status=status), role)


def test_project_is_a_read_only_view(make_request):
    request = replace(make_request(), id=12)
    view = project(request, Role.COORDINADOR)

    assert view["id"] == 12
    assert view["kind"] == "ALTA"
    assert view["status"] == "PENDIENTE_ALTA"
    assert view["status_label"] == "Por iniciar (Alta)"
    assert view["progress"] == 0
    assert view["editable"] is False
    assert set(view["actions"]) == {"start", "observe"}
    assert [it["system_name"] for it in view["items"]] == ["Email", "SharedFolder"]
    assert view["target"]["full_name"] == "Jane Doe"

    assert project(request, Role.SOLICITANTE)["editable"] is True
