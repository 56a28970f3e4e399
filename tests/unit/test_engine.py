"""Máquina de estados: aristas, permisos por rol, precondiciones y escenarios completos."""
from dataclasses import replace

import pytest

from apps.access.workflow import (
    Action,
    EffectKind,
    InvalidTransition,
    ItemStatus,
    PersonRecord,
    PersonStatus,
    PreconditionFailed,
    RequestKind,
    RequestStatus,
    Role,
    Selection,
    SystemEntry,
    TargetSnapshot,
    Unauthorized,
    WorkflowConfig,
    allowed_actions,
    apply_person_effect,
    completion_percentage,
    create_request,
    transition,
)
from apps.access.workflow.states import kind_of, phase_of

pytestmark = pytest.mark.unit

# Estados posibles para una solicitud de ALTA (con fase ALTA o laterales).
ALTA_STATUSES = [s for s in RequestStatus if kind_of(s) in (None, RequestKind.ALTA)]


def _in(request, status):
    return replace(request, status=status)


# ==============================================================================
# Orden de validación
# ==============================================================================

def test_invalid_transition_wins_over_unauthorized(make_request):
    # approve desde PENDIENTE no existe, aunque el rol tampoco sea el correcto
    with pytest.raises(InvalidTransition):
        transition(make_request(), Role.SOLICITANTE, "approve")


def test_unauthorized_wins_over_precondition(make_request):
    # observe sin motivo, pero el solicitante no puede observar
    with pytest.raises(Unauthorized):
        transition(make_request(), Role.SOLICITANTE, "observe", {})


def test_unknown_action_and_role(make_request):
    with pytest.raises(InvalidTransition):
        transition(make_request(), Role.COORDINADOR, "teleport")
    with pytest.raises(Unauthorized):
        transition(make_request(), "SUPERVISOR", "start")


def test_start_is_for_the_coordinator_only(make_request):
    request = make_request()
    for role in (Role.SOLICITANTE, Role.TECNICO, Role.APROBADOR):
        with pytest.raises(Unauthorized):
            transition(request, role, "start")

    result = transition(request, Role.COORDINADOR, "start")
    assert result.request.status == RequestStatus.EN_PROCESO_ALTA
    assert result.from_status == RequestStatus.PENDIENTE_ALTA
    assert result.changed_status
    assert result.effects == ()


# ==============================================================================
# toggle_line_item
# ==============================================================================

def test_toggle_requires_an_item_id(make_request, run):
    started = run(make_request(), (Role.COORDINADOR, "start"))
    with pytest.raises(PreconditionFailed):
        transition(started, Role.TECNICO, "toggle_line_item", {})
    with pytest.raises(PreconditionFailed):
        transition(started, Role.TECNICO, "toggle_line_item", {"item_id": "abc"})


def test_toggle_without_flag_flips_the_item(make_request, run, email_system):
    started = run(make_request(), (Role.COORDINADOR, "start"))
    once = transition(started, Role.TECNICO, "toggle_line_item", {"item_id": email_system.id})
    assert once.request.line_item(email_system.id).completed
    assert not once.changed_status

    twice = transition(once.request, Role.COORDINADOR, "toggle_line_item",
                       {"item_id": email_system.id})
    assert not twice.request.line_item(email_system.id).completed


def test_toggle_accepts_string_flags(make_request, run, email_system):
    started = run(make_request(), (Role.COORDINADOR, "start"))
    done = transition(started, Role.TECNICO, "toggle_line_item",
                      {"item_id": str(email_system.id), "completed": "true"})
    assert done.request.line_item(email_system.id).status == ItemStatus.COMPLETADO

    undone = transition(done.request, Role.TECNICO, "toggle_line_item",
                        {"item_id": email_system.id, "completed": "False"})
    assert undone.request.line_item(email_system.id).status == ItemStatus.PENDIENTE


def test_toggle_is_not_available_before_start(make_request, email_system):
    with pytest.raises(InvalidTransition):
        transition(make_request(), Role.TECNICO, "toggle_line_item",
                   {"item_id": email_system.id, "completed": True})


def test_technical_stage_is_only_for_the_technician(make_request, run, email_system):
    technical = run(make_request(), (Role.COORDINADOR, "start"),
                    (Role.TECNICO, "send_to_technical"))
    assert technical.status == RequestStatus.TECNICO_ALTA

    with pytest.raises(Unauthorized):
        transition(technical, Role.COORDINADOR, "toggle_line_item",
                   {"item_id": email_system.id, "completed": True})
    result = transition(technical, Role.TECNICO, "toggle_line_item",
                        {"item_id": email_system.id, "completed": True})
    assert result.request.status == RequestStatus.TECNICO_ALTA


# ==============================================================================
# send_to_validate
# ==============================================================================

def test_send_to_validate_needs_every_item_completed(make_request, run, email_system, shared_folder_system):
    started = run(make_request(), (Role.COORDINADOR, "start"))
    with pytest.raises(PreconditionFailed):
        transition(started, Role.TECNICO, "send_to_validate")

    half = run(started, (Role.TECNICO, "toggle_line_item",
                         {"item_id": email_system.id, "completed": True}))
    with pytest.raises(PreconditionFailed, match="50%"):
        transition(half, Role.TECNICO, "send_to_validate")

    full = run(half, (Role.TECNICO, "toggle_line_item",
                      {"item_id": shared_folder_system.id, "completed": True}))
    assert transition(full, Role.TECNICO, "send_to_validate").request.status == \
        RequestStatus.PARA_VALIDAR_ALTA


def test_send_to_validate_also_from_technical_stage(make_request, run):
    request = run(make_request(), (Role.COORDINADOR, "start"), (Role.TECNICO, "send_to_technical"))
    for item in request.line_items:
        request = run(request, (Role.TECNICO, "toggle_line_item",
                                {"item_id": item.system_id, "completed": True}))
    assert run(request, (Role.TECNICO, "send_to_validate")).status == RequestStatus.PARA_VALIDAR_ALTA


def test_empty_baja_can_be_validated_when_allowed(make_request, run):
    config = WorkflowConfig(allow_empty_baja=True)
    request = make_request("BAJA", selections=[], config=config)
    request = run(request, (Role.COORDINADOR, "start"), (Role.TECNICO, "send_to_validate"),
                  config=config)
    assert request.status == RequestStatus.PARA_VALIDAR_BAJA


def test_validator_role_is_configurable(make_request, run, email_system):
    config = WorkflowConfig(technical_stage=False, validator_role=Role.COORDINADOR)
    request = make_request(selections=[Selection(email_system)], config=config)
    request = run(request, (Role.COORDINADOR, "start"),
                  (Role.COORDINADOR, "toggle_line_item", {"item_id": email_system.id}),
                  config=config)

    with pytest.raises(Unauthorized):
        transition(request, Role.TECNICO, "send_to_validate", config=config)
    result = transition(request, Role.COORDINADOR, "send_to_validate", config=config)
    assert result.request.status == RequestStatus.PARA_VALIDAR_ALTA


def test_without_technical_stage_there_is_no_tecnico_status(make_request, run):
    config = WorkflowConfig(technical_stage=False)
    started = run(make_request(config=config), (Role.COORDINADOR, "start"), config=config)
    with pytest.raises(InvalidTransition):
        transition(started, Role.TECNICO, "send_to_technical", config=config)
    assert Action.SEND_TO_TECHNICAL not in allowed_actions(started, Role.TECNICO, config=config)


def test_invalid_validator_role_is_rejected():
    with pytest.raises(ValueError):
        WorkflowConfig(validator_role=Role.APROBADOR)


# ==============================================================================
# approve
# ==============================================================================

@pytest.mark.parametrize(
    "status",
    [s for s in ALTA_STATUSES if s != RequestStatus.PARA_VALIDAR_ALTA],
)
def test_approve_only_from_para_validar(make_request, status):
    request = _in(make_request(), status)
    with pytest.raises(InvalidTransition):
        transition(request, Role.APROBADOR, "approve")


def test_approve_is_for_the_approver(make_request, to_validation):
    ready = to_validation(make_request())
    for role in (Role.SOLICITANTE, Role.COORDINADOR, Role.TECNICO):
        with pytest.raises(Unauthorized):
            transition(ready, role, "approve")

    result = transition(ready, Role.APROBADOR, "approve")
    assert result.request.status == RequestStatus.COMPLETADO_ALTA
    assert [e.kind for e in result.effects] == [EffectKind.ACTIVATE]


def test_completed_request_accepts_no_further_action(make_request, to_validation, run, email_system):
    done = run(to_validation(make_request()), (Role.APROBADOR, "approve"))
    for role in Role:
        assert allowed_actions(done, role) == []
    with pytest.raises(InvalidTransition):
        transition(done, Role.TECNICO, "toggle_line_item", {"item_id": email_system.id})


# ==============================================================================
# observe / resubmit / annul
# ==============================================================================

def test_observe_needs_a_reason(make_request):
    with pytest.raises(PreconditionFailed):
        transition(make_request(), Role.COORDINADOR, "observe", {"reason": "   "})


@pytest.mark.parametrize(
    "status, roles",
    [
        (RequestStatus.PENDIENTE_ALTA, {Role.COORDINADOR, Role.APROBADOR}),
        (RequestStatus.EN_PROCESO_ALTA, {Role.COORDINADOR, Role.TECNICO, Role.APROBADOR}),
        (RequestStatus.TECNICO_ALTA, {Role.COORDINADOR, Role.TECNICO, Role.APROBADOR}),
        (RequestStatus.PARA_VALIDAR_ALTA, {Role.APROBADOR}),
    ],
)
def test_who_can_observe(make_request, status, roles):
    request = _in(make_request(), status)
    for role in Role:
        if role in roles:
            result = transition(request, role, "observe", {"reason": "Falta firma"})
            assert result.request.status == RequestStatus.OBSERVADO
            assert result.request.reason == "Falta firma"
        else:
            with pytest.raises(Unauthorized):
                transition(request, role, "observe", {"reason": "Falta firma"})


def test_closed_requests_cannot_be_observed(make_request):
    for status in (RequestStatus.COMPLETADO_ALTA, RequestStatus.ANULADO, RequestStatus.OBSERVADO):
        with pytest.raises(InvalidTransition):
            transition(_in(make_request(), status), Role.APROBADOR, "observe", {"reason": "x"})


def test_resubmit_goes_back_to_pending_of_the_same_kind(make_request, run):
    for kind in RequestKind:
        observed = run(make_request(kind), (Role.COORDINADOR, "observe", {"reason": "Revisar"}))
        resubmitted = run(observed, (Role.SOLICITANTE, "resubmit"))
        assert resubmitted.status == RequestStatus(f"PENDIENTE_{kind.value}")
        assert resubmitted.reason == ""


def test_only_the_requester_resubmits(make_request, run):
    observed = run(make_request(), (Role.COORDINADOR, "observe", {"reason": "Revisar"}))
    with pytest.raises(Unauthorized):
        transition(observed, Role.COORDINADOR, "resubmit")


@pytest.mark.parametrize("status", ALTA_STATUSES)
def test_annul_only_from_pending_or_observed(make_request, status):
    request = _in(make_request(), status)
    if status in (RequestStatus.PENDIENTE_ALTA, RequestStatus.OBSERVADO):
        assert transition(request, Role.SOLICITANTE, "annul").request.status == RequestStatus.ANULADO
    else:
        with pytest.raises(InvalidTransition):
            transition(request, Role.SOLICITANTE, "annul")


def test_annul_is_for_the_requester(make_request):
    with pytest.raises(Unauthorized):
        transition(make_request(), Role.COORDINADOR, "annul")


def test_annulled_is_terminal_and_has_no_effect(make_request):
    result = transition(make_request(), Role.SOLICITANTE, "annul")
    assert result.effects == ()
    for role in Role:
        assert allowed_actions(result.request, role) == []


# ==============================================================================
# allowed_actions
# ==============================================================================

def test_allowed_actions_per_role_from_pending(make_request):
    request = make_request()
    assert set(allowed_actions(request, Role.SOLICITANTE)) == {Action.ANNUL}
    assert set(allowed_actions(request, Role.COORDINADOR)) == {Action.START, Action.OBSERVE}
    assert allowed_actions(request, Role.TECNICO) == []
    assert set(allowed_actions(request, Role.APROBADOR)) == {Action.OBSERVE}


def test_allowed_actions_for_technician_in_process(make_request, run):
    started = run(make_request(), (Role.COORDINADOR, "start"))
    assert set(allowed_actions(started, Role.TECNICO)) == {
        Action.SEND_TO_TECHNICAL,
        Action.TOGGLE_LINE_ITEM,
        Action.SEND_TO_VALIDATE,
        Action.OBSERVE,
    }


# ==============================================================================
# Escenarios
# ==============================================================================

def test_jane_doe_alta_scenario(make_request, run, email_system, shared_folder_system):
    request = make_request("ALTA")
    assert request.status == RequestStatus.PENDIENTE_ALTA
    assert completion_percentage(request) == 0

    request = run(request, (Role.COORDINADOR, "start"),
                  (Role.TECNICO, "toggle_line_item", {"item_id": email_system.id, "completed": True}))
    assert completion_percentage(request) == 50

    with pytest.raises(PreconditionFailed):
        transition(request, Role.TECNICO, "send_to_validate")

    request = run(request, (Role.TECNICO, "toggle_line_item",
                            {"item_id": shared_folder_system.id, "completed": True}))
    assert completion_percentage(request) == 100

    request = run(request, (Role.TECNICO, "send_to_validate"))
    assert request.status == RequestStatus.PARA_VALIDAR_ALTA

    result = transition(request, Role.APROBADOR, "approve")
    assert result.request.status == RequestStatus.COMPLETADO_ALTA
    assert all(it.completed for it in result.request.line_items)

    person = None
    for effect in result.effects:
        person = apply_person_effect(person, effect)
    assert person.full_name == "Jane Doe"
    assert person.status == PersonStatus.ACTIVO
    assert person.systems == {email_system.id, shared_folder_system.id}


def test_baja_of_three_systems_deactivates_the_person(to_validation, run, email_system,
                                                      shared_folder_system, erp_system):
    holder = PersonRecord(
        full_name="John Roe",
        document="20333444",
        status=PersonStatus.ACTIVO,
        systems=frozenset({email_system.id, shared_folder_system.id, erp_system.id}),
        id=5,
    )
    request = create_request(
        "BAJA",
        TargetSnapshot(full_name=holder.full_name, document=holder.document),
        10,
        [Selection(email_system), Selection(shared_folder_system, detail="\\\\srv\\john"),
         Selection(erp_system)],
        current_systems=holder.systems,
        person_id=holder.id,
    )
    assert len(request.line_items) == 3

    done = transition(to_validation(request), Role.APROBADOR, "approve")
    assert done.request.status == RequestStatus.COMPLETADO_BAJA
    assert [it.status for it in done.request.line_items] == [ItemStatus.COMPLETADO] * 3

    (effect,) = done.effects
    assert effect.kind == EffectKind.DEACTIVATE
    assert effect.person_id == 5
    after = apply_person_effect(holder, effect)
    assert after.status == PersonStatus.INACTIVO
    assert after.systems == frozenset()


def test_missing_id_document_observation_round_trip(make_request, run):
    observed = run(make_request(), (Role.COORDINADOR, "observe", {"reason": "Missing ID document"}))
    assert observed.status == RequestStatus.OBSERVADO
    assert observed.reason == "Missing ID document"
    assert phase_of(observed.status) is None

    resubmitted = run(observed, (Role.SOLICITANTE, "resubmit"))
    assert resubmitted.status == RequestStatus.PENDIENTE_ALTA
    assert resubmitted.reason == ""


def test_round_trip_for_every_kind(to_validation, run, email_system, erp_system):
    holder_systems = frozenset({email_system.id})
    extra = SystemEntry(id=42, name="VPN")
    cases = {
        RequestKind.ALTA: ([Selection(email_system), Selection(erp_system)], None, None),
        RequestKind.MODIFICACION: ([Selection(erp_system), Selection(extra)], holder_systems, 5),
        RequestKind.BAJA: ([Selection(email_system)], holder_systems, 5),
    }
    for kind, (selections, held, person_id) in cases.items():
        request = create_request(kind, TargetSnapshot("Ana", "1"), 1, selections,
                                 current_systems=held, person_id=person_id)
        result = transition(to_validation(request), Role.APROBADOR, "approve")
        assert result.request.status == RequestStatus(f"COMPLETADO_{kind.value}")
        assert all(it.completed for it in result.request.line_items)
        assert len(result.effects) == 1
