"""
Fixtures compartidos de los tests del portal de accesos.

- Workflow (puro): entradas de catálogo, snapshots y una fábrica de solicitudes
  que no tocan la base.
- Django: catálogo, áreas y usuarios con su cuenta/rol, más un cliente HTTP
  ya logueado por rol.
"""
import pytest

from apps.access.workflow import (
    Role,
    Selection,
    SystemEntry,
    TargetSnapshot,
    WorkflowConfig,
    create_request,
    transition,
)


# ==============================================================================
# Workflow fixtures (sin base)
# ==============================================================================

@pytest.fixture
def email_system():
    return SystemEntry(id=1, name="Email", code="EMAIL")


@pytest.fixture
def shared_folder_system():
    return SystemEntry(id=2, name="SharedFolder", code="SHARED", requires_detail=True)


@pytest.fixture
def erp_system():
    return SystemEntry(id=3, name="SIGEIN", code="SIGEIN")


@pytest.fixture
def jane():
    return TargetSnapshot(
        full_name="Jane Doe",
        document="30111222",
        job_title="Analista",
        area_id=7,
        area_name="Recursos Humanos",
    )


@pytest.fixture
def make_request(jane, email_system, shared_folder_system):
    """Fábrica: create_request con valores razonables por defecto."""

    def _make(kind="ALTA", selections=None, target=None, config=None, **kwargs):
        if selections is None:
            selections = [
                Selection(email_system),
                Selection(shared_folder_system, detail="\\\\srv\\jane"),
            ]
        return create_request(
            kind,
            target or jane,
            kwargs.pop("creator_id", 10),
            selections,
            config=config or WorkflowConfig(),
            **kwargs,
        )

    return _make


@pytest.fixture
def run():
    """Aplica una secuencia de (rol, acción, payload) y devuelve la solicitud final."""

    def _run(request, *steps, config=None):
        config = config or WorkflowConfig()
        for step in steps:
            role, action, *rest = step
            payload = rest[0] if rest else None
            request = transition(request, role, action, payload, config=config).request
        return request

    return _run


@pytest.fixture
def to_validation(run):
    """Lleva una solicitud PENDIENTE hasta PARA_VALIDAR marcando todas sus líneas."""

    def _to_validation(request, config=None):
        steps = [(Role.COORDINADOR, "start")]
        steps += [
            (Role.TECNICO, "toggle_line_item", {"item_id": item.system_id, "completed": True})
            for item in request.line_items
        ]
        steps.append((Role.TECNICO, "send_to_validate"))
        return run(request, *steps, config=config)

    return _to_validation


# ==============================================================================
# Django fixtures
# ==============================================================================

@pytest.fixture
def area(db):
    from apps.access.models import Area

    return Area.objects.create(name="Recursos Humanos")


@pytest.fixture
def catalog_rows(db):
    from apps.access.models import System

    return {
        "email": System.objects.create(name="Email", code="EMAIL"),
        "folder": System.objects.create(
            name="SharedFolder", code="SHARED", requires_detail=True),
        "erp": System.objects.create(name="SIGEIN", code="SIGEIN"),
        "vpn": System.objects.create(name="VPN", code="VPN", applies_baja=False),
    }


@pytest.fixture
def make_user(db, django_user_model):
    from apps.access.models import Account

    def _make(username, role, email=""):
        user = django_user_model.objects.create_user(
            username=username, password="secret", email=email or f"{username}@example.com")
        Account.objects.create(user=user, role=role)
        return user

    return _make


@pytest.fixture
def requester(make_user):
    return make_user("oga", Role.SOLICITANTE)


@pytest.fixture
def other_requester(make_user):
    return make_user("oga2", Role.SOLICITANTE)


@pytest.fixture
def coordinator(make_user):
    return make_user("usei", Role.COORDINADOR)


@pytest.fixture
def technician(make_user):
    return make_user("etic", Role.TECNICO)


@pytest.fixture
def approver(make_user):
    return make_user("jefe", Role.APROBADOR)


@pytest.fixture
def active_person(db, area, catalog_rows):
    """Persona activa con Email, SharedFolder y SIGEIN."""
    from apps.access.models import Person

    person = Person.objects.create(
        full_name="John Roe", document="20333444", job_title="Cajero", area=area)
    person.systems.set([catalog_rows["email"], catalog_rows["folder"], catalog_rows["erp"]])
    return person


@pytest.fixture
def client_for(client):
    def _client_for(user):
        client.force_login(user)
        return client

    return _client_for
