"""Endpoints JSON: formato de respuesta y mapeo de errores a HTTP."""
import json

import pytest
from django.urls import reverse

from apps.access.models import AccessRequest, System
from apps.access.workflow import RequestStatus

pytestmark = [pytest.mark.integration, pytest.mark.django_db]


def post_json(client, url, body):
    return client.post(url, data=json.dumps(body), content_type="application/json")


@pytest.fixture
def alta_body(area, catalog_rows):
    return {
        "kind": "ALTA",
        "full_name": "Jane Doe",
        "document": "30111222",
        "job_title": "Analista",
        "area": area.pk,
        "systems": [
            {"system_id": catalog_rows["email"].pk},
            {"system_id": catalog_rows["folder"].pk, "detail": "\\\\srv\\jane"},
        ],
    }


@pytest.fixture
def created(client_for, requester, alta_body):
    response = post_json(client_for(requester), reverse("access:request_list"), alta_body)
    assert response.status_code == 201
    return response.json()


def transition_url(request_id):
    return reverse("access:request_transition", args=[request_id])


# ==============================================================================
# Autenticación
# ==============================================================================

def test_anonymous_gets_401(client):
    response = client.get(reverse("access:request_list"))
    assert response.status_code == 401
    assert response.json()["error"] == "unauthenticated"


def test_user_without_role_gets_403(client, django_user_model):
    user = django_user_model.objects.create_user(username="nobody", password="x")
    client.force_login(user)
    assert client.get(reverse("access:request_list")).status_code == 403


# ==============================================================================
# Solicitudes
# ==============================================================================

def test_create_returns_the_requester_projection(created):
    assert created["status"] == RequestStatus.PENDIENTE_ALTA
    assert created["progress"] == 0
    assert set(created["actions"]) == {"annul"}
    assert [it["system_name"] for it in created["items"]] == ["Email", "SharedFolder"]


def test_create_with_invalid_form_is_400(client_for, requester, alta_body):
    alta_body.pop("full_name")
    response = post_json(client_for(requester), reverse("access:request_list"), alta_body)
    assert response.status_code == 400
    assert "full_name" in response.json()["fields"]


def test_create_without_systems_is_422(client_for, requester, alta_body):
    alta_body["systems"] = []
    response = post_json(client_for(requester), reverse("access:request_list"), alta_body)
    assert response.status_code == 422
    assert response.json()["error"] == "precondition_failed"


def test_create_as_coordinator_is_403(client_for, coordinator, alta_body):
    response = post_json(client_for(coordinator), reverse("access:request_list"), alta_body)
    assert response.status_code == 403


def test_create_accepts_multipart_with_attachment(client_for, requester, alta_body):
    from django.core.files.uploadedfile import SimpleUploadedFile

    data = {**alta_body, "systems": json.dumps(alta_body["systems"])}
    data["attachment"] = SimpleUploadedFile("nota.pdf", b"%PDF-1.4", content_type="application/pdf")
    response = client_for(requester).post(reverse("access:request_list"), data=data)

    assert response.status_code == 201
    obj = AccessRequest.objects.get(pk=response.json()["id"])
    assert obj.attachment.name.endswith(".pdf")


def test_inboxes_follow_the_role(created, client_for, requester, coordinator, technician):
    coord = client_for(coordinator).get(reverse("access:request_list")).json()
    assert coord["view"] == "pendientes"
    assert [r["id"] for r in coord["results"]] == [created["id"]]
    assert coord["results"][0]["status_label"] == "Por iniciar (Alta)"

    tech = client_for(technician).get(reverse("access:request_list")).json()
    assert tech["count"] == 0

    mine = client_for(requester).get(reverse("access:request_list")).json()
    assert mine["views"] == ["mias"]
    assert mine["count"] == 1


def test_unknown_inbox_is_403(client_for, requester):
    response = client_for(requester).get(reverse("access:request_list"), {"view": "pendientes"})
    assert response.status_code == 403


def test_detail_includes_events(created, client_for, requester):
    body = client_for(requester).get(
        reverse("access:request_detail", args=[created["id"]])).json()
    assert [ev["action"] for ev in body["events"]] == ["create"]


def test_foreign_request_is_404_for_requesters(created, client_for, other_requester):
    response = client_for(other_requester).get(
        reverse("access:request_detail", args=[created["id"]]))
    assert response.status_code == 404


def test_missing_request_is_404(client_for, coordinator):
    response = client_for(coordinator).get(reverse("access:request_detail", args=[9999]))
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_transition_happy_path(created, client_for, coordinator):
    response = post_json(client_for(coordinator), transition_url(created["id"]),
                         {"action": "start", "version": 0})
    body = response.json()
    assert response.status_code == 200
    assert body["from_status"] == RequestStatus.PENDIENTE_ALTA
    assert body["status"] == RequestStatus.EN_PROCESO_ALTA
    assert body["version"] == 1


def test_toggle_through_the_api(created, client_for, coordinator, technician, catalog_rows):
    post_json(client_for(coordinator), transition_url(created["id"]), {"action": "start"})
    response = post_json(client_for(technician), transition_url(created["id"]), {
        "action": "toggle_line_item",
        "item_id": catalog_rows["email"].pk,
        "completed": True,
        "observation": "cuenta creada",
    })
    body = response.json()
    assert body["progress"] == 50
    assert body["items"][0]["observation"] == "cuenta creada"


def test_wrong_role_is_403(created, client_for, technician):
    response = post_json(client_for(technician), transition_url(created["id"]), {"action": "start"})
    assert response.status_code == 403
    assert response.json()["action"] == "start"


def test_invalid_transition_is_409(created, client_for, approver):
    response = post_json(client_for(approver), transition_url(created["id"]), {"action": "approve"})
    assert response.status_code == 409
    assert response.json()["error"] == "invalid_transition"


def test_stale_version_is_409(created, client_for, coordinator):
    client = client_for(coordinator)
    post_json(client, transition_url(created["id"]), {"action": "start", "version": 0})
    response = post_json(client, transition_url(created["id"]),
                         {"action": "observe", "reason": "x", "version": 0})
    assert response.status_code == 409
    assert response.json()["error"] == "stale_request"


def test_observe_without_reason_is_422(created, client_for, coordinator):
    response = post_json(client_for(coordinator), transition_url(created["id"]),
                         {"action": "observe"})
    assert response.status_code == 422


def test_unknown_action_is_400(created, client_for, coordinator):
    response = post_json(client_for(coordinator), transition_url(created["id"]),
                         {"action": "teleport"})
    assert response.status_code == 400


def test_edit_while_pending(created, client_for, requester, catalog_rows):
    response = post_json(
        client_for(requester),
        reverse("access:request_edit", args=[created["id"]]),
        {"systems": [catalog_rows["erp"].pk], "version": 0},
    )
    body = response.json()
    assert response.status_code == 200
    assert [it["system_name"] for it in body["items"]] == ["SIGEIN"]
    assert body["target"]["full_name"] == "Jane Doe"


def test_malformed_json_is_422(client_for, requester):
    response = client_for(requester).post(
        reverse("access:request_list"), data="{nope", content_type="application/json")
    assert response.status_code == 422


# ==============================================================================
# Catálogo
# ==============================================================================

def test_requesters_see_enabled_systems_only(client_for, requester, catalog_rows):
    catalog_rows["erp"].is_active = False
    catalog_rows["erp"].save()

    body = client_for(requester).get(reverse("access:system_list"), {"all": "1"}).json()
    assert {s["code"] for s in body["results"]} == {"EMAIL", "SHARED", "VPN"}


def test_systems_filtered_by_kind(client_for, requester, catalog_rows):
    body = client_for(requester).get(
        reverse("access:system_list"), {"applies_to": "BAJA"}).json()
    assert "VPN" not in {s["code"] for s in body["results"]}


def test_manager_creates_updates_and_toggles(client_for, technician):
    client = client_for(technician)

    created = post_json(client, reverse("access:system_list"),
                        {"name": " Mesa  de ayuda ", "code": "mda", "applies_alta": True,
                         "applies_baja": True, "is_active": True})
    assert created.status_code == 201
    system = created.json()
    assert (system["name"], system["code"]) == ("Mesa de ayuda", "MDA")

    renamed = post_json(client, reverse("access:system_detail", args=[system["id"]]),
                        {"name": "Mesa de Ayuda"})
    assert renamed.json()["name"] == "Mesa de Ayuda"
    assert renamed.json()["code"] == "MDA"

    toggled = client.post(reverse("access:system_toggle", args=[system["id"]]))
    assert toggled.json()["is_active"] is False
    assert System.objects.get(pk=system["id"]).is_active is False


def test_requester_cannot_manage_the_catalog(client_for, requester):
    response = post_json(client_for(requester), reverse("access:system_list"),
                         {"name": "X", "code": "X", "applies_alta": True})
    assert response.status_code == 403


def test_system_that_applies_to_nothing_is_400(client_for, coordinator):
    response = post_json(client_for(coordinator), reverse("access:system_list"),
                         {"name": "Nada", "code": "NADA", "applies_alta": False,
                          "applies_baja": False})
    assert response.status_code == 400


# ==============================================================================
# Directorio y tablero
# ==============================================================================

def test_people_list(client_for, coordinator, active_person):
    body = client_for(coordinator).get(reverse("access:people_list"), {"q": "roe"}).json()
    (person,) = body["results"]
    assert person["document"] == active_person.document
    assert {s["code"] for s in person["systems"]} == {"EMAIL", "SHARED", "SIGEIN"}


def test_dashboard_counts_per_inbox(created, client_for, coordinator):
    body = client_for(coordinator).get(reverse("home")).json()
    assert body["role"] == "COORDINADOR"
    assert body["inboxes"] == {"pendientes": 1, "seguimiento": 0}


def test_dashboard_without_role_uses_the_shared_error_body(client, django_user_model):
    user = django_user_model.objects.create_user(username="nobody", password="x")
    client.force_login(user)
    response = client.get(reverse("home"))
    assert response.status_code == 403
    assert response.json()["error"] == "unauthorized"
