# src/apps/access/services/directory.py
"""
Directorio de personal y cuentas del portal.

- role_for(user): rol del usuario en el flujo (Account activa obligatoria).
- apply_effect(effect): aplica el efecto de una aprobación sobre Person,
  con la fila bloqueada (select_for_update) dentro de la transacción.
"""
from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Q, QuerySet

from apps.access.models import Account, Area, Person
from apps.access.workflow import (
    NotFound,
    PersonEffect,
    PersonRecord,
    PersonStatus,
    Role,
    TargetSnapshot,
    Unauthorized,
    apply_person_effect,
)

logger = logging.getLogger("apps.access")


# -------------------------------------------------
# Cuentas
# -------------------------------------------------
def account_for(user) -> Account:
    if user is None or not getattr(user, "is_authenticated", False):
        raise Unauthorized("Iniciá sesión para continuar.")
    account = (
        Account.objects.select_related("person", "area")
        .filter(user_id=user.pk, is_active=True)
        .first()
    )
    if account is None:
        raise Unauthorized(f"El usuario {user} no tiene un rol asignado en el portal.")
    return account


def role_for(user) -> Role:
    return Role(account_for(user).role)


# -------------------------------------------------
# Personas
# -------------------------------------------------
def get_person(person_id: int) -> Person:
    try:
        return Person.objects.select_related("area").get(pk=person_id)
    except Person.DoesNotExist:
        raise NotFound(f"No existe la persona {person_id}.") from None


def find_by_document(document: str) -> Person | None:
    document = " ".join(str(document or "").split())
    if not document:
        return None
    return Person.objects.select_related("area").filter(document=document).first()


def current_systems(person: Person | None) -> frozenset[int]:
    if person is None:
        return frozenset()
    return frozenset(person.systems.values_list("id", flat=True))


def to_record(person: Person) -> PersonRecord:
    return PersonRecord(
        full_name=person.full_name,
        document=person.document,
        job_title=person.job_title,
        area_id=person.area_id,
        status=PersonStatus(person.status),
        systems=current_systems(person),
        id=person.pk,
    )


def snapshot_of(person: Person) -> TargetSnapshot:
    """Snapshot de la persona para BAJA / MODIFICACION (sale del directorio, no del formulario)."""
    return TargetSnapshot(
        full_name=person.full_name,
        document=person.document,
        job_title=person.job_title,
        area_id=person.area_id,
        area_name=person.area.name if person.area_id else "",
    )


def list_people(*, status: str | None = None, q: str = "") -> QuerySet[Person]:
    qs = Person.objects.select_related("area").prefetch_related("systems")
    if status:
        qs = qs.filter(status=PersonStatus(str(status).upper()))
    q = " ".join(str(q or "").split())
    if q:
        qs = qs.filter(Q(full_name__icontains=q) | Q(document__icontains=q))
    return qs.order_by("full_name")


def person_payload(person: Person) -> dict:
    return {
        "id": person.pk,
        "full_name": person.full_name,
        "document": person.document,
        "job_title": person.job_title,
        "email": person.email,
        "area": person.area.name if person.area_id else None,
        "status": person.status,
        "systems": [
            {"id": s.pk, "name": s.name, "code": s.code}
            for s in person.systems.all()
        ],
    }


# -------------------------------------------------
# Efectos de aprobación
# -------------------------------------------------
@transaction.atomic
def apply_effect(effect: PersonEffect) -> Person:
    qs = Person.objects.select_for_update()
    person = None
    if effect.person_id:
        person = qs.filter(pk=effect.person_id).first()
    if person is None and effect.target.document:
        person = qs.filter(document=effect.target.document).first()

    before = to_record(person) if person is not None else None
    after = apply_person_effect(before, effect)

    if person is None:
        person = Person(document=after.document)
    person.full_name = after.full_name
    person.job_title = after.job_title
    person.area = Area.objects.filter(pk=after.area_id).first() if after.area_id else None
    person.status = after.status
    person.save()
    person.systems.set(sorted(after.systems))

    logger.info(
        "[WORKFLOW] Directorio: %s %s (solicitud #%s) -> %s con %d sistema(s)",
        effect.kind,
        person.document,
        effect.request_id,
        person.status,
        len(after.systems),
    )
    return person
