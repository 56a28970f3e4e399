# src/apps/access/services/repository.py
"""
Persistencia del agregado Solicitud.

load()   -> RequestAggregate (con líneas)
insert() -> alta de la fila + líneas
save()   -> compare-and-swap sobre `version`: si otro escribió primero,
            StaleRequest y no se toca nada.
"""
from __future__ import annotations

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.access.models import AccessRequest, AccessRequestItem
from apps.access.workflow import (
    ItemStatus,
    LineItem,
    NotFound,
    RequestAggregate,
    RequestKind,
    RequestStatus,
    StaleRequest,
    TargetSnapshot,
)


def to_aggregate(obj: AccessRequest, items=None) -> RequestAggregate:
    rows = items if items is not None else obj.items.all().order_by("order", "id")
    return RequestAggregate(
        kind=RequestKind(obj.kind),
        status=RequestStatus(obj.status),
        target=TargetSnapshot(
            full_name=obj.target_full_name,
            document=obj.target_document,
            job_title=obj.target_job_title,
            area_id=obj.target_area_id,
            area_name=obj.target_area_name,
        ),
        requester_id=obj.owner_id,
        line_items=tuple(
            LineItem(
                system_id=row.system_id,
                system_name=row.system_name,
                requires_detail=row.requires_detail,
                detail=row.detail,
                status=ItemStatus(row.status),
                observation=row.observation,
                pk=row.pk,
            )
            for row in rows
        ),
        reason=obj.reason,
        attachment=obj.attachment.name or "",
        person_id=obj.person_id,
        id=obj.pk,
        created_at=obj.created_at,
        version=obj.version,
    )


def get_model(request_id: int) -> AccessRequest:
    try:
        return AccessRequest.objects.get(pk=request_id)
    except (AccessRequest.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"No existe la solicitud {request_id}.") from None


def load(request_id: int) -> RequestAggregate:
    return to_aggregate(get_model(request_id))


def _target_fields(aggregate: RequestAggregate) -> dict:
    target = aggregate.target
    return {
        "target_full_name": target.full_name,
        "target_document": target.document,
        "target_job_title": target.job_title,
        "target_area_id": target.area_id,
        "target_area_name": target.area_name,
    }


def _item_row(request_id: int, item: LineItem, order: int) -> AccessRequestItem:
    return AccessRequestItem(
        request_id=request_id,
        system_id=item.system_id,
        system_name=item.system_name,
        requires_detail=item.requires_detail,
        detail=item.detail,
        status=item.status,
        observation=item.observation,
        order=order,
    )


@transaction.atomic
def insert(aggregate: RequestAggregate, *, owner, attachment_file=None) -> RequestAggregate:
    obj = AccessRequest(
        kind=aggregate.kind,
        status=aggregate.status,
        version=0,
        person_id=aggregate.person_id,
        owner=owner,
        reason=aggregate.reason,
        attachment=aggregate.attachment or "",
        **_target_fields(aggregate),
    )
    if attachment_file is not None:
        obj.attachment.save(attachment_file.name, attachment_file, save=False)
    obj.save()

    AccessRequestItem.objects.bulk_create(
        [_item_row(obj.pk, item, order) for order, item in enumerate(aggregate.line_items)]
    )
    return load(obj.pk)


def _sync_items(aggregate: RequestAggregate) -> None:
    existing = {
        row.system_id: row
        for row in AccessRequestItem.objects.filter(request_id=aggregate.id)
    }
    wanted = aggregate.system_ids

    gone = [row.pk for system_id, row in existing.items() if system_id not in wanted]
    if gone:
        AccessRequestItem.objects.filter(pk__in=gone).delete()

    for order, item in enumerate(aggregate.line_items):
        row = existing.get(item.system_id)
        if row is None:
            _item_row(aggregate.id, item, order).save()
            continue

        changed = []
        for field, value in (
            ("system_name", item.system_name),
            ("requires_detail", item.requires_detail),
            ("detail", item.detail),
            ("status", item.status),
            ("observation", item.observation),
            ("order", order),
        ):
            if getattr(row, field) != value:
                setattr(row, field, value)
                changed.append(field)
        if changed:
            row.save(update_fields=[*changed, "updated_at"])


@transaction.atomic
def save(
    aggregate: RequestAggregate,
    *,
    expected_version: int,
    attachment_file=None,
) -> RequestAggregate:
    if aggregate.id is None:
        raise NotFound("La solicitud todavía no fue guardada.")

    updated = AccessRequest.objects.filter(
        pk=aggregate.id, version=expected_version
    ).update(
        status=aggregate.status,
        reason=aggregate.reason,
        person_id=aggregate.person_id,
        attachment=aggregate.attachment or "",
        version=F("version") + 1,
        updated_at=timezone.now(),
        **_target_fields(aggregate),
    )
    if not updated:
        if not AccessRequest.objects.filter(pk=aggregate.id).exists():
            raise NotFound(f"No existe la solicitud {aggregate.id}.")
        raise StaleRequest(
            f"La solicitud #{aggregate.id} fue modificada por otro usuario. "
            "Recargá y volvé a intentar.",
            status=aggregate.status,
        )

    _sync_items(aggregate)

    if attachment_file is not None:
        obj = AccessRequest.objects.get(pk=aggregate.id)
        obj.attachment.save(attachment_file.name, attachment_file, save=False)
        AccessRequest.objects.filter(pk=obj.pk).update(attachment=obj.attachment.name)

    return load(aggregate.id)


def link_person(request_id: int, person_id: int) -> None:
    """Enlaza la persona creada por una ALTA. No cuenta como escritura concurrente."""
    AccessRequest.objects.filter(pk=request_id).update(person_id=person_id)
