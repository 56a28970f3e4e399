# src/apps/access/views/people.py
from __future__ import annotations

from django.http import JsonResponse

from apps.access.services import directory

from .base import AccessJsonView


class PeopleListView(AccessJsonView):
    """Directorio de personal (?status=ACTIVO|INACTIVO&q=...)."""

    def get(self, request):
        self.get_role(request)
        people = directory.list_people(
            status=request.GET.get("status") or None,
            q=request.GET.get("q", ""),
        )
        return JsonResponse({"results": [directory.person_payload(p) for p in people]})
