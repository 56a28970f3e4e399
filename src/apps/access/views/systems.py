# src/apps/access/views/systems.py
from __future__ import annotations

from django.http import JsonResponse

from apps.access.forms import SystemForm
from apps.access.services import catalog
from apps.access.workflow import Role, Unauthorized

from .base import AccessJsonView, form_error_response

# Roles que administran el catálogo. El solicitante solo lo consulta.
CATALOG_MANAGERS = frozenset({Role.COORDINADOR, Role.TECNICO, Role.APROBADOR})


class CatalogJsonView(AccessJsonView):
    def require_manager(self, request) -> Role:
        role = self.get_role(request)
        if role not in CATALOG_MANAGERS:
            raise Unauthorized("Solo ETIC / USEI administran el catálogo de sistemas.")
        return role


class SystemCollectionView(CatalogJsonView):
    def get(self, request):
        role = self.get_role(request)
        include_disabled = request.GET.get("all") in ("1", "true") and role in CATALOG_MANAGERS
        qs = catalog.list_systems(
            applies_to=request.GET.get("applies_to") or None,
            enabled_only=not include_disabled,
        )
        return JsonResponse({"results": [catalog.system_payload(s) for s in qs]})

    def post(self, request):
        self.require_manager(request)
        data, _ = self.read_data(request)
        form = SystemForm(data)
        if not form.is_valid():
            return form_error_response(form)
        system = catalog.create_system(**form.cleaned_data)
        return JsonResponse(catalog.system_payload(system), status=201)


class SystemDetailView(CatalogJsonView):
    def get(self, request, pk: int):
        self.get_role(request)
        return JsonResponse(catalog.system_payload(catalog.get_system(pk)))

    def post(self, request, pk: int):
        self.require_manager(request)
        system = catalog.get_system(pk)
        data, _ = self.read_data(request)
        # Lo que no viene en el cuerpo conserva su valor actual.
        merged = {**catalog.system_payload(system), **dict(data.items())}
        form = SystemForm(merged, instance=system)
        if not form.is_valid():
            return form_error_response(form)
        system = catalog.update_system(pk, **form.cleaned_data)
        return JsonResponse(catalog.system_payload(system))


class SystemToggleView(CatalogJsonView):
    def post(self, request, pk: int):
        self.require_manager(request)
        system = catalog.toggle_system(pk)
        return JsonResponse(catalog.system_payload(system))
