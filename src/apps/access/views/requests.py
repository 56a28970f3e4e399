# src/apps/access/views/requests.py
from __future__ import annotations

from django.http import JsonResponse

from apps.access.forms import RequestCreateForm, RequestEditForm, TransitionForm
from apps.access.services import workflow as workflow_service
from apps.access.workflow.projections import DEFAULT_VIEW, project, views_for

from .base import AccessJsonView, form_error_response


class RequestCollectionView(AccessJsonView):
    """GET: bandeja del rol (?view=...). POST: nueva solicitud."""

    def get(self, request):
        role = self.get_role(request)
        view = request.GET.get("view") or DEFAULT_VIEW[role]
        config = workflow_service.get_workflow_config()
        results = workflow_service.list_requests(request.user, view)
        return JsonResponse(
            {
                "role": role.value,
                "view": str(view),
                "views": [v.value for v in views_for(role)],
                "count": len(results),
                "results": [project(r, role, config=config) for r in results],
            }
        )

    def post(self, request):
        data, files = self.read_data(request)
        form = RequestCreateForm(data, files)
        if not form.is_valid():
            return form_error_response(form)

        saved = workflow_service.submit_request(
            request.user,
            kind=form.cleaned_data["kind"],
            target=form.to_target(),
            systems=form.cleaned_data.get("systems") or [],
            attachment=form.cleaned_data.get("attachment"),
        )
        role = self.get_role(request)
        return JsonResponse(
            project(saved, role, config=workflow_service.get_workflow_config()),
            status=201,
        )


class RequestDetailView(AccessJsonView):
    def get(self, request, pk: int):
        role = self.get_role(request)
        current = workflow_service.get_request(request.user, pk)
        body = project(current, role, config=workflow_service.get_workflow_config())
        body["events"] = workflow_service.events_for(current.id)
        return JsonResponse(body)


class RequestEditView(AccessJsonView):
    def post(self, request, pk: int):
        current = workflow_service.get_request(request.user, pk)
        data, files = self.read_data(request)
        form = RequestEditForm(data, files)
        if not form.is_valid():
            return form_error_response(form)

        saved = workflow_service.revise(
            request.user,
            pk,
            target=form.to_target(current.target),
            systems=form.to_systems(),
            attachment=form.cleaned_data.get("attachment"),
            expected_version=form.cleaned_data.get("version"),
        )
        role = self.get_role(request)
        return JsonResponse(project(saved, role, config=workflow_service.get_workflow_config()))


class RequestTransitionView(AccessJsonView):
    """POST {action, item_id?, completed?, observation?, reason?, version?}"""

    def post(self, request, pk: int):
        data, _ = self.read_data(request)
        form = TransitionForm(data)
        if not form.is_valid():
            return form_error_response(form)

        result = workflow_service.perform(
            request.user,
            pk,
            form.cleaned_data["action"],
            form.payload(),
            expected_version=form.cleaned_data.get("version"),
        )
        role = self.get_role(request)
        body = project(result.request, role, config=workflow_service.get_workflow_config())
        body["from_status"] = result.from_status.value
        return JsonResponse(body)
