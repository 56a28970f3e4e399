from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import JsonResponse
from django.views import View

from apps.access.services import directory
from apps.access.services import workflow as workflow_service
from apps.access.views.base import error_response
from apps.access.workflow import WorkflowError


class HomeDashboardView(LoginRequiredMixin, View):
    """Contadores por bandeja del rol del usuario."""

    def get(self, request):
        try:
            role = directory.role_for(request.user)
            counts = workflow_service.dashboard_counts(request.user)
        except WorkflowError as exc:
            return error_response(exc)
        return JsonResponse(
            {
                "user": request.user.get_username(),
                "role": role.value,
                "role_label": role.label,
                "inboxes": counts,
            }
        )
