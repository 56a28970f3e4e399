# src/apps/access/views/base.py
from __future__ import annotations

import json
import logging

from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import HttpRequest, JsonResponse
from django.views import View

from apps.access.services import directory
from apps.access.workflow import (
    InvalidTransition,
    NotFound,
    PreconditionFailed,
    Role,
    StaleRequest,
    Unauthorized,
    WorkflowError,
)

logger = logging.getLogger("apps.access")

# Orden: la primera clase que matchee gana (StaleRequest antes que la base).
HTTP_STATUS_BY_ERROR = (
    (Unauthorized, 403),
    (NotFound, 404),
    (StaleRequest, 409),
    (InvalidTransition, 409),
    (PreconditionFailed, 422),
)


def error_response(exc: WorkflowError) -> JsonResponse:
    status = next((code for cls, code in HTTP_STATUS_BY_ERROR if isinstance(exc, cls)), 400)
    body = {"error": exc.code, "detail": exc.message}
    if exc.action:
        body["action"] = str(exc.action)
    if exc.status:
        body["status"] = str(exc.status)
    return JsonResponse(body, status=status)


def form_error_response(form) -> JsonResponse:
    return JsonResponse(
        {"error": "invalid_form", "fields": form.errors.get_json_data()},
        status=400,
    )


class AccessJsonView(LoginRequiredMixin, View):
    """
    Base de los endpoints JSON del portal.

    - Sin sesión: 401 JSON (no redirect al login).
    - WorkflowError -> código HTTP según HTTP_STATUS_BY_ERROR.
    """

    def handle_no_permission(self):
        return JsonResponse(
            {"error": "unauthenticated", "detail": "Iniciá sesión para continuar."},
            status=401,
        )

    def dispatch(self, request: HttpRequest, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except WorkflowError as exc:
            return error_response(exc)

    # -----------------------------
    # Helpers
    # -----------------------------
    def get_role(self, request: HttpRequest) -> Role:
        return directory.role_for(request.user)

    def read_data(self, request: HttpRequest):
        """(data, files): JSON si el cuerpo es JSON; si no, form/multipart."""
        if request.content_type == "application/json":
            try:
                data = json.loads(request.body or b"{}")
            except ValueError:
                raise PreconditionFailed("El cuerpo no es JSON válido.") from None
            if not isinstance(data, dict):
                raise PreconditionFailed("El cuerpo debe ser un objeto JSON.")
            return data, None
        return request.POST, request.FILES
