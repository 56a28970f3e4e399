# src/apps/access/workflow/errors.py
from __future__ import annotations


class WorkflowError(Exception):
    """Base de los errores del flujo. El mensaje se muestra al usuario."""

    code = "workflow_error"

    def __init__(self, message: str, *, action: str | None = None, status: str | None = None):
        super().__init__(message)
        self.message = message
        self.action = action
        self.status = status


class Unauthorized(WorkflowError):
    """El rol no puede ejecutar la acción desde el estado actual."""

    code = "unauthorized"


class InvalidTransition(WorkflowError):
    """La acción no existe desde el estado actual, sea cual sea el rol."""

    code = "invalid_transition"


class PreconditionFailed(WorkflowError):
    code = "precondition_failed"


class NotFound(WorkflowError):
    code = "not_found"


class StaleRequest(WorkflowError):
    """Otro usuario modificó la solicitud entre la lectura y la escritura."""

    code = "stale_request"
