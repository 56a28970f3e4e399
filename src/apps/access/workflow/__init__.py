from .states import (
    Action,
    ItemStatus,
    PersonStatus,
    Phase,
    RequestKind,
    RequestStatus,
    Role,
    kind_of,
    legacy_code,
    phase_of,
    status_for,
    status_from_legacy_code,
)

from .errors import (
    InvalidTransition,
    NotFound,
    PreconditionFailed,
    StaleRequest,
    Unauthorized,
    WorkflowError,
)

from .config import DEFAULT_CONFIG, WorkflowConfig

from .aggregate import (
    LineItem,
    RequestAggregate,
    Selection,
    SystemEntry,
    TargetSnapshot,
    apply_line_item_update,
    completion_percentage,
    create_request,
    is_editable_by,
    revise_request,
)

from .effects import EffectKind, PersonEffect, PersonRecord, apply_person_effect

from .engine import TransitionResult, allowed_actions, transition

from .projections import (
    InboxView,
    is_visible_to,
    statuses_visible_to,
    visible_status_label,
)


__all__ = [
    # vocabulario
    "Action",
    "ItemStatus",
    "PersonStatus",
    "Phase",
    "RequestKind",
    "RequestStatus",
    "Role",
    "kind_of",
    "legacy_code",
    "phase_of",
    "status_for",
    "status_from_legacy_code",

    # errores
    "InvalidTransition",
    "NotFound",
    "PreconditionFailed",
    "StaleRequest",
    "Unauthorized",
    "WorkflowError",

    # configuración
    "DEFAULT_CONFIG",
    "WorkflowConfig",

    # agregado
    "LineItem",
    "RequestAggregate",
    "Selection",
    "SystemEntry",
    "TargetSnapshot",
    "apply_line_item_update",
    "completion_percentage",
    "create_request",
    "is_editable_by",
    "revise_request",

    # directorio
    "EffectKind",
    "PersonEffect",
    "PersonRecord",
    "apply_person_effect",

    # motor
    "TransitionResult",
    "allowed_actions",
    "transition",

    # proyecciones
    "InboxView",
    "is_visible_to",
    "statuses_visible_to",
    "visible_status_label",
]
