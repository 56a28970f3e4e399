from .area import Area

from .systems import System

from .person import Account, Person

from .requests import AccessRequest, AccessRequestEvent, AccessRequestItem


__all__ = [
    # directorio
    "Area",
    "Person",
    "Account",

    # catálogo
    "System",

    # solicitudes
    "AccessRequest",
    "AccessRequestItem",
    "AccessRequestEvent",
]
