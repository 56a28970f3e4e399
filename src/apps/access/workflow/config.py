# src/apps/access/workflow/config.py
from __future__ import annotations

from dataclasses import dataclass

from .states import Role


@dataclass(frozen=True)
class WorkflowConfig:
    """
    Variantes del flujo que se deciden en el borde del servicio
    (settings.ACCESS_WORKFLOW), no dentro del motor.

    - technical_stage: habilita la fase TECNICO_<tipo> (ETIC separado de USEI).
    - validator_role: quién envía a validar (COORDINADOR o TECNICO).
    - allow_empty_baja: permite crear una BAJA sin sistemas seleccionados.
    """

    technical_stage: bool = True
    validator_role: Role = Role.TECNICO
    allow_empty_baja: bool = False

    def __post_init__(self):
        object.__setattr__(self, "validator_role", Role(self.validator_role))
        if self.validator_role not in (Role.COORDINADOR, Role.TECNICO):
            raise ValueError(
                f"validator_role debe ser COORDINADOR o TECNICO, no {self.validator_role!r}.")


DEFAULT_CONFIG = WorkflowConfig()
