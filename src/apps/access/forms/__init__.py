from .requests import RequestCreateForm, RequestEditForm, TransitionForm
from .systems import SystemForm

__all__ = [
    "RequestCreateForm",
    "RequestEditForm",
    "TransitionForm",
    "SystemForm",
]
