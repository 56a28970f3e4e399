from django.urls import path

from apps.access.views.people import PeopleListView
from apps.access.views.requests import (
    RequestCollectionView,
    RequestDetailView,
    RequestEditView,
    RequestTransitionView,
)
from apps.access.views.systems import (
    SystemCollectionView,
    SystemDetailView,
    SystemToggleView,
)


app_name = "access"

urlpatterns = [
    # solicitudes
    path("requests/", RequestCollectionView.as_view(), name="request_list"),
    path("requests/<int:pk>/", RequestDetailView.as_view(), name="request_detail"),
    path("requests/<int:pk>/edit/", RequestEditView.as_view(), name="request_edit"),
    path("requests/<int:pk>/transition/",
         RequestTransitionView.as_view(), name="request_transition"),

    # catálogo
    path("systems/", SystemCollectionView.as_view(), name="system_list"),
    path("systems/<int:pk>/", SystemDetailView.as_view(), name="system_detail"),
    path("systems/<int:pk>/toggle/", SystemToggleView.as_view(), name="system_toggle"),

    # directorio
    path("people/", PeopleListView.as_view(), name="people_list"),
]
