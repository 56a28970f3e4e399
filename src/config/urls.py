from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("apps.core.urls")),
    path("access/", include("apps.access.urls")),
]

# Sustentos subidos (solo en DEBUG; en producción los sirve el storage).
urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
