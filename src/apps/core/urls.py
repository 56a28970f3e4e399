from django.urls import path
from django.contrib.auth import views as auth_views

from .views import HomeDashboardView

urlpatterns = [
    path("", HomeDashboardView.as_view(), name="home"),

    # El login es el del admin (LOGIN_URL = "admin:login").
    # POST: logout real (Django 5+)
    path("accounts/logout/", auth_views.LogoutView.as_view(), name="logout"),
]
