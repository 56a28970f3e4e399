# src/config/settings/base.py
from pathlib import Path
import os

# /app/src/config/settings/base.py -> parents[2] = /app/src
PROJECT_DIR = Path(__file__).resolve().parents[2]
BASE_DIR = PROJECT_DIR

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")


def _env_list(name: str, default: str = "") -> list[str]:
    return [e.strip() for e in os.getenv(name, default).split(",") if e.strip()]


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "si", "on")


INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    "apps.core.apps.CoreConfig",
    "apps.access.apps.AccessConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",

    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"
ASGI_APPLICATION = "config.asgi.application"

LANGUAGE_CODE = "es-ar"
TIME_ZONE = "America/Argentina/Tucuman"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = PROJECT_DIR / "staticfiles"

# Sustentos adjuntos a las solicitudes
MEDIA_URL = "/media/"
MEDIA_ROOT = PROJECT_DIR / "media"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Sin templates propios: el login es el del admin.
LOGIN_URL = "admin:login"
LOGIN_REDIRECT_URL = "home"
LOGOUT_REDIRECT_URL = "admin:login"

# Correo (Gmail OAuth)
USE_GMAIL_OAUTH = _env_bool("USE_GMAIL_OAUTH", False)
GMAIL_OAUTH_CLIENT_ID = os.getenv("GMAIL_OAUTH_CLIENT_ID", "")
GMAIL_OAUTH_CLIENT_SECRET = os.getenv("GMAIL_OAUTH_CLIENT_SECRET", "")
GMAIL_OAUTH_REFRESH_TOKEN = os.getenv("GMAIL_OAUTH_REFRESH_TOKEN", "")
GMAIL_OAUTH_SENDER = os.getenv("GMAIL_OAUTH_SENDER", "")

# =========================
# FLUJO DE SOLICITUDES
# =========================

# Variantes del flujo: se deciden acá, no en el motor.
ACCESS_WORKFLOW = {
    "TECHNICAL_STAGE": _env_bool("ACCESS_TECHNICAL_STAGE", True),
    "VALIDATOR_ROLE": os.getenv("ACCESS_VALIDATOR_ROLE", "TECNICO").strip().upper(),
    "ALLOW_EMPTY_BAJA": _env_bool("ACCESS_ALLOW_EMPTY_BAJA", False),
}

# Destinatarios por rol - por env (coma separada)
ACCESS_NOTIFY_EMAILS = {
    "COORDINADOR": _env_list("ACCESS_NOTIFY_COORDINADOR"),
    "TECNICO": _env_list("ACCESS_NOTIFY_TECNICO"),
    "APROBADOR": _env_list("ACCESS_NOTIFY_APROBADOR"),
}
