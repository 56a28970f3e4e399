from .base import *  # noqa
from .base import _env_list
import os
import dj_database_url

# =========================
# CORE
# =========================

DEBUG = False


# =========================
# HOSTS / CSRF
# =========================

ALLOWED_HOSTS = _env_list("ALLOWED_HOSTS")

# Fallback seguro (evita DisallowedHost)
if not ALLOWED_HOSTS:
    ALLOWED_HOSTS = [".up.railway.app"]

CSRF_TRUSTED_ORIGINS = _env_list("CSRF_TRUSTED_ORIGINS")


# =========================
# DATABASE
# =========================

DATABASES = {
    "default": dj_database_url.config(
        default=os.getenv("DATABASE_URL"),
        conn_max_age=600,
        ssl_require=True,
    )
}


# =========================
# SECURITY / PROXY
# =========================

SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True


# =========================
# STATIC FILES
# =========================

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}


# =========================
# LOGGING
# =========================

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {"class": "logging.StreamHandler"},
    },
    "loggers": {
        "apps.access": {
            "handlers": ["console"],
            "level": os.getenv("ACCESS_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}


# =========================
# APP CONFIG
# =========================

USE_GMAIL_OAUTH = True
DEFAULT_FROM_EMAIL = os.getenv("GMAIL_OAUTH_SENDER", "no-reply@local")
