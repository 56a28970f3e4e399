# src/config/settings/test.py
from .base import *  # noqa

DEBUG = False
ALLOWED_HOSTS = ["testserver", "127.0.0.1", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
DEFAULT_FROM_EMAIL = "PortalAccesos <no-reply@test>"
USE_GMAIL_OAUTH = False

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

ACCESS_WORKFLOW = {
    "TECHNICAL_STAGE": True,
    "VALIDATOR_ROLE": "TECNICO",
    "ALLOW_EMPTY_BAJA": False,
}

ACCESS_NOTIFY_EMAILS = {
    "COORDINADOR": ["usei@example.com"],
    "TECNICO": ["etic@example.com"],
    "APROBADOR": ["jefe.etic@example.com"],
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "null": {"class": "logging.NullHandler"},
    },
    "loggers": {
        "apps.access": {
            "handlers": ["null"],
            "level": "DEBUG",
            "propagate": True,
        },
    },
}
