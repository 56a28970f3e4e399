import os

env = os.getenv("DJANGO_ENV", "development").lower().strip()

if env == "production":
    from .production import *  # noqa
elif env == "test":
    from .test import *  # noqa
else:
    from .development import *  # noqa
