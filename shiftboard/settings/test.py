"""Settings used by the test suite (manage.py test / pytest)."""

from .base import *  # noqa: F401, F403

DEBUG = False
SECRET_KEY = "shiftboard-tests-only"
ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
        "ATOMIC_REQUESTS": True,
    }
}

CHANNEL_LAYERS = {
    "default": {"BACKEND": "channels.layers.InMemoryChannelLayer"},
}

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

# Fixed month so day-range assertions do not depend on the environment
SHIFTBOARD = {
    **SHIFTBOARD,  # noqa: F405
    "YEAR": 2025,
    "MONTH": 1,
    "HOLIDAYS": [1, 20],
}

LOGGING["loggers"]["apps"]["level"] = "WARNING"  # noqa: F405
LOGGING["loggers"]["core"]["level"] = "WARNING"  # noqa: F405
