"""
Base Django settings for ShiftBoard.

All environment-specific settings (local.py, production.py, test.py) extend this module.
Values that MUST be overridden per environment are marked with # REQUIRED OVERRIDE.
"""

from pathlib import Path

import environ

# ---------------------------------------------------------------------------
# Path configuration
# ---------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# django-environ reads from .env file or OS environment
env = environ.Env(
    DEBUG=(bool, False),
    ALLOWED_HOSTS=(list, []),
    LOG_LEVEL=(str, "INFO"),
)

environ.Env.read_env(BASE_DIR / ".env")

# ---------------------------------------------------------------------------
# Security
# ---------------------------------------------------------------------------
SECRET_KEY = env("SECRET_KEY", default="django-insecure-shiftboard-dev-key")  # REQUIRED OVERRIDE
DEBUG = env("DEBUG")
ALLOWED_HOSTS = env("ALLOWED_HOSTS")

# ---------------------------------------------------------------------------
# Application definition
# ---------------------------------------------------------------------------
DJANGO_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
]

THIRD_PARTY_APPS = [
    "channels",
]

LOCAL_APPS = [
    "apps.staff",
    "apps.scheduling",
    "core",
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "core.middleware.StoreErrorMiddleware",  # Last-resort JSON 500 for database failures
]

ROOT_URLCONF = "shiftboard.urls"

# ---------------------------------------------------------------------------
# Templates (admin only; the board itself is served as JSON)
# ---------------------------------------------------------------------------
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

# ---------------------------------------------------------------------------
# ASGI / Channels
# ---------------------------------------------------------------------------
ASGI_APPLICATION = "shiftboard.asgi.application"
WSGI_APPLICATION = "shiftboard.wsgi.application"

CHANNEL_LAYERS = {
    "default": {
        "BACKEND": "channels_redis.core.RedisChannelLayer",
        "CONFIG": {
            "hosts": [env("REDIS_URL", default="redis://localhost:6379/0")],
        },
    },
}

# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------
DATABASES = {
    "default": env.db("DATABASE_URL", default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
}

DATABASES["default"]["ATOMIC_REQUESTS"] = True  # Wrap every request in a transaction

# ---------------------------------------------------------------------------
# Internationalization & Timezone
# ---------------------------------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ---------------------------------------------------------------------------
# Static files
# ---------------------------------------------------------------------------
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(levelname)s %(asctime)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "apps": {"handlers": ["console"], "level": env("LOG_LEVEL"), "propagate": False},
        "core": {"handlers": ["console"], "level": env("LOG_LEVEL"), "propagate": False},
    },
}

# ---------------------------------------------------------------------------
# ShiftBoard Business Rules (override in settings or environment if needed)
# ---------------------------------------------------------------------------
SHIFTBOARD = {
    # The single month the board is scheduling; assignments carry only a day number
    "YEAR": env.int("BOARD_YEAR", default=2025),
    "MONTH": env.int("BOARD_MONTH", default=1),
    # Days of the active month rendered as holidays (New Year, MLK Day)
    "HOLIDAYS": env.list("BOARD_HOLIDAYS", cast=int, default=[1, 20]),
    # Shift category names are trimmed, then must be 1..50 characters
    "CATEGORY_NAME_MIN_LENGTH": 1,
    "CATEGORY_NAME_MAX_LENGTH": 50,
    # Colour tags cycled through when a category is created without one
    "CATEGORY_COLORS": [
        "bg-orange-50 border-orange-200",
        "bg-purple-50 border-purple-200",
        "bg-yellow-50 border-yellow-200",
        "bg-indigo-50 border-indigo-200",
    ],
    # Offered in the staff form; not enforced
    "SUBSPECIALTY_SUGGESTIONS": [
        "cardio",
        "pulmo",
        "gi",
        "neuro",
        "endo",
        "onco",
        "hemato",
        "nephro",
        "rheum",
        "infectious",
    ],
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
