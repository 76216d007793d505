"""WSGI configuration for ShiftBoard (HTTP only; use asgi.py for board sessions)."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "shiftboard.settings.local")

application = get_wsgi_application()
