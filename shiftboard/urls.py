"""
ShiftBoard root URL configuration.

URL namespaces follow the pattern: app_name:view_name
  - staff:       staff roster CRUD
  - scheduling:  categories, assignments, board snapshot
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path
from django.utils import timezone


def health_check(request):
    """
    Lightweight health check endpoint for load balancers and uptime checks.

    Returns 200 OK with a JSON body confirming the app and DB are reachable.
    """
    # Ping the database to catch connection issues early
    try:
        from django.db import connection
        connection.ensure_connection()
        db_ok = True
    except Exception:
        db_ok = False

    status = 200 if db_ok else 503
    return JsonResponse(
        {
            "status": "ok" if db_ok else "degraded",
            "db": db_ok,
            "timestamp": timezone.now().isoformat(),
        },
        status=status,
    )


urlpatterns = [
    # Health check (no auth, must be fast)
    path("health/", health_check, name="health_check"),

    # Django admin
    path("admin/", admin.site.urls),

    # JSON API
    path("api/staff/", include("apps.staff.urls", namespace="staff")),
    path("api/", include("apps.scheduling.urls", namespace="scheduling")),
]
