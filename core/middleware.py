"""
Core middleware for ShiftBoard.

StoreErrorMiddleware:
  Catches database failures that escape a view (for example a read outside
  AssignmentService, or a failed ATOMIC_REQUESTS commit) and answers API
  requests with the same JSON error body JsonView produces, instead of
  Django's HTML 500 page.
"""

import logging

from django.db import DatabaseError

from apps.scheduling.exceptions import StoreUnavailable
from core.api import error_response

logger = logging.getLogger(__name__)


class StoreErrorMiddleware:
    """Turn an unhandled DatabaseError on an /api/ request into a JSON 500."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        """
        Render DatabaseError as a StoreUnavailable body for API paths.

        Args:
            request:   The incoming HTTP request.
            exception: The exception raised by the view.

        Returns:
            A JsonResponse for API database failures, else None so Django's
            normal handling applies.
        """
        if not isinstance(exception, DatabaseError) or not request.path.startswith("/api/"):
            return None

        logger.exception("Database failure on %s %s", request.method, request.path)
        return error_response(
            StoreUnavailable("The schedule store is unavailable. Reload the board and try again.")
        )
