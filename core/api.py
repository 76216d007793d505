"""
Shared plumbing for the JSON API.

JsonView is the base for every API view. It:
  - parses JSON request bodies (malformed JSON is a 400)
  - maps SchedulingError subclasses to their HTTP status in one place
  - exempts the API from CSRF (it is consumed by the board client, not forms)

parse_slot() reads a {day, category_id} object for both the API and the board
session consumer.

broadcast() pushes a group event to the board's WebSocket sessions after a
write, so other operators reload.
"""

import json
import logging

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.scheduling.exceptions import SchedulingError, ValidationError
from apps.scheduling.models import Slot

logger = logging.getLogger(__name__)

BOARD_GROUP = "board"


def broadcast(payload: dict, group: str = BOARD_GROUP) -> None:
    """
    Fire-and-forget channel layer group_send from a synchronous view.

    Views schedule this with transaction.on_commit, so it runs after the write
    has committed. Failures are logged and swallowed; the write has already
    succeeded and the response must report that.

    Args:
        payload: Dict passed to group_send; its "type" names the consumer
                 handler (dots converted to underscores by Channels).
        group:   Channel group name.
    """
    try:
        from asgiref.sync import async_to_sync
        from channels.layers import get_channel_layer
        channel_layer = get_channel_layer()
        if channel_layer is not None:
            async_to_sync(channel_layer.group_send)(group, payload)
    except Exception as exc:  # pragma: no cover
        logger.warning("WebSocket broadcast to group '%s' failed: %s", group, exc)


def notify_board_changed() -> None:
    broadcast({"type": "assignments.changed"})


def parse_slot(data, label: str = "slot") -> Slot:
    """
    Read a {day, category_id} object out of a request or message body.

    Type and range checks on `day` are left to the service so that the
    message is the same on every path.

    Raises:
        ValidationError: `data` is not an object with both keys.
    """
    if not isinstance(data, dict) or "day" not in data or not data.get("category_id"):
        message = "Expected an object with 'day' and 'category_id'."
        raise ValidationError(message, fields={label: [message]})
    return Slot(data["day"], str(data["category_id"]))


def error_response(error: SchedulingError) -> JsonResponse:
    body = {"fields": {}}
    body.update(error.as_dict())
    return JsonResponse(body, status=error.status)


@method_decorator(csrf_exempt, name="dispatch")
class JsonView(View):
    """Base view: JSON in, JSON out, SchedulingError mapped to a status code."""

    def dispatch(self, request: HttpRequest, *args, **kwargs) -> HttpResponse:
        try:
            return super().dispatch(request, *args, **kwargs)
        except SchedulingError as exc:
            if exc.status >= 500:
                logger.error("%s %s failed: %s", request.method, request.path, exc.message)
            else:
                logger.info("%s %s refused (%s): %s", request.method, request.path, exc.code, exc.message)
            return error_response(exc)

    @staticmethod
    def read_json(request: HttpRequest) -> dict:
        """
        Decode the request body as a JSON object.

        Raises:
            ValidationError: The body is not valid JSON or not an object.
        """
        try:
            data = json.loads(request.body or b"{}")
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ValidationError("Request body is not valid JSON.") from exc
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object.")
        return data

    @staticmethod
    def ok(data, status: int = 200) -> JsonResponse:
        return JsonResponse(data, status=status, safe=False)

    @staticmethod
    def no_content() -> HttpResponse:
        return HttpResponse(status=204)

    @staticmethod
    def not_found(message: str) -> JsonResponse:
        return JsonResponse({"error": message, "code": "not_found", "fields": {}}, status=404)
