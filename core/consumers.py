"""
WebSocket consumer for ShiftBoard's live board.

BoardConsumer is one operator's board session. It owns that operator's
gesture state and an InteractionController, relays each gesture message to
the controller, and replies with the resulting transition.

Channel group naming convention:
  - board: every open board session; receives "assignments.changed" after
    any write (from a session or from the HTTP API) and reloads its
    projection from the store.

Client messages are JSON objects {"type": <gesture>, ...}:
  arm                     {staff_id}
  disarm
  click                   {slot: {day, category_id}}
  drag_start              {slot}
  drop                    {slot}
  drag_cancel
  request_add             {slot, staff_id}
  request_edit            {slot, staff_id}
  request_delete          {slot}
  request_delete_staff    {staff_id}
  request_delete_category {category_id}
  confirm
  cancel
"""

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from apps.scheduling.controller import Idle, InteractionController, Transition
from apps.scheduling.exceptions import SchedulingError, ValidationError
from core.api import BOARD_GROUP, parse_slot

logger = logging.getLogger(__name__)


def _require(message: dict, key: str) -> str:
    value = message.get(key)
    if not value:
        raise ValidationError(f"'{key}' is required.", fields={key: ["This field is required."]})
    return str(value)


GESTURES = {
    "arm": lambda controller, state, message: controller.arm(state, _require(message, "staff_id")),
    "disarm": lambda controller, state, message: controller.disarm(state),
    "click": lambda controller, state, message: controller.click(state, parse_slot(message.get("slot"))),
    "drag_start": lambda controller, state, message: controller.drag_start(state, parse_slot(message.get("slot"))),
    "drop": lambda controller, state, message: controller.drop(state, parse_slot(message.get("slot"))),
    "drag_cancel": lambda controller, state, message: controller.drag_cancel(state),
    "request_add": lambda controller, state, message: controller.request_add(
        state, parse_slot(message.get("slot")), _require(message, "staff_id")
    ),
    "request_edit": lambda controller, state, message: controller.request_edit(
        state, parse_slot(message.get("slot")), _require(message, "staff_id")
    ),
    "request_delete": lambda controller, state, message: controller.request_delete(
        state, parse_slot(message.get("slot"))
    ),
    "request_delete_staff": lambda controller, state, message: controller.request_delete_staff(
        state, _require(message, "staff_id")
    ),
    "request_delete_category": lambda controller, state, message: controller.request_delete_category(
        state, _require(message, "category_id")
    ),
    "confirm": lambda controller, state, message: controller.confirm(state),
    "cancel": lambda controller, state, message: controller.cancel(state),
}


def apply_gesture(controller: InteractionController, state, message: dict) -> Transition:
    """
    Dispatch one client message to the controller.

    Args:
        controller: The session's controller.
        state:      The session's current gesture state.
        message:    Decoded client message; "type" names the gesture.

    Returns:
        The controller's Transition.

    Raises:
        ValidationError: Unknown gesture, or a required field is missing.
    """
    handler = GESTURES.get(message.get("type"))
    if handler is None:
        raise ValidationError(f"Unknown gesture '{message.get('type')}'.")
    return handler(controller, state, message)


class BoardConsumer(AsyncWebsocketConsumer):
    """
    One operator's live board session.

    URL: /ws/board/
    Group: board
    """

    async def connect(self) -> None:
        """Build the session's controller from the store and join the board group."""
        self.state = Idle()
        self.controller = await self._build_controller()

        await self.channel_layer.group_add(BOARD_GROUP, self.channel_name)
        await self.accept()
        logger.info("Board session %s connected.", self.channel_name)

    async def disconnect(self, close_code: int) -> None:
        await self.channel_layer.group_discard(BOARD_GROUP, self.channel_name)
        logger.info("Board session %s disconnected (code=%s).", self.channel_name, close_code)

    async def receive(self, text_data: str) -> None:
        """
        Apply a gesture and reply with the transition.

        A transition with an effect is broadcast to the board group so other
        sessions reload.

        Args:
            text_data: JSON-encoded gesture message from the browser.
        """
        try:
            message = json.loads(text_data)
        except json.JSONDecodeError:
            logger.warning("Invalid JSON received on board session %s", self.channel_name)
            await self._send_error("Message is not valid JSON.")
            return
        if not isinstance(message, dict):
            await self._send_error("Message must be a JSON object.")
            return

        try:
            transition = await self._apply(message)
        except SchedulingError as exc:
            await self._send_error(exc.message)
            return

        self.state = transition.state
        await self.send(text_data=json.dumps({"type": "transition", **transition.as_dict()}))

        if transition.changed:
            await self.channel_layer.group_send(
                BOARD_GROUP,
                {"type": "assignments.changed", "origin": self.channel_name},
            )

    # ------------------------------------------------------------------
    # Group event handlers (called by channel_layer.group_send)
    # ------------------------------------------------------------------

    async def assignments_changed(self, event: dict) -> None:
        """
        Reload after a write made elsewhere and tell the client to re-render.

        The originating session already has an up-to-date projection.

        Args:
            event: The event dict sent via group_send.
        """
        if event.get("origin") != self.channel_name:
            await self._reload()
        await self.send(text_data=json.dumps({"type": "assignments_changed"}))

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _send_error(self, message: str) -> None:
        await self.send(text_data=json.dumps({"type": "error", "error": message}))

    @database_sync_to_async
    def _build_controller(self) -> InteractionController:
        return InteractionController()

    @database_sync_to_async
    def _apply(self, message: dict) -> Transition:
        return apply_gesture(self.controller, self.state, message)

    @database_sync_to_async
    def _reload(self) -> None:
        self.controller.reload_projection()
