"""
Interaction controller for the board.

Turns operator gestures into AssignmentService calls and decides when a
confirmation step is needed. The gesture state is an explicit value: every
method takes the current state and returns a Transition holding the next one.
The controller itself keeps only the projection cache, so one controller can
serve any number of sessions.

State machine per gesture class:

  Direct assignment (click with an armed staff member)
    Idle --arm--> StaffArmed
    StaffArmed --click empty--> assign, StaffArmed
    StaffArmed --click occupied--> AwaitingReplaceConfirmation
    AwaitingReplaceConfirmation --confirm--> assign, StaffArmed
    AwaitingReplaceConfirmation --cancel--> Idle
    StaffArmed --disarm--> Idle

  Drag-move / swap
    Idle --drag_start on occupied--> Dragging
    Dragging --drop on source--> Idle (no-op)
    Dragging --drop on empty--> move, Idle
    Dragging --drop on occupied--> AwaitingSwapConfirmation
    AwaitingSwapConfirmation --confirm--> swap, Idle
    AwaitingSwapConfirmation --cancel--> Idle
    Dragging --drag_cancel--> Idle

  Per-cell and entity controls (always confirmed)
    Idle --request_*--> AwaitingCellConfirmation / AwaitingDeleteConfirmation
    --confirm--> service call, Idle
    --cancel--> Idle

Every pending state captures the slot and the staff identities involved, so
confirm can finish the action and cancel can drop it without touching the
store. A gesture that does not apply to the current state returns the state
unchanged.

Error policy: any service error resets to Idle and rebuilds the projection
from the store. Single-slot writes patch the projection in place; move, swap
and cascading deletes rebuild it.
"""

import logging
from dataclasses import dataclass, fields
from typing import Callable, ClassVar, Optional, Union

from django.db import DatabaseError, models
from django.utils.translation import gettext_lazy as _

from apps.scheduling.exceptions import SchedulingError, StoreUnavailable
from apps.scheduling.models import Slot
from apps.scheduling.projection import AssignmentProjection
from apps.scheduling.services import AssignmentService

logger = logging.getLogger(__name__)


class Effect(models.TextChoices):
    NONE = "none", _("No change")
    ASSIGNED = "assigned", _("Assigned")
    REMOVED = "removed", _("Removed")
    MOVED = "moved", _("Moved")
    SWAPPED = "swapped", _("Swapped")
    STAFF_DELETED = "staff_deleted", _("Staff member deleted")
    CATEGORY_DELETED = "category_deleted", _("Shift category deleted")


class CellAction(models.TextChoices):
    ADD = "add", _("Add assignment")
    EDIT = "edit", _("Edit assignment")
    DELETE = "delete", _("Delete assignment")


class EntityKind(models.TextChoices):
    STAFF = "staff", _("Staff member")
    CATEGORY = "category", _("Shift category")


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    kind: ClassVar[str] = "idle"


@dataclass(frozen=True)
class StaffArmed:
    kind: ClassVar[str] = "staff_armed"

    staff_id: str


@dataclass(frozen=True)
class AwaitingReplaceConfirmation:
    kind: ClassVar[str] = "awaiting_replace_confirmation"

    slot: Slot
    staff_id: str
    current_staff_id: str


@dataclass(frozen=True)
class Dragging:
    kind: ClassVar[str] = "dragging"

    source: Slot
    staff_id: str


@dataclass(frozen=True)
class AwaitingSwapConfirmation:
    kind: ClassVar[str] = "awaiting_swap_confirmation"

    source: Slot
    target: Slot
    source_staff_id: str
    target_staff_id: str


@dataclass(frozen=True)
class AwaitingCellConfirmation:
    kind: ClassVar[str] = "awaiting_cell_confirmation"

    action: CellAction
    slot: Slot
    staff_id: Optional[str] = None
    current_staff_id: Optional[str] = None


@dataclass(frozen=True)
class AwaitingDeleteConfirmation:
    """`affected` is the number of assignments the cascade will remove."""

    kind: ClassVar[str] = "awaiting_delete_confirmation"

    entity: EntityKind
    entity_id: str
    affected: int = 0


BoardState = Union[
    Idle,
    StaffArmed,
    AwaitingReplaceConfirmation,
    Dragging,
    AwaitingSwapConfirmation,
    AwaitingCellConfirmation,
    AwaitingDeleteConfirmation,
]

PENDING_STATES = (
    AwaitingReplaceConfirmation,
    AwaitingSwapConfirmation,
    AwaitingCellConfirmation,
    AwaitingDeleteConfirmation,
)


def describe_state(state: BoardState) -> dict:
    """Serialize a state for the board session protocol."""
    payload = {"state": state.kind}
    for field in fields(state):
        value = getattr(state, field.name)
        payload[field.name] = value.as_dict() if isinstance(value, Slot) else value
    return payload


@dataclass(frozen=True)
class Transition:
    """The outcome of one gesture: the next state and what happened to the store."""

    state: BoardState
    effect: Effect = Effect.NONE
    error: Optional[str] = None
    reloaded: bool = False

    @property
    def changed(self) -> bool:
        return self.effect != Effect.NONE

    def as_dict(self) -> dict:
        return {
            "state": describe_state(self.state),
            "effect": self.effect.value,
            "error": self.error,
            "reloaded": self.reloaded,
        }


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class InteractionController:
    """
    Mediates gestures into service calls.

    Args:
        projection: Cache used to decide whether a slot is occupied. Built from
                    the store when omitted.
        service:    The service object to call; AssignmentService by default.
    """

    def __init__(self, projection: Optional[AssignmentProjection] = None, service=AssignmentService):
        self.service = service
        self.projection = projection if projection is not None else AssignmentProjection.from_store()

    # ------------------------------------------------------------------
    # Direct assignment
    # ------------------------------------------------------------------

    def arm(self, state: BoardState, staff_id: str) -> Transition:
        """Select a staff member for click-assignment. Arming the armed member disarms."""
        if isinstance(state, StaffArmed) and state.staff_id == staff_id:
            return Transition(Idle())
        if isinstance(state, (Idle, StaffArmed)):
            return Transition(StaffArmed(staff_id))
        return Transition(state)

    def disarm(self, state: BoardState) -> Transition:
        if isinstance(state, (StaffArmed, AwaitingReplaceConfirmation)):
            return Transition(Idle())
        return Transition(state)

    def click(self, state: BoardState, slot: Slot) -> Transition:
        """Assign the armed member to `slot`, asking first if someone is already there."""
        if not isinstance(state, StaffArmed):
            return Transition(state)

        slot = Slot(*slot)
        current = self.projection.occupant(slot)
        if current == state.staff_id:
            return Transition(state)
        if current is not None:
            return Transition(AwaitingReplaceConfirmation(slot, state.staff_id, current))
        return self._assign(slot, state.staff_id, next_state=state)

    # ------------------------------------------------------------------
    # Drag-move / swap
    # ------------------------------------------------------------------

    def drag_start(self, state: BoardState, slot: Slot) -> Transition:
        if not isinstance(state, (Idle, StaffArmed)):
            return Transition(state)

        slot = Slot(*slot)
        occupant = self.projection.occupant(slot)
        if occupant is None:
            return Transition(state)
        return Transition(Dragging(slot, occupant))

    def drop(self, state: BoardState, target: Slot) -> Transition:
        """Move onto an empty target; ask before swapping with an occupied one."""
        if not isinstance(state, Dragging):
            return Transition(state)

        target = Slot(*target)
        if target == state.source:
            return Transition(Idle())

        current = self.projection.occupant(target)
        if current is not None:
            return Transition(
                AwaitingSwapConfirmation(state.source, target, state.staff_id, current)
            )
        return self._run(
            lambda: self.service.move(state.source, target),
            effect=Effect.MOVED,
            next_state=Idle(),
        )

    def drag_cancel(self, state: BoardState) -> Transition:
        if isinstance(state, Dragging):
            return Transition(Idle())
        return Transition(state)

    # ------------------------------------------------------------------
    # Per-cell and entity controls
    # ------------------------------------------------------------------

    def request_add(self, state: BoardState, slot: Slot, staff_id: str) -> Transition:
        return self._request_cell(state, CellAction.ADD, slot, staff_id)

    def request_edit(self, state: BoardState, slot: Slot, staff_id: str) -> Transition:
        return self._request_cell(state, CellAction.EDIT, slot, staff_id)

    def request_delete(self, state: BoardState, slot: Slot) -> Transition:
        if not self.projection.is_occupied(slot):
            return Transition(state)
        return self._request_cell(state, CellAction.DELETE, slot, None)

    def request_delete_staff(self, state: BoardState, staff_id: str) -> Transition:
        if not isinstance(state, (Idle, StaffArmed)):
            return Transition(state)
        return Transition(
            AwaitingDeleteConfirmation(
                EntityKind.STAFF, staff_id, self.projection.load_count(staff_id)
            )
        )

    def request_delete_category(self, state: BoardState, category_id: str) -> Transition:
        if not isinstance(state, (Idle, StaffArmed)):
            return Transition(state)
        return Transition(
            AwaitingDeleteConfirmation(
                EntityKind.CATEGORY, category_id, self.projection.count_in_category(category_id)
            )
        )

    def _request_cell(
        self, state: BoardState, action: CellAction, slot: Slot, staff_id: Optional[str]
    ) -> Transition:
        if not isinstance(state, (Idle, StaffArmed)):
            return Transition(state)
        slot = Slot(*slot)
        return Transition(
            AwaitingCellConfirmation(action, slot, staff_id, self.projection.occupant(slot))
        )

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    def confirm(self, state: BoardState) -> Transition:
        """Carry out the pending action held by `state`."""
        if isinstance(state, AwaitingReplaceConfirmation):
            return self._assign(state.slot, state.staff_id, next_state=StaffArmed(state.staff_id))

        if isinstance(state, AwaitingSwapConfirmation):
            return self._run(
                lambda: self.service.swap(state.source, state.target),
                effect=Effect.SWAPPED,
                next_state=Idle(),
            )

        if isinstance(state, AwaitingCellConfirmation):
            if state.action == CellAction.DELETE:
                return self._run(
                    lambda: self.service.remove(state.slot.day, state.slot.category_id),
                    effect=Effect.REMOVED,
                    next_state=Idle(),
                    patch=lambda: self.projection.record_removal(state.slot),
                )
            return self._assign(state.slot, state.staff_id, next_state=Idle())

        if isinstance(state, AwaitingDeleteConfirmation):
            if state.entity == EntityKind.STAFF:
                call = lambda: self.service.delete_staff_member(state.entity_id)  # noqa: E731
                effect = Effect.STAFF_DELETED
            else:
                call = lambda: self.service.delete_shift_category(state.entity_id)  # noqa: E731
                effect = Effect.CATEGORY_DELETED
            return self._run(call, effect=effect, next_state=Idle(), always_changed=True)

        return Transition(state)

    def cancel(self, state: BoardState) -> Transition:
        """Discard a pending action or an in-flight drag without calling the service."""
        if isinstance(state, PENDING_STATES + (Dragging,)):
            return Transition(Idle())
        return Transition(state)

    # ------------------------------------------------------------------
    # Service calls
    # ------------------------------------------------------------------

    def _assign(self, slot: Slot, staff_id: str, next_state: BoardState) -> Transition:
        return self._run(
            lambda: self.service.assign(slot.day, slot.category_id, staff_id),
            effect=Effect.ASSIGNED,
            next_state=next_state,
            patch=lambda: self.projection.record_assignment(slot, staff_id),
            always_changed=True,
        )

    def _run(
        self,
        call: Callable,
        effect: Effect,
        next_state: BoardState,
        patch: Optional[Callable] = None,
        always_changed: bool = False,
    ) -> Transition:
        """
        Invoke a service call and bring the projection up to date.

        Args:
            call:           Zero-argument callable performing the write.
            effect:         Effect reported on success.
            next_state:     State to move to on success.
            patch:          In-place projection update for single-slot writes;
                            when omitted the projection is rebuilt.
            always_changed: Report `effect` even if the call returned a falsy value
                            (move/swap/remove return False when nothing changed).

        Returns:
            Transition. On error the state is Idle and the projection has been
            reloaded from the store.
        """
        try:
            result = call()
        except SchedulingError as exc:
            if isinstance(exc, StoreUnavailable):
                logger.error("Store unavailable during %s; reloading board", effect.value)
            else:
                logger.info("Gesture refused (%s): %s", exc.code, exc.message)
            return Transition(Idle(), Effect.NONE, error=exc.message, reloaded=self.reload_projection())

        changed = always_changed or bool(result)
        if changed and patch is not None:
            patch()
            return Transition(next_state, effect)
        return Transition(next_state, effect if changed else Effect.NONE, reloaded=self.reload_projection())

    def reload_projection(self) -> bool:
        """Rebuild the projection from the store. Returns False if that failed."""
        try:
            self.projection.reload()
        except DatabaseError:
            logger.exception("Projection reload failed; board is showing stale data")
            return False
        return True
