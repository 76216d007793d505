"""
Read-side view of the board.

AssignmentProjection answers the two questions the grid asks on every render:
who sits in a slot, and how many slots a staff member holds. It keeps no state
of its own beyond a cache of the Assignment table:

  - reload() rebuilds both maps from the store (after loads, multi-step
    protocols, and any failure)
  - record_assignment() / record_removal() patch a single slot after a
    confirmed write, keeping load counts in step with occupancy
"""

import logging
from collections import Counter
from collections.abc import Iterable
from typing import Optional

from apps.scheduling.models import Assignment, Slot

logger = logging.getLogger(__name__)


class AssignmentProjection:
    """Occupancy-by-slot and load-count-by-staff, derived from assignments."""

    def __init__(self, assignments: Iterable[Assignment] = ()):
        self._occupancy: dict[Slot, str] = {}
        self._load: Counter = Counter()
        self._fill(assignments)

    @classmethod
    def from_store(cls) -> "AssignmentProjection":
        projection = cls()
        projection.reload()
        return projection

    def _fill(self, assignments: Iterable[Assignment]) -> None:
        self._occupancy.clear()
        self._load.clear()
        for assignment in assignments:
            self.record_assignment(assignment.slot, assignment.staff_id)

    def reload(self) -> None:
        """Discard the cache and rebuild it from the Assignment table."""
        assignments = list(Assignment.objects.only("day", "category", "staff"))
        self._fill(assignments)
        logger.debug("Projection rebuilt with %d occupied slot(s)", len(self._occupancy))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def occupant(self, slot: Slot) -> Optional[str]:
        return self._occupancy.get(Slot(*slot))

    def is_occupied(self, slot: Slot) -> bool:
        return Slot(*slot) in self._occupancy

    def load_count(self, staff_id: str) -> int:
        return self._load.get(staff_id, 0)

    def count_in_category(self, category_id: str) -> int:
        return sum(1 for slot in self._occupancy if slot.category_id == category_id)

    def load_counts(self) -> dict[str, int]:
        return {staff_id: count for staff_id, count in self._load.items() if count}

    def __len__(self) -> int:
        return len(self._occupancy)

    # ------------------------------------------------------------------
    # Single-slot patches
    # ------------------------------------------------------------------

    def record_assignment(self, slot: Slot, staff_id: str) -> None:
        """Place `staff_id` in `slot`, releasing whoever held it before."""
        slot = Slot(*slot)
        previous = self._occupancy.get(slot)
        if previous == staff_id:
            return
        if previous is not None:
            self._release(previous)
        self._occupancy[slot] = staff_id
        self._load[staff_id] += 1

    def record_removal(self, slot: Slot) -> None:
        previous = self._occupancy.pop(Slot(*slot), None)
        if previous is not None:
            self._release(previous)

    def _release(self, staff_id: str) -> None:
        self._load[staff_id] -= 1
        if self._load[staff_id] <= 0:
            del self._load[staff_id]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def snapshot(self) -> dict:
        """Return occupancy and load counts in a JSON-friendly shape."""
        return {
            "occupancy": [
                {"day": slot.day, "category_id": slot.category_id, "staff_id": staff_id}
                for slot, staff_id in sorted(self._occupancy.items())
            ],
            "load_counts": self.load_counts(),
        }
