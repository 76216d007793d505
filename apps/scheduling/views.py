"""
Scheduling API views for ShiftBoard.

View inventory:
  CategoryListView        → list categories (GET), add a category (POST)
  CategoryDetailView      → one category (GET), rename/recolour (PUT),
                            cascade delete (DELETE; 409 for the last one)
  AssignmentListView      → list all or a day range (GET), upsert a slot (POST)
  AssignmentDetailView    → one slot (GET), clear a slot (DELETE)
  MoveAssignmentView      → move an occupant to another slot (POST)
  SwapAssignmentView      → exchange two occupants (POST)
  BoardView               → everything the grid needs in one response (GET)

Every successful write broadcasts "assignments.changed" to the board group once
the request transaction commits, so open board sessions reload a projection
that includes the write.
"""

import logging

from django.db import transaction
from django.http import HttpRequest, HttpResponse

from apps.scheduling.exceptions import ValidationError
from apps.scheduling.month import ActiveMonth
from apps.scheduling.projection import AssignmentProjection
from apps.scheduling.services import AssignmentService
from core.api import JsonView, notify_board_changed, parse_slot

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request parsing
# ---------------------------------------------------------------------------


def _parse_range(params) -> tuple:
    """
    Read the optional ?start=&end= day bounds.

    Raises:
        ValidationError: Only one bound given, a bound is not an integer, or
                         start is after end.
    """
    start, end = params.get("start"), params.get("end")
    if start is None and end is None:
        return None, None
    if start is None or end is None:
        raise ValidationError("Both 'start' and 'end' are required for a range query.")
    try:
        start, end = int(start), int(end)
    except ValueError as exc:
        raise ValidationError("'start' and 'end' must be whole numbers.") from exc
    if start > end:
        raise ValidationError("'start' must not be after 'end'.")
    return start, end


# ---------------------------------------------------------------------------
# Shift categories
# ---------------------------------------------------------------------------


class CategoryListView(JsonView):
    def get(self, request: HttpRequest) -> HttpResponse:
        return self.ok([category.as_dict() for category in AssignmentService.list_categories()])

    def post(self, request: HttpRequest) -> HttpResponse:
        category = AssignmentService.add_shift_category(self.read_json(request))
        transaction.on_commit(notify_board_changed)
        return self.ok(category.as_dict(), status=201)


class CategoryDetailView(JsonView):
    def get(self, request: HttpRequest, category_id: str) -> HttpResponse:
        category = AssignmentService.get_category(category_id)
        if category is None:
            return self.not_found(f"Shift category '{category_id}' not found.")
        return self.ok(category.as_dict())

    def put(self, request: HttpRequest, category_id: str) -> HttpResponse:
        category = AssignmentService.update_shift_category(category_id, self.read_json(request))
        transaction.on_commit(notify_board_changed)
        return self.ok(category.as_dict())

    def delete(self, request: HttpRequest, category_id: str) -> HttpResponse:
        removed = AssignmentService.delete_shift_category(category_id)
        logger.info("Shift category %s deleted via API (%d assignment(s) removed)", category_id, removed)
        transaction.on_commit(notify_board_changed)
        return self.no_content()


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------


class AssignmentListView(JsonView):
    def get(self, request: HttpRequest) -> HttpResponse:
        start, end = _parse_range(request.GET)
        assignments = AssignmentService.list_assignments(start, end)
        return self.ok([assignment.as_dict() for assignment in assignments])

    def post(self, request: HttpRequest) -> HttpResponse:
        """Upsert: an occupied slot gets the new occupant."""
        data = self.read_json(request)
        slot = parse_slot(data, "slot")
        staff_id = data.get("staff_id")
        if not staff_id:
            raise ValidationError("'staff_id' is required.", fields={"staff_id": ["This field is required."]})

        assignment = AssignmentService.assign(slot.day, slot.category_id, str(staff_id))
        transaction.on_commit(notify_board_changed)
        return self.ok(assignment.as_dict(), status=201)


class AssignmentDetailView(JsonView):
    def get(self, request: HttpRequest, day: int, category_id: str) -> HttpResponse:
        assignment = AssignmentService.get_assignment(day, category_id)
        if assignment is None:
            return self.not_found(f"No assignment on day {day} for '{category_id}'.")
        return self.ok(assignment.as_dict())

    def delete(self, request: HttpRequest, day: int, category_id: str) -> HttpResponse:
        if not AssignmentService.remove(day, category_id):
            return self.not_found(f"No assignment on day {day} for '{category_id}'.")
        transaction.on_commit(notify_board_changed)
        return self.no_content()


class MoveAssignmentView(JsonView):
    def post(self, request: HttpRequest) -> HttpResponse:
        data = self.read_json(request)
        moved = AssignmentService.move(parse_slot(data.get("from"), "from"), parse_slot(data.get("to"), "to"))
        if moved:
            transaction.on_commit(notify_board_changed)
        return self.ok({"moved": moved})


class SwapAssignmentView(JsonView):
    def post(self, request: HttpRequest) -> HttpResponse:
        data = self.read_json(request)
        swapped = AssignmentService.swap(parse_slot(data.get("a"), "a"), parse_slot(data.get("b"), "b"))
        if swapped:
            transaction.on_commit(notify_board_changed)
        return self.ok({"swapped": swapped})


# ---------------------------------------------------------------------------
# Board snapshot
# ---------------------------------------------------------------------------


class BoardView(JsonView):
    """
    The whole board in one payload.

    Returns month metadata, the day list with weekend/holiday flags, categories
    in column order, staff with their load counts, and slot occupancy.
    """

    def get(self, request: HttpRequest) -> HttpResponse:
        month = ActiveMonth.from_settings()
        projection = AssignmentProjection.from_store()
        snapshot = projection.snapshot()

        staff = []
        for member in AssignmentService.list_staff():
            entry = member.as_dict()
            entry["load_count"] = projection.load_count(member.pk)
            staff.append(entry)

        return self.ok({
            "month": month.as_dict(),
            "days": month.days(),
            "categories": [category.as_dict() for category in AssignmentService.list_categories()],
            "staff": staff,
            "occupancy": snapshot["occupancy"],
            "load_counts": snapshot["load_counts"],
        })
