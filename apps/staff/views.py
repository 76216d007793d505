"""
Staff API views for ShiftBoard.

View inventory:
  StaffListView     → list or search members (GET ?q=), add a member (POST)
  StaffDetailView   → one member (GET), partial update (PUT), cascade delete (DELETE)
  StaffOptionsView  → role choices and subspecialty suggestions (GET)
"""

import logging

from django.conf import settings
from django.db import transaction
from django.http import HttpRequest, HttpResponse

from apps.scheduling.services import AssignmentService
from apps.staff.models import StaffMember
from core.api import JsonView, notify_board_changed

logger = logging.getLogger(__name__)


class StaffListView(JsonView):
    def get(self, request: HttpRequest) -> HttpResponse:
        """List the roster, filtered by ?q= against name, role and subspecialty."""
        members = AssignmentService.list_staff(query=request.GET.get("q"))
        return self.ok([member.as_dict() for member in members])

    def post(self, request: HttpRequest) -> HttpResponse:
        member = AssignmentService.add_staff_member(self.read_json(request))
        transaction.on_commit(notify_board_changed)
        return self.ok(member.as_dict(), status=201)


class StaffDetailView(JsonView):
    def get(self, request: HttpRequest, staff_id: str) -> HttpResponse:
        member = AssignmentService.get_staff_member(staff_id)
        if member is None:
            return self.not_found(f"Staff member '{staff_id}' not found.")
        return self.ok(member.as_dict())

    def put(self, request: HttpRequest, staff_id: str) -> HttpResponse:
        member = AssignmentService.update_staff_member(staff_id, self.read_json(request))
        transaction.on_commit(notify_board_changed)
        return self.ok(member.as_dict())

    def delete(self, request: HttpRequest, staff_id: str) -> HttpResponse:
        """Delete the member along with every slot they hold."""
        removed = AssignmentService.delete_staff_member(staff_id)
        logger.info("Staff member %s deleted via API (%d assignment(s) removed)", staff_id, removed)
        transaction.on_commit(notify_board_changed)
        return self.no_content()


class StaffOptionsView(JsonView):
    """Values the staff form offers. Subspecialties are suggestions only."""

    def get(self, request: HttpRequest) -> HttpResponse:
        return self.ok({
            "roles": [{"value": value, "label": str(label)} for value, label in StaffMember.Role.choices],
            "subspecialty_suggestions": list(settings.SHIFTBOARD["SUBSPECIALTY_SUGGESTIONS"]),
        })
