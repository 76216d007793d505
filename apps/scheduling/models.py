"""
Scheduling models for ShiftBoard.

The core of the board. Defines:
  - ShiftCategory: a recurring column on the board (e.g. "Male Ward")
  - Assignment: places one staff member in one (day, category) slot

A slot is identified by its day number within the active month and its
category id. The day carries no year or month: the board schedules a single
month configured in settings.SHIFTBOARD.

Both foreign keys on Assignment are PROTECT. Deleting a category or a staff
member is done by AssignmentService, which removes dependent assignments and
the parent in one transaction.
"""

import uuid
from typing import NamedTuple

from django.core.validators import validate_slug
from django.db import models


class Slot(NamedTuple):
    """The (day, category) key of a board cell."""

    day: int
    category_id: str

    def as_dict(self) -> dict:
        return {"day": self.day, "category_id": self.category_id}


def generate_category_id() -> str:
    """Return a fresh id for a category created without one."""
    return f"shift-{uuid.uuid4().hex[:12]}"


class ShiftCategory(models.Model):
    """
    A shift column on the board.

    Ids may be human-assigned ("male-ward") or generated. The colour is a
    cosmetic tag passed through to the client untouched.

    At least one category must exist at all times; see
    AssignmentService.delete_shift_category.
    """

    id = models.CharField(
        primary_key=True,
        max_length=64,
        default=generate_category_id,
        validators=[validate_slug],
        help_text="Opaque stable identifier, e.g. 'male-ward'.",
    )
    name = models.CharField(max_length=50)
    color = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Shift Category"
        verbose_name_plural = "Shift Categories"
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return self.name

    def as_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "color": self.color}


class Assignment(models.Model):
    """
    One staff member placed in one (day, category) slot.

    The (day, category) pair is unique at the database level. Writers never
    rely on the constraint to report "slot taken"; AssignmentService.assign
    replaces the occupant instead. The surrogate id is internal to the store.
    """

    day = models.PositiveSmallIntegerField(help_text="Day of the active month (1-based).")
    category = models.ForeignKey(
        ShiftCategory,
        on_delete=models.PROTECT,
        related_name="assignments",
    )
    staff = models.ForeignKey(
        "staff.StaffMember",
        on_delete=models.PROTECT,
        related_name="assignments",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Assignment"
        verbose_name_plural = "Assignments"
        ordering = ["day", "category_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["day", "category"],
                name="unique_assignment_per_slot",
            )
        ]
        indexes = [
            models.Index(fields=["staff"], name="assignment_staff_idx"),
        ]

    def __str__(self) -> str:
        return f"Day {self.day} | {self.category_id} → {self.staff_id}"

    @property
    def slot(self) -> Slot:
        return Slot(self.day, self.category_id)

    def as_dict(self) -> dict:
        return {
            "day": self.day,
            "category_id": self.category_id,
            "staff_id": self.staff_id,
        }
