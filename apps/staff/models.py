"""
Staff models for ShiftBoard.

A StaffMember is anyone who can be placed on the board. Roles are a fixed
enumeration; the subspecialty is a free-form tag with suggestions offered by
the API but never enforced.

Identity is an opaque string so that records seeded or imported from other
systems can keep their ids. New members get a generated hex id.
"""

import uuid

from django.core.exceptions import ValidationError
from django.core.validators import validate_slug
from django.db import models
from django.utils.translation import gettext_lazy as _


def generate_staff_id() -> str:
    """Return a fresh opaque id for a staff member."""
    return uuid.uuid4().hex


def validate_not_blank(value: str) -> None:
    """Reject names that are empty once surrounding whitespace is removed."""
    if not value or not value.strip():
        raise ValidationError(_("This field cannot be blank."), code="blank")


class StaffMember(models.Model):
    """
    A person who can be assigned to shift slots.

    Deleting a member must go through AssignmentService.delete_staff_member,
    which removes their assignments first (the FK from Assignment is PROTECT).
    """

    class Role(models.TextChoices):
        SENIOR = "senior", _("Senior")
        JUNIOR_1 = "junior_1", _("Junior (tier 1)")
        JUNIOR_2 = "junior_2", _("Junior (tier 2)")
        EXTERNAL = "external", _("External")

    id = models.CharField(
        primary_key=True,
        max_length=64,
        default=generate_staff_id,
        validators=[validate_slug],
        help_text="Opaque stable identifier.",
    )
    name = models.CharField(max_length=100, validators=[validate_not_blank])
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.SENIOR)
    subspecialty = models.CharField(
        max_length=50,
        blank=True,
        help_text="Free-form tag, e.g. 'cardio'. Suggestions are not enforced.",
    )

    class Meta:
        verbose_name = "Staff Member"
        verbose_name_plural = "Staff Members"
        ordering = ["name"]

    def __str__(self) -> str:
        """Return the member's name and role for display."""
        return f"{self.name} ({self.get_role_display()})"

    def as_dict(self) -> dict:
        """Serialize for the JSON API. An empty subspecialty is reported as null."""
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "subspecialty": self.subspecialty or None,
        }
