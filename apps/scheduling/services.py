"""
Assignment service for ShiftBoard.

Every write to the board goes through AssignmentService. It owns the rules
that keep a slot to at most one occupant and the protocols that move people
around without leaving the board half-changed:

  assign                 upsert a slot; an occupied slot is replaced, never refused
  remove                 clear a slot; clearing an empty slot is not an error
  move                   clear the source and upsert the target with its occupant
  swap                   exchange two occupants, or move when the target is empty
  delete_shift_category  refuse the last category, else cascade its assignments
  delete_staff_member    cascade the member's assignments, then the member

Design notes:
  - Each protocol runs in one transaction.atomic block, so a failure in any
    step rolls back the earlier steps. Rows touched by move/swap are locked
    with select_for_update (a no-op on SQLite).
  - Cascades are explicit application-level deletes. Assignment's foreign keys
    are PROTECT so no other code path can orphan a row.
  - Database failures surface as StoreUnavailable; callers reload from the
    store rather than retrying.
  - Whether to ask the operator before replacing an occupant is the
    controller's decision, not this layer's.
"""

import functools
import logging
import re
from collections.abc import Iterable, Mapping
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, models, transaction

from apps.scheduling.exceptions import (
    LastCategoryError,
    NotFoundOnMutation,
    ReferenceNotFound,
    StoreUnavailable,
    ValidationError,
)
from apps.scheduling.models import Assignment, ShiftCategory, Slot
from apps.scheduling.month import ActiveMonth
from apps.staff.models import StaffMember

logger = logging.getLogger(__name__)

STAFF_FIELDS = ("name", "role", "subspecialty")
CATEGORY_FIELDS = ("name", "color")

_UNSAFE_NAME_CHARS = re.compile(r"[<>]")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _store_call(func):
    """Translate database failures raised by `func` into StoreUnavailable."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.exception("Store failure during %s", func.__name__)
            raise StoreUnavailable(
                "The schedule store is unavailable. Reload the board and try again."
            ) from exc

    return wrapper


def _text(value) -> str:
    return "" if value is None else str(value).strip()


def _pick(data: Mapping, fields: Iterable[str]) -> dict:
    """Return only the supplied keys of `data` that appear in `fields`."""
    return {field: data[field] for field in fields if field in data}


def _full_clean(instance: models.Model) -> None:
    """Run model validation, re-raising Django's error as our ValidationError."""
    try:
        instance.full_clean()
    except DjangoValidationError as exc:
        fields = exc.message_dict if hasattr(exc, "error_dict") else {"__all__": exc.messages}
        summary = "; ".join(f"{field}: {' '.join(messages)}" for field, messages in fields.items())
        raise ValidationError(summary, fields=fields) from exc


def sanitize_category_name(raw) -> str:
    """
    Normalise a shift category name.

    Angle brackets are stripped, then surrounding whitespace, then the length
    is checked against SHIFTBOARD's CATEGORY_NAME_MIN/MAX_LENGTH.

    Raises:
        ValidationError: If the cleaned name is too short or too long.
    """
    config = settings.SHIFTBOARD
    min_length = config["CATEGORY_NAME_MIN_LENGTH"]
    max_length = config["CATEGORY_NAME_MAX_LENGTH"]

    name = _UNSAFE_NAME_CHARS.sub("", _text(raw)).strip()
    if not min_length <= len(name) <= max_length:
        message = f"Category name must be between {min_length} and {max_length} characters."
        raise ValidationError(message, fields={"name": [message]})
    return name


def _check_day(day) -> None:
    month = ActiveMonth.from_settings()
    if isinstance(day, bool) or not isinstance(day, int) or not month.contains(day):
        message = f"Day must be a whole number between 1 and {month.days_in_month}."
        raise ValidationError(message, fields={"day": [message]})


def _check_category_exists(category_id: str) -> None:
    if not ShiftCategory.objects.filter(pk=category_id).exists():
        raise ReferenceNotFound(f"Shift category '{category_id}' does not exist.")


def _check_staff_exists(staff_id: str) -> None:
    if not StaffMember.objects.filter(pk=staff_id).exists():
        raise ReferenceNotFound(f"Staff member '{staff_id}' does not exist.")


def _normalize_staff(fields: dict) -> dict:
    cleaned = dict(fields)
    if "name" in cleaned:
        cleaned["name"] = _text(cleaned["name"])
    if "subspecialty" in cleaned:
        cleaned["subspecialty"] = _text(cleaned["subspecialty"])
    return cleaned


def _slot_filter(slot: Slot) -> models.Q:
    return models.Q(day=slot.day, category_id=slot.category_id)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class AssignmentService:
    """
    Service object for reading and mutating the board.

    All methods are static: the store is the only state. Reads never raise
    except StoreUnavailable. Writes raise the errors in
    apps.scheduling.exceptions and leave the store unchanged when they do.
    """

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    @_store_call
    def list_staff(query: Optional[str] = None) -> list[StaffMember]:
        """
        Return staff ordered by name.

        Args:
            query: Case-insensitive substring matched against name, role and
                   subspecialty. Blank or None returns everyone.
        """
        members = StaffMember.objects.all()
        query = _text(query)
        if query:
            members = members.filter(
                models.Q(name__icontains=query)
                | models.Q(role__icontains=query)
                | models.Q(subspecialty__icontains=query)
            )
        return list(members)

    @staticmethod
    @_store_call
    def get_staff_member(staff_id: str) -> Optional[StaffMember]:
        return StaffMember.objects.filter(pk=staff_id).first()

    @staticmethod
    @_store_call
    def list_categories() -> list[ShiftCategory]:
        return list(ShiftCategory.objects.all())

    @staticmethod
    @_store_call
    def get_category(category_id: str) -> Optional[ShiftCategory]:
        return ShiftCategory.objects.filter(pk=category_id).first()

    @staticmethod
    @_store_call
    def list_assignments(start: Optional[int] = None, end: Optional[int] = None) -> list[Assignment]:
        """
        Return assignments ordered by day then category.

        Args:
            start: Inclusive lower day bound, or None for no bound.
            end:   Inclusive upper day bound, or None for no bound.
        """
        assignments = Assignment.objects.all()
        if start is not None:
            assignments = assignments.filter(day__gte=start)
        if end is not None:
            assignments = assignments.filter(day__lte=end)
        return list(assignments)

    @staticmethod
    @_store_call
    def get_assignment(day: int, category_id: str) -> Optional[Assignment]:
        return Assignment.objects.filter(day=day, category_id=category_id).first()

    @staticmethod
    @_store_call
    def get_assigned_staff(day: int, category_id: str) -> Optional[StaffMember]:
        """Return the occupant of (day, category_id), or None for an empty slot."""
        assignment = (
            Assignment.objects.select_related("staff")
            .filter(day=day, category_id=category_id)
            .first()
        )
        return assignment.staff if assignment else None

    # ------------------------------------------------------------------
    # Slot mutations
    # ------------------------------------------------------------------

    @staticmethod
    @_store_call
    @transaction.atomic
    def assign(day: int, category_id: str, staff_id: str) -> Assignment:
        """
        Place a staff member in a slot, replacing any current occupant.

        Args:
            day:         Day of the active month.
            category_id: Shift category of the slot.
            staff_id:    The member to place.

        Returns:
            The stored Assignment.

        Raises:
            ValidationError:   `day` is outside the active month.
            ReferenceNotFound: The category or staff member does not exist.
        """
        _check_day(day)
        _check_category_exists(category_id)
        _check_staff_exists(staff_id)

        assignment, created = Assignment.objects.update_or_create(
            day=day,
            category_id=category_id,
            defaults={"staff_id": staff_id},
        )
        logger.info(
            "Assigned staff %s to day %d / %s (%s)",
            staff_id, day, category_id, "new" if created else "replaced",
        )
        return assignment

    @staticmethod
    @_store_call
    @transaction.atomic
    def remove(day: int, category_id: str) -> bool:
        """Clear a slot. Returns False when it was already empty."""
        deleted, _ = Assignment.objects.filter(day=day, category_id=category_id).delete()
        if deleted:
            logger.info("Cleared day %d / %s", day, category_id)
        return deleted > 0

    @staticmethod
    @_store_call
    @transaction.atomic
    def move(from_slot: Slot, to_slot: Slot) -> bool:
        """
        Move the occupant of `from_slot` into `to_slot`.

        A target occupant is displaced (this is the replace path; use swap to
        keep both). Moving a slot onto itself, or moving from an empty slot,
        changes nothing.

        Returns:
            True if an assignment moved.

        Raises:
            ValidationError:   The target day is outside the active month.
            ReferenceNotFound: The target category does not exist.
        """
        from_slot, to_slot = Slot(*from_slot), Slot(*to_slot)
        if from_slot == to_slot:
            return False

        source = Assignment.objects.select_for_update().filter(_slot_filter(from_slot)).first()
        if source is None:
            logger.info("Move from empty slot %s ignored", from_slot)
            return False

        _check_day(to_slot.day)
        _check_category_exists(to_slot.category_id)

        staff_id = source.staff_id
        source.delete()
        Assignment.objects.update_or_create(
            day=to_slot.day,
            category_id=to_slot.category_id,
            defaults={"staff_id": staff_id},
        )
        logger.info("Moved staff %s from %s to %s", staff_id, from_slot, to_slot)
        return True

    @staticmethod
    @_store_call
    @transaction.atomic
    def swap(slot_a: Slot, slot_b: Slot) -> bool:
        """
        Exchange the occupants of two slots.

        If `slot_b` is empty this is a move. Both rows keep their (day,
        category) keys and only trade staff, so the uniqueness constraint is
        never crossed mid-swap.

        Returns:
            True if anything changed.
        """
        slot_a, slot_b = Slot(*slot_a), Slot(*slot_b)
        if slot_a == slot_b:
            return False

        rows = {
            row.slot: row
            for row in Assignment.objects.select_for_update().filter(
                _slot_filter(slot_a) | _slot_filter(slot_b)
            )
        }
        first, second = rows.get(slot_a), rows.get(slot_b)
        if first is None:
            logger.info("Swap from empty slot %s ignored", slot_a)
            return False
        if second is None:
            return AssignmentService.move(slot_a, slot_b)

        first.staff_id, second.staff_id = second.staff_id, first.staff_id
        first.save(update_fields=["staff", "updated_at"])
        second.save(update_fields=["staff", "updated_at"])
        logger.info(
            "Swapped %s (now %s) with %s (now %s)",
            slot_a, first.staff_id, slot_b, second.staff_id,
        )
        return True

    # ------------------------------------------------------------------
    # Staff members
    # ------------------------------------------------------------------

    @staticmethod
    @_store_call
    @transaction.atomic
    def add_staff_member(data: Mapping) -> StaffMember:
        """
        Create a staff member from `data` (name, role, optional subspecialty, optional id).

        Raises:
            ValidationError: Blank name, unknown role, or an id already in use.
        """
        fields = _normalize_staff(_pick(data, STAFF_FIELDS))
        staff_id = _text(data.get("id"))
        if staff_id:
            fields["id"] = staff_id

        member = StaffMember(**fields)
        _full_clean(member)
        member.save(force_insert=True)
        logger.info("Added staff member %s (%s)", member.pk, member.role)
        return member

    @staticmethod
    @_store_call
    @transaction.atomic
    def update_staff_member(staff_id: str, data: Mapping) -> StaffMember:
        """
        Change the supplied fields of an existing member.

        Raises:
            NotFoundOnMutation: No member has this id.
            ValidationError:    The resulting record is invalid.
        """
        member = StaffMember.objects.select_for_update().filter(pk=staff_id).first()
        if member is None:
            raise NotFoundOnMutation(f"Staff member '{staff_id}' not found.")

        for field, value in _normalize_staff(_pick(data, STAFF_FIELDS)).items():
            setattr(member, field, value)
        _full_clean(member)
        member.save()
        logger.info("Updated staff member %s", staff_id)
        return member

    @staticmethod
    @_store_call
    @transaction.atomic
    def delete_staff_member(staff_id: str) -> int:
        """
        Delete a member and every assignment that references them.

        Returns:
            The number of assignments removed with the member.

        Raises:
            NotFoundOnMutation: No member has this id.
        """
        member = StaffMember.objects.select_for_update().filter(pk=staff_id).first()
        if member is None:
            raise NotFoundOnMutation(f"Staff member '{staff_id}' not found.")

        removed, _ = Assignment.objects.filter(staff_id=staff_id).delete()
        member.delete()
        logger.info("Deleted staff member %s and %d assignment(s)", staff_id, removed)
        return removed

    # ------------------------------------------------------------------
    # Shift categories
    # ------------------------------------------------------------------

    @staticmethod
    @_store_call
    @transaction.atomic
    def add_shift_category(data: Mapping) -> ShiftCategory:
        """
        Create a shift category.

        A missing name defaults to "New Shift <n>" and a missing colour to the
        next entry of SHIFTBOARD["CATEGORY_COLORS"], both keyed on the current
        category count. A missing id is generated.

        Raises:
            ValidationError: Bad name length or an id already in use.
        """
        count = ShiftCategory.objects.count()
        palette = settings.SHIFTBOARD["CATEGORY_COLORS"]

        fields = _pick(data, CATEGORY_FIELDS)
        raw_name = fields.get("name")
        fields["name"] = sanitize_category_name(
            f"New Shift {count + 1}" if raw_name is None else raw_name
        )
        fields["color"] = _text(fields.get("color")) or palette[count % len(palette)]
        category_id = _text(data.get("id"))
        if category_id:
            fields["id"] = category_id

        category = ShiftCategory(**fields)
        _full_clean(category)
        category.save(force_insert=True)
        logger.info("Added shift category %s (%s)", category.pk, category.name)
        return category

    @staticmethod
    @_store_call
    @transaction.atomic
    def update_shift_category(category_id: str, data: Mapping) -> ShiftCategory:
        """
        Rename or recolour a category.

        Raises:
            NotFoundOnMutation: No category has this id.
            ValidationError:    Bad name length.
        """
        category = ShiftCategory.objects.select_for_update().filter(pk=category_id).first()
        if category is None:
            raise NotFoundOnMutation(f"Shift category '{category_id}' not found.")

        fields = _pick(data, CATEGORY_FIELDS)
        if "name" in fields:
            category.name = sanitize_category_name(fields["name"])
        if "color" in fields:
            category.color = _text(fields["color"])
        _full_clean(category)
        category.save()
        logger.info("Updated shift category %s", category_id)
        return category

    @staticmethod
    @_store_call
    @transaction.atomic
    def delete_shift_category(category_id: str) -> int:
        """
        Delete a category and every assignment in its column.

        Returns:
            The number of assignments removed with the category.

        Raises:
            NotFoundOnMutation: No category has this id.
            LastCategoryError:  It is the only category left.
        """
        category = ShiftCategory.objects.select_for_update().filter(pk=category_id).first()
        if category is None:
            raise NotFoundOnMutation(f"Shift category '{category_id}' not found.")
        if ShiftCategory.objects.count() <= 1:
            logger.warning("Refused to delete %s: it is the last shift category", category_id)
            raise LastCategoryError("At least one shift category must remain.")

        removed, _ = Assignment.objects.filter(category_id=category_id).delete()
        category.delete()
        logger.info("Deleted shift category %s and %d assignment(s)", category_id, removed)
        return removed
