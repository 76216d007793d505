from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from apps.scheduling.exceptions import (
    LastCategoryError,
    NotFoundOnMutation,
    ReferenceNotFound,
    StoreUnavailable,
    ValidationError,
)
from apps.scheduling.models import Assignment, ShiftCategory, Slot
from apps.scheduling.projection import AssignmentProjection
from apps.scheduling.services import AssignmentService, sanitize_category_name
from apps.staff.models import StaffMember


def make_staff(staff_id, name=None, role=StaffMember.Role.SENIOR):
    return StaffMember.objects.create(id=staff_id, name=name or staff_id.title(), role=role)


def make_category(category_id, name=None):
    return ShiftCategory.objects.create(id=category_id, name=name or category_id.title())


class BoardTestCase(TestCase):
    """Board with one ward and two staff members."""

    def setUp(self):
        # Start without the default wards installed by migrations
        ShiftCategory.objects.all().delete()
        self.ward = make_category("ward-1", "Ward 1")
        self.alice = make_staff("alice")
        self.bob = make_staff("bob")

    def occupants(self):
        return {
            (a.day, a.category_id): a.staff_id
            for a in Assignment.objects.all()
        }


class TestAssign(BoardTestCase):
    def test_assign_places_staff_member(self):
        # Scenario A, first half
        AssignmentService.assign(5, "ward-1", "alice")
        self.assertEqual(AssignmentService.get_assigned_staff(5, "ward-1"), self.alice)

    def test_assign_occupied_slot_replaces_occupant(self):
        AssignmentService.assign(5, "ward-1", "alice")
        AssignmentService.assign(5, "ward-1", "bob")

        self.assertEqual(AssignmentService.get_assigned_staff(5, "ward-1"), self.bob)
        self.assertEqual(Assignment.objects.filter(day=5, category_id="ward-1").count(), 1)
        self.assertFalse(Assignment.objects.filter(staff_id="alice").exists())
        self.assertEqual(AssignmentProjection.from_store().load_count("alice"), 0)

    def test_empty_slot_reads_as_none(self):
        self.assertIsNone(AssignmentService.get_assigned_staff(9, "ward-1"))
        self.assertIsNone(AssignmentService.get_assignment(9, "ward-1"))

    def test_assign_rejects_day_outside_active_month(self):
        for day in (0, 32, -1):
            with self.subTest(day=day):
                with self.assertRaises(ValidationError) as ctx:
                    AssignmentService.assign(day, "ward-1", "alice")
                self.assertIn("day", ctx.exception.fields)
        self.assertFalse(Assignment.objects.exists())

    def test_assign_rejects_non_integer_day(self):
        for day in ("5", 5.0, True, None):
            with self.subTest(day=day):
                with self.assertRaises(ValidationError):
                    AssignmentService.assign(day, "ward-1", "alice")

    def test_assign_accepts_last_day_of_month(self):
        AssignmentService.assign(31, "ward-1", "alice")
        self.assertEqual(AssignmentService.get_assigned_staff(31, "ward-1"), self.alice)

    def test_assign_unknown_category_is_reference_error(self):
        with self.assertRaises(ReferenceNotFound):
            AssignmentService.assign(5, "ward-404", "alice")
        self.assertFalse(Assignment.objects.exists())

    def test_assign_unknown_staff_is_reference_error(self):
        with self.assertRaises(ReferenceNotFound):
            AssignmentService.assign(5, "ward-1", "nobody")
        self.assertFalse(Assignment.objects.exists())

    def test_store_failure_surfaces_as_store_unavailable(self):
        with mock.patch.object(
            Assignment.objects, "update_or_create", side_effect=DatabaseError("connection lost")
        ):
            with self.assertRaises(StoreUnavailable):
                AssignmentService.assign(5, "ward-1", "alice")


class TestRemove(BoardTestCase):
    def test_remove_clears_slot(self):
        AssignmentService.assign(2, "ward-1", "alice")
        self.assertTrue(AssignmentService.remove(2, "ward-1"))
        self.assertIsNone(AssignmentService.get_assigned_staff(2, "ward-1"))

    def test_remove_empty_slot_is_not_an_error(self):
        self.assertFalse(AssignmentService.remove(2, "ward-1"))


class TestMove(BoardTestCase):
    def test_move_to_self_changes_nothing(self):
        AssignmentService.assign(4, "ward-1", "alice")
        before = self.occupants()

        self.assertFalse(AssignmentService.move(Slot(4, "ward-1"), Slot(4, "ward-1")))
        self.assertEqual(self.occupants(), before)

    def test_move_to_empty_slot(self):
        AssignmentService.assign(4, "ward-1", "alice")

        self.assertTrue(AssignmentService.move(Slot(4, "ward-1"), Slot(6, "ward-1")))
        self.assertEqual(self.occupants(), {(6, "ward-1"): "alice"})

    def test_move_across_categories(self):
        make_category("ward-2")
        AssignmentService.assign(4, "ward-1", "alice")

        AssignmentService.move((4, "ward-1"), (4, "ward-2"))
        self.assertEqual(self.occupants(), {(4, "ward-2"): "alice"})

    def test_move_displaces_target_occupant(self):
        AssignmentService.assign(4, "ward-1", "alice")
        AssignmentService.assign(6, "ward-1", "bob")

        AssignmentService.move(Slot(4, "ward-1"), Slot(6, "ward-1"))
        self.assertEqual(self.occupants(), {(6, "ward-1"): "alice"})

    def test_move_from_empty_slot_is_silent_no_op(self):
        AssignmentService.assign(6, "ward-1", "bob")

        self.assertFalse(AssignmentService.move(Slot(4, "ward-1"), Slot(6, "ward-1")))
        self.assertEqual(self.occupants(), {(6, "ward-1"): "bob"})

    def test_move_to_invalid_target_leaves_source(self):
        AssignmentService.assign(4, "ward-1", "alice")

        with self.assertRaises(ValidationError):
            AssignmentService.move(Slot(4, "ward-1"), Slot(40, "ward-1"))
        with self.assertRaises(ReferenceNotFound):
            AssignmentService.move(Slot(4, "ward-1"), Slot(5, "ward-404"))
        self.assertEqual(self.occupants(), {(4, "ward-1"): "alice"})

    def test_failed_move_keeps_source_row(self):
        AssignmentService.assign(4, "ward-1", "alice")

        with mock.patch.object(
            Assignment.objects, "update_or_create", side_effect=DatabaseError("connection lost")
        ):
            with self.assertRaises(StoreUnavailable):
                AssignmentService.move(Slot(4, "ward-1"), Slot(6, "ward-1"))

        self.assertEqual(self.occupants(), {(4, "ward-1"): "alice"})


class TestSwap(BoardTestCase):
    def test_swap_exchanges_occupants(self):
        # Scenario B
        AssignmentService.assign(3, "ward-1", "alice")
        AssignmentService.assign(7, "ward-1", "bob")

        self.assertTrue(AssignmentService.swap(Slot(3, "ward-1"), Slot(7, "ward-1")))
        self.assertEqual(AssignmentService.get_assigned_staff(3, "ward-1"), self.bob)
        self.assertEqual(AssignmentService.get_assigned_staff(7, "ward-1"), self.alice)

    def test_swap_twice_restores_original(self):
        AssignmentService.assign(3, "ward-1", "alice")
        AssignmentService.assign(7, "ward-1", "bob")
        before = self.occupants()

        AssignmentService.swap(Slot(3, "ward-1"), Slot(7, "ward-1"))
        AssignmentService.swap(Slot(3, "ward-1"), Slot(7, "ward-1"))
        self.assertEqual(self.occupants(), before)

    def test_swap_with_empty_target_moves(self):
        AssignmentService.assign(3, "ward-1", "alice")

        self.assertTrue(AssignmentService.swap(Slot(3, "ward-1"), Slot(7, "ward-1")))
        self.assertEqual(self.occupants(), {(7, "ward-1"): "alice"})

    def test_swap_from_empty_source_is_no_op(self):
        AssignmentService.assign(7, "ward-1", "bob")

        self.assertFalse(AssignmentService.swap(Slot(3, "ward-1"), Slot(7, "ward-1")))
        self.assertEqual(self.occupants(), {(7, "ward-1"): "bob"})

    def test_swap_with_self_is_no_op(self):
        AssignmentService.assign(3, "ward-1", "alice")
        self.assertFalse(AssignmentService.swap(Slot(3, "ward-1"), Slot(3, "ward-1")))
        self.assertEqual(self.occupants(), {(3, "ward-1"): "alice"})

    def test_swap_keeps_one_row_per_slot(self):
        AssignmentService.assign(3, "ward-1", "alice")
        AssignmentService.assign(7, "ward-1", "bob")
        AssignmentService.swap(Slot(3, "ward-1"), Slot(7, "ward-1"))

        self.assertEqual(Assignment.objects.count(), 2)

    def test_failed_second_write_rolls_back_swap(self):
        AssignmentService.assign(3, "ward-1", "alice")
        AssignmentService.assign(7, "ward-1", "bob")
        real_save = Assignment.save
        calls = []

        def flaky_save(instance, *args, **kwargs):
            calls.append(instance.slot)
            if len(calls) > 1:
                raise DatabaseError("connection lost")
            return real_save(instance, *args, **kwargs)

        with mock.patch.object(Assignment, "save", autospec=True, side_effect=flaky_save):
            with self.assertRaises(StoreUnavailable):
                AssignmentService.swap(Slot(3, "ward-1"), Slot(7, "ward-1"))

        self.assertEqual(len(calls), 2)
        self.assertEqual(self.occupants(), {(3, "ward-1"): "alice", (7, "ward-1"): "bob"})


class TestDeleteShiftCategory(BoardTestCase):
    def test_delete_cascades_only_its_assignments(self):
        # Scenario C
        make_category("ward-2")
        AssignmentService.assign(1, "ward-1", "bob")
        AssignmentService.assign(1, "ward-2", "alice")
        AssignmentService.assign(2, "ward-2", "bob")

        removed = AssignmentService.delete_shift_category("ward-2")

        self.assertEqual(removed, 2)
        self.assertIsNone(AssignmentService.get_assigned_staff(1, "ward-2"))
        self.assertFalse(ShiftCategory.objects.filter(pk="ward-2").exists())
        self.assertEqual(self.occupants(), {(1, "ward-1"): "bob"})

    def test_last_category_cannot_be_deleted(self):
        # Scenario D
        AssignmentService.assign(1, "ward-1", "alice")

        with self.assertRaises(LastCategoryError):
            AssignmentService.delete_shift_category("ward-1")
        self.assertTrue(ShiftCategory.objects.filter(pk="ward-1").exists())
        self.assertEqual(self.occupants(), {(1, "ward-1"): "alice"})

    def test_delete_missing_category(self):
        with self.assertRaises(NotFoundOnMutation):
            AssignmentService.delete_shift_category("ward-404")

    def test_failed_delete_keeps_its_assignments(self):
        make_category("ward-2")
        AssignmentService.assign(1, "ward-2", "alice")
        AssignmentService.assign(2, "ward-2", "bob")

        with mock.patch.object(ShiftCategory, "delete", side_effect=DatabaseError("disk full")):
            with self.assertRaises(StoreUnavailable):
                AssignmentService.delete_shift_category("ward-2")

        self.assertTrue(ShiftCategory.objects.filter(pk="ward-2").exists())
        self.assertEqual(self.occupants(), {(1, "ward-2"): "alice", (2, "ward-2"): "bob"})


class TestDeleteStaffMember(BoardTestCase):
    def test_delete_cascades_only_their_assignments(self):
        make_category("ward-2")
        AssignmentService.assign(1, "ward-1", "alice")
        AssignmentService.assign(1, "ward-2", "alice")
        AssignmentService.assign(2, "ward-1", "bob")

        removed = AssignmentService.delete_staff_member("alice")

        self.assertEqual(removed, 2)
        self.assertFalse(StaffMember.objects.filter(pk="alice").exists())
        self.assertEqual(self.occupants(), {(2, "ward-1"): "bob"})

    def test_delete_missing_member(self):
        with self.assertRaises(NotFoundOnMutation):
            AssignmentService.delete_staff_member("nobody")

    def test_failed_cascade_rolls_back(self):
        AssignmentService.assign(1, "ward-1", "alice")

        with mock.patch.object(StaffMember, "delete", side_effect=DatabaseError("disk full")):
            with self.assertRaises(StoreUnavailable):
                AssignmentService.delete_staff_member("alice")

        self.assertTrue(StaffMember.objects.filter(pk="alice").exists())
        self.assertEqual(self.occupants(), {(1, "ward-1"): "alice"})


class TestStaffMemberWrites(TestCase):
    def test_add_generates_id(self):
        member = AssignmentService.add_staff_member({"name": "  Dana  ", "role": "junior_2"})

        self.assertTrue(member.pk)
        self.assertEqual(member.name, "Dana")
        self.assertEqual(member.role, StaffMember.Role.JUNIOR_2)

    def test_add_keeps_supplied_id(self):
        member = AssignmentService.add_staff_member({"id": "7", "name": "Dr. James Lee", "role": "external"})
        self.assertEqual(member.pk, "7")

    def test_add_rejects_blank_name_and_unknown_role(self):
        with self.assertRaises(ValidationError) as ctx:
            AssignmentService.add_staff_member({"name": "   ", "role": "chief"})
        self.assertIn("name", ctx.exception.fields)
        self.assertIn("role", ctx.exception.fields)
        self.assertFalse(StaffMember.objects.exists())

    def test_add_rejects_duplicate_id(self):
        make_staff("alice")
        with self.assertRaises(ValidationError):
            AssignmentService.add_staff_member({"id": "alice", "name": "Another Alice"})

    def test_subspecialty_is_free_form(self):
        member = AssignmentService.add_staff_member({"name": "Eve", "subspecialty": "sports-medicine"})
        self.assertEqual(member.subspecialty, "sports-medicine")

    def test_update_changes_only_supplied_fields(self):
        make_staff("alice", "Alice")
        member = AssignmentService.update_staff_member("alice", {"role": "junior_1"})

        self.assertEqual(member.name, "Alice")
        self.assertEqual(member.role, StaffMember.Role.JUNIOR_1)

    def test_update_missing_member(self):
        with self.assertRaises(NotFoundOnMutation):
            AssignmentService.update_staff_member("nobody", {"name": "X"})


class TestListStaff(TestCase):
    def setUp(self):
        make_staff("1", "Dr. Sarah Johnson")
        StaffMember.objects.create(id="2", name="Dr. Lisa Wang", subspecialty="gi")
        make_staff("3", "Dr. Tom Rodriguez", StaffMember.Role.JUNIOR_1)

    def test_no_query_lists_everyone_by_name(self):
        self.assertEqual([m.pk for m in AssignmentService.list_staff()], ["2", "1", "3"])
        self.assertEqual(len(AssignmentService.list_staff("   ")), 3)

    def test_query_matches_name_role_or_subspecialty(self):
        self.assertEqual([m.pk for m in AssignmentService.list_staff("ROD")], ["3"])
        self.assertEqual([m.pk for m in AssignmentService.list_staff("junior")], ["3"])
        self.assertEqual([m.pk for m in AssignmentService.list_staff("gi")], ["2"])


class TestShiftCategoryWrites(TestCase):
    def setUp(self):
        ShiftCategory.objects.all().delete()

    def test_add_defaults_name_and_colour(self):
        make_category("ward-1")
        category = AssignmentService.add_shift_category({})

        self.assertEqual(category.name, "New Shift 2")
        self.assertEqual(category.color, "bg-purple-50 border-purple-200")
        self.assertTrue(category.pk.startswith("shift-"))

    def test_add_sanitises_name(self):
        category = AssignmentService.add_shift_category({"name": "  <b>ICU</b>  "})
        self.assertEqual(category.name, "bICU/b")

    def test_add_rejects_empty_name(self):
        for name in ("", "   ", "<>"):
            with self.subTest(name=name):
                with self.assertRaises(ValidationError) as ctx:
                    AssignmentService.add_shift_category({"name": name})
                self.assertIn("name", ctx.exception.fields)

    def test_add_rejects_long_name(self):
        with self.assertRaises(ValidationError):
            AssignmentService.add_shift_category({"name": "x" * 51})
        self.assertEqual(AssignmentService.add_shift_category({"name": "x" * 50}).name, "x" * 50)

    def test_update_renames(self):
        make_category("ward-1", "Ward 1")
        category = AssignmentService.update_shift_category("ward-1", {"name": " ICU "})

        self.assertEqual(category.name, "ICU")
        self.assertEqual(ShiftCategory.objects.get(pk="ward-1").name, "ICU")

    def test_update_missing_category(self):
        with self.assertRaises(NotFoundOnMutation):
            AssignmentService.update_shift_category("ward-404", {"name": "ICU"})


class TestSanitizeCategoryName(TestCase):
    def test_strips_brackets_then_whitespace(self):
        self.assertEqual(sanitize_category_name(" < Night > "), "Night")

    def test_length_checked_after_trimming(self):
        self.assertEqual(sanitize_category_name("   " + "y" * 50 + "   "), "y" * 50)


class TestListAssignments(BoardTestCase):
    def setUp(self):
        super().setUp()
        for day in (1, 5, 10, 15):
            AssignmentService.assign(day, "ward-1", "alice")

    def test_lists_in_day_order(self):
        days = [a.day for a in AssignmentService.list_assignments()]
        self.assertEqual(days, [1, 5, 10, 15])

    def test_range_is_inclusive(self):
        days = [a.day for a in AssignmentService.list_assignments(5, 10)]
        self.assertEqual(days, [5, 10])


class TestLoadCountConsistency(BoardTestCase):
    def test_projection_matches_store_after_mixed_operations(self):
        make_category("ward-2")
        AssignmentService.assign(1, "ward-1", "alice")
        AssignmentService.assign(2, "ward-1", "alice")
        AssignmentService.assign(2, "ward-2", "bob")
        AssignmentService.swap(Slot(1, "ward-1"), Slot(2, "ward-2"))
        AssignmentService.move(Slot(2, "ward-1"), Slot(3, "ward-2"))
        AssignmentService.assign(3, "ward-2", "bob")
        AssignmentService.remove(1, "ward-1")

        projection = AssignmentProjection.from_store()
        for member in StaffMember.objects.all():
            with self.subTest(staff=member.pk):
                self.assertEqual(
                    projection.load_count(member.pk),
                    Assignment.objects.filter(staff=member).count(),
                )
