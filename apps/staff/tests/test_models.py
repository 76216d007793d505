from django.core.exceptions import ValidationError
from django.test import TestCase

from apps.staff.models import StaffMember


class TestStaffMemberModel(TestCase):
    def test_generated_id(self):
        first = StaffMember.objects.create(name="Alice")
        second = StaffMember.objects.create(name="Bob")

        self.assertEqual(len(first.pk), 32)
        self.assertNotEqual(first.pk, second.pk)

    def test_default_role_is_senior(self):
        self.assertEqual(StaffMember(name="Alice").role, StaffMember.Role.SENIOR)

    def test_str(self):
        member = StaffMember(name="Emily Davis", role=StaffMember.Role.JUNIOR_1)
        self.assertEqual(str(member), "Emily Davis (Junior (tier 1))")

    def test_whitespace_name_is_invalid(self):
        with self.assertRaises(ValidationError):
            StaffMember(name="   ").full_clean()

    def test_id_must_be_slug(self):
        with self.assertRaises(ValidationError):
            StaffMember(id="has space", name="Alice").full_clean()

    def test_as_dict_reports_missing_subspecialty_as_null(self):
        member = StaffMember(id="3", name="Emily Davis", role=StaffMember.Role.JUNIOR_1)
        self.assertEqual(member.as_dict(), {
            "id": "3", "name": "Emily Davis", "role": "junior_1", "subspecialty": None,
        })

    def test_ordered_by_name(self):
        StaffMember.objects.create(id="b", name="Zoe")
        StaffMember.objects.create(id="a", name="Adam")
        self.assertEqual([m.name for m in StaffMember.objects.all()], ["Adam", "Zoe"])
