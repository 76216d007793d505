"""
Seed ShiftBoard with the default roster and wards.

Loads ten staff members across all four roles and the three default ward
categories. Existing rows with the same ids are left alone, so the command is
safe to run on every deploy. Migrations already install the wards on an
empty database; the command restores them after --reset.

Usage:
    python manage.py seed_data
    python manage.py seed_data --reset
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.scheduling.defaults import DEFAULT_WARDS
from apps.scheduling.models import Assignment, ShiftCategory
from apps.staff.models import StaffMember

Role = StaffMember.Role

STAFF = [
    ("1", "Dr. Sarah Johnson", Role.SENIOR, "cardio"),
    ("2", "Dr. Mike Chen", Role.SENIOR, "pulmo"),
    ("3", "Dr. Emily Davis", Role.JUNIOR_1, ""),
    ("4", "Dr. Jessica Brown", Role.JUNIOR_1, ""),
    ("5", "Dr. Robert Wilson", Role.JUNIOR_2, ""),
    ("6", "Dr. Maria Garcia", Role.JUNIOR_2, ""),
    ("7", "Dr. James Lee", Role.EXTERNAL, ""),
    ("8", "Dr. Anna Kumar", Role.EXTERNAL, ""),
    ("9", "Dr. Lisa Wang", Role.SENIOR, "gi"),
    ("10", "Dr. Tom Rodriguez", Role.JUNIOR_1, ""),
]


class Command(BaseCommand):
    help = "Seed ShiftBoard with the default staff roster and ward categories"

    def add_arguments(self, parser):
        parser.add_argument("--reset", action="store_true",
                            help="Delete all assignments, staff and categories first (DESTRUCTIVE).")

    @transaction.atomic
    def handle(self, *args, **options):
        if options["reset"]:
            self.stdout.write(self.style.WARNING("Resetting all board data..."))
            self._reset_data()

        staff_created = self._create_staff()
        wards_created = self._create_wards()

        self.stdout.write(self.style.SUCCESS(
            f"Seed complete: {staff_created} staff member(s) and {wards_created} ward(s) created."
        ))

    # ------------------------------------------------------------------
    def _reset_data(self):
        # Assignments first: both of their foreign keys are PROTECT
        for model in (Assignment, StaffMember, ShiftCategory):
            model.objects.all().delete()
        self.stdout.write(self.style.WARNING("  Cleared existing data."))

    def _create_staff(self) -> int:
        created_count = 0
        for staff_id, name, role, subspecialty in STAFF:
            _, created = StaffMember.objects.get_or_create(
                id=staff_id,
                defaults={"name": name, "role": role, "subspecialty": subspecialty},
            )
            created_count += created
        self.stdout.write(f"  Staff: {created_count} created, {len(STAFF) - created_count} already present")
        return created_count

    def _create_wards(self) -> int:
        created_count = 0
        for category_id, name, color in DEFAULT_WARDS:
            _, created = ShiftCategory.objects.get_or_create(
                id=category_id,
                defaults={"name": name, "color": color},
            )
            created_count += created
        self.stdout.write(f"  Wards: {created_count} created, {len(DEFAULT_WARDS) - created_count} already present")
        return created_count
