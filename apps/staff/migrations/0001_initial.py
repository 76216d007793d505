import apps.staff.models
import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="StaffMember",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=apps.staff.models.generate_staff_id,
                        help_text="Opaque stable identifier.",
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                        validators=[django.core.validators.validate_slug],
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        max_length=100,
                        validators=[apps.staff.models.validate_not_blank],
                    ),
                ),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("senior", "Senior"),
                            ("junior_1", "Junior (tier 1)"),
                            ("junior_2", "Junior (tier 2)"),
                            ("external", "External"),
                        ],
                        default="senior",
                        max_length=10,
                    ),
                ),
                (
                    "subspecialty",
                    models.CharField(
                        blank=True,
                        help_text="Free-form tag, e.g. 'cardio'. Suggestions are not enforced.",
                        max_length=50,
                    ),
                ),
            ],
            options={
                "verbose_name": "Staff Member",
                "verbose_name_plural": "Staff Members",
                "ordering": ["name"],
            },
        ),
    ]
