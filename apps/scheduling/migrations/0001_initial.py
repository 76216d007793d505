import apps.scheduling.models
import django.db.models.deletion
import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("staff", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ShiftCategory",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=apps.scheduling.models.generate_category_id,
                        help_text="Opaque stable identifier, e.g. 'male-ward'.",
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                        validators=[django.core.validators.validate_slug],
                    ),
                ),
                ("name", models.CharField(max_length=50)),
                ("color", models.CharField(blank=True, max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Shift Category",
                "verbose_name_plural": "Shift Categories",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="Assignment",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "day",
                    models.PositiveSmallIntegerField(
                        help_text="Day of the active month (1-based)."
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assignments",
                        to="scheduling.shiftcategory",
                    ),
                ),
                (
                    "staff",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assignments",
                        to="staff.staffmember",
                    ),
                ),
            ],
            options={
                "verbose_name": "Assignment",
                "verbose_name_plural": "Assignments",
                "ordering": ["day", "category_id"],
                "indexes": [
                    models.Index(fields=["staff"], name="assignment_staff_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("day", "category"),
                        name="unique_assignment_per_slot",
                    )
                ],
            },
        ),
    ]
