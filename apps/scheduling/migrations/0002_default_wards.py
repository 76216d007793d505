from django.db import migrations

from apps.scheduling.defaults import DEFAULT_WARDS


def create_default_wards(apps, schema_editor):
    """Add the default wards to an empty category table; existing boards are left alone."""
    ShiftCategory = apps.get_model("scheduling", "ShiftCategory")
    if ShiftCategory.objects.exists():
        return
    for category_id, name, color in DEFAULT_WARDS:
        ShiftCategory.objects.create(id=category_id, name=name, color=color)


class Migration(migrations.Migration):

    dependencies = [
        ("scheduling", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(create_default_wards, migrations.RunPython.noop),
    ]
