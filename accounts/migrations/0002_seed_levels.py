from django.db import migrations

LEVELS = (
    "Intern",
    "Fresher",
    "Junior",
    "Middle",
    "Senior",
    "Lead",
    "Principal",
    "Manager",
)


def seed_levels(apps, schema_editor):
    Level = apps.get_model("accounts", "Level")
    for name in LEVELS:
        Level.objects.get_or_create(name=name)


class Migration(migrations.Migration):
    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_levels, migrations.RunPython.noop),
    ]
