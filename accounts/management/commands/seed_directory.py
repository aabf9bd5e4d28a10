from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand, CommandError

from accounts.directory import admin_role_name
from accounts.models import DEFAULT_LEVELS, Level


class Command(BaseCommand):
    help = "Create the default levels, the admin role and optional extra roles"

    def add_arguments(self, parser):
        parser.add_argument(
            "--role",
            dest="roles",
            action="append",
            default=[],
            help="Extra role to create (can be repeated)",
        )

    def handle(self, *args, **options):
        created_levels = 0
        for name in DEFAULT_LEVELS:
            _, created = Level.objects.get_or_create(name=name)
            created_levels += int(created)

        roles = [admin_role_name(), *options["roles"]]
        created_roles = 0
        for role in roles:
            role = role.strip()
            if not role or "|" in role:
                raise CommandError(f"Invalid role name: {role!r}")
            _, created = Group.objects.get_or_create(name=role)
            created_roles += int(created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Directory seeded: {created_levels} levels, {created_roles} roles created"
            )
        )
