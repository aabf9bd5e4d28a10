import json
from io import StringIO

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser, Group
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings

from accounts import directory
from accounts.models import DEFAULT_LEVELS, Department, EmployeeProfile, Level
from accounts.permissions import is_hr_admin

User = get_user_model()


class EmployeeProfileSignalTests(TestCase):
    def test_profile_is_created_with_user(self):
        user = User.objects.create_user(username="employee", password="pass")
        self.assertTrue(EmployeeProfile.objects.filter(user=user).exists())
        self.assertIsNone(directory.level_id_for(user))


class DirectoryTests(TestCase):
    def setUp(self):
        Group.objects.create(name="Admin")
        Group.objects.create(name="Dev")
        Group.objects.create(name="QA")

    def test_levels_are_seeded(self):
        self.assertEqual(list(Level.objects.values_list("name", flat=True)), list(DEFAULT_LEVELS))

    def test_admin_role_is_not_assignable(self):
        self.assertEqual(directory.assignable_role_names(), ["Dev", "QA"])
        self.assertEqual(directory.unknown_roles(["Dev", "Admin", "Ghost", "Dev"]), ["Admin", "Ghost"])

    @override_settings(HRTEST_ADMIN_ROLE="HR")
    def test_admin_role_name_comes_from_settings(self):
        self.assertEqual(directory.assignable_role_names(), ["Admin", "Dev", "QA"])

    def test_level_lookups(self):
        senior = Level.objects.get(name="Senior")
        self.assertTrue(directory.level_exists(senior.pk))
        self.assertFalse(directory.level_exists(None))
        self.assertFalse(directory.level_exists(9999))
        self.assertEqual(directory.get_level_name(senior.pk), "Senior")
        self.assertIsNone(directory.get_level_name(9999))
        self.assertEqual(directory.level_names([senior.pk]), {senior.pk: "Senior"})

    def test_role_names_for_user(self):
        user = User.objects.create_user(username="dev", password="pass")
        user.groups.add(Group.objects.get(name="QA"), Group.objects.get(name="Dev"))

        self.assertEqual(directory.role_names_for(user), ["Dev", "QA"])
        self.assertEqual(directory.role_names_for(AnonymousUser()), [])

    def test_is_hr_admin(self):
        admin = User.objects.create_user(username="hr", password="pass")
        admin.groups.add(Group.objects.get(name="Admin"))
        superuser = User.objects.create_superuser(username="root", password="pass")
        employee = User.objects.create_user(username="dev", password="pass")

        self.assertTrue(is_hr_admin(admin))
        self.assertTrue(is_hr_admin(superuser))
        self.assertFalse(is_hr_admin(employee))
        self.assertFalse(is_hr_admin(AnonymousUser()))


class SeedDirectoryCommandTests(TestCase):
    def test_creates_admin_and_extra_roles_idempotently(self):
        out = StringIO()
        call_command("seed_directory", "--role", "Dev", "--role", "QA", stdout=out)
        call_command("seed_directory", "--role", "Dev", stdout=StringIO())

        self.assertEqual(
            sorted(Group.objects.values_list("name", flat=True)), ["Admin", "Dev", "QA"]
        )
        self.assertEqual(Level.objects.count(), len(DEFAULT_LEVELS))
        self.assertIn("0 levels, 3 roles created", out.getvalue())

    def test_rejects_role_with_separator(self):
        with self.assertRaises(CommandError):
            call_command("seed_directory", "--role", "Dev|Ops", stdout=StringIO())


class DirectoryApiTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username="hr", password="pass")
        self.admin.groups.add(Group.objects.create(name="Admin"))
        Group.objects.create(name="Dev")
        self.client.force_login(self.admin)

    def test_levels_are_listed_for_any_user(self):
        self.client.force_login(User.objects.create_user(username="dev", password="pass"))

        response = self.client.get("/api/levels/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["name"] for item in response.json()], list(DEFAULT_LEVELS))

    def test_roles_exclude_admin(self):
        response = self.client.get("/api/admin/roles/")
        self.assertEqual(response.json(), ["Dev"])

    def test_duplicate_department_is_rejected(self):
        Department.objects.create(name="Engineering")

        response = self.client.post(
            "/api/admin/departments/",
            data=json.dumps({"name": "engineering"}),
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("name", response.json())

    def test_department_with_employees_cannot_be_deleted(self):
        department = Department.objects.create(name="Engineering")
        profile = User.objects.create_user(username="dev", password="pass").employee_profile
        profile.department = department
        profile.save(update_fields=["department"])

        response = self.client.delete(f"/api/admin/departments/{department.id}/")

        self.assertEqual(response.status_code, 400)
        self.assertTrue(Department.objects.filter(pk=department.pk).exists())

    def test_empty_department_is_deleted(self):
        department = Department.objects.create(name="Legal")

        response = self.client.delete(f"/api/admin/departments/{department.id}/")

        self.assertEqual(response.status_code, 204)
