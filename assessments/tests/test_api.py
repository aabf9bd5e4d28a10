import json
from datetime import datetime, timedelta, timezone as dt_timezone
from unittest import mock

from django.contrib.auth.models import Group
from django.test import TestCase, override_settings
from django.utils import timezone

from assessments.models import Assignment, Test as AssessmentTest
from assessments.service_utils.assignment import set_role_assignments
from questions.models import Question
from . import factories

NOTIFY = "assessments.service_utils.workflow.notify_roles"


@override_settings(HRTEST_DISPLAY_TIME_ZONE="Asia/Ho_Chi_Minh")
class AdminTestApiTests(TestCase):
    def setUp(self):
        self.admin = factories.create_admin()
        self.client.force_login(self.admin)
        Group.objects.create(name="Dev")
        self.level = factories.get_level("Junior")
        self.skill = factories.create_skill("Python")
        self.bank = factories.create_bank(name="Backend")
        factories.create_questions(6, bank=self.bank, skill=self.skill)

    def _post(self, url, payload, method="post"):
        return getattr(self.client, method)(
            url, data=json.dumps(payload), content_type="application/json"
        )

    def _payload(self, **overrides):
        payload = {
            "name": "Python screening",
            "description": "First round",
            "duration_minutes": 30,
            "pass_score": "6.00",
            "bank": self.bank.id,
            "skill": self.skill.id,
            "question_count": 4,
            "roles": ["Dev"],
            "level_id": self.level.pk,
            "start_at": "2024-01-15T09:30",
            "end_at": "2024-01-20T18:00",
        }
        payload.update(overrides)
        return payload

    def test_create_returns_details(self):
        with mock.patch(NOTIFY):
            response = self._post("/api/admin/tests/", self._payload())

        self.assertEqual(response.status_code, 201, response.content)
        data = response.json()
        self.assertEqual(data["created_by"], "hradmin")
        self.assertTrue(data["is_randomized"])
        self.assertEqual(data["question_count"], 4)
        self.assertEqual([item["order"] for item in data["questions"]], [1, 2, 3, 4])
        self.assertEqual(data["questions"][0]["skill_name"], "Python")
        self.assertEqual(data["questions"][0]["bank_name"], "Backend")

        assignment = data["assignments"][0]
        self.assertEqual(assignment["role"], "Dev")
        self.assertEqual(assignment["level_name"], "Junior")
        self.assertEqual(assignment["start_at"], "2024-01-15T09:30:00+07:00")

        stored = Assignment.objects.get(test_id=data["id"])
        self.assertEqual(stored.target_value, f"Dev|{self.level.pk}")
        self.assertEqual(stored.start_at, datetime(2024, 1, 15, 2, 30, tzinfo=dt_timezone.utc))

    def test_no_matching_questions_is_a_field_error(self):
        response = self._post(
            "/api/admin/tests/", self._payload(type=Question.Type.MATCHING)
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("bank", response.json())
        self.assertFalse(AssessmentTest.objects.exists())

    def test_reversed_window_is_a_field_error(self):
        response = self._post(
            "/api/admin/tests/",
            self._payload(start_at="2024-01-20T09:00", end_at="2024-01-15T09:00"),
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("end_at", response.json())
        self.assertFalse(AssessmentTest.objects.exists())

    def test_unknown_role_is_a_field_error(self):
        response = self._post("/api/admin/tests/", self._payload(roles=["Nobody"]))

        self.assertEqual(response.status_code, 400)
        self.assertIn("roles", response.json())

    def test_duration_bounds_are_validated(self):
        response = self._post("/api/admin/tests/", self._payload(duration_minutes=0))

        self.assertEqual(response.status_code, 400)
        self.assertIn("duration_minutes", response.json())

    def test_list_filters_by_name_and_role(self):
        tagged = factories.create_assessment(bank=self.bank, name="Python screening")
        factories.create_assessment(bank=self.bank, name="Python advanced")
        set_role_assignments(tagged, ["Dev"], self.level.pk)

        by_name = self.client.get("/api/admin/tests/", {"q": "screening"}).json()
        by_role = self.client.get("/api/admin/tests/", {"role": "Dev"}).json()

        self.assertEqual([item["id"] for item in by_name["results"]], [tagged.id])
        self.assertEqual([item["id"] for item in by_role["results"]], [tagged.id])
        self.assertEqual(by_role["results"][0]["question_count"], 3)

    def test_update_with_regeneration(self):
        test = factories.create_assessment(bank=self.bank, question_count=2)

        with mock.patch(NOTIFY):
            response = self._post(
                f"/api/admin/tests/{test.id}/",
                self._payload(name="Renamed", regenerate_questions=True, question_count=5),
                method="put",
            )

        self.assertEqual(response.status_code, 200, response.content)
        data = response.json()
        self.assertEqual(data["name"], "Renamed")
        self.assertEqual(data["version"], 2)
        self.assertEqual(data["question_count"], 5)

    def test_update_without_regeneration_keeps_questions(self):
        test = factories.create_assessment(bank=self.bank, question_count=2)
        payload = self._payload(name="Renamed")
        del payload["bank"]
        del payload["question_count"]

        with mock.patch(NOTIFY):
            response = self._post(f"/api/admin/tests/{test.id}/", payload, method="put")

        self.assertEqual(response.status_code, 200, response.content)
        self.assertEqual(response.json()["question_count"], 2)

    def test_question_count_is_capped(self):
        response = self._post("/api/admin/tests/", self._payload(question_count=501))

        self.assertEqual(response.status_code, 400)
        self.assertIn("question_count", response.json())
        self.assertFalse(AssessmentTest.objects.exists())

        test = factories.create_assessment(bank=self.bank)
        response = self._post(
            f"/api/admin/tests/{test.id}/",
            self._payload(regenerate_questions=True, question_count=501),
            method="put",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("question_count", response.json())

    def test_regeneration_requires_bank(self):
        test = factories.create_assessment(bank=self.bank)
        payload = self._payload(regenerate_questions=True)
        del payload["bank"]

        response = self._post(f"/api/admin/tests/{test.id}/", payload, method="put")

        self.assertEqual(response.status_code, 400)
        self.assertIn("bank", response.json())

    @override_settings(HRTEST_CONCURRENCY_MODE="optimistic")
    def test_stale_version_returns_conflict(self):
        test = factories.create_assessment(bank=self.bank)
        AssessmentTest.objects.filter(pk=test.pk).update(version=4)

        with mock.patch(NOTIFY):
            response = self._post(
                f"/api/admin/tests/{test.id}/", self._payload(version=3), method="put"
            )

        self.assertEqual(response.status_code, 409)

    def test_patch_is_not_allowed(self):
        test = factories.create_assessment(bank=self.bank)
        response = self._post(f"/api/admin/tests/{test.id}/", {"name": "x"}, method="patch")
        self.assertEqual(response.status_code, 405)

    def test_delete(self):
        test = factories.create_assessment(bank=self.bank)

        response = self.client.delete(f"/api/admin/tests/{test.id}/")

        self.assertEqual(response.status_code, 204)
        self.assertFalse(AssessmentTest.objects.filter(pk=test.pk).exists())

    def test_delete_with_attempts_is_refused(self):
        test = factories.create_assessment(bank=self.bank)
        factories.create_attempt(test, self.admin)

        response = self.client.delete(f"/api/admin/tests/{test.id}/")

        self.assertEqual(response.status_code, 400)
        self.assertIn("test", response.json())

    def test_employee_cannot_manage_tests(self):
        self.client.force_login(factories.create_employee())
        response = self.client.get("/api/admin/tests/")
        self.assertEqual(response.status_code, 403)


class MyTestsApiTests(TestCase):
    def test_lists_tests_currently_assigned_to_employee(self):
        Group.objects.create(name="Dev")
        level = factories.get_level("Junior")
        employee = factories.create_employee(roles=["Dev"], level=level)
        assigned = factories.create_assessment()
        factories.create_assessment()
        set_role_assignments(assigned, ["Dev"], level.pk, timezone.now() - timedelta(minutes=5))
        self.client.force_login(employee)

        response = self.client.get("/api/my/tests/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["id"] for item in response.json()["results"]], [assigned.id])

    def test_requires_authentication(self):
        response = self.client.get("/api/my/tests/")
        self.assertIn(response.status_code, (401, 403))
