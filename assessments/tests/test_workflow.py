from datetime import datetime, timezone as dt_timezone
from unittest import mock

import requests
from django.contrib.auth.models import Group
from django.db import DatabaseError, transaction
from django.test import TestCase, override_settings
from rest_framework.exceptions import ValidationError

from assessments.exceptions import (
    ConcurrencyConflict,
    InvalidTimeRange,
    NoMatchingQuestions,
    PersistenceFailure,
    TestInUse as InUse,
)
from assessments.models import Assignment, Test as AssessmentTest
from assessments.service_utils import workflow
from assessments.service_utils.assembly import QuestionCriteria
from . import factories

NOTIFY = "assessments.service_utils.workflow.notify_roles"


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


class CreateTestWorkflowTests(TestCase):
    def setUp(self):
        Group.objects.create(name="Dev")
        Group.objects.create(name="QA")
        self.level = factories.get_level("Middle")
        self.bank = factories.create_bank_with_questions(6)

    def _create(self, **overrides):
        kwargs = {
            "criteria": QuestionCriteria(bank_id=self.bank.id),
            "question_count": 4,
            "name": "Backend screening",
            "duration_minutes": 40,
            "pass_score": 5,
            "roles": ["Dev", "QA"],
            "level_id": self.level.pk,
            "start_at": utc(2024, 5, 1, 8, 0),
            "end_at": utc(2024, 5, 10, 8, 0),
            "created_by": "hradmin",
        }
        kwargs.update(overrides)
        return workflow.create_test(**kwargs)

    def test_creates_test_questions_and_assignments(self):
        with mock.patch(NOTIFY):
            test = self._create()

        self.assertEqual(test.test_questions.count(), 4)
        values = set(test.assignments.values_list("target_value", flat=True))
        self.assertEqual(values, {f"Dev|{self.level.pk}", f"QA|{self.level.pk}"})

    def test_notifies_after_commit(self):
        with mock.patch(NOTIFY) as notify:
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                test = self._create()
                notify.assert_not_called()

        self.assertEqual(len(callbacks), 1)
        notify.assert_called_once_with(
            test, ["Dev", "QA"], self.level.pk, utc(2024, 5, 1, 8, 0), utc(2024, 5, 10, 8, 0), "created"
        )

    def test_no_roles_means_no_notification(self):
        with mock.patch(NOTIFY) as notify:
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                self._create(roles=[], level_id=None)

        self.assertEqual(callbacks, [])
        notify.assert_not_called()

    def test_rolled_back_transaction_does_not_notify(self):
        with mock.patch(NOTIFY) as notify:
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                with self.assertRaises(RuntimeError):
                    with transaction.atomic():
                        self._create()
                        raise RuntimeError("abort")

        self.assertEqual(callbacks, [])
        notify.assert_not_called()
        self.assertFalse(AssessmentTest.objects.filter(name="Backend screening").exists())

    def test_database_error_becomes_persistence_failure(self):
        with mock.patch(NOTIFY) as notify:
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                with mock.patch.object(
                    Assignment.objects, "bulk_create", side_effect=DatabaseError("disk full")
                ):
                    with self.assertRaises(PersistenceFailure) as ctx:
                        self._create()

        self.assertIsInstance(ctx.exception.__cause__, DatabaseError)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(callbacks, [])
        notify.assert_not_called()
        self.assertFalse(AssessmentTest.objects.filter(name="Backend screening").exists())

    def test_validation_errors_happen_before_writes(self):
        before = AssessmentTest.objects.count()

        with self.assertRaises(InvalidTimeRange):
            self._create(start_at=utc(2024, 5, 10, 0, 0), end_at=utc(2024, 5, 1, 0, 0))
        with self.assertRaises(NoMatchingQuestions):
            self._create(criteria=QuestionCriteria(bank_id=factories.create_bank().id))

        self.assertEqual(AssessmentTest.objects.count(), before)

    def test_notification_failure_does_not_undo_commit(self):
        with override_settings(
            HRTEST_NOTIFICATION_CHANNEL="notifications.channels.WebhookChannel",
            HRTEST_NOTIFICATION_WEBHOOK_URL="https://push.example.test/hook",
        ):
            with mock.patch(
                "notifications.channels.requests.post",
                side_effect=requests.ConnectionError("down"),
            ) as post:
                with self.captureOnCommitCallbacks(execute=True) as callbacks:
                    test = self._create()

        post.assert_called_once()
        self.assertEqual(len(callbacks), 1)
        self.assertTrue(AssessmentTest.objects.filter(pk=test.pk).exists())


class UpdateTestWorkflowTests(TestCase):
    def setUp(self):
        Group.objects.create(name="Dev")
        Group.objects.create(name="QA")
        self.level = factories.get_level("Senior")
        self.bank = factories.create_bank_with_questions(8)
        self.test = factories.create_assessment(bank=self.bank, question_count=3)

    def _update(self, **overrides):
        kwargs = {
            "name": "Renamed",
            "description": "updated",
            "duration_minutes": 90,
            "pass_score": 7,
            "roles": ["QA"],
            "level_id": self.level.pk,
        }
        kwargs.update(overrides)
        return workflow.update_test(self.test, **kwargs)

    def test_updates_metadata_and_bumps_version(self):
        with mock.patch(NOTIFY):
            test = self._update()

        self.assertEqual(test.name, "Renamed")
        self.assertEqual(test.duration_minutes, 90)
        self.assertEqual(test.version, 2)
        self.assertEqual(test.test_questions.count(), 3)

    def test_regenerates_questions_when_requested(self):
        with mock.patch(NOTIFY):
            test = self._update(
                regenerate_questions=True,
                criteria=QuestionCriteria(bank_id=self.bank.id),
                question_count=5,
            )

        orders = list(test.test_questions.order_by("order").values_list("order", flat=True))
        self.assertEqual(orders, [1, 2, 3, 4, 5])

    def test_notifies_with_updated_action(self):
        with mock.patch(NOTIFY) as notify:
            with self.captureOnCommitCallbacks(execute=True):
                self._update(roles=["Dev", "QA"])

        notify.assert_called_once()
        args = notify.call_args.args
        self.assertEqual(args[1], ["Dev", "QA"])
        self.assertEqual(args[5], "updated")

    def test_clearing_roles_does_not_notify(self):
        with mock.patch(NOTIFY) as notify:
            with self.captureOnCommitCallbacks(execute=True):
                self._update(roles=[], level_id=None)

        notify.assert_not_called()
        self.assertFalse(self.test.assignments.exists())

    def test_empty_regeneration_criteria_fail_before_any_write(self):
        empty_bank = factories.create_bank()

        with mock.patch.object(workflow, "_write_metadata") as write_metadata:
            with self.assertRaises(NoMatchingQuestions):
                self._update(
                    regenerate_questions=True,
                    criteria=QuestionCriteria(bank_id=empty_bank.id),
                    question_count=3,
                )

        write_metadata.assert_not_called()
        self.test.refresh_from_db()
        self.assertEqual(self.test.version, 1)
        self.assertEqual(self.test.test_questions.count(), 3)

    def test_failed_regeneration_keeps_previous_state(self):
        original_links = list(self.test.test_questions.values_list("order", "question_id"))
        with mock.patch(NOTIFY):
            self._update(roles=["Dev"])
        self.test.refresh_from_db()

        with mock.patch.object(
            Assignment.objects, "bulk_create", side_effect=DatabaseError("lost connection")
        ):
            with self.assertRaises(PersistenceFailure):
                self._update(
                    name="Never saved",
                    roles=["QA"],
                    regenerate_questions=True,
                    criteria=QuestionCriteria(bank_id=self.bank.id),
                    question_count=6,
                )

        self.test.refresh_from_db()
        self.assertEqual(self.test.name, "Renamed")
        self.assertEqual(
            list(self.test.test_questions.values_list("order", "question_id")), original_links
        )
        self.assertEqual(
            list(self.test.assignments.values_list("target_value", flat=True)),
            [f"Dev|{self.level.pk}"],
        )

    def test_last_write_wins_ignores_stale_version(self):
        with mock.patch(NOTIFY):
            self._update(expected_version=1)
            test = self._update(name="Second", expected_version=1)

        self.assertEqual(test.name, "Second")
        self.assertEqual(test.version, 3)

    @override_settings(HRTEST_CONCURRENCY_MODE="optimistic")
    def test_optimistic_mode_rejects_stale_version(self):
        with mock.patch(NOTIFY):
            self._update(expected_version=1)

            with self.assertRaises(ConcurrencyConflict):
                self._update(name="Stale", expected_version=1)

        self.test.refresh_from_db()
        self.assertEqual(self.test.name, "Renamed")
        self.assertEqual(self.test.version, 2)

    @override_settings(HRTEST_CONCURRENCY_MODE="optimistic")
    def test_optimistic_mode_requires_version(self):
        with self.assertRaises(ValidationError) as ctx:
            self._update()
        self.assertIn("version", ctx.exception.detail)


class DeleteTestWorkflowTests(TestCase):
    def test_deletes_test_with_links_and_assignments(self):
        Group.objects.create(name="Dev")
        test = factories.create_assessment()
        with mock.patch(NOTIFY):
            workflow.update_test(
                test, name=test.name, roles=["Dev"], level_id=factories.get_level().pk
            )

        workflow.delete_test(test)

        self.assertFalse(AssessmentTest.objects.filter(pk=test.pk).exists())
        self.assertFalse(Assignment.objects.filter(test_id=test.pk).exists())

    def test_refuses_when_attempts_exist(self):
        test = factories.create_assessment()
        factories.create_attempt(test, factories.create_employee())

        with self.assertRaises(InUse):
            workflow.delete_test(test)

        self.assertTrue(AssessmentTest.objects.filter(pk=test.pk).exists())
