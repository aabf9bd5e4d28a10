import random
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from assessments.exceptions import NoMatchingQuestions
from assessments.models import Test as AssessmentTest, TestQuestion as Link
from assessments.service_utils.assembly import (
    QuestionCriteria,
    assemble_test,
    draw_questions,
    regenerate_test,
    replace_test_questions,
)
from questions.models import Question
from . import factories


class DrawQuestionsTests(TestCase):
    def setUp(self):
        self.bank = factories.create_bank()
        self.questions = factories.create_questions(6, bank=self.bank)
        self.available = {question.id for question in self.questions}

    def test_draws_requested_number_without_replacement(self):
        drawn = draw_questions(QuestionCriteria(bank_id=self.bank.id), 4, rng=random.Random(3))

        self.assertEqual(len(drawn), 4)
        self.assertEqual(len(set(drawn)), 4)
        self.assertTrue(set(drawn) <= self.available)

    def test_clamps_to_available_questions(self):
        drawn = draw_questions(QuestionCriteria(bank_id=self.bank.id), 50)
        self.assertEqual(set(drawn), self.available)

    def test_filters_apply_before_sampling(self):
        essay = factories.create_question(bank=self.bank, type=Question.Type.ESSAY)
        criteria = QuestionCriteria(bank_id=self.bank.id, type=Question.Type.ESSAY)

        self.assertEqual(draw_questions(criteria, 3), [essay.id])

    def test_empty_candidate_set_raises(self):
        criteria = QuestionCriteria(bank_id=self.bank.id, difficulty=Question.Difficulty.MANAGER)
        with self.assertRaises(NoMatchingQuestions) as ctx:
            draw_questions(criteria, 3)
        self.assertIn("bank", ctx.exception.detail)


class AssembleTestTests(TestCase):
    def setUp(self):
        self.bank = factories.create_bank()
        factories.create_questions(8, bank=self.bank)

    def _assemble(self, count, **kwargs):
        return assemble_test(
            QuestionCriteria(bank_id=self.bank.id, **kwargs),
            count,
            name="Backend screening",
            description="",
            duration_minutes=45,
            pass_score=6,
            created_by="hradmin",
            rng=random.Random(11),
        )

    def test_persists_dense_order(self):
        test = self._assemble(5)

        orders = list(test.test_questions.order_by("order").values_list("order", flat=True))
        self.assertEqual(orders, [1, 2, 3, 4, 5])
        self.assertTrue(test.is_randomized)
        self.assertEqual(test.created_by, "hradmin")

    def test_question_links_are_distinct(self):
        test = self._assemble(8)
        question_ids = list(test.test_questions.values_list("question_id", flat=True))
        self.assertEqual(len(set(question_ids)), 8)

    def test_no_matching_questions_leaves_no_test(self):
        before = AssessmentTest.objects.count()

        with self.assertRaises(NoMatchingQuestions):
            self._assemble(3, type=Question.Type.MATCHING)

        self.assertEqual(AssessmentTest.objects.count(), before)

    def test_failed_link_insert_rolls_back_test_row(self):
        before = AssessmentTest.objects.count()

        with mock.patch.object(Link.objects, "bulk_create", side_effect=DatabaseError("boom")):
            with self.assertRaises(DatabaseError):
                self._assemble(3)

        self.assertEqual(AssessmentTest.objects.count(), before)


class ReplaceQuestionsTests(TestCase):
    def setUp(self):
        self.bank = factories.create_bank_with_questions(10)
        self.test = factories.create_assessment(bank=self.bank, question_count=4)

    def _links(self):
        return list(self.test.test_questions.order_by("order").values_list("order", "question_id"))

    def test_replace_renumbers_from_one(self):
        new_ids = list(self.bank.questions.values_list("id", flat=True)[:2])

        replace_test_questions(self.test, new_ids)

        self.assertEqual(self._links(), [(1, new_ids[0]), (2, new_ids[1])])

    def test_regenerate_replaces_all_rows(self):
        regenerate_test(self.test, QuestionCriteria(bank_id=self.bank.id), 6, rng=random.Random(5))

        orders = [order for order, _ in self._links()]
        self.assertEqual(orders, [1, 2, 3, 4, 5, 6])

    def test_regenerate_marks_test_randomized(self):
        AssessmentTest.objects.filter(pk=self.test.pk).update(is_randomized=False)
        self.test.refresh_from_db()

        regenerate_test(self.test, QuestionCriteria(bank_id=self.bank.id), 2)

        self.test.refresh_from_db()
        self.assertTrue(self.test.is_randomized)

    def test_failure_after_delete_restores_previous_questions(self):
        original = self._links()

        with mock.patch.object(Link.objects, "bulk_create", side_effect=DatabaseError("boom")):
            with self.assertRaises(DatabaseError):
                regenerate_test(self.test, QuestionCriteria(bank_id=self.bank.id), 5)

        self.assertEqual(self._links(), original)
        self.assertEqual(len(original), 4)

    def test_empty_criteria_keeps_existing_questions(self):
        original = self._links()
        other_bank = factories.create_bank()

        with self.assertRaises(NoMatchingQuestions):
            regenerate_test(self.test, QuestionCriteria(bank_id=other_bank.id), 3)

        self.assertEqual(self._links(), original)
