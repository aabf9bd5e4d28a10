from django.test import TestCase
from rest_framework import exceptions

from questions import services
from questions.models import Question, QuestionBank
from questions.services import QuestionCriteria
from . import factories


class FilterQuestionsTests(TestCase):
    def setUp(self):
        self.python = factories.create_skill("Python")
        self.sql = factories.create_skill("SQL")
        self.bank = factories.create_bank(name="Backend")
        self.other_bank = factories.create_bank(name="Frontend")

        self.mcq_junior = factories.create_question(bank=self.bank, skill=self.python)
        self.essay_senior = factories.create_question(
            bank=self.bank,
            skill=self.python,
            type=Question.Type.ESSAY,
            difficulty=Question.Difficulty.SENIOR,
        )
        self.sql_question = factories.create_question(bank=self.bank, skill=self.sql)
        factories.create_question(bank=self.other_bank, skill=self.python)

    def test_bank_only(self):
        ids = services.candidate_ids(QuestionCriteria(bank_id=self.bank.id))
        self.assertEqual(ids, [self.mcq_junior.id, self.essay_senior.id, self.sql_question.id])

    def test_optional_filters_narrow_the_set(self):
        criteria = QuestionCriteria(
            bank_id=self.bank.id,
            skill_id=self.python.id,
            type=Question.Type.ESSAY,
            difficulty=Question.Difficulty.SENIOR,
        )
        self.assertEqual(services.candidate_ids(criteria), [self.essay_senior.id])

    def test_no_match_returns_empty_list(self):
        criteria = QuestionCriteria(bank_id=self.bank.id, type=Question.Type.MATCHING)
        self.assertEqual(services.candidate_ids(criteria), [])

    def test_search_questions_by_term(self):
        question = factories.create_question(bank=self.bank, content="Explain the GIL")
        found = list(services.search_questions(term="gil"))
        self.assertEqual(found, [question])


class BankServiceTests(TestCase):
    def test_search_banks_by_question_skill(self):
        skill = factories.create_skill()
        tagged_bank = factories.create_bank(name="Tagged")
        factories.create_question(bank=tagged_bank, skill=skill)
        factories.create_bank(name="Untagged", skill=None)

        banks = list(services.search_banks(skill_id=skill.id))

        self.assertEqual(banks, [tagged_bank])
        self.assertEqual(banks[0].question_count, 1)

    def test_delete_bank_with_questions_is_refused(self):
        bank = factories.create_bank()
        factories.create_question(bank=bank)

        with self.assertRaises(exceptions.ValidationError) as ctx:
            services.delete_bank(bank)

        self.assertIn("bank", ctx.exception.detail)
        self.assertTrue(QuestionBank.objects.filter(pk=bank.pk).exists())

    def test_delete_empty_bank(self):
        bank = factories.create_bank()
        services.delete_bank(bank)
        self.assertFalse(QuestionBank.objects.filter(pk=bank.pk).exists())
