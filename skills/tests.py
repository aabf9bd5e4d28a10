import json

from django.test import TestCase

from questions.tests import factories
from skills.models import Skill


class SkillApiTests(TestCase):
    def setUp(self):
        self.client.force_login(factories.create_admin())

    def _post(self, payload):
        return self.client.post(
            "/api/admin/skills/", data=json.dumps(payload), content_type="application/json"
        )

    def test_create_and_list_with_bank_count(self):
        response = self._post({"name": "Python", "description": "Language"})
        self.assertEqual(response.status_code, 201)
        skill = Skill.objects.get(name="Python")
        factories.create_bank(skill=skill)

        listing = self.client.get("/api/admin/skills/", {"q": "pyth"}).json()

        self.assertEqual(listing["count"], 1)
        self.assertEqual(listing["results"][0]["bank_count"], 1)

    def test_duplicate_name_is_rejected_case_insensitively(self):
        factories.create_skill("Python")

        response = self._post({"name": "python"})

        self.assertEqual(response.status_code, 400)
        self.assertIn("name", response.json())

    def test_deleting_skill_untags_banks(self):
        skill = factories.create_skill("SQL")
        bank = factories.create_bank(skill=skill)

        response = self.client.delete(f"/api/admin/skills/{skill.id}/")

        self.assertEqual(response.status_code, 204)
        bank.refresh_from_db()
        self.assertIsNone(bank.skill)
