from django.db import models


class Skill(models.Model):
    """Subject-matter tag, e.g. Python, SQL, QA or Communication."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name
