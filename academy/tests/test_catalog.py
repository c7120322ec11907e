import random
from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import TestCase

from academy.catalog.models import Question
from academy.catalog.services import SourceCatalog

from .factories import T0, make_quiz


class SourceCatalogTests(TestCase):
    def setUp(self):
        self.catalog = SourceCatalog()

    def test_deleted_quizzes_are_hidden(self):
        quiz = make_quiz()
        self.assertEqual(self.catalog.get_source_by_id(quiz.pk), quiz)
        quiz.mark_as_deleted()
        self.assertIsNone(self.catalog.get_source_by_id(quiz.pk))

    def test_sample_draws_distinct_questions_with_keys(self):
        quiz = make_quiz(keys=("A", "B", "C", "D", "A"))
        quiz.sample_size = 3
        quiz.save()

        sample = self.catalog.sample_questions(quiz, rng=random.Random(7))
        self.assertEqual(len(sample), 3)
        self.assertEqual(len({q["question_id"] for q in sample}), 3)
        self.assertTrue(all("answer_key" in q and q["points"] == 1.0 for q in sample))

    def test_sample_is_capped_by_pool_size(self):
        quiz = make_quiz(keys=("A", "B"))
        quiz.sample_size = 5
        quiz.save()

        with self.assertLogs("academy.catalog.services", level="WARNING"):
            sample = self.catalog.sample_questions(quiz)
        self.assertEqual(len(sample), 2)

    def test_open_window(self):
        quiz = make_quiz(opens_at=T0, closes_at=T0 + timedelta(hours=1))
        self.assertFalse(quiz.is_open(T0 - timedelta(seconds=1)))
        self.assertTrue(quiz.is_open(T0))
        self.assertFalse(quiz.is_open(T0 + timedelta(hours=1)))

    def test_points_must_not_be_negative(self):
        Question(content="Bonusfrage", answer_key="A", points=Decimal("0")).full_clean()
        with self.assertRaises(DjangoValidationError) as ctx:
            Question(content="Strafpunkte", answer_key="A", points=Decimal("-1")).full_clean()
        self.assertIn("points", ctx.exception.message_dict)
