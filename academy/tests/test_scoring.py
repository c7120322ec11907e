from django.test import SimpleTestCase

from academy.exceptions import ValidationError
from academy.quiz_sessions.scoring import normalize_answers, score_answers

QUESTIONS = [
    {"question_id": 1, "answer_key": "A", "points": 1},
    {"question_id": 2, "answer_key": "B", "points": 2},
    {"question_id": 3, "answer_key": "C", "points": 1},
]


class ScoreAnswersTests(SimpleTestCase):
    def test_partial_answers_count_missing_as_wrong(self):
        result = score_answers(QUESTIONS, {"0": "A", "1": "X"})
        self.assertAlmostEqual(result.score, 1 / 3)
        self.assertEqual(result.correct_count, 1)
        self.assertEqual(result.total, 3)

    def test_all_correct(self):
        result = score_answers(QUESTIONS, {"0": "A", "1": "B", "2": "C"})
        self.assertEqual(result.score, 1.0)
        self.assertEqual(result.correct_count, 3)

    def test_empty_answers_score_zero(self):
        result = score_answers(QUESTIONS, {})
        self.assertEqual(result.score, 0.0)
        self.assertEqual(result.correct_count, 0)

    def test_empty_snapshot_scores_zero(self):
        result = score_answers([], {"0": "A"})
        self.assertEqual(result.score, 0.0)
        self.assertEqual(result.total, 0)

    def test_comparison_ignores_case_and_whitespace(self):
        result = score_answers(QUESTIONS, {"0": " a ", "1": "b"})
        self.assertEqual(result.correct_count, 2)

    def test_weighted_mode_uses_points(self):
        result = score_answers(QUESTIONS, {"1": "B"}, mode="weighted")
        self.assertAlmostEqual(result.score, 2 / 4)

    def test_zero_point_question_only_counts_in_ratio_mode(self):
        questions = [{"answer_key": "A", "points": 0}, {"answer_key": "B", "points": 1}]
        answers = {"0": "A"}
        self.assertEqual(score_answers(questions, answers).score, 0.5)
        self.assertEqual(score_answers(questions, answers, mode="weighted").score, 0.0)

    def test_scoring_is_deterministic(self):
        answers = {"0": "A", "2": "D"}
        first = score_answers(QUESTIONS, answers)
        for _ in range(5):
            self.assertEqual(score_answers(QUESTIONS, answers), first)

    def test_unknown_mode_is_rejected(self):
        with self.assertRaises(ValueError):
            score_answers(QUESTIONS, {}, mode="bonus")


class NormalizeAnswersTests(SimpleTestCase):
    def test_accepts_int_and_digit_string_keys(self):
        self.assertEqual(
            normalize_answers({0: "A", "2": 4}, 3),
            {"0": "A", "2": "4"},
        )

    def test_none_values_are_dropped(self):
        self.assertEqual(normalize_answers({"1": None}, 3), {})

    def test_missing_payload_is_empty(self):
        self.assertEqual(normalize_answers(None, 3), {})

    def test_rejects_non_object(self):
        with self.assertRaises(ValidationError):
            normalize_answers(["A", "B"], 3)

    def test_rejects_out_of_range_index(self):
        with self.assertRaises(ValidationError) as ctx:
            normalize_answers({"3": "A"}, 3)
        self.assertIn("question index 3 out of range", ctx.exception.details["answers"])

    def test_rejects_non_numeric_key(self):
        with self.assertRaises(ValidationError):
            normalize_answers({"first": "A"}, 3)

    def test_rejects_nested_values(self):
        with self.assertRaises(ValidationError):
            normalize_answers({"0": ["A"]}, 3)

    def test_rejects_non_ascii_digit_keys(self):
        for key in ("²", "٣"):
            with self.assertRaises(ValidationError) as ctx:
                normalize_answers({key: "A"}, 3)
            self.assertIn(f"invalid question index '{key}'", ctx.exception.details["answers"])

    def test_integral_floats_are_stored_like_ints(self):
        self.assertEqual(normalize_answers({"0": 1.0, "1": 2.5}, 3), {"0": "1", "1": "2.5"})

    def test_integral_float_matches_numeric_key(self):
        answers = normalize_answers({"0": 1.0}, 1)
        result = score_answers([{"question_id": 1, "answer_key": "1", "points": 1}], answers)
        self.assertEqual(result.correct_count, 1)
