from datetime import timedelta

from django.test import TestCase

from academy.exceptions import ConflictError, InvalidStateError, NotFoundError
from academy.quiz_sessions.models import QuizSession
from academy.quiz_sessions.store import SessionStore

from .factories import T0, make_quiz, make_user

SNAPSHOT = [
    {"question_id": 1, "content": "Frage 1", "options": [], "answer_key": "A", "points": 1},
    {"question_id": 2, "content": "Frage 2", "options": [], "answer_key": "B", "points": 1},
]


class SessionStoreTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.quiz = make_quiz(keys=("A", "B"))

    def setUp(self):
        self.store = SessionStore()

    def create(self, **kwargs):
        params = dict(
            owner_id=self.user.pk,
            quiz_id=self.quiz.pk,
            duration=600,
            start_time=T0,
            questions=SNAPSHOT,
        )
        params.update(kwargs)
        return self.store.create(**params)

    def test_create_persists_ongoing_session(self):
        session = self.create()
        self.assertEqual(session.status, QuizSession.Status.ONGOING)
        self.assertEqual(session.ends_at, T0 + timedelta(seconds=600))
        self.assertIsNone(session.score)
        self.assertTrue(self.store.user_has_ongoing(self.user.pk, self.quiz.pk))

    def test_second_ongoing_session_conflicts(self):
        self.create()
        with self.assertRaises(ConflictError):
            self.create()
        self.assertEqual(QuizSession.objects.count(), 1)

    def test_new_session_allowed_after_finish(self):
        first = self.create()
        self.store.finalize(first.pk, {}, 0.0, 0, T0, QuizSession.ClosedBy.SUBMISSION)
        second = self.create()
        self.assertNotEqual(first.pk, second.pk)

    def test_finalize_applies_once(self):
        session = self.create()
        first = self.store.finalize(
            session.pk, {"0": "A"}, 0.5, 1, T0 + timedelta(seconds=100), QuizSession.ClosedBy.SUBMISSION
        )
        second = self.store.finalize(
            session.pk, {}, 0.0, 0, T0 + timedelta(seconds=600), QuizSession.ClosedBy.TIMEOUT
        )

        self.assertTrue(first.applied)
        self.assertFalse(second.applied)
        self.assertEqual(second.session.score, 0.5)
        self.assertEqual(second.session.closed_by, QuizSession.ClosedBy.SUBMISSION)
        self.assertEqual(second.session.finished_at, T0 + timedelta(seconds=100))
        self.assertEqual(second.session.answers, {"0": "A"})

    def test_finalize_unknown_session(self):
        with self.assertRaises(NotFoundError):
            self.store.finalize(999999, {}, 0.0, 0, T0, QuizSession.ClosedBy.TIMEOUT)

    def test_save_answers_merges(self):
        session = self.create()
        self.store.save_answers(session.pk, {"0": "A"})
        updated = self.store.save_answers(session.pk, {"1": "X"})
        self.assertEqual(updated.answers, {"0": "A", "1": "X"})

    def test_save_answers_on_finished_session(self):
        session = self.create()
        self.store.finalize(session.pk, {}, 0.0, 0, T0, QuizSession.ClosedBy.TIMEOUT)
        with self.assertRaises(InvalidStateError):
            self.store.save_answers(session.pk, {"0": "A"})

    def test_list_by_owner_filters(self):
        other_quiz = make_quiz(keys=("A",), name="SQL")
        finished = self.create()
        self.store.finalize(finished.pk, {}, 0.0, 0, T0, QuizSession.ClosedBy.TIMEOUT)
        self.create()
        self.create(quiz_id=other_quiz.pk)
        make_user("Erika")

        self.assertEqual(self.store.list_by_owner(self.user.pk).count(), 3)
        self.assertEqual(self.store.list_by_owner(self.user.pk, {"quiz": self.quiz.pk}).count(), 2)
        self.assertEqual(
            self.store.list_by_owner(self.user.pk, {"status": QuizSession.Status.ONGOING}).count(), 2
        )
