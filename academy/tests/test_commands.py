from datetime import timedelta
from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase

from academy.quiz_sessions.models import QuizSession
from academy.scheduling.models import ScheduledTask

from .factories import T0, FakeClock, build_manager, make_quiz, make_user


class RunSchedulerCommandTests(TestCase):
    def setUp(self):
        cache.clear()
        self.user = make_user()
        self.quiz = make_quiz()

    def test_once_closes_expired_sessions(self):
        # Session liegt in der Vergangenheit, der Job ist also längst fällig
        session = build_manager(FakeClock()).start_session(self.user, self.quiz.pk)

        out = StringIO()
        call_command("run_scheduler", "--once", stdout=out)

        closed = QuizSession.objects.get(pk=session.pk)
        self.assertEqual(closed.status, QuizSession.Status.FINISHED)
        self.assertEqual(closed.closed_by, QuizSession.ClosedBy.TIMEOUT)
        self.assertEqual(closed.finished_at, T0 + timedelta(seconds=600))
        self.assertEqual(
            ScheduledTask.objects.get(pk=closed.scheduled_task_id).status,
            ScheduledTask.Status.DONE,
        )
        self.assertIn("1 Job(s) ausgeführt", out.getvalue())

    def test_once_without_due_jobs(self):
        out = StringIO()
        call_command("run_scheduler", "--once", stdout=out)
        self.assertIn("0 Job(s) ausgeführt", out.getvalue())
