"""
Session Lifecycle Manager

The only component that creates or closes quiz sessions. It combines the
source catalog, the session store, the task scheduler and the notifier,
all passed in through the constructor.

Lifecycle:
1. start_session: eligibility checks, question snapshot, session row and
   END_SESSION job written in one transaction
2. save_answers: progress is stored while the session is running
3. submit_answers: manual close before the deadline
4. on_scheduled_end: forced close when the deadline job fires

Manual submit and scheduled end race through ``SessionStore.finalize``;
whichever conditional update lands first wins, the other one is a no-op.

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from ..access.permissions import Permission, PermissionChecker
from ..catalog.services import SourceCatalog
from ..exceptions import (
    ConflictError,
    DeadlineExceededError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..notifications.notifier import Notifier, get_notifier
from ..scheduling.scheduler import TaskScheduler
from ..scheduling.task_types import ScheduledTaskType
from .models import QuizSession
from .scoring import normalize_answers, score_answers
from .store import SessionStore

logger = logging.getLogger(__name__)


def _as_id(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")


class SessionLifecycleManager:
    """
    Orchestrates creation, submission and forced termination of sessions.

    Attributes:
        store: SessionStore for session rows
        scheduler: TaskScheduler for the END_SESSION deadline jobs
        notifier: Notifier informing users about forced closes
        catalog: SourceCatalog for quiz definitions and question sampling
        permissions: PermissionChecker answering can_perform
        clock: Callable returning the current aware datetime
        scoring_mode: "ratio" or "weighted"
    """

    def __init__(
        self,
        store: SessionStore,
        scheduler: TaskScheduler,
        notifier: Notifier,
        catalog: SourceCatalog,
        permissions: PermissionChecker,
        clock: Callable[[], datetime] = timezone.now,
        scoring_mode: Optional[str] = None,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.notifier = notifier
        self.catalog = catalog
        self.permissions = permissions
        self.clock = clock
        self.scoring_mode = scoring_mode or getattr(settings, "QUIZ_SCORING_MODE", "ratio")

    # --- Client operations ---

    def start_session(self, user, quiz_id) -> QuizSession:
        """
        Start a timed session for ``user`` on the given quiz.

        Raises:
            ForbiddenError: Missing permission or quiz not open
            NotFoundError: Quiz does not exist or was deleted
            ConflictError: User already has an ongoing session for the quiz
        """
        if not self.permissions.can_perform(user, Permission.ATTEMPT_QUIZ):
            raise ForbiddenError()

        quiz = self.catalog.get_source_by_id(_as_id(quiz_id, "quizId"))
        if quiz is None:
            raise NotFoundError("Quiz not found.")

        now = self.clock()
        if not quiz.is_open(now):
            raise ForbiddenError("This quiz is not open for attempts.")
        if self.store.user_has_ongoing(user.pk, quiz.pk):
            raise ConflictError()

        questions = self.catalog.sample_questions(quiz)

        with transaction.atomic():
            session = self.store.create(
                owner_id=user.pk,
                quiz_id=quiz.pk,
                duration=quiz.duration,
                start_time=now,
                questions=questions,
                kind=quiz.kind,
            )
            task_id = self.scheduler.schedule_at(
                session.ends_at,
                ScheduledTaskType.END_SESSION,
                {"session_id": session.pk},
            )
            self.store.attach_task(session.pk, task_id)
            session.scheduled_task_id = task_id

        logger.info(
            f"[Quiz] User {user.pk} started session {session.pk} on quiz {quiz.pk}, ends at {session.ends_at.isoformat()}"
        )
        return session

    def save_answers(self, user, session_id, answers: Any) -> QuizSession:
        """Persist intermediate answers of a running session."""
        session = self._load_owned(user, session_id)
        self._ensure_accepting_answers(session)
        normalized = normalize_answers(answers, len(session.questions))
        return self.store.save_answers(session.pk, normalized)

    def submit_answers(self, user, session_id, answers: Any) -> QuizSession:
        """
        Close the session with the user's answers and score it.

        If the scheduler closed the session between loading and finalizing,
        the stored result is returned unchanged.

        Raises:
            NotFoundError, ForbiddenError, InvalidStateError,
            DeadlineExceededError, ValidationError
        """
        session = self._load_owned(user, session_id)
        now = self._ensure_accepting_answers(session)

        submitted = normalize_answers(answers, len(session.questions))
        merged: Dict[str, Any] = {**(session.answers or {}), **submitted}
        result = score_answers(session.questions, merged, self.scoring_mode)

        outcome = self.store.finalize(
            session.pk,
            answers=merged,
            score=result.score,
            correct_count=result.correct_count,
            finished_at=now,
            closed_by=QuizSession.ClosedBy.SUBMISSION,
        )
        if not outcome.applied:
            logger.info(f"[Quiz] Submission for session {session.pk} lost against scheduled end")

        self._cancel_end_task(outcome.session)
        return outcome.session

    def get_session(self, user, session_id) -> QuizSession:
        session = self.store.get_by_id(_as_id(session_id, "sessionId"))
        if session is None:
            raise NotFoundError("Session not found.")
        if session.owner_id != user.pk and not self.permissions.can_perform(
            user, Permission.VIEW_ANY_SESSION
        ):
            raise ForbiddenError()
        return session

    def list_sessions(self, user, filters: Optional[Mapping[str, Any]] = None) -> QuerySet:
        return self.store.list_by_owner(user.pk, filters)

    # --- Scheduler entry points ---

    def on_scheduled_end(self, session_id) -> bool:
        """
        Force-close a session whose deadline passed.

        Scores whatever answers were saved so far. Missing or already
        finished sessions are ignored.

        Returns:
            True if this call closed the session
        """
        session = self.store.get_by_id(session_id)
        if session is None:
            logger.warning(f"[Quiz] Scheduled end for unknown session {session_id}")
            return False
        if not session.is_ongoing:
            return False

        finished_at = min(self.clock(), session.ends_at)
        answers = dict(session.answers or {})
        result = score_answers(session.questions, answers, self.scoring_mode)

        outcome = self.store.finalize(
            session.pk,
            answers=answers,
            score=result.score,
            correct_count=result.correct_count,
            finished_at=finished_at,
            closed_by=QuizSession.ClosedBy.TIMEOUT,
        )
        if not outcome.applied:
            return False

        self._notify_closed(outcome.session)
        return True

    def handle_end_session_task(self, payload: Mapping[str, Any]) -> None:
        session_id = payload.get("session_id")
        if session_id is None:
            raise ValueError("Trying to end session but payload has no session_id")
        self.on_scheduled_end(session_id)

    # --- Helpers ---

    def _load_owned(self, user, session_id) -> QuizSession:
        session = self.store.get_by_id(_as_id(session_id, "sessionId"))
        if session is None:
            raise NotFoundError("Session not found.")
        if session.owner_id != user.pk:
            raise ForbiddenError("This session belongs to another user.")
        return session

    def _ensure_accepting_answers(self, session: QuizSession) -> datetime:
        if not session.is_ongoing:
            raise InvalidStateError()
        now = self.clock()
        if now > session.ends_at:
            raise DeadlineExceededError()
        return now

    def _cancel_end_task(self, session: QuizSession) -> None:
        if not session.scheduled_task_id:
            return
        try:
            self.scheduler.cancel(session.scheduled_task_id)
        except Exception as e:
            logger.warning(
                f"[Quiz] Could not cancel end task {session.scheduled_task_id} of session {session.pk}: {e}"
            )

    def _notify_closed(self, session: QuizSession) -> None:
        try:
            self.notifier.notify_user_session_closed(session.owner_id, session.pk)
        except Exception as e:
            logger.warning(f"[Quiz] Notification for session {session.pk} failed: {e}")


def build_session_manager(
    scheduler: Optional[TaskScheduler] = None,
    notifier: Optional[Notifier] = None,
    clock: Callable[[], datetime] = timezone.now,
) -> SessionLifecycleManager:
    """
    Wire a lifecycle manager with the default collaborators.

    The END_SESSION handler is registered on the scheduler, so the same
    function serves both the web process and the scheduler worker.
    """
    scheduler = scheduler or TaskScheduler(clock=clock)
    manager = SessionLifecycleManager(
        store=SessionStore(),
        scheduler=scheduler,
        notifier=notifier or get_notifier(),
        catalog=SourceCatalog(),
        permissions=PermissionChecker(),
        clock=clock,
    )
    scheduler.register(ScheduledTaskType.END_SESSION, manager.handle_end_session_task)
    return manager
