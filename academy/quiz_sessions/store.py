"""
Session Store

Database access for ``QuizSession`` rows. The two operations that carry the
lifecycle guarantees are implemented as single SQL statements:

- create: the partial unique constraint on (owner, quiz, status='ongoing')
  rejects a second ongoing session, also across server instances
- finalize: ``UPDATE ... WHERE status='ongoing'``; exactly one caller sees
  one updated row, everyone else gets the stored result back

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from ..exceptions import ConflictError, InvalidStateError, NotFoundError
from .models import QuizSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinalizeResult:
    session: QuizSession
    applied: bool


class SessionStore:
    """Persistence for quiz sessions."""

    def create(
        self,
        owner_id: int,
        quiz_id: int,
        duration: int,
        start_time: datetime,
        questions: List[Dict[str, Any]],
        kind: str = "quiz",
    ) -> QuizSession:
        """
        Insert a new ongoing session.

        Raises:
            ConflictError: If the owner already has an ongoing session for the quiz
        """
        try:
            # Eigener Savepoint, damit der IntegrityError eine äußere Transaktion nicht beschädigt
            with transaction.atomic():
                session = QuizSession.objects.create(
                    owner_id=owner_id,
                    quiz_id=quiz_id,
                    kind=kind,
                    status=QuizSession.Status.ONGOING,
                    start_time=start_time,
                    duration=duration,
                    questions=questions,
                    answers={},
                )
        except IntegrityError as e:
            logger.info(f"[Quiz] Duplicate ongoing session for user {owner_id} and quiz {quiz_id}: {e}")
            raise ConflictError() from e
        logger.info(f"[Quiz] Session {session.pk} created for user {owner_id} and quiz {quiz_id}")
        return session

    def get_by_id(self, session_id) -> Optional[QuizSession]:
        return QuizSession.objects.filter(pk=session_id).first()

    def user_has_ongoing(self, owner_id: int, quiz_id: int) -> bool:
        return QuizSession.objects.filter(
            owner_id=owner_id, quiz_id=quiz_id, status=QuizSession.Status.ONGOING
        ).exists()

    def attach_task(self, session_id, task_id: int) -> None:
        QuizSession.objects.filter(pk=session_id).update(scheduled_task_id=task_id)

    def save_answers(self, session_id, answers: Mapping[str, Any]) -> QuizSession:
        """
        Merge answers into an ongoing session.

        Raises:
            NotFoundError: Unknown session
            InvalidStateError: Session already finished
        """
        with transaction.atomic():
            session = QuizSession.objects.select_for_update().filter(pk=session_id).first()
            if session is None:
                raise NotFoundError("Session not found.")
            if not session.is_ongoing:
                raise InvalidStateError()
            merged = dict(session.answers or {})
            merged.update(answers)
            session.answers = merged
            session.save(update_fields=["answers"])
        return session

    def finalize(
        self,
        session_id,
        answers: Mapping[str, Any],
        score: float,
        correct_count: int,
        finished_at: datetime,
        closed_by: str,
    ) -> FinalizeResult:
        """
        Close an ongoing session exactly once.

        Returns:
            FinalizeResult(applied=True) if this call closed the session,
            FinalizeResult(applied=False) with the untouched stored session
            if it was already finished

        Raises:
            NotFoundError: Unknown session
        """
        updated = QuizSession.objects.filter(
            pk=session_id, status=QuizSession.Status.ONGOING
        ).update(
            status=QuizSession.Status.FINISHED,
            answers=dict(answers),
            score=score,
            correct_count=correct_count,
            finished_at=finished_at,
            closed_by=closed_by,
        )
        session = self.get_by_id(session_id)
        if session is None:
            raise NotFoundError("Session not found.")
        if updated:
            logger.info(
                f"[Quiz] Session {session_id} finalized by {closed_by} with score {score:.4f}"
            )
        else:
            logger.info(f"[Quiz] Session {session_id} was already finalized, {closed_by} discarded")
        return FinalizeResult(session=session, applied=bool(updated))

    def list_by_owner(self, owner_id: int, filters: Optional[Mapping[str, Any]] = None) -> QuerySet:
        queryset = QuizSession.objects.filter(owner_id=owner_id).select_related("quiz")
        filters = filters or {}
        if filters.get("quiz"):
            queryset = queryset.filter(quiz_id=filters["quiz"])
        if filters.get("status"):
            queryset = queryset.filter(status=filters["status"])
        if filters.get("kind"):
            queryset = queryset.filter(kind=filters["kind"])
        return queryset.order_by("-created_at", "-id")
