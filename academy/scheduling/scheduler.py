"""
Task Scheduler for the Academy Platform

Durable replacement for an in-memory job queue. Jobs are rows in the
``ScheduledTask`` table; a polling worker (``manage.py run_scheduler``) picks
due rows, claims them with a conditional UPDATE and runs the handler that was
registered for the job's task type.

Guarantees:
- A job runs at or after ``run_at``, as long as a worker is running
- Each job runs at most once: the PENDING -> RUNNING claim is atomic in the DB
- Handler failures are logged and mark the job FAILED; no automatic retry
- Jobs left RUNNING by a crashed worker are marked FAILED for operator triage

Author: Academy Development Team
Version: 1.0.0
"""

import logging
import threading
import time
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from django.conf import settings
from django.db import close_old_connections
from django.utils import timezone

from .models import ScheduledTask

logger = logging.getLogger(__name__)

TaskHandler = Callable[[Dict[str, Any]], Any]


class TaskScheduler:
    """
    Database-backed scheduler with an explicit handler registry.

    The registry belongs to the instance. Whoever builds the scheduler
    registers the handlers it needs (see ``build_session_manager``).

    Attributes:
        poll_interval (float): Seconds between polls when idle
        batch_size (int): Max jobs claimed per poll
        stale_after (timedelta): RUNNING jobs older than this count as lost
    """

    def __init__(
        self,
        poll_interval: Optional[float] = None,
        batch_size: Optional[int] = None,
        stale_after: Optional[float] = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self.poll_interval = float(
            poll_interval
            if poll_interval is not None
            else getattr(settings, "SCHEDULER_POLL_INTERVAL_SECONDS", 5)
        )
        self.batch_size = int(
            batch_size
            if batch_size is not None
            else getattr(settings, "SCHEDULER_BATCH_SIZE", 50)
        )
        self.stale_after = timedelta(
            seconds=stale_after
            if stale_after is not None
            else getattr(settings, "SCHEDULER_STALE_AFTER_SECONDS", 900)
        )
        self.clock = clock
        self._handlers: Dict[str, TaskHandler] = {}

    # --- Registry ---

    def register(self, task_type: str, handler: TaskHandler) -> None:
        self._handlers[str(task_type)] = handler
        logger.debug(f"[TaskScheduling] Handler registered for '{task_type}'")

    def has_handler(self, task_type: str) -> bool:
        return str(task_type) in self._handlers

    # --- Producer API ---

    def schedule_at(
        self, when: datetime, task_type: str, payload: Optional[Dict[str, Any]] = None
    ) -> int:
        """
        Persist a job that fires at or after ``when``.

        Args:
            when: Due instant (timezone-aware)
            task_type: Registered task type
            payload: JSON-serialisable handler input

        Returns:
            Primary key of the created job
        """
        task = ScheduledTask.objects.create(
            task_type=str(task_type), payload=payload or {}, run_at=when
        )
        logger.debug(f"[TaskScheduling] Scheduled {task_type} job {task.pk} at {when.isoformat()}")
        return task.pk

    def run_now(self, task_type: str, payload: Optional[Dict[str, Any]] = None) -> int:
        return self.schedule_at(self.clock(), task_type, payload)

    def cancel(self, job_id: int) -> bool:
        """
        Cancel a job that has not been claimed yet.

        A job that is already running or finished is left alone.

        Returns:
            True if the job moved from PENDING to CANCELLED
        """
        updated = ScheduledTask.objects.filter(
            pk=job_id, status=ScheduledTask.Status.PENDING
        ).update(status=ScheduledTask.Status.CANCELLED, finished_at=self.clock())
        if updated:
            logger.debug(f"[TaskScheduling] Cancelled job {job_id}")
        return bool(updated)

    # --- Worker API ---

    def claim(self, job_id: int, now: Optional[datetime] = None) -> bool:
        """Atomically move a due job from PENDING to RUNNING."""
        now = now or self.clock()
        updated = ScheduledTask.objects.filter(
            pk=job_id, status=ScheduledTask.Status.PENDING, run_at__lte=now
        ).update(status=ScheduledTask.Status.RUNNING, claimed_at=now)
        return updated == 1

    def due_task_ids(self, now: datetime, limit: int) -> List[int]:
        return list(
            ScheduledTask.objects.filter(
                status=ScheduledTask.Status.PENDING, run_at__lte=now
            )
            .order_by("run_at", "id")
            .values_list("id", flat=True)[:limit]
        )

    def run_due(self, now: Optional[datetime] = None, limit: Optional[int] = None) -> int:
        """
        Claim and execute due jobs.

        Args:
            now: Reference instant (defaults to the scheduler clock)
            limit: Max number of jobs (defaults to ``batch_size``)

        Returns:
            Number of jobs this call executed
        """
        now = now or self.clock()
        executed = 0
        for job_id in self.due_task_ids(now, limit or self.batch_size):
            if not self.claim(job_id, now):
                # Ein anderer Worker war schneller
                continue
            self.execute(ScheduledTask.objects.get(pk=job_id))
            executed += 1
        return executed

    def execute(self, task: ScheduledTask) -> bool:
        """
        Run the handler of a claimed job and record the outcome.

        Returns:
            True if the handler finished without raising
        """
        handler = self._handlers.get(task.task_type)
        try:
            if handler is None:
                raise LookupError(f"No handler registered for task type '{task.task_type}'")
            handler(task.payload)
        except Exception as e:
            logger.exception(f"[TaskScheduling] Job {task.pk} ({task.task_type}) failed: {e}")
            ScheduledTask.objects.filter(
                pk=task.pk, status=ScheduledTask.Status.RUNNING
            ).update(
                status=ScheduledTask.Status.FAILED,
                finished_at=self.clock(),
                last_error=f"{type(e).__name__}: {e}",
            )
            return False

        ScheduledTask.objects.filter(
            pk=task.pk, status=ScheduledTask.Status.RUNNING
        ).update(status=ScheduledTask.Status.DONE, finished_at=self.clock())
        logger.debug(f"[TaskScheduling] Job {task.pk} ({task.task_type}) done")
        return True

    def fail_stale(self, now: Optional[datetime] = None) -> int:
        """Mark jobs whose worker vanished mid-execution as FAILED."""
        now = now or self.clock()
        count = ScheduledTask.objects.filter(
            status=ScheduledTask.Status.RUNNING, claimed_at__lt=now - self.stale_after
        ).update(
            status=ScheduledTask.Status.FAILED,
            finished_at=now,
            last_error="Worker lost during execution",
        )
        if count:
            logger.error(f"[TaskScheduling] {count} stale running job(s) marked as failed")
        return count

    def run_forever(
        self,
        stop_event: Optional[threading.Event] = None,
        max_iterations: Optional[int] = None,
    ) -> None:
        """
        Polling loop of the worker process.

        Errors inside one iteration (e.g. the database being unreachable) are
        logged and the loop continues after the poll interval.

        Args:
            stop_event: Set to stop the loop after the current iteration
            max_iterations: Stop after this many polls (None = run forever)
        """
        logger.info(
            f"[TaskScheduling] Worker started (interval={self.poll_interval}s, batch={self.batch_size})"
        )
        iterations = 0
        while not (stop_event and stop_event.is_set()):
            executed = 0
            try:
                close_old_connections()
                self.fail_stale()
                executed = self.run_due()
            except Exception as e:
                logger.exception(f"[TaskScheduling] Poll failed: {e}")

            iterations += 1
            if max_iterations is not None and iterations >= max_iterations:
                break
            if executed >= self.batch_size:
                # Rückstau abarbeiten, ohne zu warten
                continue
            if stop_event is not None:
                stop_event.wait(self.poll_interval)
            else:
                time.sleep(self.poll_interval)
        logger.info("[TaskScheduling] Worker stopped")
