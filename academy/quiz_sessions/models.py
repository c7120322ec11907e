from datetime import timedelta

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from ..access.permissions import Permission
from ..catalog.models import Quiz, SourceKind
from ..scheduling.models import ScheduledTask

User = settings.AUTH_USER_MODEL


class QuizSession(models.Model):
    class Status(models.TextChoices):
        ONGOING = "ongoing", _("Läuft")
        FINISHED = "finished", _("Beendet")

    class ClosedBy(models.TextChoices):
        SUBMISSION = "submission", _("Abgabe")
        TIMEOUT = "timeout", _("Zeitablauf")

    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name="quiz_sessions")
    quiz = models.ForeignKey(Quiz, on_delete=models.PROTECT, related_name="sessions")
    kind = models.CharField(
        max_length=10, choices=SourceKind.choices, default=SourceKind.QUIZ
    )
    status = models.CharField(
        max_length=15, choices=Status.choices, default=Status.ONGOING
    )
    start_time = models.DateTimeField()
    duration = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text=_("Bearbeitungszeit in Sekunden."),
    )
    questions = models.JSONField(
        default=list,
        help_text=_("Unveränderlicher Snapshot der gezogenen Fragen inkl. Lösung."),
    )
    answers = models.JSONField(default=dict, blank=True)
    score = models.FloatField(
        null=True,
        blank=True,
        help_text=_("Anteil 0..1. Wird erst beim Abschluss berechnet."),
    )
    correct_count = models.PositiveIntegerField(null=True, blank=True)
    closed_by = models.CharField(
        max_length=15, choices=ClosedBy.choices, null=True, blank=True
    )
    scheduled_task = models.ForeignKey(
        ScheduledTask,
        related_name="sessions",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    created_at = models.DateTimeField(default=timezone.now)
    finished_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("Quiz Session")
        verbose_name_plural = _("Quiz Sessions")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["owner", "quiz"],
                condition=Q(status="ongoing"),
                name="unique_ongoing_session_per_owner_and_quiz",
            ),
        ]
        indexes = [
            models.Index(fields=["owner", "status"], name="academy_sess_owner_status_idx"),
        ]
        permissions = [
            (Permission.ATTEMPT_QUIZ.value, Permission.ATTEMPT_QUIZ.label),
            (Permission.VIEW_ANY_SESSION.value, Permission.VIEW_ANY_SESSION.label),
            (Permission.MANAGE_SCHEDULED_TASKS.value, Permission.MANAGE_SCHEDULED_TASKS.label),
        ]

    def __str__(self):
        return f"Session {self.pk} of {self.quiz_id} by {self.owner_id} [{self.status}]"

    @property
    def ends_at(self):
        return self.start_time + timedelta(seconds=self.duration)

    @property
    def is_ongoing(self) -> bool:
        return self.status == self.Status.ONGOING

    def remaining_seconds(self, now=None) -> int:
        now = now or timezone.now()
        return max(int((self.ends_at - now).total_seconds()), 0)
