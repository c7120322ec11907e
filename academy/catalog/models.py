from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

User = settings.AUTH_USER_MODEL


class SourceKind(models.TextChoices):
    QUIZ = "quiz", _("Quiz")
    EXAM = "exam", _("Prüfung")


class Question(models.Model):
    content = models.TextField()
    options = models.JSONField(
        default=list,
        blank=True,
        help_text=_("Antwortmöglichkeiten. Leer lassen für Freitext-Fragen."),
    )
    answer_key = models.CharField(
        max_length=255,
        help_text=_("Korrekte Antwort, wird beim Bewerten verglichen."),
    )
    points = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=1,
        validators=[MinValueValidator(0)],
        help_text=_("Gewichtung der Frage bei gewichteter Bewertung."),
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Question")
        verbose_name_plural = _("Questions")
        ordering = ["id"]

    def __str__(self):
        return self.content[:50]

    def to_snapshot(self) -> dict:
        return {
            "question_id": self.pk,
            "content": self.content,
            "options": list(self.options or []),
            "answer_key": self.answer_key,
            "points": float(self.points),
        }


class QuizQuerySet(models.QuerySet):
    def alive(self):
        return self.filter(deleted_at__isnull=True)


class Quiz(models.Model):
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    kind = models.CharField(
        max_length=10, choices=SourceKind.choices, default=SourceKind.QUIZ
    )
    duration = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text=_("Bearbeitungszeit ab Start in Sekunden."),
    )
    sample_size = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1)],
        help_text=_("Anzahl der Fragen, die pro Versuch gezogen werden."),
    )
    potential_questions = models.ManyToManyField(
        Question, related_name="quizzes", blank=True
    )
    opens_at = models.DateTimeField(null=True, blank=True)
    closes_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        User,
        related_name="created_quizzes",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = QuizQuerySet.as_manager()

    class Meta:
        verbose_name = _("Quiz")
        verbose_name_plural = _("Quizzes")
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.get_kind_display()})"

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def is_open(self, now=None) -> bool:
        if self.is_deleted:
            return False
        now = now or timezone.now()
        if self.opens_at and now < self.opens_at:
            return False
        if self.closes_at and now >= self.closes_at:
            return False
        return True

    def mark_as_deleted(self) -> None:
        # Sessions, die aus diesem Quiz erstellt wurden, bleiben erhalten
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at", "updated_at"])
