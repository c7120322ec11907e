"""
Academy Django Admin Configuration

Admin interface for the question bank, quiz/exam definitions, session
records and the scheduler job table.

The admin interface is organized into logical sections:
- Catalog: Questions and quiz/exam definitions (soft delete)
- Sessions: Read-only session history
- Scheduling: Job table with cancel action for pending jobs

Author: Academy Development Team
Version: 1.0.0
"""

from typing import Optional

from django.contrib import admin, messages
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _

from .access.permissions import Permission, PermissionChecker
from .models import Question, Quiz, QuizSession, ScheduledTask
from .scheduling.scheduler import TaskScheduler

# --- Catalog Administration ---


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ("id", "short_content", "answer_key", "points", "created_at")
    search_fields = ("content", "answer_key")
    readonly_fields = ("created_at",)

    @admin.display(description=_("Content"))
    def short_content(self, obj: Question) -> str:
        return obj.content[:60]


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    """
    Administration of quiz and exam definitions.

    Quizzes are never hard-deleted from here because sessions keep
    referencing them; the bulk action sets ``deleted_at`` instead.
    """

    list_display = (
        "name",
        "kind",
        "duration",
        "sample_size",
        "question_count",
        "opens_at",
        "closes_at",
        "deleted_at",
    )
    list_filter = ("kind", "deleted_at")
    search_fields = ("name", "description")
    filter_horizontal = ("potential_questions",)
    readonly_fields = ("created_at", "updated_at", "deleted_at")
    actions = ["mark_as_deleted"]

    fieldsets = (
        (_("Quiz Information"), {"fields": ("name", "description", "kind", "created_by")}),
        (_("Attempt Settings"), {"fields": ("duration", "sample_size", "potential_questions")}),
        (_("Availability"), {"fields": ("opens_at", "closes_at")}),
        (
            _("Timestamps"),
            {"fields": ("created_at", "updated_at", "deleted_at"), "classes": ("collapse",)},
        ),
    )

    @admin.display(description=_("Questions"))
    def question_count(self, obj: Quiz) -> int:
        return obj.potential_questions.count()

    @admin.action(description=_("Mark selected quizzes as deleted"))
    def mark_as_deleted(self, request: HttpRequest, queryset: QuerySet) -> None:
        for quiz in queryset.filter(deleted_at__isnull=True):
            quiz.mark_as_deleted()
        self.message_user(request, _("Selected quizzes were marked as deleted."), messages.SUCCESS)

    def has_delete_permission(self, request: HttpRequest, obj: Optional[Quiz] = None) -> bool:
        return False


# --- Session Administration ---


@admin.register(QuizSession)
class QuizSessionAdmin(admin.ModelAdmin):
    """
    Read-only session history.

    Sessions are only created and closed through the lifecycle manager.
    """

    list_display = (
        "id",
        "owner",
        "quiz",
        "kind",
        "status",
        "start_time",
        "duration",
        "score",
        "closed_by",
        "finished_at",
    )
    list_filter = ("status", "kind", "closed_by")
    search_fields = ("owner__username", "owner__email", "quiz__name")
    readonly_fields = [field.name for field in QuizSession._meta.fields]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_change_permission(self, request: HttpRequest, obj: Optional[QuizSession] = None) -> bool:
        return False

    def has_delete_permission(self, request: HttpRequest, obj: Optional[QuizSession] = None) -> bool:
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("owner", "quiz")


# --- Scheduling Administration ---


@admin.register(ScheduledTask)
class ScheduledTaskAdmin(admin.ModelAdmin):
    list_display = ("id", "task_type", "run_at", "status", "claimed_at", "finished_at")
    list_filter = ("status", "task_type")
    search_fields = ("last_error",)
    readonly_fields = [field.name for field in ScheduledTask._meta.fields]
    actions = ["cancel_pending"]

    @admin.action(description=_("Cancel selected pending tasks"))
    def cancel_pending(self, request: HttpRequest, queryset: QuerySet) -> None:
        if not PermissionChecker().can_perform(request.user, Permission.MANAGE_SCHEDULED_TASKS):
            self.message_user(
                request, _("You are not allowed to manage scheduled tasks."), messages.ERROR
            )
            return
        scheduler = TaskScheduler()
        cancelled = sum(1 for task in queryset if scheduler.cancel(task.pk))
        self.message_user(request, _("%(count)d task(s) cancelled.") % {"count": cancelled})

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False
