from django.conf import settings
from django.db import models

# ------------------------------------------------------------
# Capabilities werden als Django Model-Permissions auf
# QuizSession gespeichert (siehe QuizSession.Meta.permissions)
# und über Gruppen oder direkt am User vergeben.
# ------------------------------------------------------------


class Permission(models.TextChoices):
    ATTEMPT_QUIZ = "attempt_quiz", "Can attempt quizzes and exams"
    VIEW_ANY_SESSION = "view_any_session", "Can view sessions of other users"
    MANAGE_SCHEDULED_TASKS = "manage_scheduled_tasks", "Can manage scheduled tasks"


class PermissionChecker:
    """Answers ``can_perform(actor, permission)`` for the lifecycle manager and views."""

    app_label = "academy"

    def __init__(self, attempt_requires_permission: bool = None):
        if attempt_requires_permission is None:
            attempt_requires_permission = getattr(
                settings, "QUIZ_ATTEMPT_REQUIRES_PERMISSION", False
            )
        self.attempt_requires_permission = attempt_requires_permission

    def can_perform(self, actor, permission: str) -> bool:
        if actor is None or not getattr(actor, "is_authenticated", False):
            return False
        if not actor.is_active:
            return False
        if actor.is_superuser:
            return True

        # Jeder eingeloggte User darf Quizze starten, außer es ist explizit anders konfiguriert
        if permission == Permission.ATTEMPT_QUIZ and not self.attempt_requires_permission:
            return True

        return actor.has_perm(f"{self.app_label}.{permission}")
