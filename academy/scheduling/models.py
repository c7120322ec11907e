from django.db import models
from django.utils.translation import gettext_lazy as _

from .task_types import ScheduledTaskType


class ScheduledTask(models.Model):
    """Ein persistierter Job, der zu ``run_at`` (oder später) ausgeführt wird."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Geplant")
        RUNNING = "running", _("Läuft")
        DONE = "done", _("Erledigt")
        FAILED = "failed", _("Fehlgeschlagen")
        CANCELLED = "cancelled", _("Abgebrochen")

    task_type = models.CharField(max_length=50, choices=ScheduledTaskType.choices)
    payload = models.JSONField(default=dict, blank=True)
    run_at = models.DateTimeField(db_index=True)
    status = models.CharField(
        max_length=15, choices=Status.choices, default=Status.PENDING
    )
    claimed_at = models.DateTimeField(null=True, blank=True)
    finished_at = models.DateTimeField(null=True, blank=True)
    last_error = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Scheduled Task")
        verbose_name_plural = _("Scheduled Tasks")
        ordering = ["run_at", "id"]
        indexes = [
            models.Index(fields=["status", "run_at"], name="academy_task_status_run_idx"),
        ]

    def __str__(self):
        return f"{self.task_type} @ {self.run_at:%Y-%m-%d %H:%M:%S} [{self.status}]"

    @property
    def is_finished(self) -> bool:
        return self.status in (self.Status.DONE, self.Status.FAILED, self.Status.CANCELLED)
