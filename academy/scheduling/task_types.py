from django.db import models


class ScheduledTaskType(models.TextChoices):
    END_SESSION = "end_session", "End quiz session"
