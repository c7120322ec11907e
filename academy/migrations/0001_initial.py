import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("content", models.TextField()),
                ("options", models.JSONField(blank=True, default=list, help_text="Antwortmöglichkeiten. Leer lassen für Freitext-Fragen.")),
                ("answer_key", models.CharField(help_text="Korrekte Antwort, wird beim Bewerten verglichen.", max_length=255)),
                ("points", models.DecimalField(decimal_places=2, default=1, help_text="Gewichtung der Frage bei gewichteter Bewertung.", max_digits=5, validators=[django.core.validators.MinValueValidator(0)])),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Question",
                "verbose_name_plural": "Questions",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="ScheduledTask",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("task_type", models.CharField(choices=[("end_session", "End quiz session")], max_length=50)),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("run_at", models.DateTimeField(db_index=True)),
                ("status", models.CharField(choices=[("pending", "Geplant"), ("running", "Läuft"), ("done", "Erledigt"), ("failed", "Fehlgeschlagen"), ("cancelled", "Abgebrochen")], default="pending", max_length=15)),
                ("claimed_at", models.DateTimeField(blank=True, null=True)),
                ("finished_at", models.DateTimeField(blank=True, null=True)),
                ("last_error", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Scheduled Task",
                "verbose_name_plural": "Scheduled Tasks",
                "ordering": ["run_at", "id"],
                "indexes": [models.Index(fields=["status", "run_at"], name="academy_task_status_run_idx")],
            },
        ),
        migrations.CreateModel(
            name="Quiz",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("kind", models.CharField(choices=[("quiz", "Quiz"), ("exam", "Prüfung")], default="quiz", max_length=10)),
                ("duration", models.PositiveIntegerField(help_text="Bearbeitungszeit ab Start in Sekunden.", validators=[django.core.validators.MinValueValidator(1)])),
                ("sample_size", models.PositiveSmallIntegerField(help_text="Anzahl der Fragen, die pro Versuch gezogen werden.", validators=[django.core.validators.MinValueValidator(1)])),
                ("opens_at", models.DateTimeField(blank=True, null=True)),
                ("closes_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="created_quizzes", to=settings.AUTH_USER_MODEL)),
                ("potential_questions", models.ManyToManyField(blank=True, related_name="quizzes", to="academy.question")),
            ],
            options={
                "verbose_name": "Quiz",
                "verbose_name_plural": "Quizzes",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="QuizSession",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("kind", models.CharField(choices=[("quiz", "Quiz"), ("exam", "Prüfung")], default="quiz", max_length=10)),
                ("status", models.CharField(choices=[("ongoing", "Läuft"), ("finished", "Beendet")], default="ongoing", max_length=15)),
                ("start_time", models.DateTimeField()),
                ("duration", models.PositiveIntegerField(help_text="Bearbeitungszeit in Sekunden.", validators=[django.core.validators.MinValueValidator(1)])),
                ("questions", models.JSONField(default=list, help_text="Unveränderlicher Snapshot der gezogenen Fragen inkl. Lösung.")),
                ("answers", models.JSONField(blank=True, default=dict)),
                ("score", models.FloatField(blank=True, help_text="Anteil 0..1. Wird erst beim Abschluss berechnet.", null=True)),
                ("correct_count", models.PositiveIntegerField(blank=True, null=True)),
                ("closed_by", models.CharField(blank=True, choices=[("submission", "Abgabe"), ("timeout", "Zeitablauf")], max_length=15, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("finished_at", models.DateTimeField(blank=True, null=True)),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="quiz_sessions", to=settings.AUTH_USER_MODEL)),
                ("quiz", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="sessions", to="academy.quiz")),
                ("scheduled_task", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="sessions", to="academy.scheduledtask")),
            ],
            options={
                "verbose_name": "Quiz Session",
                "verbose_name_plural": "Quiz Sessions",
                "ordering": ["-created_at", "-id"],
                "permissions": [
                    ("attempt_quiz", "Can attempt quizzes and exams"),
                    ("view_any_session", "Can view sessions of other users"),
                    ("manage_scheduled_tasks", "Can manage scheduled tasks"),
                ],
                "indexes": [models.Index(fields=["owner", "status"], name="academy_sess_owner_status_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "ongoing")),
                        fields=("owner", "quiz"),
                        name="unique_ongoing_session_per_owner_and_quiz",
                    )
                ],
            },
        ),
    ]
