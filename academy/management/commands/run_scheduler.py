"""
Run Scheduler Command - Academy

Startet den Worker, der fällige Jobs aus der ScheduledTask-Tabelle abarbeitet
(z.B. das automatische Beenden abgelaufener Quiz-Sessions).

Features:
- Dauerbetrieb mit konfigurierbarem Poll-Intervall
- Einmaliger Durchlauf (--once), z.B. für Cronjobs oder Tests
- Sauberes Beenden bei SIGINT/SIGTERM

Author: Academy Development Team
Version: 1.0.0
"""

import signal
import threading

from django.core.management.base import BaseCommand

from academy.quiz_sessions.manager import build_session_manager
from academy.scheduling.models import ScheduledTask
from academy.scheduling.scheduler import TaskScheduler

# --- Management Command: Scheduler Worker ---


class Command(BaseCommand):
    """
    Scheduler Worker

    Usage:
        python manage.py run_scheduler
        python manage.py run_scheduler --once
        python manage.py run_scheduler --interval 2 --batch-size 100
    """

    help = "Führt fällige Scheduler-Jobs aus (Quiz-Sessions automatisch beenden)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--once",
            action="store_true",
            help="Nur einen Durchlauf ausführen und dann beenden",
        )
        parser.add_argument(
            "--interval",
            type=float,
            default=None,
            help="Sekunden zwischen zwei Polls (Default: SCHEDULER_POLL_INTERVAL_SECONDS)",
        )
        parser.add_argument(
            "--batch-size",
            type=int,
            default=None,
            help="Maximale Anzahl Jobs pro Poll (Default: SCHEDULER_BATCH_SIZE)",
        )

    def handle(self, *args, **options):
        """Command Hauptlogik"""
        scheduler = TaskScheduler(
            poll_interval=options["interval"], batch_size=options["batch_size"]
        )
        build_session_manager(scheduler=scheduler)

        if options["once"]:
            stale = scheduler.fail_stale()
            executed = scheduler.run_due()
            pending = ScheduledTask.objects.filter(status=ScheduledTask.Status.PENDING).count()
            self.stdout.write(
                self.style.SUCCESS(
                    f"✅ {executed} Job(s) ausgeführt, {stale} hängende Job(s) als fehlgeschlagen markiert, {pending} noch geplant"
                )
            )
            return

        stop_event = threading.Event()

        def _stop(signum, frame):
            self.stdout.write(self.style.WARNING("⏹  Stop-Signal empfangen, Worker wird beendet..."))
            stop_event.set()

        signal.signal(signal.SIGINT, _stop)
        signal.signal(signal.SIGTERM, _stop)

        self.stdout.write(
            self.style.SUCCESS(
                f"🚀 Scheduler gestartet (Intervall {scheduler.poll_interval}s, Batch {scheduler.batch_size})"
            )
        )
        scheduler.run_forever(stop_event=stop_event)
        self.stdout.write(self.style.SUCCESS("✅ Scheduler beendet"))
