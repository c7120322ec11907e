"""
Source Catalog Service

Read access to quiz/exam definitions for the session lifecycle. The catalog
hides soft-deleted sources and turns the question pool of a source into an
ordered list of snapshot dicts that a session stores verbatim.

Author: Academy Development Team
Version: 1.0.0
"""

import logging
import random
from typing import Any, Dict, List, Optional

from .models import Quiz

logger = logging.getLogger(__name__)


class SourceCatalog:
    """
    Service für Quiz- und Prüfungsdefinitionen.

    Liefert Quellen für neue Sessions und zieht die konkreten Fragen.
    """

    def __init__(self):
        self.logger = logger

    def get_source_by_id(self, quiz_id) -> Optional[Quiz]:
        """
        Holt eine nicht gelöschte Quelle.

        Args:
            quiz_id: Primärschlüssel des Quiz

        Returns:
            Quiz oder None, wenn es nicht existiert oder gelöscht wurde
        """
        return Quiz.objects.alive().filter(pk=quiz_id).first()

    def sample_questions(
        self, quiz: Quiz, rng: Optional[random.Random] = None
    ) -> List[Dict[str, Any]]:
        """
        Zieht ``sample_size`` Fragen zufällig aus dem Fragenpool.

        Args:
            quiz: Die Quelle
            rng: Optionaler Zufallsgenerator (für reproduzierbare Tests)

        Returns:
            Geordnete Liste von Fragen-Snapshots inklusive Lösung
        """
        rng = rng or random.Random()
        pool = list(quiz.potential_questions.all().order_by("id"))
        size = min(quiz.sample_size, len(pool))
        if size < quiz.sample_size:
            self.logger.warning(
                f"Quiz {quiz.pk} has only {len(pool)} questions for sample size {quiz.sample_size}"
            )
        return [question.to_snapshot() for question in rng.sample(pool, size)]
