"""
Session Scoring

Pure functions that turn a question snapshot and an answers map into a
score. Nothing here touches the database, so the same inputs always give
the same result.

Modes:
- ratio: correct answers / number of questions (default)
- weighted: points of correctly answered questions / total points

Author: Academy Development Team
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..exceptions import ValidationError

SCORING_MODES = ("ratio", "weighted")


@dataclass(frozen=True)
class ScoreResult:
    score: float
    correct_count: int
    total: int


def _normalize_value(value: Any) -> str:
    return str(value).strip().casefold()


def is_correct(question: Mapping[str, Any], answer: Any) -> bool:
    if answer is None:
        return False
    return _normalize_value(answer) == _normalize_value(question.get("answer_key", ""))


def score_answers(
    questions: Sequence[Mapping[str, Any]],
    answers: Mapping[str, Any],
    mode: str = "ratio",
) -> ScoreResult:
    """
    Score an answers map against a question snapshot.

    Missing answers count as wrong. An empty snapshot scores 0.

    Args:
        questions: Ordered question snapshots with ``answer_key`` and ``points``
        answers: Question index (as string) -> submitted answer
        mode: One of ``SCORING_MODES``

    Returns:
        ScoreResult with the score in [0, 1]
    """
    if mode not in SCORING_MODES:
        raise ValueError(f"Unknown scoring mode '{mode}'")

    total = len(questions)
    correct_count = 0
    achieved_points = 0.0
    total_points = 0.0

    for index, question in enumerate(questions):
        points = float(question.get("points", 1) or 0)
        total_points += points
        if is_correct(question, answers.get(str(index))):
            correct_count += 1
            achieved_points += points

    if total == 0:
        return ScoreResult(score=0.0, correct_count=0, total=0)

    if mode == "weighted":
        score = achieved_points / total_points if total_points > 0 else 0.0
    else:
        score = correct_count / total

    return ScoreResult(score=score, correct_count=correct_count, total=total)


def normalize_answers(payload: Any, question_count: int) -> Dict[str, Optional[str]]:
    """
    Validate an answers payload and bring it into storage shape.

    Keys may be ints or ASCII digit strings and must address an existing
    question. Values may be strings or numbers; integral floats are stored
    without the fraction. ``None`` means unanswered and is dropped.

    Raises:
        ValidationError: If the payload is malformed
    """
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("answers must be an object mapping question index to answer")

    normalized: Dict[str, Optional[str]] = {}
    errors: List[str] = []
    for key, value in payload.items():
        if isinstance(key, bool):
            errors.append(f"invalid question index '{key}'")
            continue
        if isinstance(key, int):
            index = key
        elif isinstance(key, str) and key.strip().isascii() and key.strip().isdigit():
            # Nur ASCII-Ziffern, "²" oder "٣" sind keine Fragenindizes
            index = int(key.strip())
        else:
            errors.append(f"invalid question index '{key}'")
            continue
        if index < 0 or index >= question_count:
            errors.append(f"question index {index} out of range")
            continue

        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            errors.append(f"answer for question {index} must be a string or number")
            continue
        if isinstance(value, float) and value.is_integer():
            # 1.0 soll wie "1" bewertet werden
            value = int(value)
        normalized[str(index)] = str(value)

    if errors:
        raise ValidationError("Invalid answers payload.", details={"answers": errors})
    return normalized
