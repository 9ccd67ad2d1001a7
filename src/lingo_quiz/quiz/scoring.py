"""Score aggregation and performance tiers."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping, Sequence

from .models import Question, UserAnswer
from .validator import is_correct

__all__ = [
    "ScoreResult",
    "PerformanceLevel",
    "PERFORMANCE_LEVELS",
    "calculate_score",
    "performance_level",
    "round_percentage",
]


@dataclass(frozen=True)
class ScoreResult:
    """Points earned against points available."""

    total_score: int
    max_score: int
    percentage: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_score": self.total_score,
            "max_score": self.max_score,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class PerformanceLevel:
    """Qualitative tier for a percentage score."""

    level: str
    message: str
    style: str
    threshold: float


# Ordered from the highest inclusive lower bound down; the last entry
# catches everything below 60.
PERFORMANCE_LEVELS: tuple[PerformanceLevel, ...] = (
    PerformanceLevel("Excellent", "Outstanding! 🎉", "bold green", 90.0),
    PerformanceLevel("Very Good", "Great job! 👍", "bold blue", 80.0),
    PerformanceLevel("Good", "Well done! 😊", "bold yellow", 70.0),
    PerformanceLevel(
        "Pass", "You passed! Keep practicing! 💪", "bold dark_orange", 60.0
    ),
    PerformanceLevel(
        "Needs Improvement",
        "Keep trying! Practice makes perfect! 📚",
        "bold red",
        float("-inf"),
    ),
)


def round_percentage(value: float) -> float:
    """Round half up to two decimals and clamp into ``[0, 100]``."""

    rounded = Decimal(str(value)).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )
    return min(100.0, max(0.0, float(rounded)))


def calculate_score(
    questions: Sequence[Question],
    answers: Mapping[str, UserAnswer],
) -> ScoreResult:
    """Sum points for correctly answered questions.

    ``percentage`` is ``0`` when no points are available at all.
    """

    total = 0
    maximum = 0
    for question in questions:
        maximum += question.points
        if is_correct(question, answers.get(question.id)):
            total += question.points
    if maximum <= 0:
        return ScoreResult(total_score=total, max_score=maximum, percentage=0.0)
    percentage = round_percentage(total / maximum * 100)
    return ScoreResult(
        total_score=total,
        max_score=maximum,
        percentage=percentage,
    )


def performance_level(percentage: float) -> PerformanceLevel:
    for tier in PERFORMANCE_LEVELS:
        if percentage >= tier.threshold:
            return tier
    return PERFORMANCE_LEVELS[-1]  # pragma: no cover - NaN input
