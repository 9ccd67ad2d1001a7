"""Turn a submitted session into the attempt record handed to storage."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from .models import Question
from .scoring import PerformanceLevel, calculate_score, performance_level
from .validator import is_correct

if TYPE_CHECKING:  # pragma: no cover
    from .state import QuizSessionState

__all__ = [
    "AnswerEntry",
    "AttemptRecord",
    "build_attempt",
    "format_timestamp",
]


@dataclass(frozen=True)
class AnswerEntry:
    """Per-question line of an attempt record."""

    question_id: str
    selected_option: str | None
    text_answer: str | None
    is_correct: bool
    time_taken: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "selected_option": self.selected_option,
            "text_answer": self.text_answer,
            "is_correct": self.is_correct,
            "time_taken": self.time_taken,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AnswerEntry":
        selected = payload.get("selected_option")
        text = payload.get("text_answer")
        return cls(
            question_id=str(payload["question_id"]),
            selected_option=None if selected is None else str(selected),
            text_answer=None if text is None else str(text),
            is_correct=bool(payload.get("is_correct", False)),
            time_taken=int(payload.get("time_taken", 0)),
        )


@dataclass(frozen=True)
class AttemptRecord:
    """One completed pass through a quiz, ready for persistence."""

    content_id: str
    answers: tuple[AnswerEntry, ...]
    score: int
    max_score: int
    percentage: float
    total_time: int
    completed_at: str

    @property
    def performance(self) -> PerformanceLevel:
        return performance_level(self.percentage)

    @property
    def correct_count(self) -> int:
        return sum(1 for entry in self.answers if entry.is_correct)

    def to_dict(self) -> dict[str, Any]:
        return {
            "content_id": self.content_id,
            "answers": [entry.to_dict() for entry in self.answers],
            "score": self.score,
            "max_score": self.max_score,
            "percentage": self.percentage,
            "total_time": self.total_time,
            "completed_at": self.completed_at,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AttemptRecord":
        return cls(
            content_id=str(payload["content_id"]),
            answers=tuple(
                AnswerEntry.from_dict(item)
                for item in payload.get("answers") or ()
            ),
            score=int(payload["score"]),
            max_score=int(payload["max_score"]),
            percentage=float(payload["percentage"]),
            total_time=int(payload.get("total_time", 0)),
            completed_at=str(payload["completed_at"]),
        )


def format_timestamp(epoch_seconds: float) -> str:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).isoformat()


def build_attempt(
    state: "QuizSessionState",
    questions: Sequence[Question],
) -> AttemptRecord:
    """Build the record for a submitted ``state``.

    Questions are reported in ``order_index`` order; unanswered ones carry
    null answers and count as incorrect.
    """

    if state.total_seconds is None or state.completed_at is None:
        raise ValueError("Attempt records need a submitted session state.")

    entries = []
    for question in sorted(questions, key=lambda item: item.order_index):
        answer = state.answers.get(question.id)
        entries.append(
            AnswerEntry(
                question_id=question.id,
                selected_option=answer.selected_option_id if answer else None,
                text_answer=answer.text_answer if answer else None,
                is_correct=is_correct(question, answer),
                time_taken=state.per_question_seconds.get(question.id, 0),
            )
        )
    score = calculate_score(questions, state.answers)
    return AttemptRecord(
        content_id=state.content_id,
        answers=tuple(entries),
        score=score.total_score,
        max_score=score.max_score,
        percentage=score.percentage,
        total_time=state.total_seconds,
        completed_at=format_timestamp(state.completed_at),
    )
