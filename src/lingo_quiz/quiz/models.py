"""Immutable value types shared by every part of the quiz engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Mapping

AnswerKind = Literal["option", "text"]


class QuestionType(str, Enum):
    """Supported question type tags."""

    MULTIPLE_CHOICE = "multiple_choice"
    FILL_BLANK = "fill_blank"
    TRUE_FALSE = "true_false"


@dataclass(frozen=True)
class Option:
    """One selectable option; fill-blank questions list accepted answers."""

    id: str
    text: str
    is_correct: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "is_correct": self.is_correct}


@dataclass(frozen=True)
class Question:
    """A single quiz question as delivered by the content loader."""

    id: str
    content_id: str
    type: QuestionType | str
    text: str
    options: tuple[Option, ...] = ()
    points: int = 1
    order_index: int = 0
    correct_answer: str | None = None
    explanation: str | None = None

    def option(self, option_id: str | None) -> Option | None:
        if not option_id:
            return None
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    @property
    def correct_options(self) -> tuple[Option, ...]:
        return tuple(option for option in self.options if option.is_correct)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "content_id": self.content_id,
            "type": _type_value(self.type),
            "text": self.text,
            "options": [option.to_dict() for option in self.options],
            "points": self.points,
            "order_index": self.order_index,
        }
        if self.correct_answer is not None:
            payload["correct_answer"] = self.correct_answer
        if self.explanation is not None:
            payload["explanation"] = self.explanation
        return payload


@dataclass(frozen=True)
class QuizContent:
    """Ordered questions for one piece of learning content."""

    id: str
    title: str
    questions: tuple[Question, ...]

    def __len__(self) -> int:
        return len(self.questions)

    def question(self, question_id: str) -> Question | None:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "questions": [question.to_dict() for question in self.questions],
        }


@dataclass(frozen=True)
class UserAnswer:
    """A learner's answer to one question.

    ``kind == "option"`` carries ``selected_option_id``; ``kind == "text"``
    carries ``text_answer``. Mixing the two is a programming error.
    """

    question_id: str
    kind: AnswerKind
    selected_option_id: str | None = None
    text_answer: str | None = None

    def __post_init__(self) -> None:
        if self.kind == "option":
            if self.selected_option_id is None or self.text_answer is not None:
                raise ValueError(
                    "Option answers need selected_option_id and no text_answer."
                )
        elif self.kind == "text":
            if self.text_answer is None or self.selected_option_id is not None:
                raise ValueError(
                    "Text answers need text_answer and no selected_option_id."
                )
        else:
            raise ValueError(f"Unknown answer kind {self.kind!r}.")

    @classmethod
    def option(cls, question_id: str, option_id: str) -> "UserAnswer":
        return cls(question_id, "option", selected_option_id=option_id)

    @classmethod
    def text(cls, question_id: str, text: str) -> "UserAnswer":
        return cls(question_id, "text", text_answer=text)

    @property
    def is_blank(self) -> bool:
        value = (
            self.selected_option_id
            if self.kind == "option"
            else self.text_answer
        )
        return not (value or "").strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "kind": self.kind,
            "selected_option_id": self.selected_option_id,
            "text_answer": self.text_answer,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "UserAnswer":
        option_id = payload.get("selected_option_id")
        text = payload.get("text_answer")
        return cls(
            question_id=str(payload.get("question_id", "")),
            kind=payload.get("kind"),  # type: ignore[arg-type]
            selected_option_id=None if option_id is None else str(option_id),
            text_answer=None if text is None else str(text),
        )


def _type_value(value: QuestionType | str) -> str:
    return value.value if isinstance(value, QuestionType) else str(value)
