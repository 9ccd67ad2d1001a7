"""Answer correctness checks.

These functions are pure: the same ``(question, answer)`` pair always gives
the same result and nothing is recorded. Type-specific rules live in the
strategies of :mod:`lingo_quiz.quiz.dispatcher`; an unknown type tag
propagates as :class:`~lingo_quiz.quiz.errors.UnknownQuestionType`.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from .dispatcher import dispatch
from .models import Question, UserAnswer

__all__ = [
    "is_correct",
    "correct_answer_text",
    "validate_answers",
]


def is_correct(question: Question, answer: UserAnswer | None) -> bool:
    """Return whether ``answer`` earns the points for ``question``."""

    strategy = dispatch(question)
    if answer is None or answer.is_blank:
        return False
    return strategy.is_correct(question, answer)


def correct_answer_text(question: Question) -> str:
    """Return the text shown as the right answer in feedback.

    This is display-only and never used for scoring.
    """

    accepted = dispatch(question).accepted_answers(question)
    return accepted[0] if accepted else ""


def validate_answers(
    questions: Sequence[Question],
    answers: Mapping[str, UserAnswer],
) -> dict[str, bool]:
    """Map each question id to whether its recorded answer is correct."""

    return {
        question.id: is_correct(question, answers.get(question.id))
        for question in questions
    }
