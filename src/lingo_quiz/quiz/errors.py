"""Exception hierarchy for the quiz engine.

Rejected user actions are *not* exceptions; see
:class:`lingo_quiz.quiz.state.InvalidTransition`. The errors below describe
malformed input data or a failing collaborator.
"""

from __future__ import annotations

from typing import Iterable

__all__ = [
    "QuizError",
    "ContentError",
    "UnknownQuestionType",
    "StorageError",
]


class QuizError(RuntimeError):
    """Base class for quiz engine failures."""


class ContentError(QuizError):
    """Raised when quiz content violates the data-model invariants."""

    def __init__(self, message: str, problems: Iterable[str] = ()) -> None:
        self.problems = list(problems)
        if self.problems:
            message = message + "\n" + "\n".join(
                f"  - {problem}" for problem in self.problems
            )
        super().__init__(message)


class UnknownQuestionType(ContentError):
    """Raised when a question carries a type tag no strategy handles."""

    def __init__(self, type_tag: object, question_id: str | None = None):
        self.type_tag = type_tag
        self.question_id = question_id
        where = f" on question '{question_id}'" if question_id else ""
        super().__init__(f"Unknown question type {type_tag!r}{where}.")


class StorageError(QuizError):
    """Raised when stored attempt records cannot be read or written."""
