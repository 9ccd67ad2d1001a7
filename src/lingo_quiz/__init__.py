"""Quiz-taking engine for language-learning content."""

from .quiz import (
    AttemptRecord,
    InvalidTransition,
    QuizContent,
    QuizSession,
    UserAnswer,
    load_quiz_content,
)

__all__ = [
    "AttemptRecord",
    "InvalidTransition",
    "QuizContent",
    "QuizSession",
    "UserAnswer",
    "load_quiz_content",
]
