"""Stateful facade over the pure session transitions.

``QuizSession`` owns one learner's attempt: it holds the current
:class:`~lingo_quiz.quiz.state.QuizSessionState`, reads the clock, and hands
the attempt record to an optional :class:`~lingo_quiz.quiz.storage.AttemptSink`
exactly once per submission. Instances are not shared between callers.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Mapping

from . import state as transitions
from .dispatcher import dispatch
from .models import Question, QuizContent, UserAnswer
from .scoring import (
    PerformanceLevel,
    ScoreResult,
    calculate_score,
    performance_level,
)
from .state import (
    Applied,
    QuizSessionState,
    SessionAction,
    TransitionResult,
)
from .validator import correct_answer_text, is_correct

if TYPE_CHECKING:  # pragma: no cover
    from .storage import AttemptSink

__all__ = [
    "Clock",
    "QuestionFeedback",
    "QuizSession",
    "SessionResult",
]

Clock = Callable[[], float]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionResult:
    """Score and tier for a submitted session."""

    score: ScoreResult
    performance: PerformanceLevel


@dataclass(frozen=True)
class QuestionFeedback:
    """What the review screen shows for one question."""

    question_id: str
    text: str
    your_answer: str
    correct_answer: str
    is_correct: bool
    answered: bool
    explanation: str | None


class QuizSession:
    """Drive a single attempt over ``content``."""

    def __init__(
        self,
        content: QuizContent,
        *,
        clock: Clock = time.time,
        sink: "AttemptSink | None" = None,
        logger: logging.Logger | None = None,
        state: QuizSessionState | None = None,
    ) -> None:
        self._content = content
        self._clock = clock
        self._sink = sink
        self._logger = logger or _LOGGER
        self._state = state or QuizSessionState.start(content, clock())
        self._logger.info(
            "Quiz session ready",
            extra={
                "content_id": content.id,
                "question_count": len(content.questions),
                "status": self._state.status,
            },
        )

    @classmethod
    def resume(
        cls,
        content: QuizContent,
        snapshot: QuizSessionState | Mapping[str, Any],
        **kwargs: Any,
    ) -> "QuizSession":
        """Rebuild a session from a saved :meth:`snapshot`."""

        state = (
            snapshot
            if isinstance(snapshot, QuizSessionState)
            else QuizSessionState.from_dict(snapshot)
        )
        if state.content_id != content.id:
            raise ValueError(
                f"Snapshot belongs to content '{state.content_id}', "
                f"not '{content.id}'."
            )
        if content.questions and state.current_index >= len(content.questions):
            raise ValueError("Snapshot points past the last question.")
        unknown = set(state.answers) - {q.id for q in content.questions}
        if unknown:
            raise ValueError(
                "Snapshot has answers for unknown questions: "
                + ", ".join(sorted(unknown))
            )
        return cls(content, state=state, **kwargs)

    @property
    def content(self) -> QuizContent:
        return self._content

    @property
    def state(self) -> QuizSessionState:
        return self._state

    @property
    def question_count(self) -> int:
        return len(self._content.questions)

    @property
    def current_question(self) -> Question | None:
        index = self._state.current_index
        if 0 <= index < self.question_count:
            return self._content.questions[index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self._state.current_index == self.question_count - 1

    def snapshot(self) -> dict[str, Any]:
        return self._state.to_dict()

    def answer(self, question_id: str, answer: UserAnswer) -> TransitionResult:
        return self.apply(SessionAction("answer", question_id, answer))

    def next(self) -> TransitionResult:
        return self.apply(SessionAction("next"))

    def previous(self) -> TransitionResult:
        return self.apply(SessionAction("previous"))

    def submit(self) -> TransitionResult:
        return self.apply(SessionAction("submit"))

    def review(self) -> TransitionResult:
        return self.apply(SessionAction("review"))

    def retry(self) -> TransitionResult:
        return self.apply(SessionAction("retry"))

    def apply(self, action: SessionAction) -> TransitionResult:
        outcome = transitions.apply_action(
            self._state, self._content, action, now=self._clock()
        )
        if not isinstance(outcome, Applied):
            self._logger.debug(
                "Rejected session action",
                extra={
                    "content_id": self._content.id,
                    "action": outcome.action,
                    "reason": outcome.reason,
                },
            )
            return outcome
        if outcome.record is not None and self._sink is not None:
            # Storage failures surface to the caller before the state moves
            # on, so the attempt can be submitted again.
            self._sink.save_attempt(outcome.record)
        self._state = outcome.state
        self._log_applied(outcome)
        return outcome

    def result(self) -> SessionResult | None:
        """Score for a submitted session, ``None`` while in progress."""

        if not self._state.is_submitted:
            return None
        score = calculate_score(self._content.questions, self._state.answers)
        return SessionResult(score, performance_level(score.percentage))

    def feedback(self, question_id: str) -> QuestionFeedback:
        question = self._content.question(question_id)
        if question is None:
            raise KeyError(question_id)
        recorded = self._state.answers.get(question_id)
        return QuestionFeedback(
            question_id=question.id,
            text=question.text,
            your_answer=dispatch(question).describe(question, recorded),
            correct_answer=correct_answer_text(question),
            is_correct=is_correct(question, recorded),
            answered=self._state.is_answered(question_id),
            explanation=question.explanation,
        )

    def _log_applied(self, outcome: Applied) -> None:
        if outcome.action == "submit" and outcome.record is not None:
            self._logger.info(
                "Quiz submitted",
                extra={
                    "content_id": outcome.record.content_id,
                    "score": outcome.record.score,
                    "max_score": outcome.record.max_score,
                    "percentage": outcome.record.percentage,
                    "total_time": outcome.record.total_time,
                },
            )
        elif outcome.action == "retry":
            self._logger.info(
                "Quiz restarted", extra={"content_id": self._content.id}
            )
        else:
            self._logger.debug(
                "Applied session action",
                extra={
                    "content_id": self._content.id,
                    "action": outcome.action,
                    "current_index": outcome.state.current_index,
                },
            )
