"""Serializable quiz session state and its pure transition functions.

The state object never changes in place. Each transition takes the current
state, the quiz content and the current wall-clock reading and returns either
:class:`Applied` (carrying the next state) or :class:`InvalidTransition`
(explaining why the action was refused; the caller keeps its old state).

Timing is computed from timestamps captured on the way into a question and
settled on the way out, so no background timer is needed.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Literal, Mapping, Union

from .dispatcher import dispatch
from .models import Question, QuizContent, UserAnswer
from .reporter import AttemptRecord, build_attempt

__all__ = [
    "ActionType",
    "Applied",
    "InvalidReason",
    "InvalidTransition",
    "QuizSessionState",
    "SessionAction",
    "SessionStatus",
    "TransitionResult",
    "answer",
    "apply_action",
    "next_question",
    "previous_question",
    "retry",
    "review",
    "submit",
]

SessionStatus = Literal["in_progress", "submitted", "reviewing"]
ActionType = Literal["answer", "next", "previous", "submit", "review", "retry"]
InvalidReason = Literal[
    "submitted",
    "not_current_question",
    "unanswered",
    "not_last_question",
    "answer_kind_mismatch",
    "unknown_option",
    "not_submitted",
    "already_reviewing",
]

_STATUSES = ("in_progress", "submitted", "reviewing")


@dataclass(frozen=True)
class QuizSessionState:
    """Everything needed to resume one learner's attempt."""

    content_id: str
    session_started_at: float
    question_entered_at: float
    status: SessionStatus = "in_progress"
    current_index: int = 0
    answers: Mapping[str, UserAnswer] = field(default_factory=dict)
    per_question_seconds: Mapping[str, int] = field(default_factory=dict)
    total_seconds: int | None = None
    completed_at: float | None = None

    def __post_init__(self) -> None:
        # Read-only views; transitions build new mappings instead.
        object.__setattr__(
            self, "answers", MappingProxyType(dict(self.answers))
        )
        object.__setattr__(
            self,
            "per_question_seconds",
            MappingProxyType(dict(self.per_question_seconds)),
        )

    @classmethod
    def start(cls, content: QuizContent, now: float) -> "QuizSessionState":
        return cls(
            content_id=content.id,
            session_started_at=now,
            question_entered_at=now,
        )

    @property
    def is_submitted(self) -> bool:
        return self.status != "in_progress"

    @property
    def answered_count(self) -> int:
        return sum(1 for item in self.answers.values() if not item.is_blank)

    def is_answered(self, question_id: str) -> bool:
        recorded = self.answers.get(question_id)
        return recorded is not None and not recorded.is_blank

    def progress(self, question_count: int) -> float:
        """Percent of the quiz reached, counting the current question."""

        if question_count <= 0:
            return 0.0
        return (self.current_index + 1) / question_count * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "content_id": self.content_id,
            "status": self.status,
            "current_index": self.current_index,
            "answers": {
                question_id: recorded.to_dict()
                for question_id, recorded in self.answers.items()
            },
            "per_question_seconds": dict(self.per_question_seconds),
            "session_started_at": self.session_started_at,
            "question_entered_at": self.question_entered_at,
            "total_seconds": self.total_seconds,
            "completed_at": self.completed_at,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "QuizSessionState":
        status = payload.get("status", "in_progress")
        if status not in _STATUSES:
            raise ValueError(f"Unknown session status {status!r}.")
        index = int(payload.get("current_index", 0))
        if index < 0:
            raise ValueError("current_index must be non-negative.")
        raw_answers = payload.get("answers") or {}
        raw_seconds = payload.get("per_question_seconds") or {}
        total = payload.get("total_seconds")
        completed = payload.get("completed_at")
        return cls(
            content_id=str(payload["content_id"]),
            status=status,
            current_index=index,
            answers={
                str(question_id): UserAnswer.from_dict(item)
                for question_id, item in raw_answers.items()
            },
            per_question_seconds={
                str(question_id): max(0, int(seconds))
                for question_id, seconds in raw_seconds.items()
            },
            session_started_at=float(payload["session_started_at"]),
            question_entered_at=float(payload["question_entered_at"]),
            total_seconds=None if total is None else int(total),
            completed_at=None if completed is None else float(completed),
        )


@dataclass(frozen=True)
class SessionAction:
    """A user action expressed as data, for :func:`apply_action`."""

    type: ActionType
    question_id: str | None = None
    answer: UserAnswer | None = None


@dataclass(frozen=True)
class Applied:
    """Successful transition. ``record`` is only set by ``submit``."""

    action: ActionType
    state: QuizSessionState
    record: AttemptRecord | None = None

    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class InvalidTransition:
    """Refused transition; the session state is left unchanged."""

    action: ActionType
    reason: InvalidReason
    message: str

    ok: ClassVar[bool] = False


TransitionResult = Union[Applied, InvalidTransition]


def answer(
    state: QuizSessionState,
    content: QuizContent,
    question_id: str,
    user_answer: UserAnswer,
    *,
    now: float,
) -> TransitionResult:
    """Record (or overwrite) the answer for the current question.

    A blank answer clears whatever was stored. The pointer and the clock
    are left alone.
    """

    if state.is_submitted:
        return _refuse("answer", "submitted", "Quiz has already been submitted.")
    current = _current_question(state, content)
    if current is None or question_id != current.id:
        return _refuse(
            "answer",
            "not_current_question",
            f"Question '{question_id}' is not the current question.",
        )
    if user_answer.question_id and user_answer.question_id != question_id:
        return _refuse(
            "answer",
            "not_current_question",
            "Answer belongs to question "
            f"'{user_answer.question_id}', not '{question_id}'.",
        )

    strategy = dispatch(current)
    answers = dict(state.answers)
    if user_answer.is_blank:
        answers.pop(question_id, None)
        return Applied("answer", replace(state, answers=answers))
    if user_answer.kind != strategy.answer_kind:
        return _refuse(
            "answer",
            "answer_kind_mismatch",
            f"Question '{question_id}' expects a {strategy.answer_kind} answer.",
        )
    if user_answer.kind == "option" and (
        current.option(user_answer.selected_option_id) is None
    ):
        return _refuse(
            "answer",
            "unknown_option",
            f"Option '{user_answer.selected_option_id}' does not belong to "
            f"question '{question_id}'.",
        )
    answers[question_id] = user_answer
    return Applied("answer", replace(state, answers=answers))


def next_question(
    state: QuizSessionState, content: QuizContent, *, now: float
) -> TransitionResult:
    """Advance one question; a no-op on the last question."""

    if state.is_submitted:
        return _refuse("next", "submitted", "Quiz has already been submitted.")
    current = _current_question(state, content)
    if current is None or not state.is_answered(current.id):
        return _refuse(
            "next", "unanswered", "Answer the current question first."
        )
    if state.current_index >= len(content.questions) - 1:
        return Applied("next", state)
    return Applied(
        "next",
        replace(
            state,
            current_index=state.current_index + 1,
            per_question_seconds=_settle_time(state, current, now),
            question_entered_at=now,
        ),
    )


def previous_question(
    state: QuizSessionState, content: QuizContent, *, now: float
) -> TransitionResult:
    """Step back one question; always allowed while in progress."""

    if state.is_submitted:
        return _refuse(
            "previous", "submitted", "Quiz has already been submitted."
        )
    current = _current_question(state, content)
    if current is None or state.current_index == 0:
        return Applied("previous", state)
    return Applied(
        "previous",
        replace(
            state,
            current_index=state.current_index - 1,
            per_question_seconds=_settle_time(state, current, now),
            question_entered_at=now,
        ),
    )


def submit(
    state: QuizSessionState, content: QuizContent, *, now: float
) -> TransitionResult:
    """Finish the attempt and build its record.

    Only allowed on an answered last question. Submitting twice is refused,
    so a record is produced at most once per session.
    """

    if state.is_submitted:
        return _refuse(
            "submit", "submitted", "Quiz has already been submitted."
        )
    current = _current_question(state, content)
    if current is None:
        return _refuse("submit", "unanswered", "Quiz has no questions.")
    if state.current_index != len(content.questions) - 1:
        return _refuse(
            "submit",
            "not_last_question",
            "Submit is only available on the last question.",
        )
    if not state.is_answered(current.id):
        return _refuse(
            "submit", "unanswered", "Answer the last question first."
        )
    submitted = replace(
        state,
        status="submitted",
        per_question_seconds=_settle_time(state, current, now),
        total_seconds=_elapsed(state.session_started_at, now),
        completed_at=now,
    )
    return Applied(
        "submit", submitted, record=build_attempt(submitted, content.questions)
    )


def review(state: QuizSessionState) -> TransitionResult:
    """Move a submitted session into review."""

    if state.status == "in_progress":
        return _refuse(
            "review", "not_submitted", "Submit the quiz before reviewing."
        )
    if state.status == "reviewing":
        return _refuse(
            "review", "already_reviewing", "Quiz is already under review."
        )
    return Applied("review", replace(state, status="reviewing"))


def retry(
    state: QuizSessionState, content: QuizContent, *, now: float
) -> TransitionResult:
    """Discard the attempt and start over on the same content."""

    return Applied("retry", QuizSessionState.start(content, now))


def apply_action(
    state: QuizSessionState,
    content: QuizContent,
    action: SessionAction,
    *,
    now: float,
) -> TransitionResult:
    """Reduce ``action`` over ``state``."""

    if action.type == "answer":
        if action.answer is None:
            raise ValueError("answer actions need an answer.")
        question_id = action.question_id or action.answer.question_id
        return answer(state, content, question_id, action.answer, now=now)
    if action.type == "next":
        return next_question(state, content, now=now)
    if action.type == "previous":
        return previous_question(state, content, now=now)
    if action.type == "submit":
        return submit(state, content, now=now)
    if action.type == "review":
        return review(state)
    if action.type == "retry":
        return retry(state, content, now=now)
    raise ValueError(f"Unknown session action {action.type!r}.")


def _current_question(
    state: QuizSessionState, content: QuizContent
) -> Question | None:
    if 0 <= state.current_index < len(content.questions):
        return content.questions[state.current_index]
    return None


def _elapsed(since: float, now: float) -> int:
    return max(0, math.floor(now - since))


def _settle_time(
    state: QuizSessionState, question: Question, now: float
) -> dict[str, int]:
    # The latest visit replaces any earlier reading for the question.
    seconds = dict(state.per_question_seconds)
    seconds[question.id] = _elapsed(state.question_entered_at, now)
    return seconds


def _refuse(
    action: ActionType, reason: InvalidReason, message: str
) -> InvalidTransition:
    return InvalidTransition(action=action, reason=reason, message=message)
