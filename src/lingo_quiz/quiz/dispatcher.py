"""Route questions to the strategy that validates and presents their type.

Every :class:`QuestionType` member must have exactly one registered strategy;
the registry is checked when this module is imported so that a new type
cannot ship without its validation rules. Lookups for tags outside the enum
raise :class:`UnknownQuestionType` instead of falling back to a default.
"""

from __future__ import annotations

import json
from typing import ClassVar

from .errors import UnknownQuestionType
from .models import AnswerKind, Option, Question, QuestionType, UserAnswer

__all__ = [
    "AnswerStrategy",
    "MultipleChoiceStrategy",
    "TrueFalseStrategy",
    "FillBlankStrategy",
    "coerce_question_type",
    "dispatch",
    "normalize_text_answer",
    "registered_types",
]


class AnswerStrategy:
    """Type-specific correctness and presentation rules."""

    question_type: ClassVar[QuestionType]
    answer_kind: ClassVar[AnswerKind]

    def is_correct(self, question: Question, answer: UserAnswer) -> bool:
        raise NotImplementedError

    def accepted_answers(self, question: Question) -> list[str]:
        raise NotImplementedError

    def choices(self, question: Question) -> list[tuple[str, Option]]:
        raise NotImplementedError

    def parse_input(self, question: Question, raw: str) -> UserAnswer | None:
        raise NotImplementedError

    def describe(self, question: Question, answer: UserAnswer | None) -> str:
        raise NotImplementedError


class _OptionStrategy(AnswerStrategy):
    answer_kind: ClassVar[AnswerKind] = "option"

    def is_correct(self, question: Question, answer: UserAnswer) -> bool:
        if answer.kind != "option":
            return False
        option = question.option(answer.selected_option_id)
        return bool(option and option.is_correct)

    def accepted_answers(self, question: Question) -> list[str]:
        return [option.text for option in question.correct_options]

    def choices(self, question: Question) -> list[tuple[str, Option]]:
        return [
            (chr(ord("A") + idx), option)
            for idx, option in enumerate(question.options)
        ]

    def parse_input(self, question: Question, raw: str) -> UserAnswer | None:
        text = (raw or "").strip()
        if not text:
            return None
        option = self._match_option(question, text)
        if option is None:
            return None
        return UserAnswer.option(question.id, option.id)

    def describe(self, question: Question, answer: UserAnswer | None) -> str:
        if answer is None or answer.kind != "option":
            return ""
        option = question.option(answer.selected_option_id)
        return option.text if option else ""

    def _match_option(self, question: Question, text: str) -> Option | None:
        if len(text) == 1:
            key = text.upper()
            for choice_key, option in self.choices(question):
                if choice_key == key:
                    return option
        folded = text.casefold()
        for option in question.options:
            if option.text.strip().casefold() == folded:
                return option
        return None


class MultipleChoiceStrategy(_OptionStrategy):
    question_type = QuestionType.MULTIPLE_CHOICE


class TrueFalseStrategy(_OptionStrategy):
    question_type = QuestionType.TRUE_FALSE

    _ALIASES = {
        "t": "true",
        "y": "true",
        "yes": "true",
        "f": "false",
        "no": "false",
    }

    def _match_option(self, question: Question, text: str) -> Option | None:
        word = self._ALIASES.get(text.casefold(), text.casefold())
        if word in {"true", "false"}:
            for option in question.options:
                if option.text.strip().casefold() == word:
                    return option
        return super()._match_option(question, text)


class FillBlankStrategy(AnswerStrategy):
    question_type = QuestionType.FILL_BLANK
    answer_kind: ClassVar[AnswerKind] = "text"

    def is_correct(self, question: Question, answer: UserAnswer) -> bool:
        if answer.kind != "text":
            return False
        given = normalize_text_answer(answer.text_answer or "")
        if not given:
            return False
        return any(
            given == accepted.strip().casefold()
            for accepted in self.accepted_answers(question)
        )

    def accepted_answers(self, question: Question) -> list[str]:
        accepted = [option.text for option in question.correct_options]
        if not accepted and (question.correct_answer or "").strip():
            # Legacy content without option flags.
            accepted.append(str(question.correct_answer))
        return accepted

    def choices(self, question: Question) -> list[tuple[str, Option]]:
        return []

    def parse_input(self, question: Question, raw: str) -> UserAnswer | None:
        text = (raw or "").strip()
        if not text:
            return None
        return UserAnswer.text(question.id, text)

    def describe(self, question: Question, answer: UserAnswer | None) -> str:
        if answer is None or answer.kind != "text":
            return ""
        return answer.text_answer or ""


def normalize_text_answer(text: str) -> str:
    """Trim and case-fold a typed answer.

    Multi-blank answers arrive as a JSON array of strings and are joined
    with single spaces first. Internal whitespace is otherwise kept.
    """

    value = text.strip()
    if value.startswith("["):
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            value = " ".join(str(part) for part in parsed).strip()
    return value.casefold()


_STRATEGIES: dict[QuestionType, AnswerStrategy] = {
    strategy.question_type: strategy
    for strategy in (
        MultipleChoiceStrategy(),
        FillBlankStrategy(),
        TrueFalseStrategy(),
    )
}

_unhandled = [
    member.value for member in QuestionType if member not in _STRATEGIES
]
if _unhandled:  # pragma: no cover - guards future enum additions
    raise RuntimeError(
        "No answer strategy registered for: " + ", ".join(_unhandled)
    )


def registered_types() -> tuple[QuestionType, ...]:
    return tuple(_STRATEGIES)


def coerce_question_type(
    tag: object, *, question_id: str | None = None
) -> QuestionType:
    """Return the enum member for ``tag`` or raise ``UnknownQuestionType``."""

    if isinstance(tag, QuestionType):
        return tag
    try:
        return QuestionType(str(tag).strip().lower())
    except ValueError as exc:
        raise UnknownQuestionType(tag, question_id) from exc


def dispatch(question: Question) -> AnswerStrategy:
    """Return the strategy for ``question.type``."""

    key = coerce_question_type(question.type, question_id=question.id)
    try:
        return _STRATEGIES[key]
    except KeyError as exc:  # pragma: no cover - registry is exhaustive
        raise UnknownQuestionType(question.type, question.id) from exc
