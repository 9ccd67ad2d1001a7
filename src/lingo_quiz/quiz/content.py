"""Load quiz content and enforce the question invariants.

Content arrives as JSON shaped like ``{"id", "title", "questions": [...]}``
or as a bare list of questions. Each question uses the per-option form::

    {"id": "q1", "type": "multiple_choice", "text": "...",
     "options": [{"id": "a", "text": "...", "is_correct": true}, ...],
     "points": 5, "order_index": 0}

The older flat form (``options`` as plain strings and ``correct_answer``
holding an option index or the answer text) is still accepted and converted
on load; the per-option flags are what scoring uses afterwards.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from .dispatcher import coerce_question_type
from .errors import ContentError
from .models import Option, Question, QuestionType, QuizContent

__all__ = [
    "load_quiz_content",
    "parse_quiz_content",
]

_LOGGER = logging.getLogger(__name__)


def load_quiz_content(path: Path) -> QuizContent:
    """Read and validate a quiz content JSON file."""

    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ContentError(f"Quiz content not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ContentError(f"Quiz content is not valid JSON: {exc}") from exc

    if isinstance(data, list):
        first = data[0] if data and isinstance(data[0], Mapping) else {}
        data = {
            "id": first.get("content_id") or path.stem,
            "title": path.stem.replace("_", " ").replace("-", " ").title(),
            "questions": data,
        }
    content = parse_quiz_content(data)
    _LOGGER.info(
        "Loaded quiz content",
        extra={
            "content_id": content.id,
            "path": path,
            "question_count": len(content.questions),
        },
    )
    return content


def parse_quiz_content(data: Mapping[str, Any]) -> QuizContent:
    """Build :class:`QuizContent` from decoded JSON.

    All invariant violations are collected and raised together as one
    :class:`ContentError`. An unrecognised type tag raises
    :class:`~lingo_quiz.quiz.errors.UnknownQuestionType` immediately.
    """

    if not isinstance(data, Mapping):
        raise ContentError("Quiz content must be a JSON object.")
    problems: list[str] = []
    quiz_id = _text(data.get("id"))
    if not quiz_id:
        problems.append("quiz 'id' is required")
    title = _text(data.get("title"))
    raw_questions = data.get("questions")
    if not isinstance(raw_questions, list):
        problems.append("'questions' must be a list")
        raw_questions = []

    questions: list[Question] = []
    for position, raw in enumerate(raw_questions):
        question = _parse_question(raw, position, quiz_id, problems)
        if question is not None:
            questions.append(question)

    _check_unique([q.id for q in questions], "question id", problems)
    _check_unique(
        [str(q.order_index) for q in questions], "order_index", problems
    )
    if problems:
        raise ContentError(
            f"Invalid quiz content '{quiz_id or '?'}':", problems
        )
    questions.sort(key=lambda question: question.order_index)
    return QuizContent(id=quiz_id, title=title, questions=tuple(questions))


def _parse_question(
    raw: object,
    position: int,
    quiz_id: str,
    problems: list[str],
) -> Question | None:
    if not isinstance(raw, Mapping):
        problems.append(f"question #{position + 1} must be an object")
        return None
    qid = _text(raw.get("id"))
    label = f"question '{qid}'" if qid else f"question #{position + 1}"
    if not qid:
        problems.append(f"{label}: 'id' is required")
        return None

    qtype = coerce_question_type(
        raw.get("type", QuestionType.MULTIPLE_CHOICE.value), question_id=qid
    )
    text = _text(
        raw.get("text") or raw.get("question_text") or raw.get("question")
    )
    if not text:
        problems.append(f"{label}: question text is required")

    points = raw.get("points", 1)
    if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
        problems.append(f"{label}: 'points' must be a positive integer")
        points = 0

    order_index = raw.get("order_index", position)
    if isinstance(order_index, bool) or not isinstance(order_index, int):
        problems.append(f"{label}: 'order_index' must be an integer")
        order_index = position

    correct_answer = raw.get("correct_answer")
    options = _parse_options(raw.get("options"), qid, label, problems)
    options = _fold_legacy_answer(options, qtype, qid, correct_answer)
    _check_unique([o.id for o in options], f"option id in {label}", problems)
    _check_answer_key(options, qtype, label, problems)

    explanation = raw.get("explanation")
    return Question(
        id=qid,
        content_id=_text(raw.get("content_id")) or quiz_id,
        type=qtype,
        text=text,
        options=tuple(options),
        points=points,
        order_index=order_index,
        correct_answer=(
            correct_answer if isinstance(correct_answer, str) else None
        ),
        explanation=_text(explanation) or None,
    )


def _parse_options(
    raw: object, qid: str, label: str, problems: list[str]
) -> list[Option]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        problems.append(f"{label}: 'options' must be a list")
        return []
    options: list[Option] = []
    for idx, item in enumerate(raw):
        if isinstance(item, Mapping):
            options.append(
                Option(
                    id=_text(item.get("id")) or f"{qid}-opt-{idx + 1}",
                    text=_text(item.get("text")),
                    is_correct=bool(item.get("is_correct", False)),
                )
            )
        elif isinstance(item, (str, int, float)) and not isinstance(
            item, bool
        ):
            options.append(Option(id=f"{qid}-opt-{idx + 1}", text=str(item)))
        else:
            problems.append(f"{label}: option #{idx + 1} is not usable")
    return options


def _fold_legacy_answer(
    options: list[Option],
    qtype: QuestionType,
    qid: str,
    correct_answer: object,
) -> list[Option]:
    """Translate a flat ``correct_answer`` into option flags."""

    if any(option.is_correct for option in options) or correct_answer is None:
        return options
    if isinstance(correct_answer, int) and not isinstance(correct_answer, bool):
        if 0 <= correct_answer < len(options):
            return [
                _flag(option) if idx == correct_answer else option
                for idx, option in enumerate(options)
            ]
        return options
    wanted = str(correct_answer).strip()
    if not wanted:
        return options
    for idx, option in enumerate(options):
        if option.text.strip().casefold() == wanted.casefold():
            return options[:idx] + [_flag(option)] + options[idx + 1 :]
    if qtype is QuestionType.FILL_BLANK:
        _LOGGER.debug(
            "Folded legacy correct_answer into an option",
            extra={"question_id": qid},
        )
        return options + [Option(f"{qid}-answer", wanted, True)]
    return options


def _check_answer_key(
    options: list[Option],
    qtype: QuestionType,
    label: str,
    problems: list[str],
) -> None:
    correct = sum(1 for option in options if option.is_correct)
    if qtype is QuestionType.FILL_BLANK:
        if not any(o.is_correct and o.text.strip() for o in options):
            problems.append(f"{label}: fill_blank needs an accepted answer")
        return
    if correct != 1:
        problems.append(
            f"{label}: {qtype.value} needs exactly one correct option "
            f"(found {correct})"
        )


def _check_unique(values: list[str], what: str, problems: list[str]) -> None:
    seen: set[str] = set()
    for value in values:
        if value in seen:
            problems.append(f"duplicate {what} '{value}'")
        seen.add(value)


def _flag(option: Option) -> Option:
    return Option(id=option.id, text=option.text, is_correct=True)


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()
