from __future__ import annotations

from dataclasses import replace

import pytest

from lingo_quiz.quiz.models import UserAnswer
from lingo_quiz.quiz.reporter import (
    AttemptRecord,
    build_attempt,
    format_timestamp,
)
from lingo_quiz.quiz.state import QuizSessionState

from fixtures import fb_question, make_content, mc_question

T0 = 1_700_000_000.0


def _submitted(content, answers, seconds) -> QuizSessionState:
    return replace(
        QuizSessionState.start(content, T0),
        status="submitted",
        answers=answers,
        per_question_seconds=seconds,
        total_seconds=sum(seconds.values()),
        completed_at=T0 + 30,
    )


def test_build_attempt_orders_by_order_index() -> None:
    content = make_content(
        fb_question("q3", order_index=2),
        mc_question("q1", order_index=0),
        mc_question("q2", order_index=1, correct="b"),
    )
    state = _submitted(
        content,
        {
            "q1": UserAnswer.option("q1", "q1-a"),
            "q3": UserAnswer.text("q3", " cat"),
        },
        {"q1": 7, "q3": 5},
    )

    record = build_attempt(state, content.questions)

    assert [entry.question_id for entry in record.answers] == ["q1", "q2", "q3"]
    q1, q2, q3 = record.answers
    assert (q1.selected_option, q1.is_correct, q1.time_taken) == ("q1-a", True, 7)
    assert (q2.selected_option, q2.text_answer, q2.is_correct) == (None, None, False)
    assert q2.time_taken == 0
    assert (q3.text_answer, q3.is_correct) == (" cat", True)
    assert (record.score, record.max_score) == (15, 20)
    assert record.correct_count == 2
    assert record.total_time == 12
    assert record.completed_at == format_timestamp(T0 + 30)


def test_build_attempt_requires_submitted_state(content) -> None:
    with pytest.raises(ValueError):
        build_attempt(QuizSessionState.start(content, T0), content.questions)


def test_attempt_record_round_trip(content) -> None:
    state = _submitted(
        content, {"q1": UserAnswer.option("q1", "q1-b")}, {"q1": 3}
    )
    record = build_attempt(state, content.questions)

    restored = AttemptRecord.from_dict(record.to_dict())

    assert restored == record
    assert restored.performance.level == "Needs Improvement"


def test_format_timestamp_is_utc() -> None:
    assert format_timestamp(0) == "1970-01-01T00:00:00+00:00"
