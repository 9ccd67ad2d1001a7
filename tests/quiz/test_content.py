from __future__ import annotations

import json

import pytest

from lingo_quiz.quiz.content import load_quiz_content, parse_quiz_content
from lingo_quiz.quiz.errors import ContentError, UnknownQuestionType
from lingo_quiz.quiz.models import QuestionType

from fixtures import raw_content_document


def test_load_sorts_questions_by_order_index(content_file) -> None:
    content = load_quiz_content(content_file)

    assert content.id == "grammar-7"
    assert content.title == "Past tense"
    assert [q.id for q in content.questions] == ["g1", "g2", "g3"]
    g1, g2, g3 = content.questions
    assert g1.type is QuestionType.MULTIPLE_CHOICE
    assert g1.explanation == "'eat' is irregular."
    assert g2.points == 2
    assert g3.points == 1
    assert g3.content_id == "grammar-7"


def test_missing_file_and_bad_json(tmp_path) -> None:
    with pytest.raises(ContentError, match="not found"):
        load_quiz_content(tmp_path / "nope.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")
    with pytest.raises(ContentError, match="not valid JSON"):
        load_quiz_content(bad)


def test_bare_question_list_uses_file_stem(tmp_path) -> None:
    path = tmp_path / "food_words.json"
    path.write_text(
        json.dumps(raw_content_document()["questions"]), encoding="utf-8"
    )

    content = load_quiz_content(path)

    assert content.id == "food_words"
    assert content.title == "Food Words"
    assert len(content) == 3


def test_legacy_flat_form_is_folded_into_options() -> None:
    content = parse_quiz_content(
        {
            "id": "legacy",
            "title": "Legacy",
            "questions": [
                {
                    "id": "l1",
                    "question_text": "Pick b",
                    "options": ["a", "b"],
                    "correct_answer": 1,
                },
                {
                    "id": "l2",
                    "type": "true_false",
                    "question": "Sky is blue",
                    "options": ["True", "False"],
                    "correct_answer": "true",
                },
                {
                    "id": "l3",
                    "type": "fill_blank",
                    "text": "The ___",
                    "correct_answer": "cat",
                },
            ],
        }
    )

    l1, l2, l3 = content.questions
    assert [o.id for o in l1.correct_options] == ["l1-opt-2"]
    assert l1.type is QuestionType.MULTIPLE_CHOICE
    assert [o.text for o in l2.correct_options] == ["True"]
    assert [(o.id, o.text) for o in l3.correct_options] == [("l3-answer", "cat")]
    assert l3.correct_answer == "cat"


def test_problems_are_collected_together() -> None:
    document = raw_content_document()
    document["questions"][0]["points"] = 0
    document["questions"][1]["options"][0]["is_correct"] = True
    document["questions"][2]["order_index"] = 1
    document["questions"].append({"id": "g1", "text": "dup"})

    with pytest.raises(ContentError) as excinfo:
        parse_quiz_content(document)

    problems = excinfo.value.problems
    assert any("'points' must be a positive integer" in p for p in problems)
    assert any("needs exactly one correct option (found 2)" in p for p in problems)
    assert any("duplicate question id 'g1'" in p for p in problems)
    assert any("duplicate order_index '1'" in p for p in problems)


def test_fill_blank_without_answer_is_rejected() -> None:
    document = raw_content_document()
    document["questions"][0]["options"] = []

    with pytest.raises(ContentError, match="fill_blank needs an accepted answer"):
        parse_quiz_content(document)


def test_duplicate_option_ids_are_rejected() -> None:
    document = raw_content_document()
    document["questions"][1]["options"][0]["id"] = "g1-b"

    with pytest.raises(ContentError, match="duplicate option id"):
        parse_quiz_content(document)


def test_unknown_question_type_is_raised() -> None:
    document = raw_content_document()
    document["questions"][0]["type"] = "essay"

    with pytest.raises(UnknownQuestionType):
        parse_quiz_content(document)


def test_content_must_be_an_object() -> None:
    with pytest.raises(ContentError):
        parse_quiz_content(["not", "a", "mapping"])
