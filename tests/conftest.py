from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Make src/ importable when the package is not installed.
ROOT = TESTS_DIR.parent
for extra in (ROOT / "src",):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import (  # noqa: E402
    FakeClock,
    raw_content_document,
    three_question_content,
)
from lingo_quiz.quiz.models import QuizContent  # noqa: E402


@pytest.fixture
def clock() -> FakeClock:
    """A clock that only advances when the test says so."""

    return FakeClock()


@pytest.fixture
def content() -> QuizContent:
    """Three questions: multiple choice, true/false, fill blank."""

    return three_question_content()


@pytest.fixture
def content_file(tmp_path: Path) -> Path:
    path = tmp_path / "grammar-7.json"
    path.write_text(json.dumps(raw_content_document()), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("LINGO_QUIZ_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
