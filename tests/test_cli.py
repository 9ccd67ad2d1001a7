from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from rich.console import Console

from lingo_quiz import cli
from lingo_quiz.settings import CONFIG_PATH_ENV


@pytest.fixture(autouse=True)
def _reset_cli_logger():
    yield
    logger = logging.getLogger("lingo_quiz")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def _console(*answers: str) -> Console:
    console = Console(record=True, width=120, force_terminal=False)
    items = iter(answers)
    console.input = lambda prompt="": next(items)  # type: ignore[method-assign]
    return console


def _attempts_path(tmp_path: Path) -> Path:
    return tmp_path / "home" / ".lingo-quiz" / "attempts.jsonl"


def test_validate_lists_questions(content_file) -> None:
    console = _console()

    code = cli.main(["validate", str(content_file)], console=console)

    output = console.export_text()
    assert code == 0
    assert "Past tense" in output
    assert "fill_blank" in output
    assert "3 question(s), 6 point(s) available." in output


def test_validate_reports_problems(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"id": "x", "questions": [{"id": "a"}]}))
    console = _console()

    code = cli.main(["validate", str(path)], console=console)

    assert code == 1
    assert "Invalid:" in console.export_text()


def test_take_saves_attempt(tmp_path, content_file) -> None:
    console = _console("b", "n", "went", "/next", "false", "s", "q")

    code = cli.main(["take", str(content_file)], console=console)

    assert code == 0
    lines = _attempts_path(tmp_path).read_text(encoding="utf-8").splitlines()
    stored = json.loads(lines[0])
    assert stored["content_id"] == "grammar-7"
    assert stored["score"] == 6
    assert stored["percentage"] == 100.0
    assert "Saved 1 attempt(s)" in console.export_text()


def test_take_no_save_leaves_store_alone(tmp_path, content_file) -> None:
    console = _console("b", "q")

    code = cli.main(["take", str(content_file), "--no-save"], console=console)

    assert code == 0
    assert not _attempts_path(tmp_path).exists()


def test_take_missing_content(tmp_path) -> None:
    console = _console()

    code = cli.main(["take", str(tmp_path / "missing.json")], console=console)

    assert code == 1
    assert "not found" in console.export_text()


def test_take_empty_quiz_fails(tmp_path) -> None:
    path = tmp_path / "empty.json"
    path.write_text(json.dumps({"id": "empty", "title": "", "questions": []}))
    console = _console()

    assert cli.main(["take", str(path)], console=console) == 1
    assert "This quiz has no questions." in console.export_text()


def test_history_lists_latest(tmp_path, content_file) -> None:
    cli.main(
        ["take", str(content_file)],
        console=_console("a", "n", "gone", "/n", "true", "s", "r", "b", "n",
                         "went", "/next", "false", "s", "q"),
    )
    console = _console()

    code = cli.main(["history", "--latest"], console=console)

    output = console.export_text()
    assert code == 0
    assert output.count("grammar-7") == 1
    assert "6/6" in output
    assert "Excellent" in output


def test_history_without_attempts() -> None:
    console = _console()

    assert cli.main(["history"], console=console) == 1
    assert "No attempts recorded." in console.export_text()


def test_bad_config_exits_with_two(tmp_path, content_file, monkeypatch) -> None:
    config = tmp_path / "lingo-quiz.toml"
    config.write_text("[session]\nunknown = 1\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_PATH_ENV, str(config))
    console = _console()

    code = cli.main(["take", str(content_file)], console=console)

    assert code == 2
    assert "session.unknown" in console.export_text()


def test_config_init_writes_template(tmp_path) -> None:
    target = tmp_path / "conf" / "lingo-quiz.toml"
    console = _console()

    assert cli.main(["config", "init", "--path", str(target)], console=console) == 0
    assert "[storage]" in target.read_text(encoding="utf-8")
    assert cli.main(["config", "init", "--path", str(target)], console=console) == 2
    assert (
        cli.main(
            ["config", "init", "--path", str(target), "--force"],
            console=console,
        )
        == 0
    )


def test_take_respects_config_attempts_path(tmp_path, content_file) -> None:
    store = tmp_path / "custom" / "log.jsonl"
    config = tmp_path / "custom.toml"
    config.write_text(
        f'[storage]\nattempts_path = "{store.as_posix()}"\n'
        f'[logging]\nlog_dir = "{(tmp_path / "logs").as_posix()}"\n',
        encoding="utf-8",
    )
    console = _console("b", "n", "went", "/next", "false", "s", "q")

    code = cli.main(
        ["take", str(content_file), "--config", str(config)], console=console
    )

    assert code == 0
    assert store.exists()
    assert (tmp_path / "logs" / "lingo_quiz.log").exists()
