from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from lingo_quiz.core import logging as core_logging


def _close(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_configure_logger_writes_json(tmp_path):
    log_dir = tmp_path / "logs"
    logger, log_path = core_logging.configure_logger(
        "lingo_quiz.test",
        log_dir=log_dir,
        level="INFO",
        verbose=False,
        filename="test.log",
    )

    logger.info("hello world", extra={"content_id": "reading-1", "score": 3})
    logger.debug("filtered out")

    class _Helper:
        def __repr__(self):  # noqa: D401
            return "helper"

    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception(
            "with error",
            extra={
                "path": Path(log_dir),
                "value": {"items": (1, 2), "mapping": {"k": "v"}},
                "obj": _Helper(),
            },
        )
    for handler in logger.handlers:
        handler.flush()

    contents = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(contents) == 2
    first = json.loads(contents[0])
    assert first["message"] == "hello world"
    assert first["level"] == "INFO"
    assert first["extra"] == {"content_id": "reading-1", "score": 3}

    payload = json.loads(contents[-1])
    assert "ValueError: boom" in payload["exception"]
    assert payload["extra"]["obj"] == "helper"
    assert payload["extra"]["path"] == str(log_dir)
    assert payload["extra"]["value"]["items"] == [1, 2]

    _close(logger)


def test_configure_logger_reuses_handlers(tmp_path):
    name = "lingo_quiz.test_reuse"
    logger, first = core_logging.configure_logger(
        name, log_dir=tmp_path / "a", filename="reuse.log"
    )
    _, second = core_logging.configure_logger(
        name, log_dir=tmp_path / "b", filename="reuse.log"
    )

    assert first == second
    assert len(logger.handlers) == 1

    _close(logger)


def test_console_handler_toggle(tmp_path):
    log_dir = tmp_path / "logs"
    name = "lingo_quiz.test_toggle"

    def consoles(logger):
        return [
            handler
            for handler in logger.handlers
            if getattr(handler, "_lingo_quiz_console", False)
        ]

    logger, _ = core_logging.configure_logger(
        name, log_dir=log_dir, verbose=True, filename="toggle.log"
    )
    assert len(consoles(logger)) == 1

    core_logging.configure_logger(
        name, log_dir=log_dir, verbose=True, filename="toggle.log"
    )
    assert len(consoles(logger)) == 1

    core_logging.configure_logger(
        name, log_dir=log_dir, verbose=False, filename="toggle.log"
    )
    assert not consoles(logger)

    _close(logger)


def test_configure_logger_fallback_directory(tmp_path, monkeypatch):
    target = tmp_path / "blocked"
    original_mkdir = Path.mkdir

    def fake_mkdir(self, *args, **kwargs):  # noqa: ANN001
        if self == target:
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fake_mkdir)
    monkeypatch.setattr(tempfile, "gettempdir", lambda: str(tmp_path / "tmp"))

    logger, log_path = core_logging.configure_logger(
        "lingo_quiz.test_blocked",
        log_dir=target,
        filename="blocked.log",
    )

    assert log_path.parent == tmp_path / "tmp" / "lingo-quiz-logs"
    assert log_path.exists()

    _close(logger)


def test_unknown_level_defaults_to_info():
    assert core_logging._level_number("bogus") == logging.INFO
    assert core_logging._level_number("debug") == logging.DEBUG
