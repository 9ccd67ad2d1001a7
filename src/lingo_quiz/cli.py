"""Command line entry point for ``lingo-quiz``."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from .core.logging import configure_logger
from .quiz.console import run_quiz_session
from .quiz.content import load_quiz_content
from .quiz.errors import ContentError, StorageError
from .quiz.storage import JsonlAttemptStore
from .settings import (
    CONFIG_FILENAME,
    ConfigError,
    QuizSettings,
    load_settings,
    write_template,
)


def _load(args: argparse.Namespace, console: Console) -> QuizSettings | None:
    explicit = Path(args.config) if getattr(args, "config", None) else None
    try:
        return load_settings(explicit_path=explicit)
    except ConfigError as exc:
        console.print(f"[red]Error:[/] {exc}")
        return None


def _setup_logging(settings: QuizSettings) -> logging.Logger:
    logger, _ = configure_logger(
        "lingo_quiz",
        log_dir=settings.logging.log_dir,
        level=settings.logging.level,
        verbose=settings.logging.verbose,
    )
    return logger


def _cmd_take(args: argparse.Namespace, console: Console) -> int:
    settings = _load(args, console)
    if settings is None:
        return 2
    logger = _setup_logging(settings)
    try:
        content = load_quiz_content(Path(args.content))
    except ContentError as exc:
        console.print(f"[red]Error:[/] {exc}")
        return 1
    store = None if args.no_save else JsonlAttemptStore(
        settings.storage.attempts_path
    )
    explain = (
        settings.session.show_explanations
        if args.explain is None
        else args.explain
    )
    console.print(f"[bold]{content.title or content.id}[/]")
    try:
        result = run_quiz_session(
            content,
            console,
            lambda: console.input("> "),
            sink=store,
            show_explanations=explain,
            logger=logger.getChild("session"),
        )
    except StorageError as exc:
        console.print(f"[red]Error:[/] {exc}")
        return 1
    if result.exit_action == "empty":
        return 1
    if store is not None and result.records:
        console.print(
            f"Saved {len(result.records)} attempt(s) -> {store.path}"
        )
    return 0


def _cmd_validate(args: argparse.Namespace, console: Console) -> int:
    try:
        content = load_quiz_content(Path(args.content))
    except ContentError as exc:
        console.print(f"[red]Invalid:[/] {exc}")
        return 1

    table = Table(title=content.title or content.id, box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Id")
    table.add_column("Type")
    table.add_column("Points", justify="right")
    table.add_column("Question", overflow="fold")
    for question in content.questions:
        table.add_row(
            str(question.order_index),
            question.id,
            getattr(question.type, "value", str(question.type)),
            str(question.points),
            question.text,
        )
    console.print(table)
    total = sum(question.points for question in content.questions)
    console.print(
        f"{len(content.questions)} question(s), {total} point(s) available."
    )
    return 0


def _cmd_history(args: argparse.Namespace, console: Console) -> int:
    settings = _load(args, console)
    if settings is None:
        return 2
    store = JsonlAttemptStore(settings.storage.attempts_path)
    try:
        if args.latest:
            records = store.latest_attempts(args.content_id or None)
        else:
            records = store.load_attempts()
            if args.content_id:
                wanted = set(args.content_id)
                records = [r for r in records if r.content_id in wanted]
    except StorageError as exc:
        console.print(f"[red]Error:[/] {exc}")
        return 1
    if not records:
        console.print("No attempts recorded.")
        return 1

    table = Table(title="Attempts", box=box.SIMPLE)
    table.add_column("Completed")
    table.add_column("Content")
    table.add_column("Score", justify="right")
    table.add_column("Percentage", justify="right")
    table.add_column("Level")
    table.add_column("Time", justify="right")
    for record in records:
        tier = record.performance
        table.add_row(
            record.completed_at,
            record.content_id,
            f"{record.score}/{record.max_score}",
            f"{record.percentage:.2f}%",
            f"[{tier.style}]{tier.level}[/]",
            f"{record.total_time}s",
        )
    console.print(table)
    return 0


def _cmd_config_init(args: argparse.Namespace, console: Console) -> int:
    path = Path(args.path or CONFIG_FILENAME).expanduser().resolve()
    try:
        write_template(path, overwrite=bool(args.force))
    except ConfigError as exc:
        console.print(f"[red]Error:[/] {exc}")
        return 2
    console.print(f"Created template {path}")
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lingo-quiz",
        description="Take and review language-learning quizzes",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp_take = sub.add_parser("take", help="Take a quiz from a content file")
    sp_take.add_argument("content", help="Quiz content JSON file")
    sp_take.add_argument("--config", help="Path to lingo-quiz.toml")
    sp_take.add_argument("--explain", dest="explain", action="store_true")
    sp_take.add_argument("--no-explain", dest="explain", action="store_false")
    sp_take.add_argument(
        "--no-save",
        action="store_true",
        help="Do not append the attempt to the attempt store",
    )
    sp_take.set_defaults(explain=None)

    sp_val = sub.add_parser("validate", help="Check a quiz content file")
    sp_val.add_argument("content")

    sp_hist = sub.add_parser("history", help="List stored attempts")
    sp_hist.add_argument("--config", help="Path to lingo-quiz.toml")
    sp_hist.add_argument("--content-id", nargs="*")
    sp_hist.add_argument(
        "--latest",
        action="store_true",
        help="Only the most recent attempt per content",
    )

    sp_cfg = sub.add_parser("config", help="Configuration helpers")
    cfg_sub = sp_cfg.add_subparsers(dest="action", required=True)
    sp_cfg_init = cfg_sub.add_parser("init", help="Write a config template")
    sp_cfg_init.add_argument("--path")
    sp_cfg_init.add_argument("--force", action="store_true")
    return p


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    console = console or Console()
    if args.command == "take":
        return _cmd_take(args, console)
    if args.command == "validate":
        return _cmd_validate(args, console)
    if args.command == "history":
        return _cmd_history(args, console)
    if args.command == "config" and args.action == "init":
        return _cmd_config_init(args, console)
    parser.print_help()  # pragma: no cover - argparse enforces commands
    return 2  # pragma: no cover


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
