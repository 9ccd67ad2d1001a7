"""Rich console driver for a quiz session.

This module renders the current question, turns typed commands into session
actions, and prints the scored review after submission. All rules live in
:class:`~lingo_quiz.quiz.session.QuizSession`; the loop only reports the
``InvalidTransition`` messages it gets back.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Collection, Literal

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .dispatcher import dispatch
from .models import QuizContent
from .reporter import AttemptRecord
from .session import Clock, QuizSession
from .state import Applied
from .storage import AttemptSink

__all__ = [
    "ConsoleSessionResult",
    "SessionCommand",
    "parse_session_command",
    "run_quiz_session",
]

InputProvider = Callable[[], str]
ExitAction = Literal["submitted", "quit", "empty"]
CommandType = Literal["next", "prev", "submit", "retry", "quit", "answer"]

_COMMAND_WORDS: dict[str, CommandType] = {
    "n": "next",
    "next": "next",
    "p": "prev",
    "prev": "prev",
    "previous": "prev",
    "s": "submit",
    "submit": "submit",
    "r": "retry",
    "retry": "retry",
    "q": "quit",
    "quit": "quit",
    "exit": "quit",
}


@dataclass(frozen=True)
class SessionCommand:
    """Normalized command parsed from console input."""

    type: CommandType
    value: str | None = None


@dataclass(frozen=True)
class ConsoleSessionResult:
    """Return value from ``run_quiz_session``."""

    exit_action: ExitAction
    records: list[AttemptRecord] = field(default_factory=list)
    session: QuizSession | None = None


def parse_session_command(
    raw: str | None,
    *,
    free_text: bool = False,
    choice_keys: Collection[str] = (),
) -> SessionCommand | None:
    """Parse console input.

    Command words work bare or with a ``/`` prefix. When ``free_text`` is
    set (fill-blank questions) only the prefixed form is a command and
    anything else is an answer. A bare entry matching one of
    ``choice_keys`` selects that choice even if it spells a command.
    """

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    if text.startswith("/"):
        command = _COMMAND_WORDS.get(text[1:].strip().lower())
        return SessionCommand(command) if command else None
    if text.upper() in choice_keys:
        return SessionCommand("answer", text)
    if not free_text:
        command = _COMMAND_WORDS.get(text.lower())
        if command:
            return SessionCommand(command)
    return SessionCommand("answer", text)


def run_quiz_session(
    content: QuizContent,
    console: Console,
    input_provider: InputProvider,
    *,
    sink: AttemptSink | None = None,
    clock: Clock = time.time,
    show_explanations: bool = True,
    logger: logging.Logger | None = None,
) -> ConsoleSessionResult:
    """Run an interactive quiz until the learner quits."""

    if not content.questions:
        console.print(
            Panel(
                "This quiz has no questions.",
                title=content.title or "Quiz",
                border_style="yellow",
            )
        )
        return ConsoleSessionResult("empty")

    session = QuizSession(content, clock=clock, sink=sink, logger=logger)
    records: list[AttemptRecord] = []
    while True:
        if session.state.is_submitted:
            _render_after_submit_hint(console)
            free_text = False
            choice_keys: set[str] = set()
        else:
            _render_question(console, session)
            question = session.current_question
            strategy = dispatch(question) if question is not None else None
            free_text = strategy is not None and strategy.answer_kind == "text"
            choice_keys = (
                {key for key, _ in strategy.choices(question)}
                if strategy is not None
                else set()
            )
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            break
        command = parse_session_command(
            raw, free_text=free_text, choice_keys=choice_keys
        )
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            if not session.state.is_submitted:
                console.print(
                    "\n[bold yellow]Ending quiz without submission.[/]"
                )
            break
        record = _apply_command(command, session, console)
        if record is not None:
            records.append(record)
            session.review()
            _render_summary(
                console, session, record, show_explanations=show_explanations
            )

    exit_action: ExitAction = "submitted" if records else "quit"
    return ConsoleSessionResult(exit_action, records, session)


def _apply_command(
    command: SessionCommand,
    session: QuizSession,
    console: Console,
) -> AttemptRecord | None:
    if command.type == "retry":
        session.retry()
        console.print("[bold cyan]Starting over.[/]")
        return None
    if session.state.is_submitted:
        console.print("[red]Quiz submitted. Use r (retry) or q (quit).[/]")
        return None

    if command.type == "answer":
        question = session.current_question
        if question is None or not command.value:
            return None
        answer = dispatch(question).parse_input(question, command.value)
        if answer is None:
            console.print(
                "[red]'%s' is not a valid choice for this question.[/red]"
                % command.value,
            )
            return None
        outcome = session.answer(question.id, answer)
    elif command.type == "next":
        outcome = session.next()
    elif command.type == "prev":
        outcome = session.previous()
    elif command.type == "submit":
        outcome = session.submit()
    else:  # pragma: no cover - parse_session_command guards the set
        return None

    if not isinstance(outcome, Applied):
        console.print(f"[red]{outcome.message}[/red]")
        return None
    return outcome.record


def _render_question(console: Console, session: QuizSession) -> None:
    question = session.current_question
    if question is None:
        return
    state = session.state
    header = Text.assemble(
        (f"Question {state.current_index + 1}", "bold cyan"),
        (f" / {session.question_count}", "dim"),
        (f"  ({question.points} pt)", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.text, style="bold"))

    strategy = dispatch(question)
    recorded = state.answers.get(question.id)
    choices = strategy.choices(question)
    if choices:
        table = Table(show_header=False, box=box.SIMPLE, expand=True)
        table.add_column("Key", justify="center", style="cyan")
        table.add_column("Choice")
        selected = recorded.selected_option_id if recorded else None
        for key, option in choices:
            marker = "•" if option.id == selected else " "
            label = Text(option.text)
            if option.id == selected:
                label.stylize("bold green")
            row = Text(marker + " ")
            row += label
            table.add_row(key, row)
        console.print(table)
        hint = "choices [" + ", ".join(key for key, _ in choices) + "]"
    else:
        current = strategy.describe(question, recorded)
        console.print(
            Text(f"Your answer: {current}" if current else "Type your answer.")
        )
        hint = "type an answer"

    final = "/submit" if session.is_last_question else "/next"
    # Bare command words are shadowed by choice keys that spell them.
    shadowed = any(key.lower() in _COMMAND_WORDS for key, _ in choices)
    nav = (
        f"{final}, /prev, /quit"
        if strategy.answer_kind == "text" or shadowed
        else f"{final.lstrip('/')}, p (prev), quit"
    )
    console.print(
        Text(
            f"Answered {state.answered_count}/{session.question_count} | "
            f"Commands: {hint}, {nav}",
            style="dim",
        )
    )


def _render_after_submit_hint(console: Console) -> None:
    console.print(Text("Commands: r (retry), q (quit)", style="dim"))


def _render_summary(
    console: Console,
    session: QuizSession,
    record: AttemptRecord,
    *,
    show_explanations: bool,
) -> None:
    console.print()
    console.rule(Text("Quiz Summary", style="bold magenta"))

    tier = record.performance
    overview = Table(
        show_header=False, box=box.MINIMAL_DOUBLE_HEAD, expand=False
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Score", f"{record.score} / {record.max_score}")
    overview.add_row("Percentage", f"{record.percentage:.2f}%")
    overview.add_row("Performance", Text(tier.level, style=tier.style))
    overview.add_row("Total time", f"{record.total_time}s")
    console.print(overview)
    console.print(Text(tier.message, style=tier.style))

    responses = Table(title="Responses", box=box.SIMPLE, expand=True)
    responses.add_column("#", justify="right")
    responses.add_column("Question", overflow="fold")
    responses.add_column("Your answer")
    responses.add_column("Correct answer")
    responses.add_column("Result", justify="center")
    responses.add_column("Time", justify="right")

    feedback = [session.feedback(entry.question_id) for entry in record.answers]
    for idx, (entry, item) in enumerate(zip(record.answers, feedback), 1):
        responses.add_row(
            str(idx),
            item.text,
            item.your_answer or "—",
            item.correct_answer or "—",
            "✅" if entry.is_correct else "❌",
            f"{entry.time_taken}s",
        )
    console.print(responses)

    if not show_explanations:
        return
    for item in feedback:
        if not item.explanation:
            continue
        console.print(
            Panel(
                item.explanation,
                title=f"Explanation: {item.question_id}",
                border_style="green" if item.is_correct else "red",
            )
        )
