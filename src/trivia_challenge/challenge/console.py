"""Rich-powered console front end for the trivia challenge.

The loop prompts for commands, feeds them to a :class:`RoundEngine` and
redraws the round after each one. Countdown ticks are delivered by a
:class:`PolledScheduler` pumped right after every prompt returns, so time
spent thinking at the prompt still counts against the round and a choice
typed after the deadline is ignored.
"""

from __future__ import annotations

import random
import re
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .engine import (
    DEFAULT_QUESTIONS_PER_ROUND,
    DEFAULT_TIME_LIMIT_SECONDS,
    EngineEvent,
    RoundEngine,
    RoundRecord,
)
from .questions import ANSWER_COUNT, Question
from .scoreboard import SessionSummary
from .timer import Clock, PolledScheduler

InputProvider = Callable[[], str]
ExitAction = Literal["menu", "interrupted", "empty"]

ANSWER_KEYS = "ABCD"[:ANSWER_COUNT]

_SELECT_PATTERN = re.compile(r"^(\d+)\s*([a-z])$")


@dataclass(frozen=True)
class ConsoleCommand:
    """Normalized user command parsed from console input."""

    type: Literal["select", "submit", "next", "time", "quit", "help"]
    question: Optional[int] = None
    answer: Optional[int] = None


@dataclass(frozen=True)
class ChallengeSessionResult:
    """Return value from ``run_console_challenge``."""

    summary: SessionSummary
    rounds: tuple[RoundRecord, ...]
    exit_action: ExitAction


def parse_console_command(raw: str | None) -> ConsoleCommand | None:
    """Parse raw user input such as ``2b``, ``submit`` or ``q``.

    Question numbers are 1-based on input and 0-based in the result.
    """

    if raw is None:
        return None
    text = raw.strip().lower()
    if not text:
        return None
    if text in {"s", "submit"}:
        return ConsoleCommand("submit")
    if text in {"n", "next"}:
        return ConsoleCommand("next")
    if text in {"t", "time"}:
        return ConsoleCommand("time")
    if text in {"q", "quit", "exit", "menu"}:
        return ConsoleCommand("quit")
    if text in {"h", "help", "?"}:
        return ConsoleCommand("help")
    match = _SELECT_PATTERN.match(text)
    if match is None:
        return None
    number, key = match.groups()
    answer = ANSWER_KEYS.lower().find(key)
    if answer < 0 or int(number) < 1:
        return None
    return ConsoleCommand("select", question=int(number) - 1, answer=answer)


def run_console_challenge(
    bank: Sequence[Question],
    console: Console,
    input_provider: InputProvider,
    *,
    questions_per_round: int = DEFAULT_QUESTIONS_PER_ROUND,
    time_limit_seconds: int = DEFAULT_TIME_LIMIT_SECONDS,
    clock: Clock = time.monotonic,
    rng: Optional[random.Random] = None,
) -> ChallengeSessionResult:
    """Play rounds from ``bank`` until the player quits or input ends."""

    if not bank:
        console.print(
            Panel(
                "Question bank is empty.",
                title="Trivia Challenge",
                border_style="yellow",
            )
        )
        summary = SessionSummary(
            rounds_played=0, timed_out_rounds=0, correct=0, total=0
        )
        return ChallengeSessionResult(summary, (), "empty")

    scheduler = PolledScheduler(clock=clock)
    engine = RoundEngine(
        bank,
        scheduler=scheduler,
        questions_per_round=questions_per_round,
        time_limit_seconds=time_limit_seconds,
        rng=rng,
    )
    engine.add_listener(lambda event: _announce(console, engine, event))
    engine.start_round()

    exit_action: ExitAction = "menu"
    while True:
        _render_round(console, engine)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            exit_action = "interrupted"
            break
        scheduler.pump()
        command = parse_console_command(raw)
        if command is None:
            console.print("[red]Unrecognized command. Type h for help.[/]")
            continue
        if _apply_command(command, engine, console):
            break

    rounds = tuple(engine.session.rounds)
    summary = engine.exit_to_menu()
    render_session_summary(console, summary, rounds)
    return ChallengeSessionResult(summary, rounds, exit_action)


def _apply_command(
    command: ConsoleCommand,
    engine: RoundEngine,
    console: Console,
) -> bool:
    """Apply ``command``; return ``True`` when the session should end."""

    if command.type == "quit":
        console.print("\n[bold yellow]Returning to the menu.[/]")
        return True
    if command.type == "help":
        console.print(_command_hint(engine))
        return False
    if command.type == "time":
        console.print(f"Time remaining: [bold]{engine.formatted_time()}[/]")
        return False
    if command.type == "next":
        if not engine.is_complete:
            console.print("[red]Finish this round first.[/]")
            return False
        engine.next_round()
        return False
    if command.type == "submit":
        if engine.submit() is None and not engine.is_complete:
            remaining = len(engine.question_states) - engine.answered_count()
            console.print(
                f"[red]Answer every question before submitting "
                f"({remaining} left).[/]"
            )
        return False
    if command.type == "select":
        _apply_selection(command, engine, console)
    return False


def _apply_selection(
    command: ConsoleCommand, engine: RoundEngine, console: Console
) -> None:
    if command.question is None or command.answer is None:
        return
    if not engine.is_active:
        console.print("[yellow]This round is over; answers are locked.[/]")
        return
    if command.question >= len(engine.question_states):
        console.print(
            f"[red]There is no question {command.question + 1} "
            "in this round.[/]"
        )
        return
    engine.select_answer(command.question, command.answer)


def _announce(
    console: Console, engine: RoundEngine, event: EngineEvent
) -> None:
    if event == "timed_out":
        console.print(
            Panel(
                "Time's up! This round was not scored.",
                border_style="red",
            )
        )
    elif event == "submitted" and engine.last_record is not None:
        record = engine.last_record
        message = (
            "Perfect round!"
            if record.is_perfect
            else f"You got {record.correct_count} of {record.total_count}."
        )
        console.print(Panel(message, border_style="green"))


def _render_round(console: Console, engine: RoundEngine) -> None:
    header = Text.assemble(
        (f"Round {engine.round_number}", "bold cyan"),
        (f"  {engine.formatted_time()}", "bold"),
    )
    console.print()
    console.rule(header, style=engine.theme)

    for q_index, state in enumerate(engine.question_states):
        console.print(
            Text(f"{q_index + 1}. {state.question.text}", style="bold")
        )
        table = Table(show_header=False, box=box.SIMPLE, expand=True)
        table.add_column("Key", justify="center", style="cyan")
        table.add_column("Answer")
        for a_index, answer in enumerate(state.question.answers):
            table.add_row(
                ANSWER_KEYS[a_index],
                _answer_text(engine, q_index, a_index, answer),
            )
        console.print(table)

    console.print(_status_line(engine))


def _answer_text(
    engine: RoundEngine, q_index: int, a_index: int, answer: str
) -> Text:
    selected = engine.is_selected(q_index, a_index)
    text = Text(("• " if selected else "  ") + answer)
    if engine.is_correct_answer(q_index, a_index):
        text.stylize("bold green")
        text.append("  ✓", style="green")
    elif engine.is_wrong_answer(q_index, a_index):
        text.stylize("bold red")
        text.append("  ✗", style="red")
    elif selected:
        text.stylize("bold")
    return text


def _status_line(engine: RoundEngine) -> Text:
    session = engine.session
    score = (
        f"Score {session.cumulative_correct}/{session.cumulative_total} "
        f"({session.percent}%)"
    )
    if engine.is_complete:
        record = engine.last_record
        this_round = (
            "time expired"
            if record is None or record.time_expired
            else f"{record.correct_count}/{record.total_count} "
            f"({record.percent}%)"
        )
        return Text(
            f"Round over: {this_round} | {score} | "
            "n (next round), q (menu)",
            style="dim",
        )
    total = len(engine.question_states)
    return Text(
        f"Answered {engine.answered_count()}/{total} | {score} | "
        "e.g. 2b selects B for question 2, s (submit), t (time), q (menu)",
        style="dim",
    )


def _command_hint(engine: RoundEngine) -> Text:
    keys = ", ".join(ANSWER_KEYS.lower())
    lines = [
        f"<number><letter>  choose an answer ({keys}), e.g. 1a",
        "s, submit        score the round once every question is answered",
        "t, time          show the remaining time",
        "n, next          start the next round after this one ends",
        "q, quit          return to the menu",
    ]
    if not engine.has_multiple_rounds():
        lines.append(
            "(the bank only fills one round; next reshuffles the same "
            "questions)"
        )
    return Text("\n".join(lines), style="dim")


def render_session_summary(
    console: Console,
    summary: SessionSummary,
    rounds: Sequence[RoundRecord],
) -> None:
    console.print()
    console.rule(Text("Session Summary", style="bold magenta"))

    overview = Table(
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Rounds played", str(summary.rounds_played))
    overview.add_row("Timed out", str(summary.timed_out_rounds))
    overview.add_row("Correct", f"{summary.correct}/{summary.total}")
    overview.add_row("Accuracy", f"{summary.percent}%")
    console.print(overview)

    if not rounds:
        return
    table = Table(title="Rounds", box=box.SIMPLE, expand=False)
    table.add_column("#", justify="right")
    table.add_column("Correct", justify="right")
    table.add_column("Result")
    for number, record in enumerate(rounds, start=1):
        if record.time_expired:
            outcome = "time expired"
        elif record.is_perfect:
            outcome = "perfect"
        else:
            outcome = f"{record.percent}%"
        table.add_row(
            str(number),
            f"{record.correct_count}/{record.total_count}",
            outcome,
        )
    console.print(table)
