from __future__ import annotations

import random
from typing import List, Optional, Sequence

from textual.app import App, ComposeResult, ScreenStackError
from textual.containers import Container, Vertical
from textual.css.query import NoMatches
from textual.widget import Widget
from textual.widgets import Button, Static

from ..engine import (
    DEFAULT_QUESTIONS_PER_ROUND,
    DEFAULT_TIME_LIMIT_SECONDS,
    EngineEvent,
    RoundEngine,
    RoundRecord,
)
from ..questions import Question
from ..scoreboard import SessionSummary
from ..timer import Scheduler, TextualScheduler

ANSWER_KEYS = "ABCD"
ANSWER_STATES = ("selected", "correct", "wrong")


def answer_button_name(question_index: int, answer_index: int) -> str:
    return f"answer-{question_index}-{answer_index}"


def parse_answer_button_name(name: str) -> Optional[tuple[int, int]]:
    """Parse names made by :func:`answer_button_name`."""

    parts = name.split("-")
    if len(parts) != 3 or parts[0] != "answer":
        return None
    if not (parts[1].isdigit() and parts[2].isdigit()):
        return None
    return int(parts[1]), int(parts[2])


def answer_classes(
    engine: RoundEngine, question_index: int, answer_index: int
) -> List[str]:
    classes: List[str] = []
    if engine.is_selected(question_index, answer_index):
        classes.append("selected")
    if engine.is_correct_answer(question_index, answer_index):
        classes.append("correct")
    elif engine.is_wrong_answer(question_index, answer_index):
        classes.append("wrong")
    return classes


def status_text(engine: RoundEngine) -> str:
    session = engine.session
    score = (
        f"Score {session.cumulative_correct}/{session.cumulative_total} "
        f"({session.percent}%)"
    )
    if engine.is_complete:
        record = engine.last_record
        if record is None or record.time_expired:
            outcome = "Time's up! This round was not scored."
        elif record.is_perfect:
            outcome = "Perfect round!"
        else:
            outcome = (
                f"You got {record.correct_count} of {record.total_count}."
            )
        return f"{outcome} {score} | Enter: next round, Esc: menu"
    answered = engine.answered_count()
    total = len(engine.question_states)
    return (
        f"Round {engine.round_number} | {engine.formatted_time()} | "
        f"Answered {answered}/{total} | {score}"
    )


class ChallengeApp(App):
    CSS_PATH = None
    CSS = """
#stage { height: 1fr; overflow-y: auto; }
.answers Button.selected { background: $accent; color: black; }
.answers Button.correct { background: green; color: white; }
.answers Button.wrong { background: red; color: white; }
#footer { height: auto; }
"""
    BINDINGS = [
        ("enter", "next_round", "Next round"),
        ("space", "next_round", "Next round"),
        ("s", "submit", "Submit"),
        ("escape", "menu", "Menu"),
    ]

    def __init__(
        self,
        bank: Sequence[Question],
        *,
        questions_per_round: int = DEFAULT_QUESTIONS_PER_ROUND,
        time_limit_seconds: int = DEFAULT_TIME_LIMIT_SECONDS,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__()
        self.engine = RoundEngine(
            bank,
            scheduler=scheduler or TextualScheduler(self),
            questions_per_round=questions_per_round,
            time_limit_seconds=time_limit_seconds,
            rng=rng,
        )
        self.engine.add_listener(self._on_engine_event)
        self.summary: Optional[SessionSummary] = None
        self.rounds: tuple[RoundRecord, ...] = ()
        self._cards: List[QuestionCard] = []

    def compose(self) -> ComposeResult:
        with Container(id="stage"):
            self._cards = self._question_cards()
            yield from self._cards
        with Container(id="footer"):
            yield Static(status_text(self.engine), id="status")
            yield Button("Submit", id="submit")
            yield Button("Next round", id="next")
            yield Button("Menu", id="menu")

    def on_mount(self) -> None:
        self.engine.start_round()

    def on_unmount(self) -> None:
        self.engine.close()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = getattr(event.button, "id", "") or ""
        target = parse_answer_button_name(
            getattr(event.button, "name", "") or ""
        )
        if target is not None:
            self.engine.select_answer(*target)
        elif bid == "submit":
            self.action_submit()
        elif bid == "next":
            self.action_next_round()
        elif bid == "menu":
            self.action_menu()

    def action_submit(self) -> None:
        self.engine.submit()

    def action_next_round(self) -> None:
        if self.engine.is_complete:
            self.engine.next_round()

    def action_menu(self) -> None:
        self.rounds = tuple(self.engine.session.rounds)
        self.summary = self.engine.exit_to_menu()
        self.exit(self.summary)

    def _question_cards(self) -> List["QuestionCard"]:
        return [
            QuestionCard(self.engine, index)
            for index in range(len(self.engine.question_states))
        ]

    def _on_engine_event(self, event: EngineEvent) -> None:
        if event == "closed":
            return
        if event == "started":
            self._rebuild_stage()
        elif event != "tick":
            # Rebuilding here would drop the focused answer button.
            for card in self._cards:
                card.refresh_answers()
        if event in ("submitted", "timed_out"):
            self._focus("#next")
        self._update_status()

    def _rebuild_stage(self) -> None:
        try:
            stage = self.query_one("#stage", Container)
        except (NoMatches, ScreenStackError):
            return
        stage.remove_children()
        self._cards = self._question_cards()
        for card in self._cards:
            stage.mount(card)
        self._apply_theme()
        if self.is_running:
            self.call_after_refresh(self._focus_first_answer)

    def _focus(self, selector: str) -> None:
        try:
            self.query_one(selector, Button).focus()
        except (NoMatches, ScreenStackError):
            pass

    def _focus_first_answer(self) -> None:
        if self._cards:
            self._cards[0].focus_first_answer()

    def _update_status(self) -> None:
        try:
            status = self.query_one("#status", Static)
        except (NoMatches, ScreenStackError):
            return
        status.update(status_text(self.engine))
        try:
            submit = self.query_one("#submit", Button)
        except (NoMatches, ScreenStackError):
            return
        submit.disabled = not self.engine.can_submit()

    def _apply_theme(self) -> None:
        try:
            self.screen.styles.background = self.engine.theme
        except ScreenStackError:
            pass


class QuestionCard(Widget):
    """One question of the current round with its four answer buttons."""

    DEFAULT_CSS = """
QuestionCard { height: auto; margin: 1 2; }
"""

    def __init__(self, engine: RoundEngine, question_index: int) -> None:
        super().__init__()
        self.engine = engine
        self.question_index = question_index
        self._buttons: List[Button] = []

    def compose(self) -> ComposeResult:
        state = self.engine.question_states[self.question_index]
        yield Static(
            f"{self.question_index + 1}. {state.question.text}",
            classes="question-text",
        )
        with Vertical(classes="answers"):
            for a_index, answer in enumerate(state.question.answers):
                button = Button(
                    f"{ANSWER_KEYS[a_index]}) {answer}",
                    name=answer_button_name(self.question_index, a_index),
                )
                for name in answer_classes(
                    self.engine, self.question_index, a_index
                ):
                    button.add_class(name)
                self._buttons.append(button)
                yield button

    def refresh_answers(self) -> None:
        """Re-apply answer classes without replacing the buttons."""

        for a_index, button in enumerate(self._buttons):
            current = answer_classes(
                self.engine, self.question_index, a_index
            )
            for name in ANSWER_STATES:
                button.set_class(name in current, name)

    def focus_first_answer(self) -> None:
        if self._buttons:
            self._buttons[0].focus()
