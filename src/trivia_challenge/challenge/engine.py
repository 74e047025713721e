"""Round state machine: sampling, answer selection, countdown and scoring.

A round moves from ``ACTIVE`` to either ``SUBMITTED`` (every question
answered and submitted) or ``TIMED_OUT`` (the countdown reached zero).
Finalized rounds are recorded on the engine's :class:`SessionTotals`.
The countdown handle is owned by the engine and is only ever cancelled
through :meth:`RoundEngine._cancel_countdown`, so at most one countdown is
live at any time.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Literal, Optional, Sequence

from .questions import ANSWER_COUNT, Question, shuffled
from .scoreboard import SessionSummary, SessionTotals, percent
from .timer import Scheduler, TimerHandle

__all__ = [
    "DEFAULT_QUESTIONS_PER_ROUND",
    "DEFAULT_TIME_LIMIT_SECONDS",
    "THEME_PALETTE",
    "EngineEvent",
    "QuestionState",
    "RoundEngine",
    "RoundRecord",
    "RoundStateError",
    "RoundStatus",
]

DEFAULT_QUESTIONS_PER_ROUND = 4
DEFAULT_TIME_LIMIT_SECONDS = 90

# Background colours picked at random for each round; purely cosmetic.
THEME_PALETTE: tuple[str, ...] = (
    "#667eea",
    "#f093fb",
    "#4facfe",
    "#43e97b",
    "#fa709a",
    "#30cfd0",
    "#a8edea",
    "#ff9a9e",
)

EngineEvent = Literal[
    "started", "tick", "selected", "submitted", "timed_out", "closed"
]
Listener = Callable[[EngineEvent], None]

logger = logging.getLogger(__name__)


class RoundStateError(RuntimeError):
    """Raised when an operation is not valid in the engine's current state."""


class RoundStatus(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    SUBMITTED = "submitted"
    TIMED_OUT = "timed_out"

    @property
    def is_complete(self) -> bool:
        return self in (RoundStatus.SUBMITTED, RoundStatus.TIMED_OUT)


@dataclass
class QuestionState:
    """A sampled question plus the player's current choice."""

    question: Question
    selected_index: Optional[int] = None

    @property
    def answered(self) -> bool:
        return self.selected_index is not None

    @property
    def is_correct(self) -> bool:
        return self.selected_index == self.question.correct_index


@dataclass(frozen=True)
class RoundRecord:
    """Final result of one round."""

    question_states: tuple[QuestionState, ...]
    correct_count: int
    total_count: int
    time_expired: bool

    @property
    def percent(self) -> int:
        return percent(self.correct_count, self.total_count)

    @property
    def is_perfect(self) -> bool:
        return self.total_count > 0 and self.correct_count == self.total_count


class RoundEngine:
    """Own the active round, its countdown and the session totals."""

    def __init__(
        self,
        bank: Sequence[Question],
        *,
        scheduler: Scheduler,
        questions_per_round: int = DEFAULT_QUESTIONS_PER_ROUND,
        time_limit_seconds: int = DEFAULT_TIME_LIMIT_SECONDS,
        session: Optional[SessionTotals] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._bank: tuple[Question, ...] = tuple(bank)
        self._scheduler = scheduler
        self._questions_per_round = _positive(
            "questions_per_round", questions_per_round
        )
        self._time_limit_seconds = _positive(
            "time_limit_seconds", time_limit_seconds
        )
        self.session = session if session is not None else SessionTotals()
        self._rng = rng or random.Random()

        self._status = RoundStatus.IDLE
        self._states: List[QuestionState] = []
        self._time_remaining = self._time_limit_seconds
        self._theme_index = 0
        self._countdown: Optional[TimerHandle] = None
        self._last_record: Optional[RoundRecord] = None
        self._listeners: List[Listener] = []

    # -- configuration -------------------------------------------------

    @property
    def bank(self) -> tuple[Question, ...]:
        return self._bank

    @property
    def questions_per_round(self) -> int:
        return self._questions_per_round

    @property
    def time_limit_seconds(self) -> int:
        return self._time_limit_seconds

    def configure(
        self,
        *,
        questions_per_round: Optional[int] = None,
        time_limit_seconds: Optional[int] = None,
    ) -> None:
        """Change round settings; only allowed while no round is running."""

        if self._status is RoundStatus.ACTIVE:
            raise RoundStateError(
                "Cannot reconfigure while a round is active."
            )
        if questions_per_round is not None:
            self._questions_per_round = _positive(
                "questions_per_round", questions_per_round
            )
        if time_limit_seconds is not None:
            self._time_limit_seconds = _positive(
                "time_limit_seconds", time_limit_seconds
            )

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # -- state ---------------------------------------------------------

    @property
    def status(self) -> RoundStatus:
        return self._status

    @property
    def is_active(self) -> bool:
        return self._status is RoundStatus.ACTIVE

    @property
    def is_complete(self) -> bool:
        return self._status.is_complete

    @property
    def time_expired(self) -> bool:
        return self._status is RoundStatus.TIMED_OUT

    @property
    def time_remaining(self) -> int:
        return self._time_remaining

    @property
    def question_states(self) -> tuple[QuestionState, ...]:
        return tuple(self._states)

    @property
    def round_number(self) -> int:
        return self.session.round_number

    @property
    def theme_index(self) -> int:
        return self._theme_index

    @property
    def theme(self) -> str:
        return THEME_PALETTE[self._theme_index]

    @property
    def last_record(self) -> Optional[RoundRecord]:
        return self._last_record

    @property
    def has_countdown(self) -> bool:
        return self._countdown is not None

    # -- transitions ---------------------------------------------------

    def start_round(self) -> None:
        """Sample a fresh round from the bank and arm the countdown."""

        if not self._bank:
            raise RoundStateError("Question bank is empty.")
        self._cancel_countdown()

        picked = shuffled(self._bank, self._rng)[: self._questions_per_round]
        self._states = [QuestionState(question) for question in picked]
        self._theme_index = self._rng.randrange(len(THEME_PALETTE))
        self._time_remaining = self._time_limit_seconds
        self._last_record = None
        self._status = RoundStatus.ACTIVE
        self._countdown = self._scheduler.call_every(1.0, self.tick)

        logger.info(
            "round started",
            extra={
                "round": self.round_number,
                "questions": len(self._states),
                "time_limit": self._time_limit_seconds,
            },
        )
        self._notify("started")

    def select_answer(self, question_index: int, answer_index: int) -> bool:
        """Record a choice; ignored unless the round is active."""

        if self._status is not RoundStatus.ACTIVE:
            return False
        if not 0 <= question_index < len(self._states):
            raise IndexError(f"No question at index {question_index}")
        if not 0 <= answer_index < ANSWER_COUNT:
            raise ValueError(f"Answer index out of range: {answer_index}")
        self._states[question_index].selected_index = answer_index
        logger.debug(
            "answer selected",
            extra={"question": question_index, "answer": answer_index},
        )
        self._notify("selected")
        return True

    def can_submit(self) -> bool:
        return self._status is RoundStatus.ACTIVE and all(
            state.answered for state in self._states
        )

    def submit(self) -> Optional[RoundRecord]:
        """Score the round; ``None`` until every question is answered."""

        if not self.can_submit():
            return None
        correct = sum(1 for state in self._states if state.is_correct)
        record = self._finalize(
            RoundStatus.SUBMITTED,
            correct_count=correct,
            total_count=len(self._states),
        )
        logger.info(
            "round submitted",
            extra={
                "round": self.round_number,
                "correct": record.correct_count,
                "total": record.total_count,
            },
        )
        self._notify("submitted")
        return record

    def tick(self) -> None:
        """Advance the countdown by one second."""

        if self._status is not RoundStatus.ACTIVE:
            return
        self._time_remaining = max(0, self._time_remaining - 1)
        if self._time_remaining > 0:
            self._notify("tick")
            return
        # Unsubmitted answers are never scored.
        self._finalize(RoundStatus.TIMED_OUT, correct_count=0, total_count=0)
        logger.info("round timed out", extra={"round": self.round_number})
        self._notify("timed_out")

    def next_round(self) -> None:
        if not self._status.is_complete:
            raise RoundStateError("The current round has not finished yet.")
        self.session.advance_round()
        self.start_round()

    def close(self) -> None:
        """Tear down the round and its countdown; safe to call repeatedly."""

        self._cancel_countdown()
        if self._status is RoundStatus.IDLE:
            return
        self._status = RoundStatus.IDLE
        self._states = []
        logger.debug("round engine closed", extra={"round": self.round_number})
        self._notify("closed")

    def exit_to_menu(self) -> SessionSummary:
        """Stop playing and reset the session; return what was played."""

        summary = self.session.snapshot()
        self.close()
        self.session.reset()
        logger.info(
            "session ended",
            extra={
                "rounds": summary.rounds_played,
                "correct": summary.correct,
                "total": summary.total,
            },
        )
        return summary

    # -- projections ---------------------------------------------------

    def is_selected(self, question_index: int, answer_index: int) -> bool:
        return self._states[question_index].selected_index == answer_index

    def is_correct_answer(
        self, question_index: int, answer_index: int
    ) -> bool:
        if not self.is_complete:
            return False
        question = self._states[question_index].question
        return question.correct_index == answer_index

    def is_wrong_answer(self, question_index: int, answer_index: int) -> bool:
        if not self.is_complete:
            return False
        state = self._states[question_index]
        return state.selected_index == answer_index and not state.is_correct

    def formatted_time(self) -> str:
        minutes, seconds = divmod(self._time_remaining, 60)
        return f"{minutes}:{seconds:02d}"

    def answered_count(self) -> int:
        return sum(1 for state in self._states if state.answered)

    def has_multiple_rounds(self) -> bool:
        return len(self._bank) > self._questions_per_round

    # -- internals -----------------------------------------------------

    def _finalize(
        self, status: RoundStatus, *, correct_count: int, total_count: int
    ) -> RoundRecord:
        self._cancel_countdown()
        record = RoundRecord(
            question_states=tuple(replace(state) for state in self._states),
            correct_count=correct_count,
            total_count=total_count,
            time_expired=status is RoundStatus.TIMED_OUT,
        )
        self._status = status
        self._last_record = record
        self.session.record(record)
        return record

    def _cancel_countdown(self) -> None:
        handle, self._countdown = self._countdown, None
        if handle is not None and not handle.cancelled:
            handle.cancel()

    def _notify(self, event: EngineEvent) -> None:
        for listener in list(self._listeners):
            listener(event)


def _positive(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return value
