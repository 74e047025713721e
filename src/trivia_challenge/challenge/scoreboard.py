"""Cumulative scoring across the rounds of one game session."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .engine import RoundRecord

__all__ = ["SessionSummary", "SessionTotals", "percent"]


def percent(correct: int, total: int) -> int:
    """Whole-number percentage, rounding halves up; 0 when ``total`` is 0."""

    if total <= 0:
        return 0
    return int(math.floor(100 * correct / total + 0.5))


@dataclass(frozen=True)
class SessionSummary:
    """Read-only snapshot of a session, handed back when play ends."""

    rounds_played: int
    timed_out_rounds: int
    correct: int
    total: int

    @property
    def percent(self) -> int:
        return percent(self.correct, self.total)


@dataclass
class SessionTotals:
    """Running totals owned by the round engine for one session.

    Every finalized round is recorded. A timed-out round carries a 0/0
    score, so it shows up in ``rounds`` without moving the totals.
    """

    cumulative_correct: int = 0
    cumulative_total: int = 0
    round_number: int = 1
    rounds: List["RoundRecord"] = field(default_factory=list)

    @property
    def percent(self) -> int:
        return percent(self.cumulative_correct, self.cumulative_total)

    def record(self, result: "RoundRecord") -> None:
        self.cumulative_correct += result.correct_count
        self.cumulative_total += result.total_count
        self.rounds.append(result)

    def advance_round(self) -> int:
        self.round_number += 1
        return self.round_number

    def reset(self) -> None:
        self.cumulative_correct = 0
        self.cumulative_total = 0
        self.round_number = 1
        self.rounds.clear()

    def snapshot(self) -> SessionSummary:
        return SessionSummary(
            rounds_played=len(self.rounds),
            timed_out_rounds=sum(
                1 for item in self.rounds if item.time_expired
            ),
            correct=self.cumulative_correct,
            total=self.cumulative_total,
        )
