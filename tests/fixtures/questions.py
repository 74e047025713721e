"""Builders for question banks and CSV files used across tests."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from trivia_challenge.challenge.questions import Question

HEADER = ("question", "correct", "wrong1", "wrong2", "wrong3")


def csv_text(
    rows: Iterable[Sequence[str]], *, header: bool = True
) -> str:
    """Join already-quoted cells into CSV text with a header row."""

    lines = [",".join(HEADER)] if header else []
    lines.extend(",".join(row) for row in rows)
    return "\n".join(lines) + "\n"


def make_question(number: int, *, correct_index: int = 0) -> Question:
    answers = [f"Q{number} wrong {i}" for i in range(1, 4)]
    answers.insert(correct_index, f"Q{number} right")
    return Question(
        text=f"Question {number}?",
        answers=tuple(answers),
        correct_index=correct_index,
    )


def make_bank(count: int) -> list[Question]:
    return [
        make_question(n, correct_index=n % 4) for n in range(1, count + 1)
    ]


def numbered_rows(count: int) -> list[tuple[str, ...]]:
    return [
        (f"Question {n}?", f"right {n}", "w1", "w2", "w3")
        for n in range(1, count + 1)
    ]


@dataclass
class QuestionFiles:
    """Writes question files beneath a tmp directory."""

    root: Path

    def write(self, name: str, content: str | bytes) -> Path:
        path = self.root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    def numbered(self, name: str, count: int) -> Path:
        return self.write(name, csv_text(numbered_rows(count)))
