"""Question records and validation of parsed CSV rows.

Rows come from :func:`parse_csv_table`. Each data row must provide a
question, the correct answer and three wrong answers; anything after the
fifth column is ignored. Accepted questions get their answers shuffled so
the correct one does not always sit in the same slot.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, TypeVar

__all__ = [
    "ANSWER_COUNT",
    "MIN_COLUMNS",
    "Question",
    "ValidationResult",
    "build_question",
    "shuffled",
    "validate_rows",
]

T = TypeVar("T")

ANSWER_COUNT = 4
MIN_COLUMNS = 1 + ANSWER_COUNT
MAX_REPORTED_ERRORS = 3

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Question:
    """One multiple-choice question with its answers in display order."""

    text: str
    answers: tuple[str, ...]
    correct_index: int

    def __post_init__(self) -> None:
        if len(self.answers) != ANSWER_COUNT:
            raise ValueError(
                f"Question needs exactly {ANSWER_COUNT} answers, "
                f"got {len(self.answers)}"
            )
        if not 0 <= self.correct_index < ANSWER_COUNT:
            raise ValueError(
                f"correct_index out of range: {self.correct_index}"
            )

    @property
    def correct_answer(self) -> str:
        return self.answers[self.correct_index]


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a parsed table.

    ``failure`` holds the single user-facing message when the table as a
    whole is rejected; ``questions`` is empty in that case. ``errors`` keeps
    every row-level message either way.
    """

    questions: tuple[Question, ...] = ()
    errors: tuple[str, ...] = ()
    failure: Optional[str] = None
    accepted: int = 0

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass
class _RowCheck:
    questions: List[Question] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def shuffled(items: Sequence[T], rng: random.Random) -> List[T]:
    """Return a uniformly shuffled copy of ``items`` (Fisher–Yates)."""

    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


def validate_rows(
    rows: Sequence[Sequence[str]],
    min_required: int,
    *,
    rng: Optional[random.Random] = None,
) -> ValidationResult:
    """Turn parsed rows into questions, collecting per-row errors.

    Row 0 is the header. Rows whose first field is empty are skipped
    silently. The table fails as a whole when it has no data rows, when
    every data row was rejected, or when fewer than ``min_required``
    questions survive.
    """

    rng = rng or random.Random()
    if len(rows) < 2:
        return ValidationResult(
            failure="File must contain at least a header and one question."
        )

    check = _RowCheck()
    for index, row in enumerate(rows[1:], start=1):
        _check_row(row, line=index + 1, check=check, rng=rng)

    found = len(check.questions)
    errors = tuple(check.errors)
    failure: Optional[str] = None
    if errors and not check.questions:
        listed = "\n".join(errors[:MAX_REPORTED_ERRORS])
        failure = f"Errors found:\n{listed}"
    elif found < min_required:
        failure = (
            f"Need at least {min_required} valid questions. "
            f"Found only {found}."
        )

    if failure is not None:
        logger.info(
            "question table rejected",
            extra={"accepted": found, "row_errors": len(errors)},
        )
        return ValidationResult(errors=errors, failure=failure, accepted=found)

    logger.debug(
        "question table accepted",
        extra={"accepted": found, "row_errors": len(errors)},
    )
    return ValidationResult(
        questions=tuple(check.questions), errors=errors, accepted=found
    )


def _check_row(
    row: Sequence[str],
    *,
    line: int,
    check: _RowCheck,
    rng: random.Random,
) -> None:
    if not row or not row[0]:
        return
    if len(row) < MIN_COLUMNS:
        check.errors.append(
            f"Line {line}: Not enough columns "
            "(need at least 5: question + 4 answers)"
        )
        return

    text, correct, *wrong = row[:MIN_COLUMNS]
    if not text.strip():
        check.errors.append(f"Line {line}: Question is empty")
        return
    if not correct.strip():
        check.errors.append(f"Line {line}: Correct answer is empty")
        return
    if any(not answer.strip() for answer in wrong):
        check.errors.append(
            f"Line {line}: One or more wrong answers are empty"
        )
        return

    check.questions.append(build_question(text, correct, wrong, rng))


def build_question(
    text: str,
    correct: str,
    wrong: Sequence[str],
    rng: random.Random,
) -> Question:
    """Shuffle ``correct`` in among ``wrong`` and track where it lands."""

    answers = [correct, *wrong]
    order = shuffled(range(len(answers)), rng)
    return Question(
        text=text,
        answers=tuple(answers[i] for i in order),
        correct_index=order.index(0),
    )
