"""Loading question banks from uploads, raw text and the packaged sample.

Every source goes through the same :func:`parse_csv_table` and
:func:`validate_rows` pair. Failures never raise out of this module: they
are reported on the loader (``error``) and any previously accepted bank is
discarded.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Optional

from .csv_table import parse_csv_table
from .engine import DEFAULT_QUESTIONS_PER_ROUND
from .questions import Question, ValidationResult, validate_rows

__all__ = [
    "INVALID_TYPE_MESSAGE",
    "READ_ERROR_MESSAGE",
    "QuestionBankLoader",
    "is_csv_name",
    "load_default_bank",
    "load_questions_text",
    "sample_csv_text",
    "write_sample_csv",
]

INVALID_TYPE_MESSAGE = "Invalid file type. Please upload a .csv file."
READ_ERROR_MESSAGE = "Error reading file. Please try again."
SAMPLE_RESOURCE = "data/sample_questions.csv"
SAMPLE_FILENAME = "sample-questions.csv"

logger = logging.getLogger(__name__)


def is_csv_name(name: str) -> bool:
    return name.lower().endswith(".csv")


def sample_csv_text() -> str:
    """Return the bundled sample question file."""

    resource = resources.files(__package__).joinpath(SAMPLE_RESOURCE)
    return resource.read_text(encoding="utf-8")


def write_sample_csv(path: Path, *, overwrite: bool = False) -> Path:
    """Write the sample question file to ``path``."""

    if path.exists() and not overwrite:
        raise FileExistsError(f"Refusing to overwrite existing file: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(sample_csv_text(), encoding="utf-8")
    return path


def load_questions_text(
    text: str,
    *,
    questions_per_round: int = DEFAULT_QUESTIONS_PER_ROUND,
    rng: Optional[random.Random] = None,
) -> ValidationResult:
    rows = parse_csv_table(text)
    return validate_rows(rows, questions_per_round, rng=rng)


def load_default_bank(
    *,
    questions_per_round: int = DEFAULT_QUESTIONS_PER_ROUND,
    rng: Optional[random.Random] = None,
) -> ValidationResult:
    """Validate the bundled sample exactly like an uploaded file."""

    return load_questions_text(
        sample_csv_text(),
        questions_per_round=questions_per_round,
        rng=rng,
    )


@dataclass
class QuestionBankLoader:
    """Holds the currently accepted question bank and the last error.

    A failed load always leaves the loader empty, so callers never start a
    game with a partially accepted file.
    """

    questions_per_round: int = DEFAULT_QUESTIONS_PER_ROUND
    rng: Optional[random.Random] = None
    file_name: Optional[str] = None
    questions: tuple[Question, ...] = ()
    error: Optional[str] = None
    result: Optional[ValidationResult] = field(default=None, repr=False)

    @property
    def loaded(self) -> bool:
        return bool(self.questions)

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def clear(self) -> None:
        self.file_name = None
        self.questions = ()
        self.result = None

    def load_file(self, path: Path) -> bool:
        """Load an uploaded file; only ``.csv`` names are read."""

        path = Path(path)
        if not is_csv_name(path.name):
            self.clear()
            self.error = INVALID_TYPE_MESSAGE
            logger.warning(
                "rejected question file", extra={"file": path.name}
            )
            return False

        self.clear()
        self.file_name = path.name
        self.error = None
        try:
            # utf-8-sig drops the BOM spreadsheet exports tend to add.
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError):
            logger.exception(
                "failed to read question file", extra={"file": str(path)}
            )
            self.clear()
            self.error = READ_ERROR_MESSAGE
            return False
        return self._accept(text, source=path.name)

    def load_text(self, text: str, *, name: str = "<text>") -> bool:
        self.clear()
        self.file_name = name
        self.error = None
        return self._accept(text, source=name)

    def load_default(self) -> bool:
        return self.load_text(sample_csv_text(), name=SAMPLE_FILENAME)

    def _accept(self, text: str, *, source: str) -> bool:
        result = load_questions_text(
            text,
            questions_per_round=self.questions_per_round,
            rng=self.rng,
        )
        self.result = result
        if not result.ok:
            self.questions = ()
            self.error = result.failure
            logger.info(
                "question file rejected",
                extra={"file": source, "row_errors": len(result.errors)},
            )
            return False
        self.questions = result.questions
        self.error = None
        logger.info(
            "question file loaded",
            extra={"file": source, "questions": len(result.questions)},
        )
        return True
