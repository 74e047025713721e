"""Shared testing helpers for the trivia_challenge test suite."""

from .clock import FakeClock  # noqa: F401
from .questions import (  # noqa: F401
    QuestionFiles,
    csv_text,
    make_bank,
    make_question,
)

__all__ = [
    "FakeClock",
    "QuestionFiles",
    "csv_text",
    "make_bank",
    "make_question",
]
