from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

ROOT = TESTS_DIR.parent
for extra in (ROOT / "src",):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import FakeClock, QuestionFiles  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_workspace(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point every test at a private workspace and clear config env vars."""

    for key in list(os.environ):
        if key.startswith("TRIVIA_CHALLENGE_"):
            monkeypatch.delenv(key, raising=False)
    home = tmp_path / "workspace-home"
    monkeypatch.setenv("TRIVIA_CHALLENGE_HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def _reset_trivia_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("trivia_challenge")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


@pytest.fixture
def workspace_home(_isolated_workspace: Path) -> Path:
    return _isolated_workspace


@pytest.fixture
def question_files(tmp_path: Path) -> QuestionFiles:
    return QuestionFiles(tmp_path / "questions")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
