from __future__ import annotations

import json
import logging
from pathlib import Path

from trivia_challenge.core import logging as core_logging


def _close(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_configure_logger_writes_json(tmp_path):
    log_dir = tmp_path / "logs"
    logger, log_path = core_logging.configure_logger(
        "trivia_challenge.test",
        log_dir=log_dir,
        level="INFO",
        filename="test.log",
    )

    logger.info("round started", extra={"round": 2, "file": Path("q.csv")})
    logger.debug("not written at INFO")

    class _Helper:
        def __repr__(self):  # noqa: D401
            return "helper"

    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception(
            "with error",
            extra={"items": [Path(log_dir), 1], "obj": _Helper()},
        )
    for handler in logger.handlers:
        handler.flush()

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["message"] == "round started"
    assert first["level"] == "INFO"
    assert first["extra"] == {"round": 2, "file": "q.csv"}

    last = json.loads(lines[-1])
    assert "ValueError: boom" in last["exception"]
    assert last["extra"]["obj"] == "helper"
    assert last["extra"]["items"][1] == 1

    _close(logger)


def test_configure_logger_reuses_file_handler(tmp_path):
    first_logger, first_path = core_logging.configure_logger(
        "trivia_challenge.test_reuse", log_dir=tmp_path / "a"
    )
    second_logger, second_path = core_logging.configure_logger(
        "trivia_challenge.test_reuse", log_dir=tmp_path / "b"
    )

    assert first_logger is second_logger
    assert first_path == second_path
    assert len(second_logger.handlers) == 1
    assert first_path.name == "test_reuse.log"

    _close(second_logger)


def test_verbose_adds_and_removes_console_handler(tmp_path):
    name = "trivia_challenge.test_verbose"
    logger, _ = core_logging.configure_logger(
        name, log_dir=tmp_path, verbose=True
    )
    consoles = [
        handler
        for handler in logger.handlers
        if getattr(handler, "_trivia_console", False)
    ]
    assert len(consoles) == 1

    core_logging.configure_logger(name, log_dir=tmp_path, verbose=False)

    assert not any(
        getattr(handler, "_trivia_console", False)
        for handler in logger.handlers
    )
    _close(logger)


def test_configure_logger_fallback_directory(tmp_path, monkeypatch):
    target = tmp_path / "blocked"
    original_mkdir = Path.mkdir

    def fake_mkdir(self, *args, **kwargs):  # noqa: ANN001
        if self == target:
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fake_mkdir)
    monkeypatch.setattr(
        core_logging, "_fallback_dir", lambda: tmp_path / "fallback"
    )

    logger, log_path = core_logging.configure_logger(
        "trivia_challenge.test_blocked",
        log_dir=target,
        filename="blocked.log",
    )

    assert log_path.parent == tmp_path / "fallback"
    assert log_path.exists()
    _close(logger)


def test_unknown_level_defaults_to_info(tmp_path):
    logger, log_path = core_logging.configure_logger(
        "trivia_challenge.test_level",
        log_dir=tmp_path,
        level="chatty",
    )

    logger.debug("hidden")
    logger.info("shown")
    for handler in logger.handlers:
        handler.flush()

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert [json.loads(line)["message"] for line in lines] == ["shown"]
    _close(logger)
