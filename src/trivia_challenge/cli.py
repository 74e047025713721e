"""Unified ``trivia`` command line entry point.

Subcommand modules are imported only when their command runs, so
``trivia list`` and ``trivia sample`` never pay for loading Textual.
"""

from __future__ import annotations

import inspect
import sys
from dataclasses import dataclass
from importlib import import_module, metadata
from typing import Callable, Mapping, Optional, Sequence

PACKAGE_NAME = "trivia-challenge"
_GAME_MODULE = "trivia_challenge.challenge._main"


@dataclass(frozen=True)
class CommandSpec:
    """A ``trivia`` subcommand and the function that implements it."""

    name: str
    summary: str
    module: str
    func: str = "main"
    is_tui: bool = False

    @property
    def prog(self) -> str:
        return f"trivia {self.name}"

    def run(self, argv: Sequence[str]) -> int:
        target = getattr(import_module(self.module), self.func)
        return _invoke_main(target, self.prog, argv)


COMMANDS: Mapping[str, CommandSpec] = {
    spec.name: spec
    for spec in (
        CommandSpec(
            "init",
            "Create the trivia-challenge workspace.",
            "trivia_challenge.workspace.cli",
        ),
        CommandSpec(
            "play",
            "Play timed rounds from a question CSV.",
            _GAME_MODULE,
            "play_main",
            is_tui=True,
        ),
        CommandSpec(
            "check",
            "Validate a question CSV and list row problems.",
            _GAME_MODULE,
            "check_main",
        ),
        CommandSpec(
            "sample",
            "Write the bundled sample question CSV.",
            _GAME_MODULE,
            "sample_main",
        ),
        CommandSpec(
            "config",
            "Write the default trivia.toml configuration.",
            _GAME_MODULE,
            "config_main",
        ),
    )
}


def format_command_table() -> str:
    width = max((len(name) for name in COMMANDS), default=0)
    rows = ["Available commands:"]
    for spec in COMMANDS.values():
        marker = " (TUI)" if spec.is_tui else ""
        rows.append(f"  {spec.name:<{width}}  {spec.summary}{marker}")
    return "\n".join(rows)


def format_usage() -> str:
    return "\n".join(
        [
            "Usage: trivia <command> [args...]",
            "Run `trivia list` for commands or `trivia help <name>` for "
            "details.",
            "",
            format_command_table(),
        ]
    )


def _out(text: str) -> None:
    sys.stdout.write(text + "\n")


def _err(text: str) -> None:
    sys.stderr.write(text + "\n")


def _unknown(command: str) -> int:
    _err(f"Unknown command '{command}'.")
    _err(format_command_table())
    return 2


def _version() -> str:
    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return "unknown"


def _help(argv: Sequence[str]) -> int:
    if not argv:
        _out(format_usage())
        return 0
    spec = COMMANDS.get(argv[0])
    if spec is None:
        return _unknown(argv[0])
    _out(f"{spec.name}: {spec.summary}")
    _out("")
    return spec.run(["--help"])


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        _out(format_usage())
        return 2

    command, rest = args[0], args[1:]
    if command in ("-h", "--help"):
        _out(format_usage())
        return 0
    if command in ("-V", "--version", "version"):
        _out(_version())
        return 0
    if command == "list":
        _out(format_command_table())
        return 0
    if command == "help":
        return _help(rest)

    spec = COMMANDS.get(command)
    if spec is None:
        return _unknown(command)
    return spec.run(rest)


def _invoke_main(
    func: Callable[..., object], prog: str, argv: Sequence[str]
) -> int:
    """Call ``func`` with ``argv`` and turn its outcome into an exit code.

    ``sys.argv`` is swapped for the duration of the call so argparse
    reports ``prog`` in usage lines. Functions without a positional
    parameter are called bare and read ``sys.argv`` themselves.
    """

    args = list(argv)
    saved = sys.argv
    sys.argv = [prog, *args]
    try:
        result = func(args) if _takes_argv(func) else func()
    except SystemExit as exc:
        return _exit_code(exc)
    finally:
        sys.argv = saved
    return result if isinstance(result, int) else 0


def _takes_argv(func: Callable[..., object]) -> bool:
    try:
        parameters = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return False
    positional = (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
        inspect.Parameter.VAR_POSITIONAL,
    )
    return any(param.kind in positional for param in parameters)


def _exit_code(exc: SystemExit) -> int:
    if exc.code is None:
        return 0
    if isinstance(exc.code, int):
        return exc.code
    _err(str(exc.code))
    return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
