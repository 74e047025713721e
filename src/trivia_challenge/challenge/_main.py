"""Command handlers behind the ``trivia`` game subcommands."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from trivia_challenge.core import workspace as workspace_mod
from trivia_challenge.core.logging import configure_logger
from trivia_challenge.core.workspace import WorkspaceError

from .bank import SAMPLE_FILENAME, QuestionBankLoader, write_sample_csv
from .config import (
    CONFIG_FILENAME,
    LOG_FILENAME,
    ChallengeConfigError,
    ConfigOverrides,
    LoadResult,
    load_config,
    write_config_template,
)
from .console import (
    InputProvider,
    render_session_summary,
    run_console_challenge,
)

LOGGER_NAME = "trivia_challenge"


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help=(
            "Path to a TOML config file (defaults to the workspace config "
            "directory)."
        ),
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root used for config and log files.",
    )
    parser.add_argument(
        "--questions-per-round",
        type=int,
        help="Questions drawn for each round (defaults to 4).",
    )
    parser.add_argument(
        "--log-level",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Echo log records to stderr.",
    )


def _build_play_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trivia play",
        description=(
            "Play timed rounds of multiple-choice questions from a CSV file "
            "or the bundled sample questions."
        ),
        epilog=(
            "CSV layout: question,correct_answer,wrong1,wrong2,wrong3 with "
            "a header row."
        ),
    )
    parser.add_argument(
        "csv",
        nargs="?",
        type=Path,
        help="Question file to load (defaults to the bundled sample).",
    )
    parser.add_argument(
        "--time-limit",
        type=int,
        help="Seconds allowed for each round (defaults to 90).",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Use the line-based Rich console instead of the Textual UI.",
    )
    _add_config_arguments(parser)
    return parser


def _build_check_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trivia check",
        description="Validate a question CSV and report row problems.",
    )
    parser.add_argument("csv", type=Path, help="Question file to validate.")
    _add_config_arguments(parser)
    return parser


def _build_sample_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trivia sample",
        description="Write the bundled sample question CSV.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        help=f"Destination file (defaults to ./{SAMPLE_FILENAME}).",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if it already exists.",
    )
    return parser


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trivia config",
        description="Manage the trivia.toml configuration file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Write the default trivia.toml template.",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Destination for the config TOML (defaults to the workspace "
            "config directory)."
        ),
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help=(
            "Workspace root override used when resolving the default config "
            "path."
        ),
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if a config already exists.",
    )
    return parser


def _load(
    parser: argparse.ArgumentParser,
    args: argparse.Namespace,
) -> tuple[LoadResult, logging.Logger, Path]:
    csv_path = getattr(args, "csv", None)
    if csv_path is not None:
        csv_path = csv_path.expanduser().resolve()
    overrides = ConfigOverrides(
        questions_per_round=args.questions_per_round,
        time_limit_seconds=getattr(args, "time_limit", None),
        questions_file=csv_path,
        log_level=args.log_level,
    )
    try:
        load_result = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except ChallengeConfigError as exc:
        parser.error(str(exc))

    logger, log_path = configure_logger(
        LOGGER_NAME,
        log_dir=load_result.layout.path_for("logs"),
        level=load_result.config.log_level,
        verbose=args.verbose,
        filename=LOG_FILENAME,
    )
    return load_result, logger, log_path


def play_main(
    argv: Sequence[str] | None = None,
    *,
    console: Optional[Console] = None,
    input_provider: Optional[InputProvider] = None,
) -> int:
    parser = _build_play_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    console = console or Console()

    load_result, logger, log_path = _load(parser, args)
    config = load_result.config
    logger.debug("play command invoked", extra={"log_file": log_path})

    loader = QuestionBankLoader(questions_per_round=config.questions_per_round)
    if config.questions_file is not None:
        loaded = loader.load_file(config.questions_file)
    else:
        loaded = loader.load_default()
    if not loaded:
        console.print(
            Panel(
                loader.error or "No questions loaded.",
                title=str(loader.file_name or "Question file"),
                border_style="red",
            )
        )
        return 1

    if args.console:
        provider = input_provider or (lambda: console.input("[bold]> [/]"))
        result = run_console_challenge(
            loader.questions,
            console,
            provider,
            questions_per_round=config.questions_per_round,
            time_limit_seconds=config.time_limit_seconds,
        )
        return 0 if result.exit_action != "empty" else 1

    # Imported lazily so console-only runs never load Textual.
    from .view.app import ChallengeApp

    app = ChallengeApp(
        loader.questions,
        questions_per_round=config.questions_per_round,
        time_limit_seconds=config.time_limit_seconds,
    )
    summary = app.run()
    if summary is None:
        summary = app.summary or app.engine.session.snapshot()
    rounds = app.rounds or tuple(app.engine.session.rounds)
    render_session_summary(console, summary, rounds)
    return 0


def check_main(
    argv: Sequence[str] | None = None,
    *,
    console: Optional[Console] = None,
) -> int:
    parser = _build_check_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    console = console or Console()

    load_result, _logger, _log_path = _load(parser, args)
    config = load_result.config

    loader = QuestionBankLoader(questions_per_round=config.questions_per_round)
    loaded = loader.load_file(args.csv)
    result = loader.result

    if result is not None and result.errors:
        table = Table(title="Row problems", box=box.SIMPLE, expand=False)
        table.add_column("Problem", overflow="fold")
        for message in result.errors:
            table.add_row(message)
        console.print(table)

    if not loaded:
        console.print(
            Panel(
                loader.error or "No questions loaded.",
                title=args.csv.name,
                border_style="red",
            )
        )
        return 1

    skipped = len(result.errors) if result is not None else 0
    console.print(
        Panel(
            f"{loader.question_count} valid question(s); "
            f"{skipped} row(s) skipped. "
            f"Rounds draw {config.questions_per_round} question(s).",
            title=args.csv.name,
            border_style="green",
        )
    )
    return 0


def sample_main(argv: Sequence[str] | None = None) -> int:
    parser = _build_sample_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    target = args.path or Path.cwd() / SAMPLE_FILENAME
    try:
        written = write_sample_csv(target.expanduser(), overwrite=args.force)
    except FileExistsError as exc:
        sys.stderr.write(f"{exc}. Use --force to replace it.\n")
        return 1
    sys.stdout.write(f"Wrote sample questions to {written}\n")
    return 0


def config_main(argv: Sequence[str] | None = None) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        target = _resolve_config_target(args)
    except WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    try:
        written = write_config_template(target, overwrite=args.force)
    except ChallengeConfigError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote trivia config to {written}\n")
    return 0


def _resolve_config_target(args: argparse.Namespace) -> Path:
    if args.path is not None:
        candidate = args.path.expanduser()
        if not candidate.is_absolute():
            candidate = (Path.cwd() / candidate).resolve()
        return candidate

    layout = workspace_mod.ensure_workspace(path=args.workspace)
    return layout.path_for("config") / CONFIG_FILENAME


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(play_main())
