"""``trivia init``: prepare the workspace and show where files will go."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from trivia_challenge.challenge.config import CONFIG_FILENAME, LOG_FILENAME
from trivia_challenge.core import workspace as workspace_mod


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trivia init",
        description=(
            "Create the trivia-challenge workspace and report where the "
            "trivia.toml config and the JSON log file are kept."
        ),
    )
    parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Workspace root to prepare (defaults to TRIVIA_CHALLENGE_HOME "
            "or ~/.trivia-challenge)."
        ),
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Print nothing when the workspace is ready.",
    )
    return parser


def describe_workspace(layout: workspace_mod.WorkspaceLayout) -> list[str]:
    """Summarize ``layout`` as the lines ``trivia init`` prints."""

    state = "created" if layout.created.get("home") else "already present"
    config_path = layout.path_for("config") / CONFIG_FILENAME
    log_path = layout.path_for("logs") / LOG_FILENAME

    lines = [f"Workspace {state}: {layout.home}"]
    if config_path.is_file():
        lines.append(f"Config: {config_path}")
    else:
        lines.append(
            f"Config: {config_path} (missing; run `trivia config init` "
            "to write the defaults)"
        )
    lines.append(f"Log file: {log_path}")
    return lines


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(
        list(argv) if argv is not None else None
    )

    try:
        layout = workspace_mod.ensure_workspace(path=args.path)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    if not args.quiet:
        sys.stdout.write("\n".join(describe_workspace(layout)) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
