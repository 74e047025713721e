"""Shared helpers for trivia-challenge commands."""

from __future__ import annotations

from .config import (
    ConfigFileError,
    load_toml,
    merge_defaults,
    write_template,
)
from .logging import JsonLogFormatter, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "ConfigFileError",
    "load_toml",
    "merge_defaults",
    "write_template",
    "JsonLogFormatter",
    "configure_logger",
    "WORKSPACE_ENV",
    "WorkspaceError",
    "WorkspaceLayout",
    "ensure_workspace",
]
