"""Configuration loader for the trivia challenge game."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Mapping, MutableMapping, Optional

from trivia_challenge.core import config as core_config
from trivia_challenge.core import workspace as workspace_mod

from .engine import DEFAULT_QUESTIONS_PER_ROUND, DEFAULT_TIME_LIMIT_SECONDS

CONFIG_FILENAME = "trivia.toml"
LOG_FILENAME = "trivia-challenge.log"
CONFIG_ENV = "TRIVIA_CHALLENGE_CONFIG"
ENV_PREFIX = "TRIVIA_CHALLENGE_"
TEMPLATE_RESOURCE = "template.toml"

_DEFAULT_LOG_LEVEL = "INFO"


class ChallengeConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class ChallengeConfig:
    """Fully resolved settings for a game session."""

    questions_per_round: int = DEFAULT_QUESTIONS_PER_ROUND
    time_limit_seconds: int = DEFAULT_TIME_LIMIT_SECONDS
    questions_file: Optional[Path] = None
    log_level: str = _DEFAULT_LOG_LEVEL


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    questions_per_round: Optional[int] = None
    time_limit_seconds: Optional[int] = None
    questions_file: Optional[Path] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Result of loading configuration, including workspace context."""

    config: ChallengeConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise ChallengeConfigError(str(exc)) from exc
    default_path = layout.path_for("config") / CONFIG_FILENAME

    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=default_path,
    )

    table = _default_table()
    loaded_path: Optional[Path]
    if requested_path.exists():
        loaded_path = requested_path
        try:
            parsed = core_config.load_toml(requested_path)
            core_config.merge_defaults(table, parsed)
        except core_config.ConfigFileError as exc:
            raise ChallengeConfigError(str(exc)) from exc
    else:
        loaded_path = None
        if config_path is not None or _has_env_config(env_map):
            raise ChallengeConfigError(
                f"Config file not found: {requested_path}"
            )

    questions_per_round = _resolve_count(
        "round.questions_per_round",
        overrides.questions_per_round,
        _parse_env_int(env_map, "QUESTIONS_PER_ROUND"),
        table["round"]["questions_per_round"],
    )
    time_limit_seconds = _resolve_count(
        "round.time_limit_seconds",
        overrides.time_limit_seconds,
        _parse_env_int(env_map, "TIME_LIMIT_SECONDS"),
        table["round"]["time_limit_seconds"],
    )
    questions_file = _resolve_questions_file(
        _pick_first(
            overrides.questions_file,
            _parse_env_path(env_map, "QUESTIONS_FILE"),
            _coerce_optional_path(table["questions"]["file"]),
        ),
        layout=layout,
    )
    log_level = _resolve_log_level(
        overrides.log_level,
        _parse_env_string(env_map, "LOG_LEVEL"),
        table["logging"]["level"],
    )

    config = ChallengeConfig(
        questions_per_round=questions_per_round,
        time_limit_seconds=time_limit_seconds,
        questions_file=questions_file,
        log_level=log_level,
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def template_text() -> str:
    resource = resources.files(__package__).joinpath(TEMPLATE_RESOURCE)
    return resource.read_text(encoding="utf-8")


def write_config_template(path: Path, *, overwrite: bool = False) -> Path:
    """Write the packaged ``trivia.toml`` template to ``path``."""

    try:
        return core_config.write_template(
            path, template_text(), overwrite=overwrite
        )
    except core_config.ConfigFileError as exc:
        raise ChallengeConfigError(str(exc)) from exc


def _default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    return {
        "round": {
            "questions_per_round": DEFAULT_QUESTIONS_PER_ROUND,
            "time_limit_seconds": DEFAULT_TIME_LIMIT_SECONDS,
        },
        "questions": {"file": None},
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = env_map.get(CONFIG_ENV)
    if env_candidate and env_candidate.strip():
        return Path(env_candidate.strip()).expanduser()
    return default_path


def _has_env_config(env_map: Mapping[str, str]) -> bool:
    env_candidate = env_map.get(CONFIG_ENV)
    return bool(env_candidate and env_candidate.strip())


def _resolve_count(name: str, *candidates: object) -> int:
    value = _pick_first(*candidates)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ChallengeConfigError(f"{name} must be an integer.")
    if value <= 0:
        raise ChallengeConfigError(f"{name} must be greater than zero.")
    return value


def _coerce_optional_path(value: object) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        return Path(raw)
    raise ChallengeConfigError(
        "questions.file must be a string when provided."
    )


def _resolve_questions_file(
    candidate: object, *, layout: workspace_mod.WorkspaceLayout
) -> Optional[Path]:
    if candidate is None:
        return None
    path = Path(candidate).expanduser()  # type: ignore[arg-type]
    if not path.is_absolute():
        return (layout.home / path).resolve()
    return path


def _resolve_log_level(
    override: Optional[str],
    env_value: Optional[str],
    file_value: object,
) -> str:
    candidate = _pick_first(override, env_value, file_value)
    if not isinstance(candidate, str):
        raise ChallengeConfigError("logging.level must be a string.")
    level = candidate.strip()
    if not level:
        raise ChallengeConfigError(
            "logging.level must be a non-empty string."
        )
    return level.upper()


def _parse_env_int(env_map: Mapping[str, str], key: str) -> Optional[int]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ChallengeConfigError(
            f"{ENV_PREFIX}{key} must be an integer, got '{raw}'."
        ) from exc


def _parse_env_path(env_map: Mapping[str, str], key: str) -> Optional[Path]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    return Path(raw).expanduser()


def _parse_env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
