from .bank import (
    INVALID_TYPE_MESSAGE,
    READ_ERROR_MESSAGE,
    QuestionBankLoader,
    load_default_bank,
    sample_csv_text,
    write_sample_csv,
)
from .config import (
    ChallengeConfig,
    ChallengeConfigError,
    ConfigOverrides,
    load_config,
)
from .console import (
    ChallengeSessionResult,
    parse_console_command,
    run_console_challenge,
)
from .csv_table import parse_csv_table
from .engine import (
    QuestionState,
    RoundEngine,
    RoundRecord,
    RoundStateError,
    RoundStatus,
)
from .questions import Question, ValidationResult, validate_rows
from .scoreboard import SessionSummary, SessionTotals, percent
from .timer import PolledScheduler, Scheduler, TextualScheduler

__all__ = [
    "INVALID_TYPE_MESSAGE",
    "READ_ERROR_MESSAGE",
    "QuestionBankLoader",
    "load_default_bank",
    "sample_csv_text",
    "write_sample_csv",
    "ChallengeConfig",
    "ChallengeConfigError",
    "ConfigOverrides",
    "load_config",
    "ChallengeSessionResult",
    "parse_console_command",
    "run_console_challenge",
    "parse_csv_table",
    "QuestionState",
    "RoundEngine",
    "RoundRecord",
    "RoundStateError",
    "RoundStatus",
    "Question",
    "ValidationResult",
    "validate_rows",
    "SessionSummary",
    "SessionTotals",
    "percent",
    "PolledScheduler",
    "Scheduler",
    "TextualScheduler",
]
