"""Load shell configuration overlays from TOML files."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Tuple

import tomllib

DEFAULT_STATE_PATH = Path("~/.alexdos/state.json")
DEFAULT_STATE_SLOT = "alexdos_state"
DEFAULT_CHAT_LOG_NAME = "chat.log"
DEFAULT_LOG_LEVEL = "WARNING"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ShellConfigError(ValueError):
    """Raised when a shell configuration file fails validation."""


@dataclass(frozen=True)
class QuizQuestion:
    """One quiz prompt and the answer accepted for it."""

    prompt: str
    answer: str


DEFAULT_QUIZ_QUESTIONS: Tuple[QuizQuestion, ...] = (
    QuizQuestion("What is the capital of France?", "paris"),
    QuizQuestion("Which planet is known as the Red Planet?", "mars"),
    QuizQuestion("What is 7 multiplied by 8?", "56"),
)


@dataclass(frozen=True)
class ShellConfig:
    """Host settings for a console session.

    ``state_path`` of ``None`` keeps the session in memory only.
    """

    state_path: Path | None = DEFAULT_STATE_PATH
    state_slot: str = DEFAULT_STATE_SLOT
    chat_log_name: str = DEFAULT_CHAT_LOG_NAME
    log_level: str = DEFAULT_LOG_LEVEL
    quiz_questions: Tuple[QuizQuestion, ...] = DEFAULT_QUIZ_QUESTIONS

    @classmethod
    def stub(cls) -> "ShellConfig":
        """Return the built-in defaults used when no file is supplied."""

        return cls()


def load_shell_config(config_path: Path) -> ShellConfig:
    """Merge the TOML file at ``config_path`` over :meth:`ShellConfig.stub`."""

    with config_path.open("rb") as stream:
        try:
            data = tomllib.load(stream)
        except tomllib.TOMLDecodeError as exc:
            raise ShellConfigError(f"invalid TOML in {config_path}: {exc}") from exc

    config = ShellConfig.stub()
    overrides: dict[str, Any] = {}
    overrides.update(_parse_storage_section(data, base=config_path.parent))
    overrides.update(_parse_chat_section(data))
    overrides.update(_parse_logging_section(data))
    overrides.update(_parse_quiz_section(data))
    return replace(config, **overrides)


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = data.get(name)
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ShellConfigError(f"[{name}] section must be a mapping")
    return raw


def _require_text(value: Any, label: str) -> str:
    if not isinstance(value, str):
        raise ShellConfigError(f"{label} must be a string")
    text = value.strip()
    if not text:
        raise ShellConfigError(f"{label} must not be empty")
    return text


def _parse_storage_section(data: Mapping[str, Any], *, base: Path) -> dict[str, Any]:
    storage = _section(data, "storage")
    overrides: dict[str, Any] = {}
    memory = storage.get("memory", False)
    if not isinstance(memory, bool):
        raise ShellConfigError("storage.memory must be a boolean")
    raw_path = storage.get("path")
    if raw_path is not None:
        path = Path(_require_text(raw_path, "storage.path")).expanduser()
        if not path.is_absolute():
            path = (base / path).resolve()
        overrides["state_path"] = path
    if memory:
        if raw_path is not None:
            raise ShellConfigError("storage.path and storage.memory are mutually exclusive")
        overrides["state_path"] = None
    raw_slot = storage.get("slot")
    if raw_slot is not None:
        overrides["state_slot"] = _require_text(raw_slot, "storage.slot")
    return overrides


def _parse_chat_section(data: Mapping[str, Any]) -> dict[str, Any]:
    chat = _section(data, "chat")
    raw_name = chat.get("log_name")
    if raw_name is None:
        return {}
    name = _require_text(raw_name, "chat.log_name")
    if "/" in name:
        raise ShellConfigError("chat.log_name must be a plain file name")
    return {"chat_log_name": name}


def _parse_logging_section(data: Mapping[str, Any]) -> dict[str, Any]:
    section = _section(data, "logging")
    raw_level = section.get("level")
    if raw_level is None:
        return {}
    level = _require_text(raw_level, "logging.level").upper()
    if level not in VALID_LOG_LEVELS:
        raise ShellConfigError(
            f"logging.level must be one of {', '.join(VALID_LOG_LEVELS)}"
        )
    return {"log_level": level}


def _parse_quiz_section(data: Mapping[str, Any]) -> dict[str, Any]:
    quiz = _section(data, "quiz")
    entries = quiz.get("questions")
    if entries is None:
        return {}
    if not isinstance(entries, list):
        raise ShellConfigError("[[quiz.questions]] must be an array of tables")
    questions = tuple(_parse_question(index, entry) for index, entry in enumerate(entries, start=1))
    if not questions:
        raise ShellConfigError("quiz configuration must define at least one question")
    return {"quiz_questions": questions}


def _parse_question(index: int, entry: Any) -> QuizQuestion:
    if not isinstance(entry, Mapping):
        raise ShellConfigError(
            f"quiz question #{index} must be a mapping, received {type(entry)!r}"
        )
    prompt = _require_text(entry.get("prompt"), f"quiz question #{index} prompt")
    answer = _require_text(entry.get("answer"), f"quiz question #{index} answer")
    return QuizQuestion(prompt=prompt, answer=answer)


__all__ = [
    "DEFAULT_CHAT_LOG_NAME",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_QUIZ_QUESTIONS",
    "DEFAULT_STATE_PATH",
    "DEFAULT_STATE_SLOT",
    "QuizQuestion",
    "ShellConfig",
    "ShellConfigError",
    "VALID_LOG_LEVELS",
    "load_shell_config",
]
