"""Interactive command-line shell for an ALEXDOS session."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import IO, Sequence

from ..shell_config import VALID_LOG_LEVELS, ShellConfig, ShellConfigError, load_shell_config
from .session_runner import SessionRunner
from .state_repository import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    StateRepository,
)

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed arguments for the shell CLI."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a TOML file with storage, chat, logging and quiz settings",
    )
    parser.add_argument(
        "--state-path",
        type=Path,
        default=None,
        help="JSON file backing the persisted session (default: ~/.alexdos/state.json)",
    )
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Keep the session in memory only; nothing is written to disk",
    )
    parser.add_argument(
        "--slot",
        default=None,
        help="Storage slot holding the session state",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Discard stored state before the session starts",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=VALID_LOG_LEVELS,
        help="Logging verbosity (defaults to the configured level)",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ShellConfig:
    """Load the configured file and apply command-line overrides."""

    config_path: Path | None = getattr(args, "config", None)
    config = load_shell_config(config_path) if config_path is not None else ShellConfig.stub()
    overrides: dict[str, object] = {}
    if getattr(args, "state_path", None) is not None:
        overrides["state_path"] = args.state_path
    if getattr(args, "memory", False):
        overrides["state_path"] = None
    if getattr(args, "slot", None):
        overrides["state_slot"] = args.slot
    if getattr(args, "log_level", None):
        overrides["log_level"] = args.log_level
    return replace(config, **overrides) if overrides else config


def build_store(config: ShellConfig) -> KeyValueStore:
    if config.state_path is None:
        return MemoryKeyValueStore()
    return JsonFileKeyValueStore(config.state_path.expanduser())


def create_runner(args: argparse.Namespace, *, config: ShellConfig | None = None) -> SessionRunner:
    """Instantiate :class:`SessionRunner` according to ``args``."""

    if config is None:
        config = build_config(args)
    repository = StateRepository(build_store(config), slot=config.state_slot)
    if getattr(args, "reset", False):
        repository.reset()
    return SessionRunner(repository=repository, config=config)


def _write_and_flush(stream: IO[str], text: str) -> None:
    stream.write(text)
    stream.flush()


def drive_session(
    runner: SessionRunner,
    *,
    input_stream: IO[str] = sys.stdin,
    output_stream: IO[str] = sys.stdout,
) -> None:
    """Feed ``input_stream`` lines to ``runner`` until EOF."""

    while True:
        flushed = runner.read_output()
        if flushed:
            _write_and_flush(output_stream, flushed)
        _write_and_flush(output_stream, runner.prompt)

        try:
            raw_line = input_stream.readline()
        except KeyboardInterrupt:  # pragma: no cover - user interrupt
            _write_and_flush(output_stream, "\n")
            return

        if raw_line == "":  # EOF
            _write_and_flush(output_stream, "\n")
            return

        runner.send_command(raw_line.rstrip("\r\n"))


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the shell CLI."""

    args = parse_args(argv)
    if args.config is not None and not args.config.is_file():
        raise SystemExit(f"config file not found: {args.config}")
    try:
        config = build_config(args)
    except ShellConfigError as exc:
        raise SystemExit(f"invalid configuration: {exc}") from exc
    logging.basicConfig(level=getattr(logging, config.log_level))
    LOGGER.info("starting session (state path: %s)", config.state_path or "memory")
    runner = create_runner(args, config=config)
    drive_session(runner)
    return 0


if __name__ == "__main__":  # pragma: no cover - exercised via python -m
    raise SystemExit(main())


__all__ = [
    "build_config",
    "build_store",
    "create_runner",
    "drive_session",
    "main",
    "parse_args",
]
