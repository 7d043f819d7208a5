"""Session runner that routes input lines to modes or shell commands."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from ..errors import ShellError
from ..session_state import SessionState
from ..shell_config import ShellConfig
from .commands import SYSTEM_NAME, SYSTEM_VERSION, CommandRegistry, build_default_registry
from .console import ConsoleBuffer
from .modal_input import ModalInputStack
from .state_repository import MemoryKeyValueStore, StateRepository

LOGGER = logging.getLogger(__name__)


def _memory_repository() -> StateRepository:
    return StateRepository(MemoryKeyValueStore())


@dataclass
class SessionRunner:
    """Own the session state and feed textual input through the dispatcher.

    Each call to :meth:`send_command` handles exactly one line: the active mode
    frame receives it when one is pushed, otherwise it is parsed as a command.
    """

    repository: StateRepository = field(default_factory=_memory_repository)
    config: ShellConfig = field(default_factory=ShellConfig.stub)
    registry: CommandRegistry = field(default_factory=build_default_registry)
    clock: Callable[[], datetime] = datetime.now
    rng: random.Random = field(default_factory=random.Random)
    show_banner: bool = True

    state: SessionState = field(init=False)
    console: ConsoleBuffer = field(init=False, default_factory=ConsoleBuffer)
    modes: ModalInputStack = field(init=False, default_factory=ModalInputStack)

    def __post_init__(self) -> None:
        self.state = self.repository.load()
        if self.show_banner:
            self._write_banner()

    # Public API ---------------------------------------------------------

    @property
    def prompt(self) -> str:
        """Prompt of the active mode, or the ``C:<dir>>`` shell prompt."""

        mode_prompt = self.modes.prompt
        if mode_prompt is not None:
            return mode_prompt
        return f"C:{self.state.current_dir}>"

    def send_command(self, line: str) -> None:
        """Process one raw input line."""

        try:
            if self.modes.dispatch(line):
                return
            self._run_command(line)
        except ShellError as exc:
            LOGGER.debug("command %r failed: %s", line, exc)
            self.console.error(exc)

    def read_output(self) -> str:
        return self.console.read_output()

    def save(self) -> None:
        self.repository.save(self.state)

    def reboot(self) -> None:
        """Drop modes and screen, then reload the last saved state."""

        self.modes.clear()
        self.console.clear()
        self.console.echo("Rebooting...")
        self.state = self.repository.load()
        self._write_banner()

    def reset(self) -> None:
        """Discard stored state and continue from the defaults."""

        self.modes.clear()
        self.state = self.repository.reset()
        LOGGER.info("session state reset to defaults")

    # Internal helpers -------------------------------------------------

    def _run_command(self, line: str) -> None:
        tokens = line.split()
        if not tokens:
            return
        name, args = tokens[0], tokens[1:]
        command = self.registry.get(name)
        if command is None:
            self.console.error(f"Command not found: {name}")
            return
        LOGGER.debug("dispatching %s %s", command.name, args)
        command.handler(self, args)

    def _write_banner(self) -> None:
        self.console.echo(f"{SYSTEM_NAME} Version {SYSTEM_VERSION}")
        self.console.echo("Type 'help' for a list of commands.")


__all__ = ["SessionRunner"]
