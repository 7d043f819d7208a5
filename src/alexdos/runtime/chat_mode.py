"""Single-participant chat log kept in the current user's home directory."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from ..errors import InvalidInputError, ShellError
from ..profiles import home_directory
from ..vfs import DirectoryNode, FileNode, write_file
from .console import ConsoleBuffer
from .modal_input import ModeFrame, ModeSignal

if TYPE_CHECKING:
    from .session_runner import SessionRunner

CHAT_PROMPT = ">> "
CHAT_EXIT_COMMAND = "EXIT"
_RULE = "-" * 30

Clock = Callable[[], datetime]


@dataclass
class ChatContext:
    user: str
    home: DirectoryNode
    log_name: str
    log: str = ""


def format_chat_line(user: str, message: str, when: datetime) -> str:
    return f"{user} ({when.strftime('%H:%M:%S')}): {message}\n"


class ChatSession:
    """Timestamp and echo each line; ``EXIT`` writes the log back to disk."""

    def __init__(
        self,
        context: ChatContext,
        *,
        console: ConsoleBuffer,
        persist: Callable[[], None],
        clock: Clock = datetime.now,
    ) -> None:
        self.context = context
        self._console = console
        self._persist = persist
        self._clock = clock

    def handle_line(self, line: str) -> ModeSignal:
        ctx = self.context
        if line.upper() == CHAT_EXIT_COMMAND:
            try:
                write_file(ctx.home, ctx.log_name, ctx.log)
            except ShellError as exc:
                self._console.error(f"Chat log not saved: {exc}")
            else:
                self._persist()
            self._console.echo("Chat session ended.")
            return ModeSignal.POP
        entry = format_chat_line(ctx.user, line, self._clock())
        self._console.echo(entry.rstrip("\n"))
        ctx.log += entry
        return ModeSignal.CONTINUE

    def frame(self) -> ModeFrame[ChatContext]:
        return ModeFrame(
            name="chat",
            line_handler=self.handle_line,
            prompt=CHAT_PROMPT,
            context=self.context,
        )


def open_chat(runner: "SessionRunner") -> ModeFrame[ChatContext]:
    """Replay the stored log and push a chat session for the current user."""

    state = runner.state
    home = home_directory(state)
    log_name = runner.config.chat_log_name
    existing = home.get(log_name)
    if isinstance(existing, DirectoryNode):
        raise InvalidInputError(f"'{log_name}' is a directory")
    log = existing.contents if isinstance(existing, FileNode) else ""

    console = runner.console
    console.echo("ALEXDOS Chat")
    console.echo("Type your message and press Enter.")
    console.echo(f"Type `{CHAT_EXIT_COMMAND}` to leave chat.")
    console.echo(_RULE)
    for entry in log.splitlines():
        console.echo(entry)
    console.echo(_RULE)

    session = ChatSession(
        ChatContext(user=state.current_user, home=home, log_name=log_name, log=log),
        console=console,
        persist=runner.save,
        clock=runner.clock,
    )
    frame = session.frame()
    runner.modes.push(frame)
    return frame


__all__ = [
    "CHAT_EXIT_COMMAND",
    "CHAT_PROMPT",
    "ChatContext",
    "ChatSession",
    "format_chat_line",
    "open_chat",
]
