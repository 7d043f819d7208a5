"""Line editor mode that collects text into a file of the current directory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from ..errors import InvalidInputError
from ..path_resolver import current_directory
from ..vfs import DirectoryNode, FileNode, validate_name, write_file
from .console import ConsoleBuffer
from .modal_input import ModeFrame, ModeSignal

if TYPE_CHECKING:
    from .session_runner import SessionRunner

EDITOR_PROMPT = "EDITOR> "
SAVE_COMMAND = "SAVE"
EXIT_COMMAND = "EXIT"


@dataclass
class EditorContext:
    """Buffer under construction and the directory it will be saved into."""

    file_name: str
    parent: DirectoryNode
    buffer: str = ""


class LineEditor:
    """Append each input line to the buffer until ``SAVE`` or ``EXIT``."""

    def __init__(
        self,
        context: EditorContext,
        *,
        console: ConsoleBuffer,
        persist: Callable[[], None],
    ) -> None:
        self.context = context
        self._console = console
        self._persist = persist

    def handle_line(self, line: str) -> ModeSignal:
        command = line.upper()
        if command == SAVE_COMMAND:
            ctx = self.context
            write_file(ctx.parent, ctx.file_name, ctx.buffer)
            self._persist()
            self._console.echo(f"File '{ctx.file_name}' saved.")
            return ModeSignal.POP
        if command == EXIT_COMMAND:
            self._console.echo(f"Changes to '{self.context.file_name}' discarded.")
            return ModeSignal.POP
        self.context.buffer += line + "\n"
        return ModeSignal.CONTINUE

    def frame(self) -> ModeFrame[EditorContext]:
        return ModeFrame(
            name="editor",
            line_handler=self.handle_line,
            prompt=EDITOR_PROMPT,
            context=self.context,
        )


def open_editor(runner: "SessionRunner", file_name: str) -> ModeFrame[EditorContext]:
    """Push an editor for ``file_name`` in the current directory."""

    validate_name(file_name)
    parent = current_directory(runner.state)
    existing = parent.get(file_name)
    if isinstance(existing, DirectoryNode):
        raise InvalidInputError(f"'{file_name}' is a directory")
    if isinstance(existing, FileNode):
        buffer = existing.contents
        runner.console.echo(
            f"Loading '{file_name}'. Type '{SAVE_COMMAND}' to save, "
            f"'{EXIT_COMMAND}' to quit without saving."
        )
    else:
        buffer = ""
        runner.console.echo(
            f"Creating new file '{file_name}'. Type '{SAVE_COMMAND}' to save, "
            f"'{EXIT_COMMAND}' to quit."
        )
    editor = LineEditor(
        EditorContext(file_name=file_name, parent=parent, buffer=buffer),
        console=runner.console,
        persist=runner.save,
    )
    frame = editor.frame()
    runner.modes.push(frame)
    return frame


__all__ = [
    "EDITOR_PROMPT",
    "EXIT_COMMAND",
    "EditorContext",
    "LineEditor",
    "SAVE_COMMAND",
    "open_editor",
]
