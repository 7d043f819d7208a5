"""Stack of line handlers that temporarily replace command dispatch."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Generic, List, TypeVar

LOGGER = logging.getLogger(__name__)

ContextT = TypeVar("ContextT")


class ModeSignal(Enum):
    """Result returned by a frame's line handler."""

    CONTINUE = auto()
    POP = auto()


class ModeStackError(RuntimeError):
    """Raised when the stack is driven in an unsupported way."""


@dataclass
class ModeFrame(Generic[ContextT]):
    """One interactive mode: its handler, its prompt, and its private context."""

    name: str
    line_handler: Callable[[str], ModeSignal]
    prompt: str
    context: ContextT


class ModalInputStack:
    """LIFO stack of :class:`ModeFrame` objects.

    While the stack holds a frame, every raw input line goes to the top frame's
    handler. A frame leaves the stack only when its own handler returns
    :attr:`ModeSignal.POP`.
    """

    def __init__(self) -> None:
        self._frames: List[ModeFrame] = []
        self._dispatching = False

    @property
    def active(self) -> bool:
        return bool(self._frames)

    @property
    def depth(self) -> int:
        return len(self._frames)

    @property
    def top(self) -> ModeFrame | None:
        return self._frames[-1] if self._frames else None

    @property
    def prompt(self) -> str | None:
        """Prompt of the active frame, or ``None`` in normal mode."""

        frame = self.top
        return frame.prompt if frame is not None else None

    def push(self, frame: ModeFrame) -> None:
        self._frames.append(frame)
        LOGGER.debug("entered %s mode (depth %d)", frame.name, len(self._frames))

    def pop(self) -> ModeFrame:
        if not self._frames:
            raise ModeStackError("no mode is active")
        frame = self._frames.pop()
        LOGGER.debug("left %s mode (depth %d)", frame.name, len(self._frames))
        return frame

    def dispatch(self, line: str) -> bool:
        """Deliver ``line`` to the top frame; return ``False`` if none is active."""

        frame = self.top
        if frame is None:
            return False
        if self._dispatching:
            raise ModeStackError("input lines must be processed one at a time")
        self._dispatching = True
        try:
            signal = frame.line_handler(line)
        finally:
            self._dispatching = False
        if signal is ModeSignal.POP:
            self._remove(frame)
        return True

    def clear(self) -> None:
        """Discard every frame; used when the whole session restarts."""

        self._frames.clear()

    def _remove(self, frame: ModeFrame) -> None:
        # A handler may have pushed a nested mode before asking to leave.
        for index in range(len(self._frames) - 1, -1, -1):
            if self._frames[index] is frame:
                del self._frames[index]
                LOGGER.debug("left %s mode (depth %d)", frame.name, len(self._frames))
                return


__all__ = [
    "ModalInputStack",
    "ModeFrame",
    "ModeSignal",
    "ModeStackError",
]
