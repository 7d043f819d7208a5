"""Buffered console output consumed by the CLI loop and by tests."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import Deque, List


class LineStyle(Enum):
    """Rendering hint attached to each emitted line."""

    NORMAL = auto()
    ERROR = auto()


@dataclass(frozen=True)
class ConsoleLine:
    text: str
    style: LineStyle = LineStyle.NORMAL


class ConsoleBuffer:
    """Collect echoed lines until the host flushes them."""

    ERROR_PREFIX = "Error: "

    def __init__(self) -> None:
        self.output: Deque[ConsoleLine] = deque()
        self.clear_requests = 0

    def echo(self, text: object = "") -> None:
        self.output.append(ConsoleLine(str(text)))

    def error(self, text: object) -> None:
        self.output.append(ConsoleLine(str(text), LineStyle.ERROR))

    def clear(self) -> None:
        """Drop pending output, mirroring a screen clear."""

        self.output.clear()
        self.clear_requests += 1

    def drain(self) -> List[ConsoleLine]:
        lines: List[ConsoleLine] = []
        while self.output:
            lines.append(self.output.popleft())
        return lines

    def read_output(self) -> str:
        """Flush buffered lines and return them as newline-terminated text."""

        rendered: List[str] = []
        for line in self.drain():
            prefix = self.ERROR_PREFIX if line.style is LineStyle.ERROR else ""
            rendered.append(f"{prefix}{line.text}\n")
        return "".join(rendered)


__all__ = [
    "ConsoleBuffer",
    "ConsoleLine",
    "LineStyle",
]
