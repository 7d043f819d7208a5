"""Runtime modules exposed by the ALEXDOS package."""
from __future__ import annotations

from typing import Any

from . import calculator as _calculator
from . import chat_mode as _chat_mode
from . import cli as _cli
from . import commands as _commands
from . import console as _console
from . import editor_mode as _editor_mode
from . import modal_input as _modal_input
from . import quiz_mode as _quiz_mode
from . import session_runner as _session_runner
from . import state_repository as _state_repository

_modules = [
    _calculator,
    _chat_mode,
    _cli,
    _commands,
    _console,
    _editor_mode,
    _modal_input,
    _quiz_mode,
    _session_runner,
    _state_repository,
]

__all__: list[str] = []
_seen: set[str] = set()
for _module in _modules:
    for _name in _module.__all__:
        if _name not in _seen:
            _seen.add(_name)
            __all__.append(_name)
        globals()[_name] = getattr(_module, _name)


def __getattr__(name: str) -> Any:
    for _module in _modules:
        if hasattr(_module, name):
            return getattr(_module, name)
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(__all__)
