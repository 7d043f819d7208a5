"""Public ALEXDOS API: the session runner and its persistent state."""
from __future__ import annotations

from . import errors as _errors
from .runtime.commands import SYSTEM_NAME, SYSTEM_VERSION, CommandRegistry
from .runtime.session_runner import SessionRunner
from .runtime.state_repository import (
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
    StateRepository,
)
from .session_state import Profile, SessionState
from .shell_config import ShellConfig, load_shell_config

__all__ = [
    "CommandRegistry",
    "JsonFileKeyValueStore",
    "MemoryKeyValueStore",
    "Profile",
    "SYSTEM_NAME",
    "SYSTEM_VERSION",
    "SessionRunner",
    "SessionState",
    "ShellConfig",
    "StateRepository",
    "load_shell_config",
]

for _name in _errors.__all__:  # pragma: no branch - data-driven
    globals()[_name] = getattr(_errors, _name)
    if _name not in __all__:
        __all__.append(_name)
