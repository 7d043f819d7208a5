"""Pytest configuration to ensure the ALEXDOS package is importable."""
from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Callable

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
_root_str = str(_REPO_ROOT)
if _root_str not in sys.path:
    sys.path.insert(0, _root_str)

import sitecustomize  # noqa: F401  # Ensure src/ is on sys.path via sitecustomize hook.

from alexdos.runtime.session_runner import SessionRunner
from alexdos.runtime.state_repository import MemoryKeyValueStore, StateRepository

FIXED_NOW = datetime(2024, 5, 17, 9, 30, 5)


def _fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def make_runner(store: MemoryKeyValueStore) -> Callable[..., SessionRunner]:
    """Build runners sharing ``store`` so reloads observe earlier saves."""

    def factory(**kwargs: object) -> SessionRunner:
        kwargs.setdefault("repository", StateRepository(store))
        kwargs.setdefault("clock", _fixed_clock)
        kwargs.setdefault("show_banner", False)
        return SessionRunner(**kwargs)  # type: ignore[arg-type]

    return factory


@pytest.fixture()
def runner(make_runner: Callable[..., SessionRunner]) -> SessionRunner:
    return make_runner()
