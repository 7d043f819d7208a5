"""Persistence helpers for :class:`alexdos.session_state.SessionState`.

The whole session is stored as one JSON document under a single slot of a
host key-value store. The loader recognises version ``1`` (the format written
by :meth:`StateRepository.save`) and unversioned legacy dumps, including the
form whose ``files`` object wraps the root under a ``"/"`` key. Missing
profile home directories are recreated on load.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, MutableMapping, Protocol

from ..errors import ShellError
from ..path_resolver import canonical_path, resolve_directory, split_path
from ..session_state import DEFAULT_USER, HOME_ROOT, Profile, SessionState
from ..shell_config import DEFAULT_STATE_SLOT
from ..vfs import DirectoryNode, FileNode, Node, NodeKind, validate_name

LOGGER = logging.getLogger(__name__)

STATE_VERSION = 1


class KeyValueStore(Protocol):
    """String-keyed, string-valued storage provided by the host."""

    def get_item(self, key: str) -> str | None:
        """Return the value stored under ``key`` or ``None``."""

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    def remove_item(self, key: str) -> None:
        """Forget ``key``; missing keys are ignored."""


class MemoryKeyValueStore:
    """Dictionary-backed store for embedding and tests."""

    def __init__(self, items: Mapping[str, str] | None = None) -> None:
        self._items: MutableMapping[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._items)


class JsonFileKeyValueStore:
    """Store slots as a single JSON object on disk.

    Writes go through a temporary file in the same directory followed by
    :func:`os.replace`, so readers never observe a half-written document.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def get_item(self, key: str) -> str | None:
        value = self._read_items().get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise TypeError(f"slot {key!r} must hold a string value")
        return value

    def set_item(self, key: str, value: str) -> None:
        items = self._read_items_for_update()
        items[key] = value
        self._write_items(items)

    def remove_item(self, key: str) -> None:
        if not self.path.exists():
            return
        items = self._read_items_for_update()
        if key not in items:
            return
        del items[key]
        self._write_items(items)

    # Internal helpers -------------------------------------------------

    def _read_items(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        payload = json.loads(text)
        if not isinstance(payload, Mapping):
            raise TypeError("key-value store payload must be a mapping")
        return dict(payload)

    def _read_items_for_update(self) -> Dict[str, Any]:
        try:
            return self._read_items()
        except (TypeError, ValueError) as exc:
            LOGGER.warning("discarding unreadable key-value store %s: %s", self.path, exc)
            return {}

    def _write_items(self, items: Mapping[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                dir=str(self.path.parent),
                prefix=self.path.name,
                suffix=".tmp",
                encoding="utf-8",
                delete=False,
            ) as stream:
                temp_path = Path(stream.name)
                json.dump(items, stream, sort_keys=True, separators=(",", ":"))
                stream.write("\n")
                stream.flush()
                os.fsync(stream.fileno())
            os.replace(temp_path, self.path)
        except Exception:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink()
            raise


def node_to_dict(node: Node) -> dict[str, Any]:
    """Serialise ``node`` (recursively) to a JSON-friendly mapping."""

    if isinstance(node, FileNode):
        return {"type": NodeKind.FILE.value, "contents": node.contents}
    return {
        "type": NodeKind.DIRECTORY.value,
        "contents": children_to_dict(node),
    }


def children_to_dict(directory: DirectoryNode) -> dict[str, Any]:
    return {name: node_to_dict(child) for name, child in directory.children.items()}


def node_from_dict(payload: Mapping[str, Any] | Any) -> Node:
    """Reconstruct a :data:`Node` from ``payload``."""

    if not isinstance(payload, Mapping):
        raise TypeError("node payload must be a mapping")
    try:
        kind = NodeKind(payload.get("type"))
    except ValueError as exc:
        raise ValueError(f"unknown node type: {payload.get('type')!r}") from exc
    contents = payload.get("contents")
    if kind is NodeKind.FILE:
        if contents is None:
            contents = ""
        if not isinstance(contents, str):
            raise TypeError("file contents must be a string")
        return FileNode(contents=contents)
    return children_from_dict(contents if contents is not None else {})


def children_from_dict(payload: Mapping[str, Any] | Any) -> DirectoryNode:
    if not isinstance(payload, Mapping):
        raise TypeError("directory contents must be a mapping")
    directory = DirectoryNode()
    for name, child in payload.items():
        directory.children[validate_name(str(name))] = node_from_dict(child)
    return directory


def _root_from_files(files: Any) -> DirectoryNode:
    if isinstance(files, Mapping) and set(files) == {"/"}:
        wrapped = node_from_dict(files["/"])
        if not isinstance(wrapped, DirectoryNode):
            raise TypeError("legacy root entry must be a directory")
        return wrapped
    return children_from_dict(files)


def _profiles_from_dict(payload: Any) -> Dict[str, Profile]:
    if not isinstance(payload, Mapping):
        raise TypeError("profiles payload must be a mapping")
    profiles: Dict[str, Profile] = {}
    for name, entry in payload.items():
        if not isinstance(entry, Mapping):
            raise TypeError(f"profile {name!r} must be a mapping")
        home = entry.get("home")
        if not isinstance(home, str) or not home.startswith("/"):
            raise ValueError(f"profile {name!r} requires an absolute home path")
        profiles[validate_name(str(name))] = Profile(name=str(name), home_path=home)
    if not profiles:
        raise ValueError("at least one profile is required")
    return profiles


def _provision_directory(root: DirectoryNode, path: str) -> None:
    current = root
    for segment in split_path(path):
        child = current.children.get(segment)
        if child is None:
            LOGGER.warning("creating missing home directory segment %r of %s", segment, path)
            child = current.children[segment] = DirectoryNode()
        if not isinstance(child, DirectoryNode):
            return
        current = child


def state_to_dict(state: SessionState) -> dict[str, Any]:
    """Serialise ``state`` using the version ``1`` schema."""

    return {
        "version": STATE_VERSION,
        "files": children_to_dict(state.tree),
        "profiles": {
            name: {"home": profile.home_path}
            for name, profile in state.profiles.items()
        },
        "currentDir": state.current_dir,
        "currentUser": state.current_user,
    }


def state_from_dict(payload: Mapping[str, Any] | Any) -> SessionState:
    """Reconstruct and validate a :class:`SessionState` from ``payload``."""

    if not isinstance(payload, Mapping):
        raise TypeError("session state payload must be a mapping")

    version = payload.get("version")
    if version is not None:
        if not isinstance(version, int):
            raise ValueError("session state version must be an integer")
        if version != STATE_VERSION:
            raise ValueError(f"unsupported session state version: {version}")

    state = SessionState(
        tree=_root_from_files(payload.get("files", {})),
        profiles=_profiles_from_dict(payload.get("profiles")),
    )
    # Legacy dumps never seeded /home, and older saves may have lost a home.
    for path in (HOME_ROOT, *(profile.home_path for profile in state.profiles.values())):
        _provision_directory(state.tree, path)
        resolve_directory(state, path)

    current_user = payload.get("currentUser")
    if not isinstance(current_user, str) or current_user not in state.profiles:
        current_user = DEFAULT_USER if DEFAULT_USER in state.profiles else min(state.profiles)
    state.current_user = current_user

    home_path = state.profiles[current_user].home_path
    current_dir = payload.get("currentDir")
    if not isinstance(current_dir, str) or not current_dir.startswith("/"):
        current_dir = home_path
    try:
        resolve_directory(state, current_dir)
    except ShellError as exc:
        LOGGER.warning("stored directory %r is unusable (%s); using %s", current_dir, exc, home_path)
        current_dir = home_path
    state.current_dir = canonical_path(split_path(current_dir))
    return state


class StateRepository:
    """Load, save, and reset session state in one key-value store slot."""

    def __init__(self, store: KeyValueStore, slot: str = DEFAULT_STATE_SLOT) -> None:
        self.store = store
        self.slot = slot

    def load(self) -> SessionState:
        """Return the stored state, or defaults when it is absent or unusable."""

        try:
            text = self.store.get_item(self.slot)
            if text is None:
                LOGGER.debug("slot %s is empty; using default state", self.slot)
                return SessionState.default()
            return state_from_dict(json.loads(text))
        except (ShellError, LookupError, TypeError, ValueError) as exc:
            LOGGER.warning(
                "failed to load state from slot %s (%s); initialising new state",
                self.slot,
                exc,
            )
            return SessionState.default()

    def save(self, state: SessionState) -> None:
        """Overwrite the slot with ``state``."""

        payload = json.dumps(state_to_dict(state), sort_keys=True, separators=(",", ":"))
        self.store.set_item(self.slot, payload)
        LOGGER.debug("saved state to slot %s (%d bytes)", self.slot, len(payload))

    def reset(self) -> SessionState:
        """Drop the stored state and return freshly loaded defaults."""

        self.store.remove_item(self.slot)
        LOGGER.debug("removed slot %s", self.slot)
        return self.load()


__all__ = [
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "STATE_VERSION",
    "StateRepository",
    "node_from_dict",
    "node_to_dict",
    "state_from_dict",
    "state_to_dict",
]
