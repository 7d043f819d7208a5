"""Translate textual paths into nodes of a session's file tree.

Only a bare ``..`` is interpreted; relative paths such as ``../docs`` or
``./notes`` are appended verbatim and their ``..``/``.`` segments are looked up
as ordinary names, which normally fails with :class:`NotFoundError`.
"""
from __future__ import annotations

from typing import Iterable, List

from .errors import DirectoryExpectedError, InvalidInputError, NotFoundError
from .session_state import SessionState
from .vfs import DirectoryNode, Node, resolve

PARENT_DIR = ".."


def split_path(path: str) -> List[str]:
    """Return the non-empty ``/``-separated segments of ``path``."""

    return [segment for segment in path.split("/") if segment]


def canonical_path(segments: Iterable[str]) -> str:
    return "/" + "/".join(segments)


def normalize(current_dir: str, input_path: str) -> str:
    """Combine ``current_dir`` and ``input_path`` into an absolute path."""

    if not input_path:
        raise InvalidInputError("path must not be empty")
    if input_path == PARENT_DIR:
        segments = split_path(current_dir)
        if segments:
            segments.pop()
        return canonical_path(segments)
    if input_path.startswith("/"):
        return input_path
    separator = "" if current_dir.endswith("/") else "/"
    return f"{current_dir}{separator}{input_path}"


def resolve_node(state: SessionState, path: str) -> Node:
    """Return the node at absolute ``path`` in ``state.tree``."""

    return resolve(state.tree, split_path(path))


def resolve_directory(state: SessionState, path: str) -> DirectoryNode:
    """Return the directory at absolute ``path``.

    Raises :class:`NotFoundError` when nothing lives there and
    :class:`DirectoryExpectedError` when the path names a file.
    """

    try:
        node = resolve_node(state, path)
    except NotFoundError as exc:
        raise NotFoundError(f"Directory not found: {path}") from exc
    if not isinstance(node, DirectoryNode):
        raise DirectoryExpectedError(f"Not a directory: {path}")
    return node


def current_directory(state: SessionState) -> DirectoryNode:
    return resolve_directory(state, state.current_dir)


def change_directory(state: SessionState, input_path: str) -> str:
    """Move ``state.current_dir`` to ``input_path`` and return the new path."""

    target = normalize(state.current_dir, input_path)
    resolve_directory(state, target)
    state.current_dir = canonical_path(split_path(target))
    return state.current_dir


__all__ = [
    "PARENT_DIR",
    "canonical_path",
    "change_directory",
    "current_directory",
    "normalize",
    "resolve_directory",
    "resolve_node",
    "split_path",
]
