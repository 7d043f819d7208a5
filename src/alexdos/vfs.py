"""In-memory directory tree backing the virtual file system."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Sequence, Tuple, Union

from .errors import AlreadyExistsError, InvalidInputError, NotFoundError


class NodeKind(Enum):
    """Discriminant for :data:`Node`; values match the persisted ``type`` tag."""

    DIRECTORY = "dir"
    FILE = "file"


@dataclass
class FileNode:
    """Leaf node holding opaque text content."""

    contents: str = ""

    @property
    def kind(self) -> NodeKind:
        return NodeKind.FILE


@dataclass
class DirectoryNode:
    """Interior node mapping child names to nodes."""

    children: Dict[str, "Node"] = field(default_factory=dict)

    @property
    def kind(self) -> NodeKind:
        return NodeKind.DIRECTORY

    def __contains__(self, name: object) -> bool:
        return name in self.children

    def __len__(self) -> int:
        return len(self.children)

    def get(self, name: str) -> "Node | None":
        return self.children.get(name)


Node = Union[DirectoryNode, FileNode]


def validate_name(name: str) -> str:
    """Return ``name`` if it is usable as a directory entry key."""

    if not isinstance(name, str) or not name:
        raise InvalidInputError("names must not be empty")
    if "/" in name:
        raise InvalidInputError(f"name '{name}' must not contain '/'")
    return name


def resolve(root: DirectoryNode, segments: Sequence[str]) -> Node:
    """Walk ``segments`` from ``root`` and return the node they address."""

    current: Node = root
    for segment in segments:
        if not isinstance(current, DirectoryNode):
            raise NotFoundError(f"not a directory on the way to '{segment}'")
        child = current.children.get(segment)
        if child is None:
            raise NotFoundError(f"no such entry: {segment}")
        current = child
    return current


def create_child(parent: DirectoryNode, name: str, node: Node) -> Node:
    """Insert ``node`` under ``name``; existing entries are never replaced."""

    validate_name(name)
    if name in parent.children:
        raise AlreadyExistsError(f"'{name}' already exists")
    parent.children[name] = node
    return node


def rename_or_move(parent: DirectoryNode, old_name: str, new_name: str) -> Node:
    """Re-key ``old_name`` as ``new_name`` within ``parent``.

    Both names are immediate children of ``parent``; ``new_name`` is a flat key,
    not a path, so entries never leave their directory.
    """

    if old_name not in parent.children:
        raise NotFoundError(f"Source file or directory not found: {old_name}")
    validate_name(new_name)
    if new_name in parent.children:
        raise AlreadyExistsError(f"Destination already exists: {new_name}")
    node = parent.children.pop(old_name)
    parent.children[new_name] = node
    return node


def remove_child(parent: DirectoryNode, name: str) -> FileNode:
    """Delete the file ``name``; directories are not removable."""

    node = parent.children.get(name)
    if not isinstance(node, FileNode):
        raise NotFoundError(f"File not found: {name}")
    del parent.children[name]
    return node


def write_file(parent: DirectoryNode, name: str, contents: str) -> FileNode:
    """Create or overwrite the file ``name`` with ``contents``."""

    validate_name(name)
    existing = parent.children.get(name)
    if isinstance(existing, DirectoryNode):
        raise InvalidInputError(f"'{name}' is a directory")
    node = FileNode(contents=contents)
    parent.children[name] = node
    return node


def read_file(parent: DirectoryNode, name: str) -> str:
    node = parent.children.get(name)
    if not isinstance(node, FileNode):
        raise NotFoundError(f"File not found: {name}")
    return node.contents


def list_children(
    directory: DirectoryNode, include_hidden: bool = False
) -> Iterator[Tuple[str, NodeKind]]:
    """Yield ``(name, kind)`` for the immediate children of ``directory``."""

    for name in sorted(directory.children):
        if name.startswith(".") and not include_hidden:
            continue
        yield name, directory.children[name].kind


__all__ = [
    "DirectoryNode",
    "FileNode",
    "Node",
    "NodeKind",
    "create_child",
    "list_children",
    "read_file",
    "remove_child",
    "rename_or_move",
    "resolve",
    "validate_name",
    "write_file",
]
