"""Session state shared by the file tree, profiles, and command handlers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from .vfs import DirectoryNode

DEFAULT_USER = "guest"
HOME_ROOT = "/home"


@dataclass(frozen=True)
class Profile:
    """Registered user identity and the absolute path of its home directory."""

    name: str
    home_path: str


@dataclass
class SessionState:
    """Mutable state owned by one console session.

    ``current_dir`` always names a directory inside ``tree`` and
    ``current_user`` always names an entry of ``profiles``; the operations in
    :mod:`alexdos.path_resolver` and :mod:`alexdos.profiles` preserve both.
    """

    tree: DirectoryNode = field(default_factory=DirectoryNode)
    profiles: Dict[str, Profile] = field(default_factory=dict)
    current_user: str = DEFAULT_USER
    current_dir: str = "/"

    @classmethod
    def default(cls) -> "SessionState":
        """Return a fresh state with ``/home/guest`` and the ``guest`` profile."""

        home_path = f"{HOME_ROOT}/{DEFAULT_USER}"
        tree = DirectoryNode(
            children={
                "home": DirectoryNode(children={DEFAULT_USER: DirectoryNode()}),
            }
        )
        return cls(
            tree=tree,
            profiles={DEFAULT_USER: Profile(name=DEFAULT_USER, home_path=home_path)},
            current_user=DEFAULT_USER,
            current_dir=home_path,
        )


__all__ = [
    "DEFAULT_USER",
    "HOME_ROOT",
    "Profile",
    "SessionState",
]
