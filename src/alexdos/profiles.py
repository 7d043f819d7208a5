"""User profile registry and home-directory provisioning."""
from __future__ import annotations

from typing import List

from .errors import AlreadyExistsError, DirectoryExpectedError, InvalidInputError, NotFoundError
from .path_resolver import canonical_path, resolve_directory, split_path
from .session_state import HOME_ROOT, Profile, SessionState
from .vfs import DirectoryNode, create_child, validate_name


def create_user(state: SessionState, name: str) -> Profile:
    """Register ``name`` and create its empty home directory under ``/home``."""

    validate_name(name)
    if name in state.profiles:
        raise AlreadyExistsError(f"User '{name}' already exists.")
    try:
        home_root = resolve_directory(state, HOME_ROOT)
    except (NotFoundError, DirectoryExpectedError) as exc:
        raise RuntimeError(f"{HOME_ROOT} is missing from the file tree") from exc
    # A colliding directory name must leave the registry untouched.
    create_child(home_root, name, DirectoryNode())
    profile = Profile(name=name, home_path=f"{HOME_ROOT}/{name}")
    state.profiles[name] = profile
    return profile


def login(state: SessionState, name: str) -> Profile:
    """Switch the session to ``name`` and move into its home directory."""

    profile = state.profiles.get(name)
    if profile is None:
        raise NotFoundError(f"User '{name}' does not exist.")
    resolve_directory(state, profile.home_path)
    state.current_user = name
    state.current_dir = profile.home_path
    return profile


def list_users(state: SessionState) -> List[str]:
    return sorted(state.profiles)


def current_profile(state: SessionState) -> Profile:
    try:
        return state.profiles[state.current_user]
    except KeyError as exc:
        raise NotFoundError(f"User '{state.current_user}' does not exist.") from exc


def home_directory(state: SessionState) -> DirectoryNode:
    """Return the current user's home directory node."""

    return resolve_directory(state, current_profile(state).home_path)


def ensure_movable(state: SessionState, path: str) -> None:
    """Refuse ``path`` when it is ``/home`` or contains a registered home directory."""

    target = split_path(path)
    protected = [HOME_ROOT, *(profile.home_path for profile in state.profiles.values())]
    for home in protected:
        if split_path(home)[: len(target)] == target:
            raise InvalidInputError(
                f"Cannot move '{canonical_path(target)}': it holds a user's home directory."
            )


__all__ = [
    "create_user",
    "current_profile",
    "ensure_movable",
    "home_directory",
    "list_users",
    "login",
]
