"""Recoverable error taxonomy shared by the shell components."""
from __future__ import annotations


class ShellError(Exception):
    """Base class for conditions reported to the console and then ignored."""


class NotFoundError(ShellError, LookupError):
    """Raised when a path, file, or user does not exist."""


class AlreadyExistsError(ShellError):
    """Raised when a destination name or user is already taken."""


class DirectoryExpectedError(ShellError):
    """Raised when a path resolves to a file where a directory is required."""


class InvalidInputError(ShellError, ValueError):
    """Raised for missing arguments or malformed input."""


__all__ = [
    "AlreadyExistsError",
    "DirectoryExpectedError",
    "InvalidInputError",
    "NotFoundError",
    "ShellError",
]
