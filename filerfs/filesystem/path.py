"""
Module that translates file system paths into the addressing used by the filer.

The filer identifies an entry by the directory that contains it and its name within that
directory, so most operations need a path split into those two parts. All functions here
are pure string manipulation and never touch the filer.
"""

import posixpath
from typing import Tuple

ROOT = "/"


class InvalidPathError(ValueError):
    """Exception raised for a path that can't be addressed on the filer."""


def normalize(path: str) -> str:
    """
    Normalize an absolute path.

    Redundant separators and "." and ".." components are collapsed, and a trailing
    separator is removed. Relative paths are rejected because the filer has no notion
    of a working directory.
    """
    if not path.startswith(ROOT):
        raise InvalidPathError(f"path is not absolute: '{path}'")

    normalized = posixpath.normpath(path)

    # POSIX allows two leading slashes to have a special meaning, so normpath keeps
    # them. The filer doesn't.
    if normalized.startswith("//"):
        normalized = ROOT + normalized.lstrip("/")

    return normalized


def split(path: str) -> Tuple[str, str]:
    """
    Split an absolute path into its parent directory and leaf name.

    The root has no parent and raises InvalidPathError.
    """
    path = normalize(path)

    if path == ROOT:
        raise InvalidPathError("the root directory has no parent")

    return posixpath.split(path)


def join(directory: str, name: str) -> str:
    """Return the path of the entry with the given name inside a directory."""
    if not name or "/" in name:
        raise InvalidPathError(f"invalid entry name '{name}' in '{directory}'")

    return posixpath.join(normalize(directory), name)
