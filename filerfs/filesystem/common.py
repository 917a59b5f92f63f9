"""Data structures used by multiple file system components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import auto, Enum
import errno
import getpass
import grp
import os
import stat
from typing import Tuple

import filerfs.constants as constants
from filerfs.filer.common import Entry, FuseAttributes

# The filer stores permission bits in a 16-bit field.
MODE_MASK = 0xFFFF


@dataclass(frozen=True)
class Permission:
    """Immutable permission bits of a file system entry."""

    mode: int

    def __post_init__(self) -> None:
        if not 0 <= self.mode <= MODE_MASK:
            raise ValueError(f"permission mode out of range: {self.mode:#o}")

    @staticmethod
    def from_short(value: int) -> Permission:
        """Reconstruct the permission from the mode stored by the filer."""
        return Permission(value & MODE_MASK)

    def to_short(self) -> int:
        """Return the mode in the form stored by the filer."""
        return self.mode

    def __str__(self) -> str:
        # filemode() prefixes the file type, which isn't part of the permission
        return stat.filemode(self.mode)[1:]


@dataclass(frozen=True)
class UserIdentity:
    """User on whose behalf operations are performed, along with its groups."""

    user_name: str
    group_names: Tuple[str, ...] = ()

    @property
    def primary_group(self) -> str:
        return self.group_names[0] if self.group_names else ""

    @staticmethod
    def current() -> UserIdentity:
        """Return the identity of the user running this process."""
        primary_gid = os.getgid()
        gids = [primary_gid] + [gid for gid in os.getgroups() if gid != primary_gid]

        return UserIdentity(getpass.getuser(), tuple(_group_name(gid) for gid in gids))


def _group_name(gid: int) -> str:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        # Group without an entry in the group database
        return str(gid)


def directory_attributes(
    permission: Permission, user: UserIdentity, now: int
) -> FuseAttributes:
    """Build the filer attributes of a directory created by the user at time now."""
    return FuseAttributes(
        file_size=0,
        mtime=now,
        crtime=now,
        file_mode=permission.to_short(),
        user_name=user.user_name,
        group_name=list(user.group_names),
    )


@dataclass(frozen=True)
class FileStatus:
    """
    File system view of a filer entry.

    The filer doesn't track access times or store data in replicated blocks, so those
    fields are constants. Only the primary group of an entry is exposed.
    """

    length: int
    is_directory: bool
    block_replication: int
    block_size: int
    modification_time: int
    access_time: int
    permission: Permission
    owner: str
    group: str
    path: str

    @staticmethod
    def from_entry(path: str, entry: Entry) -> FileStatus:
        """Project a filer entry located at the given path."""
        attributes = entry.attributes

        return FileStatus(
            length=attributes.file_size,
            is_directory=entry.is_directory,
            block_replication=constants.BLOCK_REPLICATION,
            block_size=constants.BLOCK_SIZE,
            modification_time=attributes.mtime,
            access_time=constants.ACCESS_TIME,
            permission=Permission.from_short(attributes.file_mode),
            owner=attributes.user_name,
            group=attributes.group_name[0] if attributes.group_name else "",
            path=path,
        )


class Status(Enum):
    """Outcome of an operation that modifies the filer."""

    OK = auto()
    NOT_FOUND = auto()
    REMOTE_FAILURE = auto()


class RemoteFailureError(OSError):
    """Exception raised when the filer failed to carry out a request."""


@dataclass(frozen=True)
class Result:
    """
    Result of an operation that modifies the filer.

    A result is truthy only if the operation succeeded. Callers that prefer exceptions
    can use raise_for_status().
    """

    status: Status
    path: str
    error: str = ""

    def __bool__(self) -> bool:
        return self.status is Status.OK

    def raise_for_status(self) -> None:
        """Raise FileNotFoundError or RemoteFailureError if the operation failed."""
        if self.status is Status.NOT_FOUND:
            raise FileNotFoundError(
                errno.ENOENT, self.error or os.strerror(errno.ENOENT), self.path
            )
        elif self.status is Status.REMOTE_FAILURE:
            raise RemoteFailureError(
                errno.EIO, self.error or os.strerror(errno.EIO), self.path
            )
