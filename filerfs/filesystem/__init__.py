"""
Modules that expose a filer as a file system.

A filer is a metadata service that stores a tree of entries, each addressed by the
directory that contains it and its name within that directory, and each carrying
attributes like its size, mode, owner and groups. This package maps file system
operations onto that model:

* path: splits paths into the (directory, name) pairs that the filer addresses by.
* common: converts between permissions and users on the file system side and the
attributes stored by the filer, and back into FileStatus records.
* store: issues exactly one filer request per operation (create directory, list,
stat, delete) and reports outcomes as explicit results.
* filesystem: a per-user file system with a working directory on top of the store.
"""

from .common import FileStatus, Permission, Result, Status, UserIdentity
from .filesystem import FilerFileSystem
from .path import InvalidPathError
from .store import FilerStore

__all__ = [
    "FileStatus",
    "FilerFileSystem",
    "FilerStore",
    "InvalidPathError",
    "Permission",
    "Result",
    "Status",
    "UserIdentity",
]
