"""Module that contains the file system that forwards all calls to a filer."""

from __future__ import annotations

import posixpath
from typing import List, Optional

from semver import VersionInfo

from filerfs.config import Config
import filerfs.constants as constants
from filerfs.filer.service import FilerService
from filerfs.filesystem.common import (
    FileStatus,
    Permission,
    Result,
    Status,
    UserIdentity,
)
import filerfs.filesystem.path as fspath
from filerfs.filesystem.store import FilerStore
from filerfs.logger import log
import filerfs.rpc as rpc


class IncompatibleProtocolError(RuntimeError):
    """Exception raised when the filer speaks an incompatible protocol version."""


class FilerFileSystem:
    """
    File system for a single user on top of a filer.

    Adds the conveniences of a file system interface to FilerStore: relative paths
    resolved against a working directory, default permissions for new directories, and
    deletion without knowing the type of an entry in advance.
    """

    def __init__(
        self,
        store: FilerStore,
        user: UserIdentity,
        umask: int = constants.DEFAULT_UMASK,
    ):
        """Instantiate file system for the given user on top of a store."""
        self._store = store
        self._user = user
        self._umask = Permission(umask)
        self._working_directory = fspath.ROOT

    @staticmethod
    def connect(
        config: Config, user: Optional[UserIdentity] = None
    ) -> FilerFileSystem:
        """
        Connect to the filer described by the config.

        Fails if the filer is unreachable or speaks an incompatible protocol. Operations
        are performed on behalf of the current user unless another user is specified.
        """
        client = rpc.Client(
            FilerService,
            config.filer.endpoint,
            token=config.filer.token,
            timeout_ms=config.filer.timeout_ms,
        )

        version = VersionInfo.parse(client.protocol_version())
        expected = VersionInfo.parse(constants.PROTOCOL_VERSION)

        if version.major != expected.major:
            client.close()
            raise IncompatibleProtocolError(
                f"incompatible protocol ({version} != {expected})"
            )

        log.info(f"connected to filer at {config.filer.endpoint} (protocol {version})")

        store = FilerStore(
            client, list_limit=config.listing.limit, paginate=config.listing.paginate
        )

        return FilerFileSystem(
            store, user or UserIdentity.current(), config.permissions.umask
        )

    @property
    def user(self) -> UserIdentity:
        return self._user

    @property
    def working_directory(self) -> str:
        return self._working_directory

    def set_working_directory(self, path: str) -> None:
        self._working_directory = self.make_absolute(path)

    def make_absolute(self, path: str) -> str:
        """Resolve a path against the working directory."""
        return fspath.normalize(posixpath.join(self._working_directory, path))

    #
    # Operations
    #

    def mkdir(self, path: str, permission: Optional[Permission] = None) -> Result:
        """
        Create a directory, by default with full permissions.

        The configured umask is passed along with the permission.
        """
        if permission is None:
            permission = Permission(constants.DEFAULT_DIRECTORY_PERMISSION)

        return self._store.create_directory(
            self.make_absolute(path), self._user, permission, self._umask
        )

    def list_status(self, path: str) -> List[FileStatus]:
        return self._store.list_entries(self.make_absolute(path))

    def get_file_status(self, path: str) -> FileStatus:
        return self._store.get_file_status(self.make_absolute(path))

    def exists(self, path: str) -> bool:
        try:
            self.get_file_status(path)
            return True
        except FileNotFoundError:
            return False

    def delete(self, path: str, recursive: bool = False) -> Result:
        """Delete a file or directory without having to know which of the two it is."""
        path = self.make_absolute(path)

        try:
            status = self._store.get_file_status(path)
        except FileNotFoundError as e:
            return Result(Status.NOT_FOUND, path, str(e))

        return self._store.delete_entries(path, status.is_directory, recursive)
