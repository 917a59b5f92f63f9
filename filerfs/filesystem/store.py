"""Module that translates file system operations into filer requests."""

import errno
import os
import time
from typing import Any, List

import filerfs.constants as constants
from filerfs.filer.common import (
    CreateEntryRequest,
    DeleteEntryRequest,
    Entry,
    ListEntriesRequest,
    LookupDirectoryEntryRequest,
)
from filerfs.filesystem.common import (
    directory_attributes,
    FileStatus,
    Permission,
    Result,
    Status,
    UserIdentity,
)
import filerfs.filesystem.path as fspath
from filerfs.logger import log


class FilerStore:
    """
    File system operations backed by a filer.

    Every operation is a single synchronous request to the filer (except for paginated
    listings), without retries. The store doesn't keep any state besides the client, so
    it can be shared between threads as long as the client can.

    The client is anything that exposes the FilerService functions, typically an
    rpc.Client for FilerService.
    """

    def __init__(
        self,
        client: Any,
        list_limit: int = constants.LIST_ENTRIES_LIMIT,
        paginate: bool = False,
    ):
        """
        Instantiate with a filer client.

        Directory listings request at most list_limit entries. Without pagination
        larger directories are truncated to that many entries, with pagination the
        listing continues page by page until the directory is exhausted.
        """
        if list_limit <= 0:
            raise ValueError(f"list limit must be > 0, got {list_limit}")

        self._client = client
        self._list_limit = list_limit
        self._paginate = paginate

    def create_directory(
        self,
        path: str,
        user: UserIdentity,
        permission: Permission,
        umask: Permission,
    ) -> Result:
        """
        Create a directory owned by the user in an existing parent directory.

        The permission is stored as given. The umask is left for the filer to enforce,
        if it does so at all. Missing parent directories are not created.
        """
        log.debug(f"create_directory({path}, {permission}, umask={umask})")

        directory, name = fspath.split(path)
        now = int(time.time())

        request = CreateEntryRequest(
            directory=directory,
            entry=Entry(
                name=name,
                is_directory=True,
                attributes=directory_attributes(permission, user, now),
            ),
        )

        return self._modify(path, self._client.create_entry, request)

    def list_entries(self, path: str) -> List[FileStatus]:
        """List the entries of a directory in the order returned by the filer."""
        log.debug(f"list_entries({path})")

        directory = fspath.normalize(path)
        statuses: List[FileStatus] = []

        start_from = ""

        while True:
            response = self._client.list_entries(
                ListEntriesRequest(
                    directory=directory,
                    limit=self._list_limit,
                    start_from_file_name=start_from,
                )
            )

            for entry in response.entries:
                child = fspath.join(directory, entry.name)
                statuses.append(FileStatus.from_entry(child, entry))

            if not self._paginate or len(response.entries) < self._list_limit:
                break

            start_from = response.entries[-1].name

        if len(statuses) >= self._list_limit and not self._paginate:
            log.debug(f"listing of {directory} may be truncated at {len(statuses)}")

        return statuses

    def get_file_status(self, path: str) -> FileStatus:
        """
        Retrieve the status of a single entry.

        Raises FileNotFoundError if the entry doesn't exist.
        """
        log.debug(f"get_file_status({path})")

        directory, name = fspath.split(path)

        response = self._client.lookup_directory_entry(
            LookupDirectoryEntryRequest(directory=directory, name=name)
        )

        if response.entry is None:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)

        return FileStatus.from_entry(fspath.join(directory, name), response.entry)

    def delete_entries(self, path: str, is_directory: bool, recursive: bool) -> Result:
        """
        Delete an entry along with its data.

        Whether a non-empty directory may be deleted without recursive is up to the
        filer.
        """
        log.debug(
            f"delete_entries({path}, is_directory={is_directory}, "
            f"recursive={recursive})"
        )

        directory, name = fspath.split(path)

        request = DeleteEntryRequest(
            directory=directory,
            name=name,
            is_directory=is_directory,
            is_delete_data=True,
            is_recursive=recursive,
        )

        return self._modify(path, self._client.delete_entry, request)

    @staticmethod
    def _modify(path: str, call: Any, request: Any) -> Result:
        """Send a create or delete request and turn its outcome into a Result."""
        try:
            response = call(request)
        except FileNotFoundError as e:
            result = Result(Status.NOT_FOUND, path, str(e))
        except OSError as e:
            # Connection failures and timeouts
            result = Result(Status.REMOTE_FAILURE, path, str(e))
        else:
            if response.error:
                result = Result(Status.REMOTE_FAILURE, path, response.error)
            else:
                result = Result(Status.OK, path)

        if not result:
            log.warning(f"{type(request).__name__} for {path} failed: {result.error}")

        return result
