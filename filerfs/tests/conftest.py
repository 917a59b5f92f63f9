"""Module with an in-memory filer and fixtures shared by the tests."""

import errno
import os
import posixpath
import socket
import threading
from typing import Dict

import pytest

from filerfs.filer import (
    CreateEntryRequest,
    CreateEntryResponse,
    DeleteEntryRequest,
    DeleteEntryResponse,
    Entry,
    FilerService,
    ListEntriesRequest,
    ListEntriesResponse,
    LookupDirectoryEntryRequest,
    LookupDirectoryEntryResponse,
)
from filerfs.filesystem import FilerStore, UserIdentity
from filerfs.rpc import Server


def _not_found(path: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, f"{path}: {os.strerror(errno.ENOENT)}")


class InMemoryFiler(FilerService):
    """Filer that keeps its entries in memory, listed in name order."""

    def __init__(self, version: str = "1.0.0"):
        self.version = version
        self.directories: Dict[str, Dict[str, Entry]] = {"/": {}}
        self.lock = threading.Lock()

    def protocol_version(self) -> str:
        return self.version

    def create_entry(self, request: CreateEntryRequest) -> CreateEntryResponse:
        with self.lock:
            children = self._children(request.directory)

            if request.entry.name in children:
                path = posixpath.join(request.directory, request.entry.name)
                return CreateEntryResponse(error=f"{path} already exists")

            children[request.entry.name] = request.entry

            if request.entry.is_directory:
                path = posixpath.join(request.directory, request.entry.name)
                self.directories[path] = {}

            return CreateEntryResponse()

    def list_entries(self, request: ListEntriesRequest) -> ListEntriesResponse:
        with self.lock:
            entries = []

            for name in sorted(self._children(request.directory)):
                if not name.startswith(request.prefix):
                    continue

                if request.start_from_file_name:
                    if name < request.start_from_file_name:
                        continue
                    if (
                        name == request.start_from_file_name
                        and not request.inclusive_start_from
                    ):
                        continue

                entries.append(self.directories[request.directory][name])

                if len(entries) == request.limit:
                    break

            return ListEntriesResponse(entries=entries)

    def lookup_directory_entry(
        self, request: LookupDirectoryEntryRequest
    ) -> LookupDirectoryEntryResponse:
        with self.lock:
            children = self._children(request.directory)

            if request.name not in children:
                raise _not_found(posixpath.join(request.directory, request.name))

            return LookupDirectoryEntryResponse(entry=children[request.name])

    def delete_entry(self, request: DeleteEntryRequest) -> DeleteEntryResponse:
        with self.lock:
            children = self._children(request.directory)
            path = posixpath.join(request.directory, request.name)

            if request.name not in children:
                raise _not_found(path)

            if children[request.name].is_directory:
                if self.directories[path] and not request.is_recursive:
                    return DeleteEntryResponse(
                        error=f"fail to delete non-empty folder: {path}"
                    )

                for subdirectory in list(self.directories):
                    if subdirectory == path or subdirectory.startswith(path + "/"):
                        del self.directories[subdirectory]

            del children[request.name]

            return DeleteEntryResponse()

    def _children(self, directory: str) -> Dict[str, Entry]:
        if directory not in self.directories:
            raise _not_found(directory)

        return self.directories[directory]


def free_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def start_server(server: Server) -> str:
    """Serve in a background thread and return the endpoint to connect to."""
    endpoint = f"tcp://127.0.0.1:{free_port()}"

    t = threading.Thread(target=server.serve, args=(endpoint,), daemon=True)
    t.start()

    return endpoint


@pytest.fixture
def filer():
    return InMemoryFiler()


@pytest.fixture
def store(filer):
    return FilerStore(filer)


@pytest.fixture
def user():
    return UserIdentity("alice", ("staff", "wheel"))


@pytest.fixture
def serve():
    return start_server
