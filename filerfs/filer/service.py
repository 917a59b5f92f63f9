"""Module defining the RPC interface of the filer."""

from filerfs.filer.common import (
    CreateEntryRequest,
    CreateEntryResponse,
    DeleteEntryRequest,
    DeleteEntryResponse,
    ListEntriesRequest,
    ListEntriesResponse,
    LookupDirectoryEntryRequest,
    LookupDirectoryEntryResponse,
)


class FilerService:
    """
    Base class for a filer exposed through filerfs.rpc.

    The RPC client uses the type annotations of these methods to discover the message
    dataclasses it needs to (de)serialize, so implementations must keep them.

    Missing entries should be reported by raising the built-in FileNotFoundError, which
    is recreated faithfully on the client side. Other failures to handle a create or
    delete request are reported through the error field of the response.
    """

    def protocol_version(self) -> str:
        """Return the semantic version of the protocol spoken by the filer."""
        raise NotImplementedError()

    def create_entry(self, request: CreateEntryRequest) -> CreateEntryResponse:
        """Create an entry in an existing directory."""
        raise NotImplementedError()

    def list_entries(self, request: ListEntriesRequest) -> ListEntriesResponse:
        """
        List up to request.limit entries of a directory, ordered by name.

        Listing starts after request.start_from_file_name if it is set, or at it if
        request.inclusive_start_from is also set.
        """
        raise NotImplementedError()

    def lookup_directory_entry(
        self, request: LookupDirectoryEntryRequest
    ) -> LookupDirectoryEntryResponse:
        """Look up a single entry by its directory and name."""
        raise NotImplementedError()

    def delete_entry(self, request: DeleteEntryRequest) -> DeleteEntryResponse:
        """Delete an entry and, if requested, its data and children."""
        raise NotImplementedError()
