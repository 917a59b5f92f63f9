"""
Modules describing the remote filer that filerfs talks to.

The filer is a metadata service that owns a hierarchical namespace of entries. filerfs
doesn't implement a filer itself; it only knows the messages it exchanges with one and
the interface through which they are exchanged.
"""

from .common import (
    CreateEntryRequest,
    CreateEntryResponse,
    DeleteEntryRequest,
    DeleteEntryResponse,
    Entry,
    FuseAttributes,
    ListEntriesRequest,
    ListEntriesResponse,
    LookupDirectoryEntryRequest,
    LookupDirectoryEntryResponse,
)
from .service import FilerService

__all__ = [
    "CreateEntryRequest",
    "CreateEntryResponse",
    "DeleteEntryRequest",
    "DeleteEntryResponse",
    "Entry",
    "FilerService",
    "FuseAttributes",
    "ListEntriesRequest",
    "ListEntriesResponse",
    "LookupDirectoryEntryRequest",
    "LookupDirectoryEntryResponse",
]
