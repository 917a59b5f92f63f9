"""
Messages exchanged with the filer.

The filer addresses every entry by its parent directory and its name rather than by
its full path, so all requests carry a directory and (where applicable) a name.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class FuseAttributes:
    """Attributes that the filer stores alongside an entry."""

    file_size: int = 0
    mtime: int = 0
    crtime: int = 0
    file_mode: int = 0
    user_name: str = ""
    group_name: List[str] = field(default_factory=list)


@dataclass
class Entry:
    """Filer record of a single file or directory."""

    name: str
    is_directory: bool = False
    attributes: FuseAttributes = field(default_factory=FuseAttributes)


#
# Requests
#


@dataclass
class CreateEntryRequest:
    directory: str
    entry: Entry


@dataclass
class ListEntriesRequest:
    directory: str
    limit: int
    prefix: str = ""
    start_from_file_name: str = ""
    inclusive_start_from: bool = False


@dataclass
class LookupDirectoryEntryRequest:
    directory: str
    name: str


@dataclass
class DeleteEntryRequest:
    directory: str
    name: str
    is_directory: bool = False
    is_delete_data: bool = True
    is_recursive: bool = False


#
# Responses
#
# An empty error string means that the filer handled the request successfully.
#


@dataclass
class CreateEntryResponse:
    error: str = ""


@dataclass
class ListEntriesResponse:
    entries: List[Entry] = field(default_factory=list)


@dataclass
class LookupDirectoryEntryResponse:
    entry: Optional[Entry] = None


@dataclass
class DeleteEntryResponse:
    error: str = ""
