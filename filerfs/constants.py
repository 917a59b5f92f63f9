"""Module defining various global constants."""

# filerfs version
VERSION = "1.0.0"

# Filer RPC protocol
# The major version must be identical on the client and the filer.
PROTOCOL_VERSION = "1.0.0"

# Exit code for when filerfs itself fails (as opposed to a failed operation).
FILERFS_ERROR_CODE = 254

# Default filer endpoint
DEFAULT_FILER_HOST = "localhost"
DEFAULT_FILER_PORT = 18888

# Maximum number of entries requested in a single directory listing page.
LIST_ENTRIES_LIMIT = 100000

# Constants surfaced in every FileStatus. The filer neither replicates in blocks
# nor tracks access times.
BLOCK_REPLICATION = 1
BLOCK_SIZE = 512
ACCESS_TIME = 0

# Permissions used by mkdir when the caller doesn't specify any.
DEFAULT_DIRECTORY_PERMISSION = 0o777
DEFAULT_UMASK = 0o022
