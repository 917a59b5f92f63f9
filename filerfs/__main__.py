"""
Module implementing the command-line interface of filerfs.

The command-line tool is a thin shell around FilerFileSystem for inspecting and
modifying the namespace of a filer by hand, like listing a directory or creating one.
"""

import os
import sys
import time
from typing import List, NoReturn, Optional

from filerfs.config import Config
import filerfs.constants as constants
from filerfs.filesystem import FileStatus, FilerFileSystem, InvalidPathError
from filerfs.filesystem.common import Permission
from filerfs.logger import log, set_debug
from .args import Arguments


def main(arguments: Optional[List[str]] = None) -> NoReturn:
    """
    Run a single file system operation with the given arguments.

    Defaults to parsing command-line arguments from sys.argv if none are specified.
    """
    args = Arguments.parse(arguments)

    set_debug(args.debug)

    config = _load_config(args)

    try:
        fs = FilerFileSystem.connect(config)
        exit_code = _run(fs, args)
    except InvalidPathError as e:
        log.error(f"invalid path: {e}")
        exit_code = 1
    except OSError as e:
        # Missing entries, failures reported by the filer, and timeouts
        log.error(f"{args.command} failed: {e}")
        exit_code = 1
    except Exception as e:
        log.error(f"failed to run {args.command}: {e}")
        exit_code = constants.FILERFS_ERROR_CODE

    sys.exit(exit_code)


def _load_config(args: Arguments) -> Config:
    """Load the config file and apply overrides from the command-line."""
    config = Config.load(os.path.expanduser(args.config))

    if args.host is not None:
        config.filer.host = args.host
    if args.port is not None:
        config.filer.port = args.port
    if args.token is not None:
        config.filer.token = args.token
    if args.timeout is not None:
        config.filer.timeout_ms = args.timeout

    return config


def _run(fs: FilerFileSystem, args: Arguments) -> int:
    if args.command == "ls":
        for status in fs.list_status(args.path):
            print(format_status(status))
    elif args.command == "stat":
        print(format_status(fs.get_file_status(args.path)))
    elif args.command == "mkdir":
        permission = Permission(args.mode) if args.mode is not None else None
        fs.mkdir(args.path, permission).raise_for_status()
    elif args.command == "rm":
        fs.delete(args.path, args.recursive).raise_for_status()
    else:
        raise ValueError(f"unknown command {args.command}")

    return 0


def format_status(status: FileStatus) -> str:
    """Format a FileStatus like a line of ls -l."""
    kind = "d" if status.is_directory else "-"
    mtime = time.strftime("%Y-%m-%d %H:%M", time.localtime(status.modification_time))

    return (
        f"{kind}{status.permission} {status.owner or '-'} {status.group or '-'} "
        f"{status.length:>10} {mtime} {status.path}"
    )


if __name__ == "__main__":
    main()
