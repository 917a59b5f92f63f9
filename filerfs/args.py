"""Module defining the command-line arguments and providing a parser for them."""

from __future__ import annotations

import argparse
from typing import List, Optional

from filerfs.constants import PROTOCOL_VERSION, VERSION


class Arguments(argparse.Namespace):
    """Parsed command-line arguments."""

    command: str
    path: str

    recursive: bool
    mode: Optional[int]

    config: str

    host: Optional[str]
    port: Optional[int]
    token: Optional[str]
    timeout: Optional[int]

    debug: bool

    @classmethod
    def parse(cls, args: Optional[List[str]] = None) -> Arguments:
        """
        Parse command-line arguments from the given list of strings.

        Defaults to sys.argv if none are specified.
        """
        return cls._get_parser().parse_args(args, namespace=cls())

    @classmethod
    def _get_parser(cls) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Inspect and modify the namespace of a filer.",
            usage="filerfs [option...] {ls,stat,mkdir,rm} path",
        )

        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {VERSION} (protocol {PROTOCOL_VERSION})",
            help="show the program version and protocol version",
        )

        # Primary arguments
        parser.add_argument(
            "command",
            choices=["ls", "stat", "mkdir", "rm"],
            help="operation to perform",
        )
        parser.add_argument("path", type=str, help="absolute path on the filer")

        # Operation modifiers
        parser.add_argument(
            "-r",
            "--recursive",
            action="store_true",
            help="delete directories along with their contents",
        )
        parser.add_argument(
            "--mode",
            type=cls._parse_mode,
            help="permission of a new directory in octal (default is 777)",
        )

        # Path to (optional) config file
        parser.add_argument(
            "--config",
            type=str,
            help="path to config file (default is ~/.filerfs/config)",
            default="~/.filerfs/config",
        )

        # Overrides of the filer connection settings in the config file
        parser.add_argument("--host", type=str, help="filer host")
        parser.add_argument("--port", type=int, help="filer port")
        parser.add_argument("--token", type=str, help="filer authentication token")
        parser.add_argument(
            "--timeout",
            type=cls._parse_timeout,
            help="timeout for network communications in milliseconds",
        )

        # Enable debug output for development
        parser.add_argument(
            "--debug", action="store_true", help="enable debug information"
        )

        return parser

    @staticmethod
    def _parse_mode(arg: str) -> int:
        try:
            val = int(arg, 8)
            assert 0 <= val <= 0o7777
            return val
        except (ValueError, AssertionError):
            raise argparse.ArgumentTypeError("expected octal mode like 755")

    @staticmethod
    def _parse_timeout(arg: str) -> int:
        try:
            val = int(arg)
            assert val > 0
            return val
        except (ValueError, AssertionError):
            raise argparse.ArgumentTypeError("expected number > 0")
