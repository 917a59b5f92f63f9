"""Module for configuration variables with defaults that are overridable by a file."""

from __future__ import annotations

from configparser import ConfigParser, SectionProxy
from dataclasses import dataclass, field
from typing import Optional

import filerfs.constants as constants
from filerfs.logger import log


@dataclass
class FilerConfig:
    """Configuration variables related to the connection with the filer."""

    host: str = constants.DEFAULT_FILER_HOST
    port: int = constants.DEFAULT_FILER_PORT

    timeout_ms: int = 5000
    token: Optional[str] = None

    @property
    def endpoint(self) -> str:
        """Return the ZeroMQ endpoint of the filer."""
        return f"tcp://{self.host}:{self.port}"

    @staticmethod
    def load(section: SectionProxy) -> FilerConfig:
        """Load overridden variables from a section within a config file."""
        config = FilerConfig()

        config.host = section.get("host", fallback=config.host)
        config.port = section.getint("port", fallback=config.port)

        config.timeout_ms = section.getint("timeout_ms", fallback=config.timeout_ms)
        config.token = section.get("token", fallback=config.token)

        return config


@dataclass
class ListingConfig:
    """Configuration variables related to directory listings."""

    limit: int = constants.LIST_ENTRIES_LIMIT

    # Off by default: a listing is a single page truncated at the limit.
    paginate: bool = False

    @staticmethod
    def load(section: SectionProxy) -> ListingConfig:
        """Load overridden variables from a section within a config file."""
        config = ListingConfig()

        config.limit = section.getint("limit", fallback=config.limit)
        config.paginate = section.getboolean("paginate", fallback=config.paginate)

        if config.limit <= 0:
            raise ValueError(f"listing limit must be > 0, got {config.limit}")

        return config


@dataclass
class PermissionsConfig:
    """Configuration variables related to permissions of new entries."""

    umask: int = constants.DEFAULT_UMASK

    @staticmethod
    def load(section: SectionProxy) -> PermissionsConfig:
        """Load overridden variables from a section within a config file."""
        config = PermissionsConfig()

        # umask is written in octal, like the shell builtin
        umask = section.get("umask")
        if umask is not None:
            config.umask = int(umask, 8)

        return config


@dataclass
class Config:
    """Configuration variables."""

    filer: FilerConfig = field(default_factory=FilerConfig)
    listing: ListingConfig = field(default_factory=ListingConfig)
    permissions: PermissionsConfig = field(default_factory=PermissionsConfig)

    @staticmethod
    def load(filename: str) -> Config:
        """Load overridden configuration variables from a config file."""
        parser = ConfigParser()

        config = Config()

        try:
            with open(filename, "r") as f:
                parser.read_string(f.read(), filename)

            if "filer" in parser:
                config.filer = FilerConfig.load(parser["filer"])
            if "listing" in parser:
                config.listing = ListingConfig.load(parser["listing"])
            if "permissions" in parser:
                config.permissions = PermissionsConfig.load(parser["permissions"])
        except FileNotFoundError:
            log.info(f"no config file at {filename}")
        except Exception as e:
            # An unreadable config file is not considered a fatal error since we can
            # fall back to defaults.
            log.error(f"failed to read config file {filename}: {e}")
        else:
            log.info(f"loaded config: {config}")

        return config
