from .config import Settings, load_settings
from .errors import (
    ArchiveError,
    CommandFailedError,
    ConfigError,
    CredentialError,
    DeployBotError,
    PrCheckError,
    PreconditionError,
    SauceConnectError,
)
from .fs import atomic_write_bytes, iter_files, relpath_posix, safe_unlink
from .hashing import FileDigest, sha256_file
from .logging import bind, configure_logging, get_logger
from .time import monotonic_ms

__all__ = [
    "Settings",
    "load_settings",
    "PrCheckError",
    "ConfigError",
    "CommandFailedError",
    "PreconditionError",
    "CredentialError",
    "ArchiveError",
    "SauceConnectError",
    "DeployBotError",
    "atomic_write_bytes",
    "iter_files",
    "relpath_posix",
    "safe_unlink",
    "FileDigest",
    "sha256_file",
    "configure_logging",
    "get_logger",
    "bind",
    "monotonic_ms",
]
