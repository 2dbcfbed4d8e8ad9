"""pterofs: a game-server panel's file manager as a filesystem.

Mount one server's remote file tree and work with it through a small,
conventional filesystem API.
"""

__version__ = "0.1.0"

from pterofs._pterofs import PteroFS
from pterofs.fs.exceptions import (
    AuthenticationError,
    DirectoryNotEmptyError,
    FileIsADirectoryError,
    NoPermissionError,
    NotConfiguredError,
    PartialFailureError,
    PathExistsError,
    PathNotFoundError,
    PteroFSError,
    RateLimitedError,
    RemoteUnavailableError,
    UnavailableError,
)
from pterofs.fs.protocol import FileSystemProvider
from pterofs.fs.provider import PanelFileSystem
from pterofs.fs.session import SessionConfig, SessionStore
from pterofs.fs.types import Disposable, FileEntry, FileStat, FileType
from pterofs.panel import ServerInfo, list_servers, select_server

__all__ = [
    "AuthenticationError",
    "DirectoryNotEmptyError",
    "Disposable",
    "FileEntry",
    "FileIsADirectoryError",
    "FileStat",
    "FileSystemProvider",
    "FileType",
    "NoPermissionError",
    "NotConfiguredError",
    "PanelFileSystem",
    "PartialFailureError",
    "PathExistsError",
    "PathNotFoundError",
    "PteroFS",
    "PteroFSError",
    "RateLimitedError",
    "RemoteUnavailableError",
    "ServerInfo",
    "SessionConfig",
    "SessionStore",
    "UnavailableError",
    "__version__",
    "list_servers",
    "select_server",
]
