"""Filesystem layer — panel client, error translation, stat cache, provider."""

from pterofs.fs.cache import MetadataCache
from pterofs.fs.client import FileManagerClient
from pterofs.fs.errors import classify, parse_remote_error
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
from pterofs.fs.types import Disposable, FileEntry, FileStat, FileType, RemoteError
from pterofs.fs.utils import (
    copied_name,
    leaf_name,
    normalize_path,
    parent_path,
    split_path,
    strip_leading_slash,
)

__all__ = [
    "AuthenticationError",
    "DirectoryNotEmptyError",
    "Disposable",
    "FileEntry",
    "FileIsADirectoryError",
    "FileManagerClient",
    "FileStat",
    "FileSystemProvider",
    "FileType",
    "MetadataCache",
    "NoPermissionError",
    "NotConfiguredError",
    "PanelFileSystem",
    "PartialFailureError",
    "PathExistsError",
    "PathNotFoundError",
    "PteroFSError",
    "RateLimitedError",
    "RemoteError",
    "RemoteUnavailableError",
    "SessionConfig",
    "SessionStore",
    "UnavailableError",
    "classify",
    "copied_name",
    "leaf_name",
    "normalize_path",
    "parent_path",
    "parse_remote_error",
    "split_path",
    "strip_leading_slash",
]
