"""Exception hierarchy for the panel filesystem layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import RemoteError


class PteroFSError(Exception):
    """Base exception for all pterofs filesystem errors."""

    def __init__(
        self,
        message: str = "",
        *,
        path: str | None = None,
        remote: RemoteError | None = None,
    ) -> None:
        super().__init__(message or path or self.__class__.__name__)
        self.message = message
        self.path = path
        self.remote = remote


class PathNotFoundError(PteroFSError):
    """Raised when a file or directory path does not exist."""


class PathExistsError(PteroFSError):
    """Raised when a write would replace an existing file without ``overwrite``."""


class FileIsADirectoryError(PteroFSError):
    """Raised when a file operation targets a directory."""


class NoPermissionError(PteroFSError):
    """Raised when the panel refuses the request (403)."""


class AuthenticationError(NoPermissionError):
    """Raised on 401.  The credential is missing, revoked or expired.

    Callers can offer re-authentication; the failed call is never retried.
    """


class UnavailableError(PteroFSError):
    """The operation could not be carried out right now."""


class NotConfiguredError(UnavailableError):
    """Raised when no server or credential is set on the session."""


class DirectoryNotEmptyError(UnavailableError):
    """Raised by a non-recursive delete of a directory that has entries."""


class RemoteUnavailableError(UnavailableError):
    """Raised on panel failures: 5xx, 422, transport errors, unknown statuses."""


class RateLimitedError(RemoteUnavailableError):
    """Raised on 429."""


class PartialFailureError(PteroFSError):
    """Raised when a multi-step operation stopped after its first step.

    Currently only ``copy`` can produce this: the remote copy succeeded
    but moving the generated sibling to its destination failed, leaving
    ``orphan_path`` behind.  Retrying just the rename is safe.
    """

    def __init__(
        self,
        message: str = "",
        *,
        path: str | None = None,
        orphan_path: str,
        destination: str,
        cause: PteroFSError | None = None,
    ) -> None:
        super().__init__(message, path=path, remote=cause.remote if cause else None)
        self.orphan_path = orphan_path
        self.destination = destination
        self.cause = cause
