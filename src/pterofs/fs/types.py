"""Value types: FileType, FileEntry, FileStat, RemoteError, Disposable."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import IntFlag
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

EPOCH = datetime.fromtimestamp(0, UTC)


class FileType(IntFlag):
    """Kind of a filesystem entry.  ``SYMLINK`` combines with the others."""

    UNKNOWN = 0
    FILE = 1
    DIRECTORY = 2
    SYMLINK = 64


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 panel timestamp, ``None`` when absent or malformed."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass
class FileEntry:
    """One row of a remote directory listing."""

    name: str
    type: FileType
    size: int = 0
    mode: str | None = None
    mimetype: str | None = None
    created_at: datetime | None = None
    modified_at: datetime | None = None

    @property
    def is_file(self) -> bool:
        return bool(self.type & FileType.FILE)

    @property
    def is_directory(self) -> bool:
        return bool(self.type & FileType.DIRECTORY)

    @property
    def is_symlink(self) -> bool:
        return bool(self.type & FileType.SYMLINK)

    @property
    def writable(self) -> bool:
        """Owner write bit from the ``-rw-r--r--`` style mode string.

        Entries without a mode string report no restriction.
        """
        if not self.mode or len(self.mode) < 3:
            return True
        return self.mode[2] == "w"

    @classmethod
    def from_attributes(cls, attributes: dict[str, Any]) -> FileEntry:
        """Build an entry from a listing object's ``attributes`` mapping.

        Shapes without ``is_file`` map to ``FileType.UNKNOWN`` rather than
        being guessed.
        """
        is_file = attributes.get("is_file")
        if is_file is None:
            kind = FileType.UNKNOWN
        else:
            kind = FileType.FILE if is_file else FileType.DIRECTORY
        if kind and attributes.get("is_symlink"):
            kind |= FileType.SYMLINK

        size = attributes.get("size")
        mode = attributes.get("mode")
        return cls(
            name=str(attributes.get("name", "")),
            type=kind,
            size=size if isinstance(size, int) and size >= 0 else 0,
            mode=mode if isinstance(mode, str) else None,
            mimetype=attributes.get("mimetype"),
            created_at=parse_timestamp(attributes.get("created_at")),
            modified_at=parse_timestamp(attributes.get("modified_at")),
        )


@dataclass(frozen=True)
class FileStat:
    """Metadata of a single path, synthesized from its parent's listing."""

    type: FileType
    created_at: datetime = EPOCH
    modified_at: datetime = EPOCH
    size: int = 0
    writable: bool = True

    @property
    def is_directory(self) -> bool:
        return bool(self.type & FileType.DIRECTORY)

    @classmethod
    def root(cls) -> FileStat:
        return cls(type=FileType.DIRECTORY)

    @classmethod
    def from_entry(cls, entry: FileEntry) -> FileStat:
        return cls(
            type=entry.type,
            created_at=entry.created_at or EPOCH,
            modified_at=entry.modified_at or entry.created_at or EPOCH,
            size=entry.size,
            writable=entry.writable,
        )


@dataclass
class RemoteError:
    """Error details returned by the panel.

    ``code`` and ``detail`` come from the first item of a
    ``{"errors": [{"code": ..., "detail": ...}]}`` envelope; both are
    ``None`` when the body is not such a document.  ``is_json`` records
    whether the body parsed as JSON at all.
    """

    status: int
    code: str | None = None
    detail: str | None = None
    body: str = ""
    is_json: bool = False


class Disposable:
    """Handle returned by ``watch``.  Calling ``dispose`` unsubscribes."""

    def __init__(self, on_dispose: Callable[[], None] | None = None) -> None:
        self._on_dispose = on_dispose
        self.disposed = False

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        if self._on_dispose is not None:
            self._on_dispose()

    def __enter__(self) -> Disposable:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.dispose()
