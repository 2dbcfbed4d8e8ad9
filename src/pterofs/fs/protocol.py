"""FileSystemProvider protocol — the contract a mounted tree exposes.

A conventional virtual-filesystem provider surface: metadata, listing,
whole-file read/write and the usual tree mutations.  ``watch`` is part of
the contract even for providers that cannot observe external changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .types import Disposable, FileStat, FileType


@runtime_checkable
class FileSystemProvider(Protocol):
    """Core interface every provider must implement.

    Paths are absolute and slash-separated.  Failures are raised as
    ``PteroFSError`` subclasses.
    """

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def stat(self, path: str) -> FileStat: ...

    async def read_directory(self, path: str) -> list[tuple[str, FileType]]: ...

    async def read_file(self, path: str) -> bytes: ...

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def write_file(
        self,
        path: str,
        content: bytes,
        *,
        create: bool = True,
        overwrite: bool = True,
    ) -> None: ...

    async def create_directory(self, path: str) -> None: ...

    async def delete(self, path: str, *, recursive: bool = True) -> None: ...

    async def rename(self, old_path: str, new_path: str, *, overwrite: bool = False) -> None: ...

    async def copy(self, source: str, destination: str, *, overwrite: bool = False) -> None: ...

    # ------------------------------------------------------------------
    # Watch
    # ------------------------------------------------------------------

    def watch(
        self,
        path: str,
        *,
        recursive: bool = False,
        excludes: Sequence[str] = (),
    ) -> Disposable:
        """Subscribe to changes under *path*.  Dispose to unsubscribe."""
        ...
